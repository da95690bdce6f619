import sys

from banalytiq_sync.pipeline_orchestrator import main

sys.exit(main())
