import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from banalytiq_sync.batch_orchestrator import BatchReport
from banalytiq_sync.config_manager import ConfigManager
from banalytiq_sync.errors import BanalytiqSyncError, ConfigurationError
from banalytiq_sync.logging_setup import setup_logging


class PipelineOrchestrator:

    def __init__(self, config: ConfigManager, data_dir: Optional[Union[str, Path]] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.config = config
        self.data_dir = Path(data_dir) if data_dir else config.data_dir

    def _banner(self, title: str):
        self.logger.info("=" * 60)
        self.logger.info(title)
        self.logger.info("=" * 60)

    def step_download(self) -> Path:
        self._banner("STEP 1: Downloading database files")

        start = datetime.now()
        path = self.config.build_downloader().download(self.data_dir)
        elapsed = (datetime.now() - start).total_seconds()

        self.logger.info(f"Step 1 complete in {elapsed:.1f}s")
        return path

    def step_merge(self) -> BatchReport:
        self._banner("STEP 2: Merging timestamped databases")

        start = datetime.now()
        report = self.config.build_orchestrator().merge_all(self.data_dir)
        elapsed = (datetime.now() - start).total_seconds()

        if report.total:
            self.logger.info("Per-file outcome:\n" + report.to_frame().to_string(index=False))
        self.logger.info(f"Step 2 complete in {elapsed:.1f}s")
        return report

    def run_full(self, download: bool = True, merge: bool = True) -> Optional[BatchReport]:
        self.logger.info("🚀 STARTING PIPELINE")
        self.logger.info(f"Data directory: {self.data_dir}")

        start = datetime.now()
        report = None

        try:
            if download:
                self.step_download()
            else:
                self.logger.info("Step 1 skipped (--merge-only specified)")

            if merge:
                report = self.step_merge()
            else:
                self.logger.info("Step 2 skipped (--no-merge specified)")
        except BanalytiqSyncError as e:
            self.logger.error(f"❌ PIPELINE FAILED: {e}")
            raise

        elapsed = (datetime.now() - start).total_seconds()
        self._banner(f"✅ PIPELINE COMPLETE in {elapsed:.1f}s")
        return report


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='banalytiq-sync',
        description='Download the analytics database and merge timestamped snapshots into it',
    )
    parser.add_argument('config', nargs='?', default=None,
                        help='Path to the JSON config file (default: ./config.json)')
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument('--no-merge', action='store_true', help='Download only, skip merging')
    mode.add_argument('--merge-only', action='store_true',
                      help='Merge existing timestamped databases only')
    parser.add_argument('--dir', dest='data_dir', default=None,
                        help='Directory holding the base database (overrides DATA_DIR)')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging()
    logger = logging.getLogger('banalytiq_sync')

    try:
        config = ConfigManager(args.config, required=not args.merge_only)
        if config.log_file:
            setup_logging(config.log_file)
        orch = PipelineOrchestrator(config, args.data_dir)
    except ConfigurationError as e:
        logger.error(f"Error: {e}")
        return 1

    try:
        report = orch.run_full(download=not args.merge_only, merge=not args.no_merge)
    except BanalytiqSyncError:
        return 1

    if report is not None and report.failed:
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
