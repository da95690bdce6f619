from banalytiq_sync.batch_orchestrator import BatchOrchestrator, BatchReport
from banalytiq_sync.merge_engine import MergeEngine
from banalytiq_sync.results import FailureKind, MergeFailure, MergeSuccess
from banalytiq_sync.snapshot_manager import SnapshotFile, SnapshotManager

__all__ = [
    'BatchOrchestrator', 'BatchReport', 'MergeEngine', 'FailureKind',
    'MergeFailure', 'MergeSuccess', 'SnapshotFile', 'SnapshotManager',
]
