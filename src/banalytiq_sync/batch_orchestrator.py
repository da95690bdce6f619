import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

import pandas as pd

from banalytiq_sync.errors import BaseStoreMissing
from banalytiq_sync.merge_engine import MergeEngine
from banalytiq_sync.results import MergeFailure, MergeResult, MergeSuccess
from banalytiq_sync.snapshot_manager import SnapshotFile, SnapshotManager


@dataclass(frozen=True)
class FileOutcome:
    snapshot: SnapshotFile
    result: MergeResult

    @property
    def ok(self) -> bool:
        return self.result.ok


@dataclass
class BatchReport:
    outcomes: List[FileOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    @property
    def inserted_total(self) -> int:
        return sum(o.result.inserted_count for o in self.outcomes if o.ok)

    @property
    def unretired(self) -> List[SnapshotFile]:
        return [o.snapshot for o in self.outcomes if o.ok and o.result.warning]

    def summary_lines(self) -> List[str]:
        lines = [
            f"Total files processed: {self.total}",
            f"Successfully merged files: {self.succeeded}",
            f"Failed files: {self.failed}",
            f"Records inserted: {self.inserted_total}",
        ]
        for snap in self.unretired:
            lines.append(f"Not retired (rename failed): {snap.name}")
        return lines

    def to_frame(self) -> pd.DataFrame:
        rows = []
        for o in self.outcomes:
            result = o.result
            if isinstance(result, MergeSuccess):
                status = 'merged'
                inserted = result.inserted_count
                retired = result.retired
                detail = result.warning
            elif isinstance(result, MergeFailure):
                status = f'failed:{result.kind.value}'
                inserted = 0
                retired = False
                detail = result.detail
            else:
                raise TypeError(f"Unexpected merge result: {result!r}")
            rows.append({
                'file': o.snapshot.name,
                'timestamp': o.snapshot.timestamp,
                'status': status,
                'inserted': inserted,
                'retired': retired,
                'detail': detail,
            })
        return pd.DataFrame(
            rows, columns=['file', 'timestamp', 'status', 'inserted', 'retired', 'detail']
        )


class BatchOrchestrator:

    def __init__(self, base_name: str = 'banalytiq.db', retired_suffix: str = '.bak',
                 cache_size: int = 50000, retire_unchanged: bool = False):
        self.base_name = base_name
        self.retired_suffix = retired_suffix
        self.cache_size = cache_size
        self.retire_unchanged = retire_unchanged
        self.logger = logging.getLogger(self.__class__.__name__)

    def merge_all(self, directory: Union[str, Path]) -> BatchReport:
        directory = Path(directory)
        base_path = directory / self.base_name

        if not base_path.exists():
            raise BaseStoreMissing(base_path)

        locator = SnapshotManager(directory, self.base_name, self.retired_suffix)
        snapshots = locator.list_snapshots()
        report = BatchReport()

        if not snapshots:
            self.logger.info("No timestamped database files found")
            self.logger.info(f"Looking for files matching pattern: {locator.pattern}")
            return report

        self.logger.info(f"Found {len(snapshots)} timestamped database file(s) to merge:")
        for snap in snapshots:
            self.logger.info(f"  - {snap.name} (timestamp: {snap.created_at:%Y-%m-%d %H:%M:%S})")

        engine = MergeEngine(
            base_path,
            retired_suffix=self.retired_suffix,
            cache_size=self.cache_size,
            retire_unchanged=self.retire_unchanged,
        )

        for idx, snap in enumerate(snapshots, 1):
            self.logger.info(f"[{idx}/{len(snapshots)}] Processing {snap.name}")
            result = engine.merge_one(snap.path)
            report.outcomes.append(FileOutcome(snap, result))
            self._log_outcome(snap, result)

        self.logger.info("=== FINAL SUMMARY ===")
        for line in report.summary_lines():
            self.logger.info(line)
        return report

    def _log_outcome(self, snap: SnapshotFile, result: MergeResult):
        if isinstance(result, MergeSuccess):
            self.logger.info(f"✓ Successfully merged {result.inserted_count} new records")
            if result.warning:
                self.logger.warning(f"{snap.name} left in place, it will be rescanned next run")
        else:
            self.logger.error(f"✗ Failed to merge {snap.name}: {result.detail}")
