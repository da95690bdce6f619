import logging
from pathlib import Path
from typing import Callable, Optional, Union

from sqlalchemy import text
from sqlalchemy.engine import Connection

from banalytiq_sync.datastore import ANALYTICS_TABLE, get_engine
from banalytiq_sync.errors import InvalidSnapshot
from banalytiq_sync.results import FailureKind, MergeFailure, MergeResult, MergeSuccess


SOURCE_ALIAS = 'source_db'

# First-written row per key within the snapshot, and only keys absent from the base
MISSING_IN_BASE = f"""
    FROM {SOURCE_ALIAS}.{ANALYTICS_TABLE} s
    WHERE NOT EXISTS (
        SELECT 1 FROM main.{ANALYTICS_TABLE} m
        WHERE m.ip = s.ip AND m.dt = s.dt AND m.url = s.url
    )
    AND s.rowid = (
        SELECT MIN(s2.rowid) FROM {SOURCE_ALIAS}.{ANALYTICS_TABLE} s2
        WHERE s2.ip = s.ip AND s2.dt = s.dt AND s2.url = s.url
    )
"""

COUNT_SQL = f"SELECT COUNT(*) {MISSING_IN_BASE}"

INSERT_SQL = f"""
    INSERT INTO main.{ANALYTICS_TABLE}
        (ip, dt, url, referer, ua, status, country, city, latitude, longitude)
    SELECT s.ip, s.dt, s.url, s.referer, s.ua, s.status, NULL, NULL, NULL, NULL
    {MISSING_IN_BASE}
"""


class MergeEngine:
    """Folds one snapshot store into the base store.

    The snapshot is attached to the base connection so the difference is
    computed by SQLite as an anti-join on (ip, dt, url); only rows missing
    from the base are inserted, inside a single transaction. A merged
    snapshot is renamed with ``retired_suffix`` once the commit is durable.
    """

    def __init__(self, base_path: Union[str, Path], retired_suffix: str = '.bak',
                 cache_size: int = 50000, retire_unchanged: bool = False):
        self.base_path = Path(base_path)
        self.retired_suffix = retired_suffix
        self.cache_size = int(cache_size)
        self.retire_unchanged = retire_unchanged
        self.logger = logging.getLogger(self.__class__.__name__)

    def retired_path(self, snapshot_path: Union[str, Path]) -> Path:
        snapshot_path = Path(snapshot_path)
        return snapshot_path.with_name(snapshot_path.name + self.retired_suffix)

    @staticmethod
    def source_uri(snapshot_path: Union[str, Path]) -> str:
        return Path(snapshot_path).resolve().as_uri() + '?mode=ro'

    def merge_one(self, snapshot_path: Union[str, Path]) -> MergeResult:
        snapshot_path = Path(snapshot_path)

        if not snapshot_path.exists():
            return self._not_found(f"Snapshot database file not found: {snapshot_path}")
        if not self.base_path.exists():
            return self._not_found(f"Base database file not found: {self.base_path}")

        try:
            inserted = self._apply(snapshot_path)
        except Exception as e:
            self.logger.error(f"Merge of {snapshot_path.name} failed: {e}")
            return MergeFailure(FailureKind.TRANSACTION, str(e))

        if inserted == 0 and not self.retire_unchanged:
            return MergeSuccess(0)
        return self._retire(snapshot_path, inserted)

    def _not_found(self, detail: str) -> MergeFailure:
        self.logger.error(detail)
        return MergeFailure(FailureKind.NOT_FOUND, detail)

    def _apply(self, snapshot_path: Path) -> int:
        # Driver autocommit: BEGIN/COMMIT are issued explicitly around the insert
        base_engine = get_engine(
            self.base_path, isolation_level='AUTOCOMMIT', connect_args={'uri': True},
        )
        snapshot_engine = get_engine(snapshot_path)
        base_conn = None
        snapshot_conn = None
        in_transaction = False

        try:
            base_conn = base_engine.connect()
            self._configure(base_conn)

            snapshot_conn = snapshot_engine.connect()
            self._check_snapshot(snapshot_conn, snapshot_path)

            base_conn.execute(
                text(f"ATTACH DATABASE :path AS {SOURCE_ALIAS}"),
                {'path': self.source_uri(snapshot_path)},
            )

            new_count = self._count_missing(base_conn)
            if new_count == 0:
                self.logger.info("No new records to merge. Database is already up to date.")
                inserted = 0
            else:
                self.logger.info(f"Found {new_count} new records to insert")
                base_conn.exec_driver_sql('BEGIN IMMEDIATE')
                in_transaction = True
                inserted = self._insert_missing(base_conn)
                base_conn.exec_driver_sql('COMMIT')
                in_transaction = False

            base_conn.exec_driver_sql(f'DETACH DATABASE {SOURCE_ALIAS}')
            return inserted
        except Exception:
            if in_transaction:
                self._rollback(base_conn)
            raise
        finally:
            self._release(
                snapshot_conn.close if snapshot_conn is not None else None,
                base_conn.close if base_conn is not None else None,
                snapshot_engine.dispose,
                base_engine.dispose,
            )

    def _release(self, *closers: Optional[Callable[[], None]]):
        for close in closers:
            if close is None:
                continue
            try:
                close()
            except Exception as e:
                self.logger.warning(f"Failed to release database handle: {e}")

    def _configure(self, conn: Connection):
        mode = conn.exec_driver_sql('PRAGMA journal_mode = WAL').scalar()
        self.logger.debug(f"Base journal mode: {mode}")
        conn.exec_driver_sql('PRAGMA synchronous = NORMAL')
        conn.exec_driver_sql(f'PRAGMA cache_size = {self.cache_size}')

    def _check_snapshot(self, conn: Connection, snapshot_path: Path):
        row = conn.execute(
            text("SELECT name FROM sqlite_master WHERE type = 'table' AND name = :t"),
            {'t': ANALYTICS_TABLE},
        ).first()
        if row is None:
            raise InvalidSnapshot(f"{snapshot_path.name} has no {ANALYTICS_TABLE} table")

    def _count_missing(self, conn: Connection) -> int:
        return int(conn.execute(text(COUNT_SQL)).scalar())

    def _insert_missing(self, conn: Connection) -> int:
        result = conn.execute(text(INSERT_SQL))
        return result.rowcount

    def _rollback(self, conn: Connection):
        try:
            conn.exec_driver_sql('ROLLBACK')
            self.logger.info("Transaction rolled back")
        except Exception as e:
            self.logger.warning(f"Rollback failed: {e}")

    def _retire(self, snapshot_path: Path, inserted: int) -> MergeSuccess:
        target = self.retired_path(snapshot_path)
        try:
            snapshot_path.rename(target)
        except OSError as e:
            warning = f"Could not rename {snapshot_path.name} to {target.name}: {e}"
            self.logger.warning(warning)
            return MergeSuccess(inserted, retired=False, warning=warning)

        self.logger.info(f"Snapshot renamed to: {target.name}")
        return MergeSuccess(inserted, retired=True)
