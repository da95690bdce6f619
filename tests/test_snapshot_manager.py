from datetime import datetime

from banalytiq_sync.snapshot_manager import SnapshotManager


def touch(directory, *names):
    for name in names:
        (directory / name).write_bytes(b'')


def test_lists_snapshots_oldest_first(tmp_path):
    touch(tmp_path, 'banalytiq.db', 'banalytiq.300.db', 'banalytiq.100.db', 'banalytiq.20.db')

    snaps = SnapshotManager(tmp_path).list_snapshots()

    assert [s.name for s in snaps] == ['banalytiq.20.db', 'banalytiq.100.db', 'banalytiq.300.db']
    assert [s.timestamp for s in snaps] == [20, 100, 300]
    assert snaps[0].path == tmp_path / 'banalytiq.20.db'


def test_excludes_base_and_retired(tmp_path):
    touch(tmp_path, 'banalytiq.db', 'banalytiq.100.db.bak', 'banalytiq.200.db')

    snaps = SnapshotManager(tmp_path).list_snapshots()

    assert [s.name for s in snaps] == ['banalytiq.200.db']


def test_skips_names_without_timestamp(tmp_path):
    touch(tmp_path, 'banalytiq.latest.db', 'banalytiq.12a.db', 'banalytiq.100.sqlite',
          'other.100.db', 'banalytiq.100.db-wal', 'banalytiq.5.db')

    snaps = SnapshotManager(tmp_path).list_snapshots()

    assert [s.name for s in snaps] == ['banalytiq.5.db']


def test_skips_directories(tmp_path):
    (tmp_path / 'banalytiq.100.db').mkdir()

    assert SnapshotManager(tmp_path).list_snapshots() == []


def test_custom_base_name_and_suffix(tmp_path):
    touch(tmp_path, 'stats.sqlite', 'stats.7.sqlite', 'stats.8.sqlite.done', 'banalytiq.9.db')

    locator = SnapshotManager(tmp_path, base_name='stats.sqlite', retired_suffix='.done')

    assert [s.name for s in locator.list_snapshots()] == ['stats.7.sqlite']
    assert locator.pattern == 'stats.{timestamp}.sqlite'


def test_empty_directory(tmp_path):
    assert SnapshotManager(tmp_path).list_snapshots() == []


def test_created_at_and_snapshot_path(tmp_path):
    touch(tmp_path, 'banalytiq.1700000000.db')
    locator = SnapshotManager(tmp_path)

    snap = locator.list_snapshots()[0]

    assert snap.created_at == datetime.fromtimestamp(1700000000)
    assert locator.snapshot_path_for(1700000000) == snap.path


def test_base_name_with_glob_characters(tmp_path):
    touch(tmp_path, 'stats[1].db', 'stats[1].5.db', 'stats1.6.db', 'stats*.7.db')

    snaps = SnapshotManager(tmp_path, base_name='stats[1].db').list_snapshots()

    assert [s.name for s in snaps] == ['stats[1].5.db']
