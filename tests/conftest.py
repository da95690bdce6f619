import pytest

from banalytiq_sync.datastore import create_store

BASE = 'banalytiq.db'


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path


@pytest.fixture
def base_db(data_dir):
    return create_store(data_dir / BASE)


@pytest.fixture
def make_snapshot(data_dir):
    def _make(timestamp, records=()):
        return create_store(data_dir / f'banalytiq.{timestamp}.db', records)
    return _make


@pytest.fixture
def corrupt_snapshot(data_dir):
    def _make(timestamp):
        path = data_dir / f'banalytiq.{timestamp}.db'
        path.write_bytes(b'this is not a sqlite database\n' * 20)
        return path
    return _make
