import importlib
import json

import pytest

from banalytiq_sync.datastore import Record, count_records, create_store
from banalytiq_sync.pipeline_orchestrator import build_parser, main


def test_main_entry_resolves():
    pkg = importlib.import_module("banalytiq_sync")
    assert hasattr(pkg, "BatchOrchestrator")
    sub = importlib.import_module("banalytiq_sync.pipeline_orchestrator")
    assert callable(sub.main)


def test_modes_are_exclusive():
    with pytest.raises(SystemExit):
        build_parser().parse_args(['--merge-only', '--no-merge'])


def test_merge_only_without_config(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    base = create_store(tmp_path / 'banalytiq.db', [Record('1.1.1.1', 1, '/')])
    create_store(tmp_path / 'banalytiq.100.db', [Record('1.1.1.1', 1, '/'), Record('2.2.2.2', 2, '/')])

    assert main(['--merge-only']) == 0
    assert count_records(base) == 2
    assert (tmp_path / 'banalytiq.100.db.bak').exists()


def test_merge_only_with_dir_override(tmp_path):
    data = tmp_path / 'data'
    data.mkdir()
    base = create_store(data / 'banalytiq.db')
    create_store(data / 'banalytiq.5.db', [Record('3.3.3.3', 3, '/x')])

    assert main(['--merge-only', '--dir', str(data), str(tmp_path / 'absent.json')]) == 0
    assert count_records(base) == 1


def test_merge_only_reports_failures(tmp_path):
    create_store(tmp_path / 'banalytiq.db')
    (tmp_path / 'banalytiq.5.db').write_bytes(b'garbage' * 100)

    assert main(['--merge-only', '--dir', str(tmp_path)]) == 1


def test_missing_base_exits_nonzero(tmp_path):
    assert main(['--merge-only', '--dir', str(tmp_path)]) == 1


def test_download_requires_config(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    assert main([]) == 1


def test_download_without_ftp_section_fails(tmp_path):
    cfg = tmp_path / 'config.json'
    cfg.write_text(json.dumps({'DATA_DIR': '.'}), encoding='utf-8')

    assert main(['--no-merge', str(cfg)]) == 1


def test_download_then_merge(tmp_path, monkeypatch):
    cfg = tmp_path / 'config.json'
    cfg.write_text(json.dumps({
        'FTP': {'HOST': 'h', 'USER': 'u', 'PWD': 'p', 'REMOTE_PATH': '/r'},
    }), encoding='utf-8')
    create_store(tmp_path / 'banalytiq.db')
    remote = create_store(tmp_path / 'remote.sqlite', [Record('4.4.4.4', 4, '/y')])

    class FakeDownloader:
        def download(self, directory):
            target = directory / 'banalytiq.42.db'
            target.write_bytes(remote.read_bytes())
            return target

    monkeypatch.setattr('banalytiq_sync.config_manager.ConfigManager.build_downloader',
                        lambda self: FakeDownloader())

    assert main([str(cfg)]) == 0
    assert count_records(tmp_path / 'banalytiq.db') == 1
    assert (tmp_path / 'banalytiq.42.db.bak').exists()
