import json
import logging
from pathlib import Path
from typing import Optional, Union

from banalytiq_sync import validators
from banalytiq_sync.batch_orchestrator import BatchOrchestrator
from banalytiq_sync.errors import ConfigurationError, ConfigurationMissing
from banalytiq_sync.transfer import SnapshotDownloader


DEFAULTS = {
    'DATA_DIR': '.',
    'BASE_DB': 'banalytiq.db',
    'RETIRED_SUFFIX': '.bak',
    'CACHE_SIZE': 50000,
    'RETIRE_UNCHANGED': False,
    'LOG_FILE': None,
}

FTP_REQUIRED = ['HOST', 'USER', 'PWD', 'REMOTE_PATH']


class ConfigManager:

    def __init__(self, config_path: Optional[Union[str, Path]] = None, required: bool = False):
        self.logger = logging.getLogger(self.__class__.__name__)

        if config_path is None:
            config_path = Path.cwd() / 'config.json'

        self.config_path = Path(config_path)
        self.required = required
        self.config = {**DEFAULTS, **self._load_config()}

    def _load_config(self) -> dict:
        if not self.config_path.exists():
            if self.required:
                raise ConfigurationMissing(f"Config file not found: {self.config_path}")
            self.logger.info(f"No config file at {self.config_path}, using defaults")
            return {}

        try:
            with self.config_path.open(encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Failed to parse config file {self.config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {self.config_path} must hold a JSON object")
        return data

    def get(self, key: str, default=None):
        return self.config.get(key, default)

    @property
    def data_dir(self) -> Path:
        data_dir = Path(validators.not_blank(self.config['DATA_DIR'], 'DATA_DIR'))
        if not data_dir.is_absolute():
            data_dir = self.config_path.parent / data_dir
        return data_dir

    @property
    def base_name(self) -> str:
        return validators.not_blank(self.config['BASE_DB'], 'BASE_DB')

    @property
    def retired_suffix(self) -> str:
        return validators.not_blank(self.config['RETIRED_SUFFIX'], 'RETIRED_SUFFIX')

    @property
    def cache_size(self) -> int:
        return validators.integer(self.config['CACHE_SIZE'], 'CACHE_SIZE')

    @property
    def retire_unchanged(self) -> bool:
        return validators.boolean(self.config['RETIRE_UNCHANGED'], 'RETIRE_UNCHANGED')

    @property
    def log_file(self) -> Optional[str]:
        return self.config.get('LOG_FILE') or None

    def ftp_settings(self) -> dict:
        ftp = self.config.get('FTP')
        if not isinstance(ftp, dict):
            raise ConfigurationMissing(f"Missing FTP section in {self.config_path}")
        validators.required_keys(ftp, FTP_REQUIRED, 'FTP')

        port = ftp.get('PORT')
        return {
            'host': ftp['HOST'],
            'port': 21 if port in (None, '') else validators.integer(port, 'FTP.PORT'),
            'user': ftp['USER'],
            'password': ftp['PWD'],
            'remote_path': ftp['REMOTE_PATH'],
        }

    def build_orchestrator(self) -> BatchOrchestrator:
        return BatchOrchestrator(
            base_name=self.base_name,
            retired_suffix=self.retired_suffix,
            cache_size=self.cache_size,
            retire_unchanged=self.retire_unchanged,
        )

    def build_downloader(self) -> SnapshotDownloader:
        return SnapshotDownloader(base_name=self.base_name, **self.ftp_settings())
