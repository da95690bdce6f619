import re
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Union


@dataclass(frozen=True)
class SnapshotFile:
    name: str
    path: Path
    timestamp: int

    @property
    def created_at(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp)


class SnapshotManager:

    def __init__(self, directory: Union[str, Path], base_name: str = 'banalytiq.db',
                 retired_suffix: str = '.bak'):
        self.directory = Path(directory)
        self.base_name = base_name
        self.retired_suffix = retired_suffix
        self.logger = logging.getLogger(self.__class__.__name__)

        base = Path(base_name)
        self.stem = base.stem
        self.ext = base.suffix
        self.regex = re.compile(rf'^{re.escape(self.stem)}\.(\d+){re.escape(self.ext)}$')

    @property
    def pattern(self) -> str:
        return f'{self.stem}.{{timestamp}}{self.ext}'

    def list_snapshots(self) -> List[SnapshotFile]:
        snapshots = []
        for path in self.directory.iterdir():
            name = path.name
            if name == self.base_name:
                continue
            if self.retired_suffix and name.endswith(self.retired_suffix):
                continue
            if not path.is_file():
                continue

            m = self.regex.match(name)
            if m:
                snapshots.append(SnapshotFile(name, path, int(m[1])))
            else:
                self.logger.debug(f"Skipping file without timestamp: {name}")

        snapshots.sort(key=lambda s: (s.timestamp, s.name))
        return snapshots

    def snapshot_path_for(self, timestamp: int) -> Path:
        return self.directory / f'{self.stem}.{int(timestamp)}{self.ext}'
