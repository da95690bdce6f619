import ftplib
import logging
import time
from pathlib import Path
from typing import Callable, Union

from banalytiq_sync.errors import SourceUnavailable
from banalytiq_sync.snapshot_manager import SnapshotManager


class SnapshotDownloader:
    """Fetches the remote base store over explicit FTPS.

    The download lands as the local base store when none exists yet,
    otherwise as a timestamped snapshot next to it so the next merge
    picks it up.
    """

    def __init__(self, host: str, user: str, password: str, remote_path: str,
                 port: int = 21, base_name: str = 'banalytiq.db',
                 ftp_factory: Callable[[], ftplib.FTP_TLS] = ftplib.FTP_TLS):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.remote_path = remote_path
        self.base_name = base_name
        self.ftp_factory = ftp_factory
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def remote_file(self) -> str:
        remote_path = self.remote_path
        if not remote_path.endswith('/'):
            remote_path += '/'
        return remote_path + self.base_name

    def target_path(self, directory: Union[str, Path]) -> Path:
        directory = Path(directory)
        base = directory / self.base_name
        if not base.exists():
            return base

        locator = SnapshotManager(directory, self.base_name)
        timestamp = int(time.time())
        target = locator.snapshot_path_for(timestamp)
        while target.exists():
            timestamp += 1
            target = locator.snapshot_path_for(timestamp)

        self.logger.info(f"{self.base_name} already exists, downloading to {target.name}")
        return target

    def download(self, directory: Union[str, Path]) -> Path:
        local_file = self.target_path(directory)
        remote_file = self.remote_file

        ftp = self.ftp_factory()
        try:
            ftp.connect(self.host, self.port)
            ftp.login(self.user, self.password)
            ftp.prot_p()
            ftp.set_pasv(True)

            with local_file.open('wb') as f:
                ftp.retrbinary(f'RETR {remote_file}', f.write)
        except ftplib.all_errors as e:
            local_file.unlink(missing_ok=True)
            raise SourceUnavailable(
                f"Failed to download {remote_file} from {self.host}: {e}"
            ) from e
        finally:
            self._close(ftp)

        self.logger.info(f"Successfully downloaded to {local_file}")
        return local_file

    def _close(self, ftp: ftplib.FTP_TLS):
        try:
            ftp.quit()
        except ftplib.all_errors as e:
            self.logger.debug(f"FTP quit failed ({e}), closing connection")
            ftp.close()
