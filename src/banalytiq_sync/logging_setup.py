from __future__ import annotations
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

CONSOLE_FMT = '[%(asctime)s] [%(levelname_colored)s] [%(name_colored)s] %(message)s'
FILE_FMT = '[%(asctime)s] [%(levelname)-8s] [%(name)s] %(message)s'
DATE_FMT = '%Y-%m-%d %H:%M:%S'


class ColoredFormatter(logging.Formatter):
    COLORS = {
        'DEBUG': '\033[36m', 'INFO': '\033[32m', 'WARNING': '\033[33m',
        'ERROR': '\033[31m', 'CRITICAL': '\033[35m'
    }
    RESET = '\033[0m'
    BOLD = '\033[1m'

    def format(self, record):
        color = self.COLORS.get(record.levelname, self.RESET)
        record.levelname_colored = f"{color}{record.levelname:8s}{self.RESET}"
        record.name_colored = f"{self.BOLD}{record.name}{self.RESET}"
        return super().format(record)


def setup_logging(log_file: Optional[Union[str, Path]] = None,
                  level: Optional[Union[int, str]] = None) -> logging.Logger:
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO").upper()

    # Clear existing handlers
    root = logging.getLogger()
    for h in root.handlers[:]:
        root.removeHandler(h)

    ch = logging.StreamHandler()
    ch.setLevel(level)
    ch.setFormatter(ColoredFormatter(CONSOLE_FMT, datefmt=DATE_FMT))
    root.addHandler(ch)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_path, mode='a', encoding='utf-8')
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter(FILE_FMT, datefmt=DATE_FMT))
        root.addHandler(fh)

    root.setLevel(level)

    logger = logging.getLogger('Setup')
    logger.info('=' * 60)
    logger.info(f'Logging initialized - File: {log_file or "console only"}')
    logger.info(f'Session: {datetime.now().strftime(DATE_FMT)}')
    logger.info('=' * 60)
    return root
