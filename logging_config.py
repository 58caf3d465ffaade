"""
Logging setup for the lotto results tracker CLI
"""

import logging
import os
import sys
from datetime import datetime
from typing import Optional

from config import AppConfig

FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
CONSOLE_FORMAT = '%(levelname)s - %(message)s'

# HTTP client libraries are chatty at DEBUG
QUIET_LOGGERS = ('urllib3', 'charset_normalizer', 'chardet')


def import_log_path(log_dir: Optional[str] = None, day: Optional[datetime] = None) -> str:
    """Daily log file, e.g. logs/lotto_import_20250902.log"""
    day = day or datetime.now()
    return os.path.join(log_dir or AppConfig.LOG_DIR, f"lotto_import_{day.strftime('%Y%m%d')}.log")


def setup_logging(level=logging.INFO, log_dir: str = None, log_to_file: bool = True):
    """
    Configure the root logger once per process.

    The console handler writes to stderr at `level` so stdout stays free for
    JSON output. The file handler, when enabled, records everything from DEBUG.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    if log_to_file:
        log_file = import_log_path(log_dir)
        os.makedirs(os.path.dirname(log_file) or '.', exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        file_handler.setLevel(logging.DEBUG)
        root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger


def get_logger(name):
    return logging.getLogger(name)
