"""Logging configuration for the level decoder."""
import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
CONSOLE_FORMAT = '%(levelname)s: %(message)s'


def setup_logging(log_level: int = logging.INFO) -> logging.Logger:
    """Route every decoder logger to stderr.

    Per-level log files are attached separately with level_log_file().

    Args:
        log_level: Logging level (default: INFO)

    Returns:
        The configured root logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    console_handler.setLevel(log_level)
    root_logger.addHandler(console_handler)

    root_logger.debug(f"Logging initialized at {logging.getLevelName(log_level)}")
    return root_logger


@contextmanager
def level_log_file(log_dir: Optional[Union[str, Path]], level_path: Path) -> Iterator[Optional[Path]]:
    """Capture everything logged while decoding one level into <log_dir>/<level stem>.log.

    Yields the log file path, or None when log_dir is None. The file is
    rewritten on every run and detached again on exit.
    """
    if log_dir is None:
        yield None
        return

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    log_file = log_path / f'{level_path.stem}.log'

    root_logger = logging.getLogger()
    file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
    file_handler.setLevel(root_logger.level)
    root_logger.addHandler(file_handler)
    try:
        yield log_file
    finally:
        root_logger.removeHandler(file_handler)
        file_handler.close()


class ContextAdapter(logging.LoggerAdapter):
    """Prefixes every message with the adapter's context values"""

    def process(self, msg, kwargs):
        if not self.extra:
            return msg, kwargs
        prefix = ' '.join(f'[{value}]' for value in self.extra.values())
        return f"{prefix} {msg}", kwargs


def get_logger(name: str, **context) -> logging.LoggerAdapter:
    """Get a logger whose messages carry context such as the level file name"""
    return ContextAdapter(logging.getLogger(name), context)
