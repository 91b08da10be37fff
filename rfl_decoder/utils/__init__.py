from .logging import get_logger, level_log_file, setup_logging

__all__ = ['setup_logging', 'level_log_file', 'get_logger']
