"""
Core binary reading and container parsing
"""

from .errors import LevelParsingError, InvalidMagicError, TruncatedDataError
from .cursor import Cursor

__all__ = [
    'LevelParsingError',
    'InvalidMagicError',
    'TruncatedDataError',
    'Cursor',
]
