"""
Level format revision detection
"""

import logging
import struct
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Union

from .base.errors import InvalidMagicError, TruncatedDataError
from .base.structs import LEVEL_MAGIC

logger = logging.getLogger(__name__)

# Revision thresholds gating layout differences
ALTERNATE = 0x127
EXTENDED = 0x12C
LEGACY_MAX = 0xC8
MOD_NAME = 0xB2
TRIGGER_TEAM = 0xB1
EVENT_COLOR = 0xB0
FACE_SCROLL = 0xB4
ROOM_EAX = 0xB4
GEOMETRY_PREFIX = 0xC8
EVENT_ROT_TELEPORT = 0x91
EVENT_ROT_ALARM = 0x98
EVENT_ROT_ANCHOR = 0x12D


class LevelFormat(Enum):
    """Supported level container families"""
    LEGACY = auto()
    ALTERNATE = auto()


@dataclass(frozen=True)
class Revision:
    """A classified revision number"""
    number: int
    format: LevelFormat
    extended: bool = False

    @property
    def is_legacy(self) -> bool:
        return self.format is LevelFormat.LEGACY

    @property
    def is_alternate(self) -> bool:
        return self.format is LevelFormat.ALTERNATE

    def at_least(self, threshold: int) -> bool:
        return self.number >= threshold

    def __str__(self) -> str:
        suffix = " extended" if self.extended else ""
        return f"0x{self.number:X} ({self.format.name.lower()}{suffix})"


def classify_revision(number: int) -> Revision:
    """
    Classify a raw revision number

    Legacy covers revisions up to 200 and from 300 upward (extended);
    295 is the alternate revision. Anything else is treated as plain
    legacy with a warning.
    """
    if number == ALTERNATE:
        return Revision(number, LevelFormat.ALTERNATE)
    if number >= EXTENDED:
        return Revision(number, LevelFormat.LEGACY, extended=True)
    if number > LEGACY_MAX:
        logger.warning(f"Revision 0x{number:X} belongs to no known family, decoding as legacy")
    return Revision(number, LevelFormat.LEGACY)


class FormatDetector:
    """Detects the revision of a level file from its header"""

    HEADER_SIZE = 8

    def __init__(self, file_path: Union[str, Path]):
        self.file_path = Path(file_path)
        self.logger = logging.getLogger(self.__class__.__name__)

    def detect_format(self) -> Revision:
        """
        Read the magic and revision number

        Returns:
            Classified Revision

        Raises:
            InvalidMagicError: If the magic does not match
            TruncatedDataError: If the file is shorter than the header
        """
        with open(self.file_path, 'rb') as f:
            header = f.read(self.HEADER_SIZE)

        if len(header) < self.HEADER_SIZE:
            raise TruncatedDataError(0, self.HEADER_SIZE, len(header))

        magic, number = struct.unpack('<Ii', header)
        if magic != LEVEL_MAGIC:
            raise InvalidMagicError(magic)

        revision = classify_revision(number)
        self.logger.info(f"{self.file_path.name}: revision {revision}")
        return revision
