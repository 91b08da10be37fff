"""
Exceptions raised while decoding level containers
"""


class LevelParsingError(Exception):
    """Base exception for level parsing errors"""
    pass


class InvalidMagicError(LevelParsingError):
    """Raised when a file does not start with the level container magic"""

    def __init__(self, magic: int):
        self.magic = magic
        super().__init__(f"Invalid RFL file: wrong magic 0x{magic:08X}")


class TruncatedDataError(LevelParsingError):
    """Raised when a read runs past the end of the bounded buffer"""

    def __init__(self, offset: int, wanted: int, available: int):
        self.offset = offset
        self.wanted = wanted
        self.available = available
        super().__init__(
            f"Truncated data at offset {offset}: wanted {wanted} bytes, {available} available"
        )
