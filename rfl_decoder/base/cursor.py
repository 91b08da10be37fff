"""
Bounded little-endian reader over an in-memory level buffer
"""

import logging
import struct
from typing import List, Optional, Tuple

from construct import Construct

from .errors import TruncatedDataError
from ..models import Color, Mat3, Vec2, Vec3

logger = logging.getLogger(__name__)

EMPTY_STRING_LENGTHS = (0, 0xFFFF)


class Cursor:
    """
    Position within a byte buffer, bounded to [start, end)

    Every read past the bound raises TruncatedDataError; the position is
    never moved by a failed read.
    """

    def __init__(self, data: bytes, start: int = 0, end: Optional[int] = None):
        self.data = data
        self.start = start
        self.end = len(data) if end is None else min(end, len(data))
        self.position = start

    def __repr__(self) -> str:
        return f"Cursor(position={self.position}, end={self.end})"

    def tell(self) -> int:
        return self.position

    def seek(self, offset: int) -> None:
        """Move to an absolute offset, clamped to the cursor bounds"""
        self.position = max(self.start, min(offset, self.end))

    @property
    def remaining(self) -> int:
        return self.end - self.position

    @property
    def at_end(self) -> bool:
        return self.position >= self.end

    def sub(self, end: int) -> 'Cursor':
        """Return a cursor over [position, end), sharing this buffer"""
        return Cursor(self.data, self.position, min(end, self.end))

    def skip(self, count: int) -> None:
        self._take(count)

    def read_bytes(self, count: int) -> bytes:
        return self._take(count)

    def _take(self, count: int) -> bytes:
        if count < 0 or count > self.remaining:
            raise TruncatedDataError(self.position, count, self.remaining)
        offset = self.position
        self.position += count
        return self.data[offset:self.position]

    def unpack(self, fmt: str) -> Tuple:
        """Unpack a struct format (little-endian prefix added)"""
        fmt = '<' + fmt
        return struct.unpack(fmt, self._take(struct.calcsize(fmt)))

    def read_struct(self, definition: Construct):
        """Parse a fixed-size construct definition at the current position"""
        return definition.parse(self._take(definition.sizeof()))

    def read_i32(self) -> int:
        return self.unpack('i')[0]

    def read_u32(self) -> int:
        return self.unpack('I')[0]

    def read_u16(self) -> int:
        return self.unpack('H')[0]

    def read_u8(self) -> int:
        return self._take(1)[0]

    def read_bool(self) -> bool:
        return self._take(1)[0] != 0

    def read_f32(self) -> float:
        return self.unpack('f')[0]

    def read_floats(self, count: int) -> Tuple[float, ...]:
        return self.unpack(f'{count}f')

    def read_vec2(self) -> Vec2:
        return Vec2(*self.unpack('2f'))

    def read_vec3(self) -> Vec3:
        return Vec3(*self.unpack('3f'))

    def read_mat3(self) -> Mat3:
        """Read nine floats stored as rows right, up, forward"""
        m = self.unpack('9f')
        return Mat3(Vec3(*m[0:3]), Vec3(*m[3:6]), Vec3(*m[6:9]))

    def read_mat3_fru(self) -> Mat3:
        """Read nine floats stored as rows forward, right, up"""
        m = self.unpack('9f')
        return Mat3(right=Vec3(*m[3:6]), up=Vec3(*m[6:9]), forward=Vec3(*m[0:3]))

    def read_rgba(self) -> Tuple[int, int, int, int]:
        return tuple(self._take(4))

    def read_color(self) -> Color:
        """Read four bytes as an RGBA color normalized to 0..1"""
        r, g, b, a = self._take(4)
        return Color(r / 255.0, g / 255.0, b / 255.0, a / 255.0)

    def read_vstring(self) -> str:
        """
        Read a u16 length-prefixed ASCII string

        Lengths 0 and 0xFFFF mean empty. A length running past the bound
        yields an empty string with the length bytes consumed.
        """
        if self.remaining < 2:
            return ""
        length = self.read_u16()
        if length in EMPTY_STRING_LENGTHS:
            return ""
        if length > self.remaining:
            logger.warning(
                f"String length {length} at offset {self.position - 2} exceeds "
                f"remaining {self.remaining} bytes"
            )
            return ""
        return self._take(length).decode('ascii', 'replace')

    def read_plain_string(self) -> str:
        """Read a u8 length-prefixed UTF-8 string"""
        length = self.read_u8()
        if length == 0:
            return ""
        if length > self.remaining:
            logger.warning(
                f"String length {length} at offset {self.position - 1} exceeds "
                f"remaining {self.remaining} bytes"
            )
            return ""
        return self._take(length).decode('utf-8', 'replace')

    def read_cstring(self) -> str:
        """Read a null-terminated string; an unterminated tail is taken whole"""
        end = self.data.find(b'\0', self.position, self.end)
        if end == -1:
            return self._take(self.remaining).decode('utf-8', 'replace')
        text = self.data[self.position:end].decode('utf-8', 'replace')
        self.position = end + 1
        return text

    def read_count(self, min_record_size: int, label: str = "record") -> int:
        """
        Read an i32 element count

        A negative count, or one whose smallest records could not fit in the
        remaining bytes, is treated as zero.
        """
        count = self.read_i32()
        if count < 0 or count * min_record_size > self.remaining:
            logger.warning(
                f"Implausible {label} count {count} at offset {self.position - 4}, treating as zero"
            )
            return 0
        return count

    def read_uid_list(self, label: str = "list") -> List[int]:
        """
        Read an i32 count followed by that many i32 values

        A negative count, or one running past the bound, gives an empty list.
        """
        count = self.read_i32()
        if count < 0 or count * 4 > self.remaining:
            logger.warning(
                f"Implausible {label} count {count} at offset {self.position - 4}, treating as empty"
            )
            return []
        return list(self.unpack(f'{count}i'))
