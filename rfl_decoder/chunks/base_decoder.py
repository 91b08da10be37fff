"""
Base class for section decoders
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, NamedTuple, Optional, TypeVar

from ..base.cursor import Cursor
from ..base.errors import TruncatedDataError
from ..config import DecodeConfig
from ..format_detector import Revision
from ..models import Mat3, Scene, Vec3
from ..textures import TextureNamer

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass
class DecodeContext:
    """State shared by every section decoder during one decode"""
    revision: Revision
    config: DecodeConfig
    scene: Scene
    texture_namer: Callable[[str], str]

    @classmethod
    def create(cls, revision: Revision, config: DecodeConfig, scene: Scene) -> 'DecodeContext':
        return cls(revision, config, scene, TextureNamer(config))

    def texture_name(self, name: str) -> str:
        """Apply the configured rewrite to alternate-revision texture names"""
        if self.revision.is_alternate:
            return self.texture_namer(name)
        return name


class ObjectHeader(NamedTuple):
    """Fields leading most placed-object records"""
    uid: int
    class_name: str
    position: Vec3
    rotation: Mat3
    script_name: str
    hidden_in_editor: bool


class SectionDecoder:
    """Base class for all section decoders"""

    section_type: int = -1
    name: str = "section"
    # Scene list extended with the decoded records, if any
    target: Optional[str] = None

    def enabled(self, config: DecodeConfig) -> bool:
        return True

    def decode(self, cursor: Cursor, context: DecodeContext) -> Any:
        """
        Decode a section body

        Args:
            cursor: Cursor bounded to the section body
            context: Revision, config and the scene being built

        Returns:
            Decoded records
        """
        raise NotImplementedError("Section decoders must implement decode method")

    def store(self, scene: Scene, result: Any) -> None:
        """Attach a decode result to the scene"""
        if self.target is not None and result:
            getattr(scene, self.target).extend(result)

    @staticmethod
    def read_records(cursor: Cursor, read_one: Callable[[Cursor, int], T], label: str) -> List[T]:
        """
        Read an i32 count followed by that many records

        Truncation inside a record stops the loop; records read so far are kept.
        """
        count = cursor.read_i32()
        logger.debug(f"Reading {count} {label}")
        records: List[T] = []
        for i in range(count):
            try:
                records.append(read_one(cursor, i))
            except TruncatedDataError as e:
                logger.warning(f"{label} {i}/{count} truncated, keeping {len(records)}: {e}")
                break
        return records

    @staticmethod
    def read_object_header(cursor: Cursor, rotation_order: str = "rows") -> ObjectHeader:
        """
        Read uid, class name, position, rotation, script name and hidden flag

        Args:
            rotation_order: "rows" for right/up/forward storage, "fru" for forward/right/up
        """
        uid = cursor.read_i32()
        class_name = cursor.read_vstring()
        position = cursor.read_vec3()
        rotation = cursor.read_mat3_fru() if rotation_order == "fru" else cursor.read_mat3()
        script_name = cursor.read_vstring()
        hidden = cursor.read_bool()
        return ObjectHeader(uid, class_name, position, rotation, script_name, hidden)


class SkippedSection:
    """A recognized section type that is deliberately not parsed"""

    def __init__(self, section_type: int, reason: str):
        self.section_type = section_type
        self.reason = reason

    def __repr__(self) -> str:
        return f"SkippedSection(0x{self.section_type:X}, {self.reason!r})"
