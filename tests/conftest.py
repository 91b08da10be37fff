"""
Builders for synthetic level containers
"""

import struct
from typing import Iterable, List, Optional, Sequence, Tuple

import pytest

from rfl_decoder.base.structs import LEVEL_MAGIC
from rfl_decoder.chunks.base_decoder import DecodeContext
from rfl_decoder.config import DecodeConfig
from rfl_decoder.format_detector import ALTERNATE, MOD_NAME, classify_revision
from rfl_decoder.models import Scene

LEGACY_REVISION = 0xC8
OLD_LEGACY_REVISION = 0x96
ALTERNATE_REVISION = ALTERNATE

IDENTITY = (1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0)

Corner = Tuple[int, float, float]


def vstring(text: str) -> bytes:
    """Create a u16 length-prefixed string"""
    data = text.encode('ascii')
    return struct.pack('<H', len(data)) + data


def i32(*values: int) -> bytes:
    return struct.pack(f'<{len(values)}i', *values)


def f32(*values: float) -> bytes:
    return struct.pack(f'<{len(values)}f', *values)


def mat3(values: Sequence[float] = IDENTITY) -> bytes:
    return f32(*values)


def uid_list(values: Iterable[int]) -> bytes:
    values = list(values)
    return i32(len(values), *values)


def section(section_type: int, body: bytes) -> bytes:
    """Create a section with the given type and body"""
    return struct.pack('<ii', section_type, len(body)) + body


def level_header(revision: int,
                 section_count: int,
                 level_name: str = "test level",
                 mod_name: str = "",
                 magic: int = LEVEL_MAGIC,
                 timestamp: int = 0) -> bytes:
    """Create the fixed header, level name and (where present) mod name"""
    header = struct.pack('<Iiiiiii', magic, revision, timestamp, 0, 0, section_count, 0)
    header += vstring(level_name)
    if revision >= MOD_NAME and revision != ALTERNATE:
        header += vstring(mod_name)
    return header


def build_level(revision: int, sections: List[bytes], section_count: Optional[int] = None, **kwargs) -> bytes:
    """Create a complete container; the section count defaults to len(sections)"""
    count = len(sections) if section_count is None else section_count
    return level_header(revision, count, **kwargs) + b''.join(sections)


def object_header(uid: int, class_name: str = "", position=(0.0, 0.0, 0.0),
                  rotation: Sequence[float] = IDENTITY, script_name: str = "", hidden: bool = False) -> bytes:
    """Create the uid/class/position/rotation/script/hidden block shared by placed objects"""
    return (i32(uid) + vstring(class_name) + f32(*position) + mat3(rotation)
            + vstring(script_name) + struct.pack('<B', hidden))


def legacy_face(corners: Sequence[Corner], flags: int = 0, texture_index: int = 0, face_id: int = 0,
                smoothing: int = 0, lightmap_uvs: bool = True) -> bytes:
    """Create a legacy face record; lightmap_uvs adds the per-corner lightmap coordinates"""
    data = f32(0.0, 1.0, 0.0, 0.0) + i32(texture_index, -1, face_id) + b'\x00' * 4
    data += b'\x00' * 4 + i32(-1) + struct.pack('<H', flags) + b'\x00' * 2
    data += struct.pack('<I', smoothing) + i32(0, len(corners))
    for index, u, v in corners:
        data += struct.pack('<iff', index, u, v)
        if lightmap_uvs:
            data += f32(0.0, 0.0)
    return data


def alternate_face(corners: Sequence[Corner], flags: int = 0, texture_index: int = 0, face_id: int = 0,
                   smoothing: int = 0, scroll: Optional[Tuple[float, float]] = None,
                   extra: float = 0.0) -> bytes:
    """Create an alternate-revision face record"""
    if scroll is not None:
        flags |= 0x8000
    data = f32(0.0, 1.0, 0.0, 0.0) + i32(texture_index, -1, face_id) + b'\x00' * 4
    data += struct.pack('<II', flags, smoothing)
    if scroll is not None:
        data += f32(*scroll)
    data += b'\x00' * 3 + f32(extra)
    data += i32(0, len(corners))
    for index, u, v in corners:
        data += struct.pack('<Iff', index, u, v) + b'\xff' * 4
    return data


def legacy_geometry(vertices: Sequence[Tuple[float, float, float]],
                    faces: Sequence[bytes],
                    textures: Sequence[str] = ("rck_wall.tga",),
                    scrolls: Sequence[Tuple[int, float, float]] = ()) -> bytes:
    """Create a legacy (revision 0xC8) static geometry body with no rooms or portals"""
    data = b'\x00' * 8 + vstring("")
    data += i32(len(textures)) + b''.join(vstring(t) for t in textures)
    data += i32(len(scrolls)) + b''.join(struct.pack('<iff', *s) for s in scrolls)
    data += i32(0)  # rooms
    data += i32(0)  # room links
    data += i32(0)  # portals
    data += i32(len(vertices)) + b''.join(f32(*v) for v in vertices)
    data += i32(len(faces)) + b''.join(faces)
    data += i32(0)  # surfaces
    return data


def alternate_geometry(vertices: Sequence[Tuple[float, float, float]],
                       faces: Sequence[bytes],
                       textures: Sequence[str] = ("drt_ground01.tga",)) -> bytes:
    """Create an alternate-revision geometry body with no rooms or portals"""
    data = vstring("") + i32(0)
    data += i32(len(textures)) + b''.join(vstring(t) for t in textures)
    data += i32(0)  # rooms
    data += i32(0)  # room links
    data += i32(0)  # uroom links
    data += i32(0)  # portals
    data += i32(len(vertices)) + b''.join(f32(*v) for v in vertices)
    data += i32(len(faces)) + b''.join(faces)
    return data


def light_record(uid: int, flags: int = 0x1B, color=(255, 255, 255, 255), light_range: float = 10.0,
                 on_intensity: float = 1.0, off_intensity: float = 0.0, position=(0.0, 0.0, 0.0)) -> bytes:
    """Create a light record (flags default to an enabled, shadow casting point light)"""
    data = object_header(uid, "Light", position)
    data += struct.pack('<I', flags) + bytes(color)
    data += f32(light_range, 45.0, 30.0, 0.0) + i32(0) + f32(4.0)
    data += f32(on_intensity, 1.0, 0.0, off_intensity, 1.0, 0.0)
    return data


def corona_record(uid: int, color=(255, 255, 255, 255), cone_angle: float = 360.0, intensity: float = 1.0,
                  forward=(0.0, 0.0, 1.0), position=(0.0, 0.0, 0.0), volumetric: str = "") -> bytes:
    """Create a corona record; rows are stored right, forward, up"""
    data = i32(uid) + vstring("Corona") + f32(*position)
    data += f32(1.0, 0.0, 0.0) + f32(*forward) + f32(0.0, 1.0, 0.0)
    data += vstring("") + b'\x00' + bytes(color) + b'\x00' * 5
    data += vstring("corona.tga")
    data += f32(cone_angle, intensity, 1.0, 1.0, 100.0)
    data += vstring(volumetric)
    if volumetric:
        data += f32(2.0, 3.0, 0.0)
    data += b'\x00' * 5
    return data


def alternate_level_properties(ambient=(10, 20, 30, 255), fog=(40, 50, 60, 255),
                               lightmap_multiplier: float = 1.0) -> bytes:
    data = vstring("geomod.tga") + i32(50) + bytes(ambient) + b'\x01'
    data += bytes(fog) + f32(1.0, 100.0)
    data += bytes((255, 240, 200, 255)) + f32(45.0, 30.0, 0.8, 2.0)
    data += bytes((128, 128, 128, 255)) + i32(3) + f32(lightmap_multiplier)
    return data


def context_for(revision: int, config: Optional[DecodeConfig] = None) -> DecodeContext:
    return DecodeContext.create(classify_revision(revision), config or DecodeConfig(), Scene())


@pytest.fixture
def legacy_context():
    return context_for(LEGACY_REVISION)


@pytest.fixture
def alternate_context():
    return context_for(ALTERNATE_REVISION)
