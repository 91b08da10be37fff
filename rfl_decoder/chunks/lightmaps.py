"""
Lightmap decoders: raw 24-bit lightmaps and alternate-revision baked vertex colours
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .base_decoder import SectionDecoder
from ..base.structs import BakedEntryHeader, BakedTriangleVertex
from ..models import Lightmap, Vec3

logger = logging.getLogger(__name__)

BAKED_LIGHTMAP_VERSION = 5
ENTRY_BOUNDS_SIZE = 24

RGB = Tuple[int, int, int]


class LightmapDecoder(SectionDecoder):
    """Decoder for raw RGB lightmaps (0x1200)"""

    section_type = 0x1200
    name = "lightmaps"
    target = "lightmaps"

    def decode(self, cursor, context):
        return self.read_records(cursor, lambda c, i: self.read_lightmap(c, i), "lightmaps")

    @staticmethod
    def read_lightmap(cursor, index: int) -> Lightmap:
        width, height = cursor.unpack('ii')
        byte_count = max(0, width * height * 3)
        if byte_count > cursor.remaining:
            logger.warning(
                f"Lightmap {index} needs {byte_count} bytes but only {cursor.remaining} remain, clamping"
            )
            byte_count = cursor.remaining
        pixels = np.frombuffer(cursor.read_bytes(byte_count), dtype=np.uint8).copy()
        logger.debug(f"Lightmap {index}: {width}x{height}, {pixels.size} bytes")
        return Lightmap(width=width, height=height, pixels=pixels)


@dataclass
class BakedTriangle:
    """Baked colours of one triangle; colors holds three RGB triples"""
    indices: Tuple[int, int, int]
    colors: Tuple[RGB, RGB, RGB]
    uvs: Tuple[float, ...]
    alpha: int


@dataclass
class BakedEntry:
    texture_index: int
    positions: List[Vec3] = field(default_factory=list)
    triangles: List[BakedTriangle] = field(default_factory=list)


@dataclass
class BakedFaceGroup:
    lightmap_id: int
    entries: List[BakedEntry] = field(default_factory=list)


@dataclass
class BakedLightmapData:
    version: int
    texture_names: List[str] = field(default_factory=list)
    light_probes: List[Tuple[float, float]] = field(default_factory=list)
    face_groups: List[BakedFaceGroup] = field(default_factory=list)

    def iter_triangles(self):
        for group in self.face_groups:
            for entry in group.entries:
                yield from entry.triangles


def read_baked_lightmaps(cursor) -> Optional[BakedLightmapData]:
    """
    Parse the baked vertex-colour section

    Returns:
        Parsed data, or None when the section version is unsupported
    """
    version = cursor.read_i32()
    if version != BAKED_LIGHTMAP_VERSION:
        logger.warning(f"Unsupported baked lightmap version {version} (expected {BAKED_LIGHTMAP_VERSION}), skipping")
        return None

    data = BakedLightmapData(version)
    texture_count = cursor.read_i32()
    group_count = cursor.read_i32()
    if texture_count < 0 or texture_count > cursor.remaining:
        logger.warning(f"Implausible baked texture count {texture_count}, treating as zero")
        texture_count = 0
    data.texture_names = [cursor.read_cstring() for _ in range(texture_count)]
    data.light_probes = [cursor.unpack('ff') for _ in range(max(0, cursor.read_i32()))]
    lightmap_ids = [cursor.read_i32() for _ in range(max(0, group_count))]

    for lightmap_id in lightmap_ids:
        group = BakedFaceGroup(lightmap_id)
        for _ in range(max(0, cursor.read_i32())):
            header = cursor.read_struct(BakedEntryHeader)
            entry = BakedEntry(header.texture_index)
            entry.positions = [cursor.read_vec3() for _ in range(max(0, header.face_vertex_count))]
            cursor.skip(ENTRY_BOUNDS_SIZE)
            for _ in range(max(0, header.triangle_vertex_count)):
                vertex = cursor.read_struct(BakedTriangleVertex)
                entry.triangles.append(BakedTriangle(
                    indices=tuple(vertex.indices),
                    colors=tuple(vertex.colors),
                    uvs=tuple(vertex.uvs),
                    alpha=max(0, min(255, vertex.alpha)),
                ))
            group.entries.append(entry)
        data.face_groups.append(group)

    logger.debug(f"Baked lightmaps: {len(data.face_groups)} face groups, {len(data.texture_names)} textures")
    return data


def baked_to_lightmaps(data: BakedLightmapData) -> List[Lightmap]:
    """Pack each entry's baked colours into a near-square zero-padded image"""
    lightmaps = []
    for group in data.face_groups:
        for entry in group.entries:
            if not entry.triangles:
                continue
            pixel_count = len(entry.triangles) * 3
            width = math.ceil(math.sqrt(pixel_count))
            height = math.ceil(pixel_count / width)
            pixels = np.zeros(width * height * 3, dtype=np.uint8)
            colors = [rgb for triangle in entry.triangles for rgb in triangle.colors]
            pixels[:pixel_count * 3] = np.asarray(colors, dtype=np.uint8).reshape(-1)
            lightmaps.append(Lightmap(width=width, height=height, pixels=pixels))
    return lightmaps


def median_baked_color(data: BakedLightmapData) -> RGB:
    """Per-channel median (upper middle element) over every baked colour"""
    colors = [rgb for triangle in data.iter_triangles() for rgb in triangle.colors]
    if not colors:
        return (0, 0, 0)
    mid = len(colors) // 2
    return tuple(sorted(channel)[mid] for channel in zip(*colors))


class BakedLightmapDecoder(SectionDecoder):
    """Decoder for alternate-revision baked vertex colours (0x7900)"""

    section_type = 0x7900
    name = "baked lightmaps"

    def decode(self, cursor, context):
        return read_baked_lightmaps(cursor)

    def store(self, scene, result):
        if result is None:
            return
        lightmaps = baked_to_lightmaps(result)
        scene.lightmaps.extend(lightmaps)
        scene.median_baked_color = median_baked_color(result)
        logger.info(
            f"Converted {len(lightmaps)} baked lightmaps (median baked RGB {scene.median_baked_color})"
        )
