"""
Static geometry and brush decoders
"""

import logging
import math
from typing import Dict, List, Tuple

from .base_decoder import DecodeContext, SectionDecoder
from ..base.cursor import Cursor
from ..base.structs import FaceHeader, LegacyFaceTail
from ..format_detector import ALTERNATE, FACE_SCROLL, GEOMETRY_PREFIX, ROOM_EAX
from ..models import Brush, Face, FaceFlags, Solid, Vec2, Vec3

logger = logging.getLogger(__name__)

PORTAL_RECORD_SIZE = 32
UROOM_LINK_SIZE = 8
SURFACE_RECORD_SIZE = 96
OLD_SCROLL_RECORD_SIZE = 0x29
OLD_FACE_SCROLL_SIZE = 12
ALTERNATE_SCROLL_FLAG = 0x8000
ALTERNATE_EXTRA_FLAG = 0x4000000
# Solid flags 0x4 | 0x8 mark brushes carrying an extra trailing block
EXTRA_BLOCK_MASK = 0x000C
QUANTIZE = 1000
# Non-finite coordinates all share one key
NON_FINITE_KEY = -2 ** 31
VSTRING_MIN_SIZE = 2


class VertexPool:
    """
    Deduplicating vertex store

    Positions are keyed by truncating each coordinate to three decimal
    places, so corners closer than 0.001 units share an index.
    """

    def __init__(self):
        self.vertices: List[Vec3] = []
        self._lookup: Dict[Tuple[int, int, int], int] = {}

    def __len__(self) -> int:
        return len(self.vertices)

    @staticmethod
    def key(position: Vec3) -> Tuple[int, int, int]:
        return tuple(int(c * QUANTIZE) if math.isfinite(c) else NON_FINITE_KEY for c in position)

    def add(self, position: Vec3) -> int:
        """Return the pool index for a position, appending on first sight"""
        key = self.key(position)
        index = self._lookup.get(key)
        if index is None:
            index = len(self.vertices)
            self.vertices.append(position)
            self._lookup[key] = index
        return index


def fan_triangulate(face: Face) -> List[Face]:
    """Split a polygon into a fan of triangles sharing its first corner"""
    if len(face.vertices) <= 3:
        return [face]
    triangles = []
    for k in range(1, len(face.vertices) - 1):
        triangles.append(Face(
            vertices=[face.vertices[0], face.vertices[k], face.vertices[k + 1]],
            uvs=[face.uvs[0], face.uvs[k], face.uvs[k + 1]],
            texture_index=face.texture_index,
            face_id=face.face_id,
            flags=face.flags,
            smoothing_groups=face.smoothing_groups,
            scroll_u=face.scroll_u,
            scroll_v=face.scroll_v,
        ))
    return triangles


class GeometryReader:
    """Reads the geometry body shared by static geometry, brushes and movers"""

    def __init__(self, cursor: Cursor, context: DecodeContext):
        self.cursor = cursor
        self.context = context
        self.revision = context.revision
        self.config = context.config
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def legacy(self) -> bool:
        return self.revision.is_legacy

    def read_body(self, static_geometry: bool) -> Brush:
        """
        Read textures, rooms, vertices and faces

        Args:
            static_geometry: Whether legacy faces carry lightmap coordinates

        Returns:
            Brush holding vertices, uvs, indices and solid (uid, position
            and rotation left at their defaults)
        """
        c = self.cursor
        revision = self.revision

        if self.legacy and revision.at_least(GEOMETRY_PREFIX):
            c.skip(8)
        name = c.read_vstring()
        if not self.legacy or not revision.at_least(GEOMETRY_PREFIX):
            c.read_u32()

        solid = Solid()
        solid.textures = self._read_textures()
        self.logger.debug(f"Geometry {name!r}: {len(solid.textures)} textures")

        scroll_table = self._read_face_scroll_table()
        self._skip_rooms()
        self._skip_room_links()

        raw_vertices = [c.read_vec3() for _ in range(max(0, c.read_i32()))]
        self.logger.debug(f"{len(raw_vertices)} raw vertices")

        pool = VertexPool()
        brush = Brush(solid=solid)
        face_count = c.read_i32()
        self.logger.debug(f"{face_count} faces")
        for i in range(face_count):
            faces = self._read_face(i, raw_vertices, pool, brush, scroll_table, static_geometry)
            solid.faces.extend(faces)

        if self.legacy:
            c.skip(max(0, c.read_i32()) * SURFACE_RECORD_SIZE)
            if revision.number <= FACE_SCROLL:
                c.skip(max(0, c.read_i32()) * OLD_FACE_SCROLL_SIZE)

        brush.vertices = pool.vertices
        return brush

    def _read_textures(self) -> List[str]:
        c = self.cursor
        textures = []
        for i in range(c.read_count(VSTRING_MIN_SIZE, "texture")):
            texture = c.read_vstring()
            renamed = self.context.texture_name(texture)
            if renamed != texture:
                self.logger.debug(f"Texture {i}: {texture!r} -> {renamed!r}")
            textures.append(renamed)
        return textures

    def _read_face_scroll_table(self) -> Dict[int, Vec2]:
        c = self.cursor
        table: Dict[int, Vec2] = {}
        if not self.legacy:
            return table
        if self.revision.at_least(FACE_SCROLL):
            for _ in range(max(0, c.read_i32())):
                face_id, u, v = c.unpack('iff')
                table[face_id] = Vec2(u, v)
        else:
            c.skip(max(0, c.read_i32()) * OLD_SCROLL_RECORD_SIZE)
        return table

    def _skip_rooms(self) -> None:
        c = self.cursor
        room_count = c.read_i32()
        self.logger.debug(f"{room_count} rooms")
        for _ in range(max(0, room_count)):
            if not self.legacy:
                c.skip(4 + 24 + 4)
                c.read_f32()  # life
                c.read_vstring()  # eax effect
                c.skip(4 * 6)
                c.skip(4 * 4)
                continue

            c.skip(4 + 24)
            # skyroom, cold, outside, airlock, liquid, ambient, subroom, alpha
            room_flags = c.read_bytes(8)
            is_liquid, has_ambient = room_flags[4], room_flags[5]
            c.read_f32()  # life
            if self.revision.at_least(ROOM_EAX):
                c.read_vstring()
            if is_liquid == 1:
                c.read_f32()  # depth
                c.read_rgba()
                c.read_vstring()  # surface texture
                c.unpack('fii')  # visibility, type, alpha
                c.read_u8()  # plankton
                c.unpack('iififf')  # ppm u/v, angle, waveform, scroll u/v
            if has_ambient == 1:
                c.read_rgba()

    def _skip_room_links(self) -> None:
        c = self.cursor
        for _ in range(max(0, c.read_i32())):
            c.read_i32()  # room
            c.skip(max(0, c.read_i32()) * 4)
        if not self.legacy:
            c.skip(max(0, c.read_i32()) * UROOM_LINK_SIZE)
        c.skip(max(0, c.read_i32()) * PORTAL_RECORD_SIZE)

    def _read_face(self, i: int, raw_vertices: List[Vec3], pool: VertexPool, brush: Brush,
                   scroll_table: Dict[int, Vec2], static_geometry: bool) -> List[Face]:
        c = self.cursor
        header = c.read_struct(FaceHeader)
        inline_scroll = None

        if self.legacy:
            tail = c.read_struct(LegacyFaceTail)
            flags = tail.flags
            smoothing = tail.smoothing_groups
            vertex_count = tail.vertex_count
        else:
            flags, smoothing = c.unpack('II')
            if flags & ALTERNATE_SCROLL_FLAG:
                u, v = c.unpack('ff')
                inline_scroll = Vec2(u / 2, v / 2)
            if self.revision.at_least(ALTERNATE):
                c.skip(3)
                if abs(c.read_f32()) > 0.0001:
                    flags |= ALTERNATE_EXTRA_FLAG
            c.read_i32()  # room
            vertex_count = c.read_i32()

        has_lightmap_uvs = (static_geometry and self.legacy
                            and not flags & (FaceFlags.FULL_BRIGHT | FaceFlags.IS_INVISIBLE))

        face = Face(
            texture_index=header.texture_index,
            face_id=header.face_id,
            flags=flags & 0xFFFF,
            smoothing_groups=smoothing,
        )
        for _ in range(max(0, vertex_count)):
            if self.legacy:
                raw_index, u, v = c.unpack('iff')
                if has_lightmap_uvs:
                    c.skip(8)
            else:
                raw_index, u, v = c.unpack('Iff')
                c.skip(4)  # vertex colour

            if raw_index < 0 or raw_index >= len(raw_vertices):
                self.logger.debug(f"Face {i}: corner index {raw_index} out of range, dropped")
                continue

            index = pool.add(raw_vertices[raw_index])
            uv = Vec2(u, v)
            face.vertices.append(index)
            face.uvs.append(uv)
            brush.uvs.append(uv)
            brush.indices.append(index)

        if not self.config.include_face(flags):
            return []

        scroll = inline_scroll or scroll_table.get(header.face_id, Vec2(0.0, 0.0))
        face.scroll_u, face.scroll_v = scroll

        if self.config.triangulate_polygons and len(face.vertices) > 3:
            return fan_triangulate(face)
        return [face]


def read_static_geometry(cursor: Cursor, context: DecodeContext) -> Brush:
    """Read the level's static geometry as a brush with UID 0"""
    brush = GeometryReader(cursor, context).read_body(static_geometry=True)
    logger.debug(f"Static geometry: {len(brush.vertices)} vertices, {len(brush.solid.faces)} faces")
    return brush


def read_brush(cursor: Cursor, context: DecodeContext) -> Brush:
    """Read a positioned brush (brush list entries and movers)"""
    uid = cursor.read_i32()
    position = cursor.read_vec3()
    rotation = cursor.read_mat3_fru()

    brush = GeometryReader(cursor, context).read_body(static_geometry=False)
    brush.uid = uid
    brush.position = position
    brush.rotation = rotation

    solid = brush.solid
    if cursor.remaining >= 12:
        solid.flags, solid.life, solid.state = cursor.unpack('Iii')

    if solid.flags & EXTRA_BLOCK_MASK == EXTRA_BLOCK_MASK:
        extra = cursor.unpack('5I4BfB')
        logger.warning(f"Brush {uid} carries an unidentified trailing block: {extra}")

    logger.debug(
        f"Brush {uid}: {len(brush.vertices)} vertices, {len(solid.faces)} faces, "
        f"flags 0x{solid.flags:X}, life {solid.life}, state {solid.state}"
    )
    return brush


class StaticGeometryDecoder(SectionDecoder):
    """Decoder for the static geometry section"""

    section_type = 0x100
    name = "static geometry"
    target = "brushes"

    def enabled(self, config) -> bool:
        return not config.parse_brush_section

    def decode(self, cursor, context):
        return [read_static_geometry(cursor, context)]


class BrushListDecoder(SectionDecoder):
    """Decoder for the brush list section"""

    section_type = 0x02000000
    name = "brushes"
    target = "brushes"

    def enabled(self, config) -> bool:
        return config.parse_brush_section

    def decode(self, cursor, context):
        brushes = self.read_records(cursor, lambda c, i: read_brush(c, context), "brushes")
        logger.info(f"Parsed {len(brushes)} brushes")
        return brushes


class MoverDecoder(SectionDecoder):
    """Decoder for mover brushes"""

    section_type = 0x2000
    name = "movers"
    target = "movers"

    def decode(self, cursor, context):
        return self.read_records(cursor, lambda c, i: read_brush(c, context), "movers")
