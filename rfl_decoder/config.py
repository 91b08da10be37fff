"""
Decode options
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

from .models import FaceFlags


class TextureMode(Enum):
    """How alternate-revision texture names are rewritten"""
    NONE = "none"
    TRANSLATE = "translate"
    RX_PREFIX = "rx_prefix"


# Filter bits that have no dedicated FaceFlags member
# portal shares its bit with sky; detail is keyed on the scroll bit
PORTAL_FACE = 0x01
DETAIL_FACE = 0x10


@dataclass(frozen=True)
class DecodeConfig:
    """Options controlling a single decode"""
    include_portal_faces: bool = True
    include_detail_faces: bool = True
    include_alpha_faces: bool = True
    include_hole_faces: bool = True
    include_sky_faces: bool = True
    include_invisible_faces: bool = True
    include_liquid_faces: bool = True
    parse_brush_section: bool = False
    triangulate_polygons: bool = True
    texture_mode: TextureMode = TextureMode.NONE
    texture_table_paths: Optional[Tuple[Path, Path]] = None
    light_scale: float = 1.0

    def include_face(self, flags: int) -> bool:
        """Whether a face with the given flag word survives the filters"""
        if not self.include_invisible_faces and flags & FaceFlags.IS_INVISIBLE:
            return False
        if not self.include_hole_faces and flags & FaceFlags.HAS_HOLES:
            return False
        if not self.include_alpha_faces and flags & FaceFlags.HAS_ALPHA:
            return False
        if not self.include_detail_faces and flags & DETAIL_FACE:
            return False
        if not self.include_liquid_faces and flags & FaceFlags.LIQUID_SURFACE:
            return False
        if not self.include_portal_faces and flags & PORTAL_FACE:
            return False
        if not self.include_sky_faces and flags & FaceFlags.SHOW_SKY:
            return False
        return True

    @classmethod
    def from_args(cls, args) -> 'DecodeConfig':
        """Build a config from parsed command line arguments"""
        texture_mode = TextureMode.NONE
        table_paths = None
        if args.translate_textures:
            texture_mode = TextureMode.TRANSLATE
            table_paths = tuple(Path(p) for p in args.translate_textures)
        elif args.texture_prefix:
            texture_mode = TextureMode.RX_PREFIX

        return cls(
            include_portal_faces=not args.no_portal,
            include_detail_faces=not args.no_detail,
            include_alpha_faces=not args.no_alpha,
            include_hole_faces=not args.no_holes,
            include_sky_faces=not args.no_sky,
            include_invisible_faces=not args.no_invisible,
            include_liquid_faces=not args.no_liquid,
            parse_brush_section=args.brushes,
            triangulate_polygons=not args.ngons,
            texture_mode=texture_mode,
            texture_table_paths=table_paths,
            light_scale=args.light_scale,
        )
