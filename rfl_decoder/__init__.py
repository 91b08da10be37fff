"""
Red Faction level decoder
Core components and utilities
"""

from .format_detector import FormatDetector, LevelFormat, Revision, classify_revision
from .base.errors import LevelParsingError, InvalidMagicError, TruncatedDataError
from .base.level_parser import LevelParser, decode_level
from .chunks import SectionRegistry, SectionFormat, section_registry, SectionDecoder
from .config import DecodeConfig, TextureMode
from .models import Scene
from .output import SceneEncoder, save_scene_json, dump_lightmaps

__version__ = '1.0.0'

__all__ = [
    # Format detection
    'FormatDetector',
    'LevelFormat',
    'Revision',
    'classify_revision',

    # Decoding
    'LevelParser',
    'decode_level',
    'DecodeConfig',
    'TextureMode',
    'Scene',
    'LevelParsingError',
    'InvalidMagicError',
    'TruncatedDataError',

    # Section handling
    'SectionRegistry',
    'SectionFormat',
    'section_registry',
    'SectionDecoder',

    # Output handling
    'SceneEncoder',
    'save_scene_json',
    'dump_lightmaps',

    # Version
    '__version__'
]
