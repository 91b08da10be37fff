"""
Section decoders for the level container
"""

from .base_decoder import DecodeContext, SectionDecoder, SkippedSection
from .registry import SECTION_END, SectionFormat, SectionRegistry, section_registry

__all__ = [
    'DecodeContext',
    'SectionDecoder',
    'SkippedSection',
    'SectionFormat',
    'SectionRegistry',
    'SECTION_END',
    'section_registry',
]
