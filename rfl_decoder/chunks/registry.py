"""
Section decoder registry and management
"""

import logging
from enum import Enum, auto
from typing import Dict, Optional, Type, Union

from .base_decoder import SectionDecoder, SkippedSection
from .geometry import BrushListDecoder, MoverDecoder, StaticGeometryDecoder
from .level import LevelInfoDecoder, LevelPropertiesDecoder, WaypointListDecoder
from .lightmaps import BakedLightmapDecoder, LightmapDecoder
from .lights import CoronaDecoder, LightDecoder
from .movers import GroupDecoder
from .objects import (
    AlternateEventDecoder,
    ClutterDecoder,
    ItemDecoder,
    LegacyEventDecoder,
    RespawnPointDecoder,
    TriggerDecoder,
)
from .regions import (
    AlternateDecalDecoder,
    ClimbingRegionDecoder,
    DecalDecoder,
    ParticleEmitterDecoder,
    PushRegionDecoder,
)
from ..config import DecodeConfig
from ..format_detector import LevelFormat, Revision

logger = logging.getLogger(__name__)

SECTION_END = 0x0


class SectionFormat(Enum):
    """Formats a section registration applies to"""
    COMMON = auto()
    LEGACY = auto()
    ALTERNATE = auto()


FORMAT_FOR_LEVEL = {
    LevelFormat.LEGACY: SectionFormat.LEGACY,
    LevelFormat.ALTERNATE: SectionFormat.ALTERNATE,
}

Entry = Union[Type[SectionDecoder], SkippedSection]


class SectionRegistry:
    """
    Registry for section decoders
    Handles format-specific overrides and recognized-but-skipped sections
    """

    def __init__(self):
        # format -> section type -> decoder class or skip marker
        self._decoders: Dict[SectionFormat, Dict[int, Entry]] = {
            SectionFormat.COMMON: {},
            SectionFormat.LEGACY: {},
            SectionFormat.ALTERNATE: {},
        }

        self.register_common_sections()
        self.register_legacy_sections()
        self.register_alternate_sections()

    def register_decoder(self,
                         decoder_class: Type[SectionDecoder],
                         section_format: SectionFormat = SectionFormat.COMMON):
        """
        Register a section decoder for a specific format

        Args:
            decoder_class: The decoder class to register
            section_format: The format this decoder is for
        """
        self._decoders[section_format][decoder_class.section_type] = decoder_class

    def register_skipped(self,
                         section_type: int,
                         reason: str,
                         section_format: SectionFormat = SectionFormat.COMMON):
        """Register a section type that is skipped by size without parsing"""
        self._decoders[section_format][section_type] = SkippedSection(section_type, reason)

    def register_common_sections(self):
        """Register decoders shared by every revision"""
        common_decoders = [
            # Geometry
            StaticGeometryDecoder,
            BrushListDecoder,
            MoverDecoder,
            GroupDecoder,

            # Lighting
            LightDecoder,
            CoronaDecoder,
            LightmapDecoder,

            # Placed objects
            RespawnPointDecoder,
            ParticleEmitterDecoder,
            ClimbingRegionDecoder,
            DecalDecoder,
            PushRegionDecoder,
            ItemDecoder,
            ClutterDecoder,
            TriggerDecoder,

            # Level-wide data
            LevelPropertiesDecoder,
            LevelInfoDecoder,
            WaypointListDecoder,
        ]

        for decoder_class in common_decoders:
            self.register_decoder(decoder_class)

        self.register_skipped(0x20000, "nav points")

    def register_legacy_sections(self):
        """Register legacy format specific sections"""
        self.register_decoder(LegacyEventDecoder, SectionFormat.LEGACY)

    def register_alternate_sections(self):
        """Register alternate format specific sections"""
        alternate_decoders = [
            AlternateEventDecoder,
            AlternateDecalDecoder,
            BakedLightmapDecoder,
        ]
        for decoder_class in alternate_decoders:
            self.register_decoder(decoder_class, SectionFormat.ALTERNATE)

        self.register_skipped(0x500, "ambient sounds", SectionFormat.ALTERNATE)
        self.register_skipped(0x7677, "particle emitters", SectionFormat.ALTERNATE)
        self.register_skipped(0x7680, "climbing regions", SectionFormat.ALTERNATE)
        self.register_skipped(0x7779, "lightmap geometry", SectionFormat.ALTERNATE)

    def lookup(self, section_type: int, revision: Revision) -> Optional[Entry]:
        """Return the registered entry for a section, format-specific first"""
        preferred = self._decoders[FORMAT_FOR_LEVEL[revision.format]]
        if section_type in preferred:
            return preferred[section_type]
        return self._decoders[SectionFormat.COMMON].get(section_type)

    def get_decoder(self,
                    section_type: int,
                    revision: Revision,
                    config: Optional[DecodeConfig] = None) -> Optional[SectionDecoder]:
        """
        Get a decoder for the specified section type

        Args:
            section_type: Type word from the section header
            revision: Revision of the level being decoded
            config: Decode options, used to disable optional decoders

        Returns:
            SectionDecoder instance, or None if the section should be skipped
        """
        entry = self.lookup(section_type, revision)
        if entry is None:
            logger.debug(f"Unknown section type 0x{section_type:X}, skipping")
            return None
        if isinstance(entry, SkippedSection):
            logger.debug(f"Skipping {entry.reason} section 0x{section_type:X}")
            return None

        decoder = entry()
        if not decoder.enabled(config or DecodeConfig()):
            logger.debug(f"Decoder for {decoder.name} (0x{section_type:X}) disabled by config")
            return None
        return decoder

    def supports_section(self, section_type: int, revision: Revision) -> bool:
        """Check if a section type is recognized for the given revision"""
        return self.lookup(section_type, revision) is not None

    def list_supported_sections(self, level_format: LevelFormat) -> Dict[int, str]:
        """
        List all recognized sections for a level format

        Returns:
            Dictionary mapping section types to decoder class names (or skip reasons)
        """
        sections = {}
        for table in (self._decoders[SectionFormat.COMMON],
                      self._decoders[FORMAT_FOR_LEVEL[level_format]]):
            for section_type, entry in table.items():
                if isinstance(entry, SkippedSection):
                    sections[section_type] = f"skipped ({entry.reason})"
                else:
                    sections[section_type] = entry.__name__
        return sections


# Global registry instance
section_registry = SectionRegistry()
