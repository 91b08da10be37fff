"""
Level container parser: header, section loop and post-processing
"""

from pathlib import Path
from typing import Optional, Union

from .cursor import Cursor
from .errors import InvalidMagicError, LevelParsingError
from .structs import LEVEL_MAGIC, LevelHeader, SectionHeader
from ..chunks.base_decoder import DecodeContext
from ..chunks.registry import SECTION_END, SectionRegistry, section_registry
from ..config import DecodeConfig
from ..format_detector import MOD_NAME, Revision, classify_revision
from ..models import Scene
from ..postprocess import PostProcessor
from ..utils.logging import get_logger

Source = Union[str, Path, bytes, bytearray]


class LevelParser:
    """
    Decodes one level container into a Scene

    Use as a context manager; the file buffer is only held while inside
    the ``with`` block.
    """

    SECTION_HEADER_SIZE = SectionHeader.sizeof()

    def __init__(self,
                 source: Source,
                 config: Optional[DecodeConfig] = None,
                 registry: Optional[SectionRegistry] = None):
        """
        Initialize the level parser

        Args:
            source: Path to a level file, or the raw file contents
            config: Decode options (defaults when None)
            registry: Section registry to dispatch through
        """
        self.source = source
        self.config = config or DecodeConfig()
        self.registry = registry or section_registry
        self._data: Optional[bytes] = None
        self.revision: Optional[Revision] = None

        label = Path(source).name if isinstance(source, (str, Path)) else "<memory>"
        self.logger = get_logger(self.__class__.__name__, level=label)

    def __enter__(self):
        """Context manager entry"""
        if isinstance(self.source, (bytes, bytearray)):
            self._data = bytes(self.source)
        else:
            with open(self.source, 'rb') as f:
                self._data = f.read()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit"""
        self._data = None

    def _read_header(self, cursor: Cursor, scene: Scene) -> int:
        """
        Read the fixed header and level name

        Returns:
            Declared section count

        Raises:
            InvalidMagicError: If the magic does not match
            TruncatedDataError: If the header is cut short
        """
        magic = cursor.read_u32()
        if magic != LEVEL_MAGIC:
            raise InvalidMagicError(magic)
        cursor.seek(0)

        header = cursor.read_struct(LevelHeader)
        self.revision = classify_revision(header.version)
        scene.revision = header.version
        scene.timestamp = header.timestamp
        scene.level_name = cursor.read_vstring()
        if self.revision.at_least(MOD_NAME) and not self.revision.is_alternate:
            scene.mod_name = cursor.read_vstring()

        self.logger.info(
            f"Revision {self.revision}, level {scene.level_name!r}, "
            f"{header.num_sections} sections, {len(cursor.data)} bytes"
        )
        return header.num_sections

    def _read_sections(self, cursor: Cursor, context: DecodeContext, section_count: int) -> None:
        for index in range(section_count):
            if cursor.remaining < self.SECTION_HEADER_SIZE:
                self.logger.warning(
                    f"Section header {index} truncated at offset {cursor.tell()}, stopping"
                )
                return

            section = cursor.read_struct(SectionHeader)
            start = cursor.tell()
            end = start + section.size
            if section.size < 0 or end > cursor.end:
                self.logger.warning(
                    f"Section 0x{section.type:X} at offset {start} claims {section.size} bytes "
                    f"but only {cursor.end - start} remain, stopping"
                )
                return

            if section.type == SECTION_END:
                self.logger.debug(f"End of sections at offset {start - self.SECTION_HEADER_SIZE}")
                return

            decoder = self.registry.get_decoder(section.type, self.revision, self.config)
            if decoder is not None:
                self._run_decoder(decoder, cursor.sub(end), context)

            cursor.seek(end)

    def _run_decoder(self, decoder, cursor: Cursor, context: DecodeContext) -> None:
        self.logger.debug(f"Decoding {decoder.name} section (0x{decoder.section_type:X}) at {cursor.tell()}")
        try:
            result = decoder.decode(cursor, context)
        except LevelParsingError as e:
            self.logger.warning(f"Abandoning {decoder.name} section (0x{decoder.section_type:X}): {e}")
            return
        decoder.store(context.scene, result)

    def parse(self) -> Scene:
        """
        Decode the whole container

        Returns:
            Post-processed Scene
        """
        if self._data is None:
            raise RuntimeError("Level not loaded. Use with context manager.")

        cursor = Cursor(self._data)
        scene = Scene()
        section_count = self._read_header(cursor, scene)

        context = DecodeContext.create(self.revision, self.config, scene)
        self._read_sections(cursor, context, section_count)

        PostProcessor(self.config).process(scene, self.revision)
        self.logger.info(
            f"Decoded {len(scene.brushes)} brushes, {len(scene.lights)} lights, "
            f"{len(scene.events)} events, {len(scene.triggers)} triggers, "
            f"{len(scene.lightmaps)} lightmaps"
        )
        return scene


def decode_level(source: Source, config: Optional[DecodeConfig] = None) -> Scene:
    """
    Decode a level container

    Args:
        source: Path to a level file, or its raw bytes
        config: Decode options

    Returns:
        Decoded Scene

    Raises:
        InvalidMagicError: If the file is not a level container
        TruncatedDataError: If the header cannot be read
    """
    with LevelParser(source, config) as parser:
        return parser.parse()
