"""
Texture filename rewriting for alternate-revision levels
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

from .config import DecodeConfig, TextureMode

logger = logging.getLogger(__name__)

PREFIX_REMAP = {
    'drt_': 'rck_',
    'woo_': 'sld_',
    'cpt_': 'sld_',
    'mar_': 'sld_',
    'sp0_': 'sld_',
    'tec_': 'mtl_',
}

MATERIAL_PREFIXES = (
    'rck_', 'mtl_', 'wtr_', 'pls_', 'gls_', 'drt_', 'woo_', 'tec_', 'cpt_', 'mar_', 'sp0_',
)

MANUAL_TRANSLATIONS = {
    'cpt_invisible.tga': 'rck_invisible04.tga',
    'drt_invisible.tga': 'rck_invisible04.tga',
    'mar_invisible.tga': 'sld_invisible01.tga',
    'mtl_invisible.tga': 'mtl_invisible02.tga',
    'pls_invisible.tga': 'sld_invisible01.tga',
    'rck_invisible.tga': 'rck_invisible04.tga',
    'woo_invisible.tga': 'sld_invisible01.tga',
    'wtr_invisible.tga': 'cem_invisible03.tga',
    'mtl_jpad_oct1.tga': 'mtl_L15S2_lift.tga',
    'mtl_jpad_oct2.tga': 'mtl_jumppad01.tga',
    'mtl_jpad_oct4.tga': 'mtl_jumppad02.tga',
    'cpt_012red01.tga': 'sld_grf2012red01a.tga',
    'mtl_122_grate2.tga': 'mtl_grf2122_grate.tga',
}


def insert_rx_prefix(texture_name: str) -> str:
    """
    Insert an "rx_" marker after the material prefix of a texture name

    Examples:
        drt_ground01.tga -> rck_rx_ground01.tga
        sky01.tga -> rx_sky01.tga
    """
    path = Path(texture_name)
    stem, extension = path.stem, path.suffix

    underscore = stem.find('_')
    if underscore > 0:
        prefix = stem[:underscore + 1]
        remainder = stem[underscore + 1:]
    else:
        prefix = ""
        remainder = stem

    prefix = PREFIX_REMAP.get(prefix.lower(), prefix)
    return f"{prefix}rx_{remainder}{extension}"


def _strip_material_prefix(name: str) -> str:
    lowered = name.lower()
    for prefix in MATERIAL_PREFIXES:
        if lowered.startswith(prefix):
            return name[len(prefix):]
    return name


class TextureTranslator:
    """Case-insensitive map from alternate-revision names to legacy names"""

    def __init__(self, real_names: Iterable[str] = (), translated_names: Iterable[str] = ()):
        self._map: Dict[str, str] = {}
        translated = [t for t in translated_names if t]
        for real in real_names:
            if not real:
                continue
            base = _strip_material_prefix(real).lower()
            match = next((t for t in translated if t.lower().endswith(base)), None)
            if match is not None:
                self._map[real.lower()] = match

        for original, replacement in MANUAL_TRANSLATIONS.items():
            self.add_translation(original, replacement)

    def __len__(self) -> int:
        return len(self._map)

    def add_translation(self, original: str, translated: str) -> None:
        self._map[original.lower()] = translated

    def translate(self, texture_name: str) -> str:
        return self._map.get(texture_name.lower(), texture_name)

    @classmethod
    def from_files(cls, real_path: Union[str, Path], translated_path: Union[str, Path]) -> 'TextureTranslator':
        """Load the two name lists, one filename per line"""
        real = Path(real_path).read_text(encoding='utf-8').splitlines()
        translated = Path(translated_path).read_text(encoding='utf-8').splitlines()
        translator = cls((r.strip() for r in real), [t.strip() for t in translated])
        logger.info(f"Loaded {len(translator)} texture filename translations")
        return translator


class TextureNamer:
    """Applies the configured texture rewrite to alternate-revision names"""

    def __init__(self, config: DecodeConfig, translator: Optional[TextureTranslator] = None):
        self.mode = config.texture_mode
        self.translator = translator
        if self.mode is TextureMode.TRANSLATE and self.translator is None:
            if config.texture_table_paths:
                self.translator = TextureTranslator.from_files(*config.texture_table_paths)
            else:
                logger.warning("Texture translation requested without name tables, using built-in translations only")
                self.translator = TextureTranslator()

    def __call__(self, texture_name: str) -> str:
        if self.mode is TextureMode.TRANSLATE:
            return self.translator.translate(texture_name)
        if self.mode is TextureMode.RX_PREFIX:
            return insert_rx_prefix(texture_name)
        return texture_name
