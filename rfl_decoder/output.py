"""
JSON and image output for decoded scenes
"""
import dataclasses
import enum
import json
import logging
from pathlib import Path
from typing import Any, List, Union

import numpy as np
from PIL import Image

from .models import Scene

logger = logging.getLogger(__name__)

IMAGE_FORMATS = {
    'tga': 'TGA',
    'png': 'PNG',
}


class SceneEncoder(json.JSONEncoder):
    """JSON encoder for scene data structures"""

    def default(self, obj: Any) -> Any:
        if dataclasses.is_dataclass(obj):
            return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
        elif isinstance(obj, enum.Enum):
            return obj.name
        elif isinstance(obj, np.ndarray):
            # Pixel buffers are summarized; images are written separately
            return {'dtype': str(obj.dtype), 'shape': list(obj.shape)}
        elif isinstance(obj, np.generic):
            return obj.item()
        elif isinstance(obj, Path):
            return str(obj)
        elif isinstance(obj, bytes):
            return obj.hex()
        return super().default(obj)

    def iterencode(self, obj: Any, _one_shot: bool = False):
        return super().iterencode(self._prepare(obj), _one_shot)

    def _prepare(self, obj: Any) -> Any:
        """Expand NamedTuples into dicts before the base encoder treats them as lists"""
        if isinstance(obj, tuple) and hasattr(obj, '_fields'):
            return {name: self._prepare(value) for name, value in zip(obj._fields, obj)}
        if isinstance(obj, (list, tuple)):
            return [self._prepare(value) for value in obj]
        if isinstance(obj, dict):
            return {str(key): self._prepare(value) for key, value in obj.items()}
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return {f.name: self._prepare(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
        if isinstance(obj, enum.IntFlag):
            return int(obj)
        return obj


def save_scene_json(scene: Scene, output_dir: Union[str, Path], stem: str) -> Path:
    """
    Save a decoded scene to JSON

    Args:
        scene: Decoded scene
        output_dir: Directory to save the JSON file
        stem: File name without extension, usually the level name

    Returns:
        Path to saved JSON file
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    json_path = output_dir / f"{stem}.json"

    json_data = json.dumps(scene, cls=SceneEncoder, indent=2)
    with open(json_path, 'w', encoding='utf-8') as f:
        f.write(json_data)

    logger.info(f"Saved scene to {json_path}")
    return json_path


def dump_lightmaps(scene: Scene, output_dir: Union[str, Path], image_format: str = 'tga') -> List[Path]:
    """
    Write every complete lightmap as a 24-bit image

    Lightmaps whose pixel data was clamped short are skipped.

    Returns:
        Paths of the written images
    """
    if image_format not in IMAGE_FORMATS:
        raise ValueError(f"Unsupported image format {image_format!r}, expected one of {sorted(IMAGE_FORMATS)}")

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for index, lightmap in enumerate(scene.lightmaps):
        if not lightmap.is_complete or lightmap.width <= 0 or lightmap.height <= 0:
            logger.warning(f"Skipping incomplete lightmap {index} ({lightmap.width}x{lightmap.height})")
            continue
        image = Image.fromarray(lightmap.as_image_array())
        path = output_dir / f"lightmap_{index}.{image_format}"
        image.save(path, IMAGE_FORMATS[image_format])
        written.append(path)

    logger.info(f"Wrote {len(written)} lightmaps to {output_dir}")
    return written
