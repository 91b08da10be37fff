#!/usr/bin/env python3
"""
Red Faction level decoder
Decodes legacy and alternate revision level containers into scenes
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from tqdm import tqdm

from .base.errors import LevelParsingError
from .base.level_parser import decode_level
from .config import DecodeConfig
from .output import IMAGE_FORMATS, dump_lightmaps, save_scene_json
from .utils.logging import level_log_file, setup_logging


def process_file(file_path: Path, output_dir: Optional[Path], args, config: DecodeConfig) -> bool:
    """
    Decode a single level file and write the requested outputs

    Args:
        file_path: Path to the level file
        output_dir: Directory for output files, next to the input when None
        args: Parsed command line arguments
        config: Decode options

    Returns:
        bool: Whether decoding was successful
    """
    target_dir = output_dir or file_path.parent
    with level_log_file(args.log_dir, file_path):
        try:
            scene = decode_level(file_path, config)
        except LevelParsingError as e:
            logging.error(f"{file_path.name}: {e}")
            return False
        except OSError as e:
            logging.error(f"{file_path.name}: could not read file: {e}")
            return False

        logging.info(
            f"{file_path.name}: {len(scene.brushes)} brushes, {len(scene.lights)} lights, "
            f"{len(scene.coronas)} coronas, {len(scene.lightmaps)} lightmaps"
        )

        if args.json:
            save_scene_json(scene, target_dir, file_path.stem)
        if args.dump_lightmaps:
            dump_lightmaps(scene, target_dir / f"{file_path.stem}_lightmaps", args.image_format)
    return True


def collect_files(input_path: Path) -> List[Path]:
    if input_path.is_dir():
        return sorted(input_path.rglob('*.rfl'))
    return [input_path]


def process_inputs(input_path: Path, output_dir: Optional[Path], args, config: DecodeConfig) -> Tuple[int, int]:
    """
    Decode a file or every level file under a directory

    Returns:
        Tuple of (successful_count, failed_count)
    """
    files = collect_files(input_path)
    if not files:
        logging.warning(f"No level files found in {input_path}")
        return 0, 0

    successful = 0
    failed = 0
    for file_path in tqdm(files, desc="Decoding", unit="level", disable=len(files) == 1, dynamic_ncols=True):
        if process_file(file_path, output_dir, args, config):
            successful += 1
        else:
            failed += 1
    return successful, failed


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Decode Red Faction level files')
    parser.add_argument('input', help='Level file or directory to search recursively')
    parser.add_argument('-o', '--output-dir', help='Directory for output files (default: next to each input)')

    geometry = parser.add_argument_group('geometry')
    geometry.add_argument('--brushes', action='store_true',
                          help='Read the editor brush list instead of the compiled static geometry')
    geometry.add_argument('--ngons', action='store_true', help='Keep polygons instead of triangulating')
    geometry.add_argument('--no-portal', action='store_true', help='Drop portal faces')
    geometry.add_argument('--no-detail', action='store_true', help='Drop detail faces')
    geometry.add_argument('--no-alpha', action='store_true', help='Drop alpha-blended faces')
    geometry.add_argument('--no-holes', action='store_true', help='Drop faces with holes')
    geometry.add_argument('--no-sky', action='store_true', help='Drop sky faces')
    geometry.add_argument('--no-invisible', action='store_true', help='Drop invisible faces')
    geometry.add_argument('--no-liquid', action='store_true', help='Drop liquid surface faces')

    textures = parser.add_argument_group('textures')
    textures.add_argument('--translate-textures', nargs=2, metavar=('REAL', 'TRANSLATED'),
                          help='Texture name tables used to translate alternate-revision textures')
    textures.add_argument('--texture-prefix', action='store_true',
                          help='Insert an rx_ marker into alternate-revision texture names')

    lighting = parser.add_argument_group('lighting')
    lighting.add_argument('--light-scale', type=float, default=1.0,
                          help='Multiplier applied to alternate-revision light intensities')

    output = parser.add_argument_group('output')
    output.add_argument('--json', action='store_true', help='Write the decoded scene as JSON')
    output.add_argument('--dump-lightmaps', action='store_true', help='Write lightmaps as images')
    output.add_argument('--image-format', choices=sorted(IMAGE_FORMATS), default='tga',
                        help='Lightmap image format')

    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    parser.add_argument('--log-dir', help="Directory for per-level log files (<level name>.log)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    input_path = Path(args.input)
    if not input_path.exists():
        logging.error(f"Input not found: {input_path}")
        return 1

    config = DecodeConfig.from_args(args)
    output_dir = Path(args.output_dir) if args.output_dir else None

    successful, failed = process_inputs(input_path, output_dir, args, config)
    logging.info(f"Decoded {successful} level(s), {failed} failed")
    return 0 if failed == 0 and successful > 0 else 1


if __name__ == '__main__':
    sys.exit(main())
