"""Command line interface for mipsdf."""
import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from mipsdf.pipeline import SDFPipeline
from mipsdf.types import OUTPUT_TYPES, SDFConfig, SDFError


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog='mipsdf',
        description='Convert a black/white image into a signed distance field',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  mipsdf glyph.png glyph_sdf.png
  mipsdf -v -s 64 --maxdst 16 glyph.png glyph_sdf.png
  mipsdf -t f32 glyph.png glyph_sdf.raw
  mipsdf --save-mipmaps debug/mip glyph.png glyph_sdf.png
        """,
    )

    parser.add_argument('input', type=str, nargs='?', help='Input image path')
    parser.add_argument('output', type=str, nargs='?', help='Output path')

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Show what the program is doing'
    )

    parser.add_argument(
        '-s', '--size',
        type=int,
        default=None,
        metavar='OUTPUT_SIZE',
        help='Size of the output signed distance field image, must be a power of 2 '
             '(default: input size / 4)'
    )

    parser.add_argument(
        '--maxdst',
        type=float,
        default=None,
        metavar='SATURATION_DISTANCE',
        help="Saturation distance (i.e. 'most far away meaningful distance') in whole pixels "
             "of the padded input image, not half pixels (default: input size / 4)"
    )

    parser.add_argument(
        '--save-mipmaps',
        type=str,
        default=None,
        metavar='BASENAME',
        help="Save the mipmaps used for accelerated calculation to BASENAMEi.png, "
             "where 'i' is the mipmap level"
    )

    parser.add_argument(
        '-t', '--type',
        choices=OUTPUT_TYPES,
        default='png',
        help="Output format. f32 and f64 are raw floating point formats, "
             "u16 is raw unsigned 16 bit integers (default: png)"
    )

    parser.add_argument(
        '--threshold',
        type=int,
        default=128,
        help='Gray values below this are foreground (default: 128)'
    )

    parser.add_argument(
        '--workers',
        type=int,
        default=1,
        help='Worker processes for the distance search, -1 = one per CPU (default: 1)'
    )

    parser.add_argument(
        '--no-prune',
        action='store_true',
        help='Disable pruning of homogeneous mipmap cells (slow, for verification)'
    )

    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format='%(message)s',
    )


def main(args: Optional[list] = None) -> int:
    """Main entry point.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = create_parser()
    if args is None:
        args = sys.argv[1:]
    parsed = parser.parse_args(args)
    if parsed.input is None or parsed.output is None:
        parser.print_help()
        return 0

    configure_logging(parsed.verbose)

    input_path = Path(parsed.input)
    if not input_path.exists():
        print(f"Error: Input file not found: {input_path}", file=sys.stderr)
        return 1

    output_path = Path(parsed.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        config = SDFConfig(
            sdf_size=parsed.size,
            saturation=parsed.maxdst,
            output_type=parsed.type,
            threshold=parsed.threshold,
            save_mipmaps=parsed.save_mipmaps,
            workers=parsed.workers,
            prune=not parsed.no_prune,
        )
        SDFPipeline(config).process(input_path, output_path)
        return 0

    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (SDFError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
