# Command line editor
"""
Edit an image from the command line.

Usage:
    # Grayscale a photo and save it to ~/Pictures
    imagefun photo.jpg -f gray

    # Red channel only, watermarked, saved to out/ and shared via stdout
    imagefun photo.jpg -f red --watermark "Hello" --output-dir out --share

    # Filter string syntax
    python -m imagefun photo.jpg --pipeline 'blue|watermark "(c) 2014"'

    # List available filters
    imagefun --list-filters
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import settings
from .filters import FilterPipeline, get_filter_aliases
from .session import EditorSession

logger = logging.getLogger(__name__)


class StdoutShareTarget:
    """Shares images by printing their MIME type and path."""

    def __init__(self, stream=None):
        self.stream = stream if stream is not None else sys.stdout

    def send(self, path: Path, mime_type: str) -> None:
        print(f"{mime_type} {path}", file=self.stream)


def parse_display(text: str) -> tuple[int, int]:
    """Parse display bounds like '1080x1920'."""
    try:
        width, height = (int(v) for v in text.lower().split('x'))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid display size '{text}', expected WIDTHxHEIGHT")
    if width <= 0 or height <= 0:
        raise argparse.ArgumentTypeError(f"Display size has to be positive, got '{text}'")
    return width, height


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='imagefun',
        description='Apply color filters and watermarks to an image',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s photo.jpg -f gray                 # Grayscale copy in ~/Pictures
  %(prog)s photo.jpg -f red -f green         # Filters run in the given order
  %(prog)s photo.jpg --watermark "Hello"     # Red text at (50, 50)
  %(prog)s photo.jpg --pipeline 'gray|blue'  # Filter string syntax
"""
    )
    parser.add_argument('source', nargs='?', help='Image file or URL')
    parser.add_argument(
        '--filter', '-f',
        action='append',
        default=[],
        dest='filters',
        help='Filter to apply, e.g. gray, red, green, blue (repeatable)'
    )
    parser.add_argument('--pipeline', '-p', help="Filter string, e.g. 'gray|red'")
    parser.add_argument('--watermark', '-w', help='Text drawn after all filters')
    parser.add_argument(
        '--display', '-d',
        type=parse_display,
        default=(settings.DISPLAY_WIDTH, settings.DISPLAY_HEIGHT),
        help=f'Display bounds the image is fit into '
             f'(default: {settings.DISPLAY_WIDTH}x{settings.DISPLAY_HEIGHT})'
    )
    parser.add_argument(
        '--output-dir', '-o',
        default=settings.PICTURES_DIR,
        type=Path,
        help=f'Directory for the saved image (default: {settings.PICTURES_DIR})'
    )
    parser.add_argument('--share', action='store_true', help='Print the MIME type and saved path')
    parser.add_argument('--list-filters', action='store_true', help='List filters and aliases')
    parser.add_argument('--log-level', default=settings.LOG_LEVEL, help='Logging level')
    return parser


def list_filters(stream=None) -> None:
    stream = stream if stream is not None else sys.stdout
    for name, aliases in get_filter_aliases().items():
        suffix = f" ({', '.join(aliases)})" if aliases else ''
        print(f"{name}{suffix}", file=stream)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    if args.list_filters:
        list_filters()
        return 0
    if not args.source:
        parser.error('the following arguments are required: source')

    try:
        pipeline = FilterPipeline.parse('|'.join(args.filters))
        if args.pipeline:
            pipeline.extend(FilterPipeline.parse(args.pipeline).filters)
    except ValueError as e:
        parser.error(str(e))

    display_width, display_height = args.display
    session = EditorSession(
        display_width=display_width,
        display_height=display_height,
        pictures_dir=args.output_dir,
        share_target=StdoutShareTarget(),
    )
    with session:
        if not session.open(args.source):
            return 1
        session.apply(pipeline)
        if args.watermark:
            session.watermark(args.watermark)
        path = session.share() if args.share else session.save()
        if path is None:
            return 1
        if not args.share:
            print(path)
    return 0


if __name__ == '__main__':
    sys.exit(main())
