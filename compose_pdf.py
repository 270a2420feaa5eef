#!/usr/bin/env python3
"""
compose_pdf.py - Composite a JPEG background and a 1-bit TIFF into one PDF page.

The TIFF is drawn over the background, masked by itself, so its white areas
show the background through. Both images are placed at 600 DPI on an A4 page.

Usage:
    python compose_pdf.py background.jpg foreground.tif

Writes output.pdf in the current directory.
"""

import argparse
import logging
import sys
from pathlib import Path

from PIL import Image

# Add parent to path when running as script
if __name__ == "__main__":
    sys.path.insert(0, str(Path(__file__).parent))

from pdf_composer.pipeline import compose_pdf
from pdf_composer.tiff_reader import format_tiff_info
from pdf_composer.versions import show_versions


def setup_logging():
    """Configure logging."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S"
    )


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Composite a JPEG background and a 1-bit TIFF foreground into output.pdf.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Example:
  python compose_pdf.py scan_background.jpg scan_text.tif

The output PDF will be:
  - A single A4 portrait page
  - The JPEG drawn at the page origin
  - The 1-bit TIFF drawn over it, transparent where it is white
  - Both images scaled for 600 DPI
"""
    )

    parser.add_argument(
        "background",
        type=Path,
        help="Background JPEG file"
    )

    parser.add_argument(
        "foreground",
        type=Path,
        help="Foreground 1-bit TIFF file"
    )

    return parser.parse_args(argv)


def print_tiff_info(info):
    print(format_tiff_info(info))


def main(argv=None):
    args = parse_args(argv)
    setup_logging()

    # Large-format scans exceed Pillow's default pixel limit
    Image.MAX_IMAGE_PIXELS = None

    show_versions()

    result = compose_pdf(
        args.background,
        args.foreground,
        info_callback=print_tiff_info
    )

    if result.success:
        print(f"\n{result.summary()}")
        print("PDF created successfully with the TIFF image.")
        sys.exit(0)
    else:
        print(f"Error: {result.error}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
