"""
readback.py - Inspect a written PDF using PyMuPDF.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

try:
    import fitz  # pip install pymupdf
except ImportError:
    import pymupdf as fitz  # apt install python3-pymupdf

logger = logging.getLogger(__name__)


@dataclass
class ImagePlacement:
    """An image drawn on a page, in PDF points with the origin bottom-left."""
    xref: int
    x0: float
    y0: float
    width: float
    height: float


def get_page_count(pdf_path: Path) -> int:
    """Get total page count."""
    with fitz.open(pdf_path) as doc:
        return len(doc)


def get_image_placements(pdf_path: Path, page_num: int = 0) -> List[ImagePlacement]:
    """List the images drawn on a page, in drawing order."""
    with fitz.open(pdf_path) as doc:
        page = doc[page_num]
        page_height = page.rect.height

        placements = []
        for info in page.get_image_info(xrefs=True):
            x0, top, x1, bottom = info["bbox"]
            placements.append(ImagePlacement(
                xref=info.get("xref", 0),
                x0=x0,
                y0=page_height - bottom,
                width=x1 - x0,
                height=bottom - top,
            ))

    logger.debug(f"Page {page_num} of {Path(pdf_path).name}: {len(placements)} images")
    return placements
