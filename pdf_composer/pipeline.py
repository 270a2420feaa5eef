"""
pipeline.py - JPEG background + 1-bit TIFF foreground composition.

Pipeline:
1. Read TIFF metadata and scanlines
2. Classify photometric interpretation, require 1-bit samples
3. Draw JPEG background on an A4 page
4. Draw the TIFF, masked by itself, over the background
5. Save

Both images are scaled by 72 / dpi, so they must share a resolution to line up.
"""

import logging
import math
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from .errors import CompositionError, UnsupportedBitDepthError
from .pdf_writer import A4, CompositeWriter, points_for_pixels
from .photometric import ColorSpace, classify_photometric
from .readback import ImagePlacement, get_image_placements, get_page_count
from .tiff_reader import TiffBasicInfo, TiffReader

logger = logging.getLogger(__name__)

DEFAULT_DPI = 600
DEFAULT_OUTPUT = Path("output.pdf")


@dataclass
class ComposeConfig:
    """Settings for one composition run."""
    dpi: float = DEFAULT_DPI
    output_path: Path = DEFAULT_OUTPUT
    page_size: Tuple[float, float] = A4
    compress: bool = True


@dataclass
class CompositionResult:
    """Result of composing one PDF."""
    background_path: Path
    foreground_path: Path
    output_path: Path
    success: bool
    error: Optional[str] = None

    tiff_info: Optional[TiffBasicInfo] = None
    color_space: Optional[ColorSpace] = None

    output_size: int = 0
    page_count: int = 0
    placements: List[ImagePlacement] = field(default_factory=list)
    total_time: float = 0.0

    @property
    def drawn_size_pts(self) -> Tuple[float, float]:
        """Size of the foreground on the page, in points."""
        if not self.placements:
            return 0.0, 0.0
        last = self.placements[-1]
        return last.width, last.height

    def summary(self) -> str:
        width, height = self.drawn_size_pts
        return (
            f"Background: {self.background_path.name}\n"
            f"Foreground: {self.foreground_path.name}\n"
            f"Output: {self.output_path.name} ({self.output_size:,} bytes)\n"
            f"Pages: {self.page_count}\n"
            f"Images placed: {len(self.placements)}\n"
            f"Foreground size: {width:.2f} x {height:.2f} pts\n"
            f"Time: {self.total_time:.2f}s"
        )


def _report_pdf_error(error: CompositionError):
    logger.error(f"PDF error: {error}")


def compose_pdf(
    background_path: Path,
    foreground_path: Path,
    config: Optional[ComposeConfig] = None,
    info_callback: Optional[Callable[[TiffBasicInfo], None]] = None
) -> CompositionResult:
    """
    Composite a JPEG background and a 1-bit TIFF foreground into one page.

    The TIFF is loaded twice: once as the visible image and once as its
    stencil mask, so only its painted pixels cover the background.

    Args:
        background_path: JPEG file
        foreground_path: 1-bit TIFF file
        config: Resolution, output path, page size, compression
        info_callback: Optional callback(tiff_info), called right after the
            TIFF metadata is read

    Returns:
        CompositionResult; failures are reported in it, not raised
    """
    config = config or ComposeConfig()
    background_path = Path(background_path)
    foreground_path = Path(foreground_path)
    output_path = Path(config.output_path)

    result = CompositionResult(
        background_path=background_path,
        foreground_path=foreground_path,
        output_path=output_path,
        success=False
    )

    start_time = time.time()
    reader = None
    buffer = None
    writer = None

    try:
        if not config.dpi > 0:
            raise CompositionError(f"Resolution must be positive, got {config.dpi} DPI")

        reader = TiffReader(foreground_path)
        info = reader.info
        result.tiff_info = info
        if info_callback:
            info_callback(info)
        logger.info(f"Read TIFF {foreground_path.name}: {info.width}x{info.height}")

        buffer = reader.read_scanlines()
        result.color_space = classify_photometric(info.photometric)

        if info.bits_per_sample != 1:
            raise UnsupportedBitDepthError(info.bits_per_sample)

        line_width = math.ceil(info.width / 8)

        writer = CompositeWriter(compress=config.compress, error_callback=_report_pdf_error)
        text_image = writer.load_1bit_image(
            buffer, info.width, info.height, line_width,
            black_is_1=True, top_is_first=True
        )

        writer.add_page(config.page_size)

        back_image = writer.load_jpeg_image(background_path)
        writer.draw_image_at_dpi(back_image, config.dpi)
        logger.info(
            f"Drew background {int(back_image.Width)}x{int(back_image.Height)} px "
            f"at {config.dpi} DPI"
        )

        masked_text = writer.load_1bit_image(
            buffer, info.width, info.height, line_width,
            black_is_1=True, top_is_first=True
        )
        writer.set_mask_image(masked_text, text_image)
        writer.draw_image_at_dpi(masked_text, config.dpi)
        logger.info(
            f"Drew masked foreground {points_for_pixels(info.width, config.dpi):.2f}x"
            f"{points_for_pixels(info.height, config.dpi):.2f} pts"
        )

        writer.save(output_path)
        result.output_size = output_path.stat().st_size
        result.success = True

    except CompositionError as e:
        logger.error(f"Composition failed: {e}")
        result.error = str(e)

    finally:
        buffer = None
        if reader is not None:
            reader.close()
        if writer is not None:
            writer.close()

    if result.success:
        try:
            result.page_count = get_page_count(output_path)
            result.placements = get_image_placements(output_path)
        except RuntimeError as e:
            logger.warning(f"Could not inspect {output_path}: {e}")

    result.total_time = time.time() - start_time
    return result
