"""
pdf_writer.py - PDF authoring layer for the composite page.

Supports:
- 1-bit raw images (FlateDecode), usable as images or as image masks
- JPEG images (DCTDecode), embedded without re-encoding
- Explicit masking (/Mask with an /ImageMask stencil)

Every call that touches pikepdf, Pillow or the filesystem raises a
CompositionError subclass on failure, after handing it to the optional
error callback.
"""

import logging
import os
import tempfile
import zlib
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Type

import numpy as np
import pikepdf
from pikepdf import Pdf, Stream, Dictionary, Name, Array
from PIL import Image

from .errors import CompositionError, DocumentSaveError, ImageLoadError

logger = logging.getLogger(__name__)

# A4 portrait in PDF points
A4 = (595.276, 841.89)

JPEG_COLORSPACES = {
    "L": Name.DeviceGray,
    "RGB": Name.DeviceRGB,
    "CMYK": Name.DeviceCMYK,
}


def points_for_pixels(pixels: float, dpi: float) -> float:
    """Convert a pixel length to PDF points (1/72 inch) at the given DPI."""
    return pixels * 72 / dpi


class CompositeWriter:
    """
    Builds a PDF by loading images and drawing them onto pages.

    Images are drawn in call order, so later images paint over earlier ones.
    """

    def __init__(
        self,
        compress: bool = True,
        error_callback: Optional[Callable[[CompositionError], None]] = None
    ):
        """
        Initialize PDF writer.

        Args:
            compress: Flate-compress image data and content streams
            error_callback: Called with each failure before it is raised
        """
        self.compress = compress
        self.error_callback = error_callback
        self.pdf = Pdf.new()
        self._page: Optional[pikepdf.Page] = None
        self._content: List[str] = []
        self._xobject_names: Dict[Tuple[int, int], Name] = {}
        self.images_drawn = 0

    def _fail(self, error: CompositionError):
        if self.error_callback is not None:
            self.error_callback(error)
        raise error

    @contextmanager
    def _library_call(self, error_type: Type[CompositionError], what: str):
        """Turn library failures inside the block into error_type."""
        try:
            yield
        except CompositionError as e:
            self._fail(e)
        except (pikepdf.PdfError, OSError, ValueError, TypeError,
                MemoryError, Image.DecompressionBombError) as e:
            error = error_type(f"{what}: {e}")
            error.__cause__ = e
            self._fail(error)

    def load_1bit_image(
        self,
        buffer: np.ndarray,
        width: int,
        height: int,
        line_width: int,
        black_is_1: bool = True,
        top_is_first: bool = True
    ) -> Stream:
        """
        Create a 1-bit DeviceGray image from packed rows.

        Args:
            buffer: uint8 rows, at least line_width bytes each
            width: Image width in pixels
            height: Image height in pixels
            line_width: Bytes per packed row
            black_is_1: Bit value 1 paints black
            top_is_first: First row is the top of the image
        """
        with self._library_call(ImageLoadError, "Cannot load 1-bit image"):
            rows = np.asarray(buffer, dtype=np.uint8)
            if rows.ndim == 1:
                if rows.size < line_width * height:
                    raise ImageLoadError(
                        f"1-bit buffer has {rows.size:,} bytes, "
                        f"need {line_width * height:,}"
                    )
                rows = rows[:line_width * height].reshape(height, line_width)
            if rows.shape[0] < height or rows.shape[1] < line_width:
                raise ImageLoadError(
                    f"1-bit buffer is {rows.shape[1]}x{rows.shape[0]} bytes, "
                    f"need {line_width}x{height}"
                )
            if line_width * 8 < width:
                raise ImageLoadError(f"line width {line_width} too short for {width} pixels")

            rows = rows[:height, :line_width]
            if not top_is_first:
                rows = rows[::-1]
            data = np.ascontiguousarray(rows).tobytes()

            image_dict = Dictionary({
                '/Type': Name.XObject,
                '/Subtype': Name.Image,
                '/Width': width,
                '/Height': height,
                '/ColorSpace': Name.DeviceGray,
                '/BitsPerComponent': 1,
            })
            if black_is_1:
                image_dict['/Decode'] = Array([1, 0])
            if self.compress:
                data = zlib.compress(data, level=9)
                image_dict['/Filter'] = Name.FlateDecode

            image = self.pdf.make_indirect(Stream(self.pdf, data, image_dict))

        logger.debug(f"Loaded 1-bit image {width}x{height} ({len(data):,} bytes)")
        return image

    def load_jpeg_image(self, jpeg_path: Path) -> Stream:
        """Embed a JPEG file as-is."""
        jpeg_path = Path(jpeg_path)

        with self._library_call(ImageLoadError, f"Cannot load JPEG {jpeg_path}"):
            with Image.open(jpeg_path) as img:
                if img.format != "JPEG":
                    raise ImageLoadError(f"Not a JPEG file: {jpeg_path} ({img.format})")
                if img.mode not in JPEG_COLORSPACES:
                    raise ImageLoadError(f"Unsupported JPEG mode {img.mode}: {jpeg_path}")
                width, height = img.size
                mode = img.mode
                adobe = "adobe" in img.info

            image_dict = Dictionary({
                '/Type': Name.XObject,
                '/Subtype': Name.Image,
                '/Width': width,
                '/Height': height,
                '/ColorSpace': JPEG_COLORSPACES[mode],
                '/BitsPerComponent': 8,
                '/Filter': Name.DCTDecode,
            })
            if mode == "CMYK" and adobe:
                # Adobe CMYK JPEGs are stored inverted
                image_dict['/Decode'] = Array([1, 0] * 4)

            image = self.pdf.make_indirect(
                Stream(self.pdf, jpeg_path.read_bytes(), image_dict)
            )

        logger.debug(f"Loaded JPEG {jpeg_path.name}: {width}x{height} {mode}")
        return image

    def set_mask_image(self, image: Stream, mask: Stream):
        """
        Use mask as the stencil mask of image.

        Where the mask paints, the image is drawn; elsewhere the page
        below shows through.
        """
        with self._library_call(ImageLoadError, "Cannot set mask image"):
            if int(mask.get(Name.BitsPerComponent, 0)) != 1:
                raise ImageLoadError("Mask image must have 1 bit per component")

            mask[Name.ImageMask] = True
            if Name.ColorSpace in mask:
                del mask[Name.ColorSpace]
            image[Name.Mask] = mask

    def add_page(self, page_size: Tuple[float, float] = A4) -> pikepdf.Page:
        """Add a blank page and make it the drawing target."""
        self._finish_page()

        with self._library_call(CompositionError, "Cannot add page"):
            self.pdf.add_blank_page(page_size=page_size)
            page = self.pdf.pages[-1]
            page.Resources = Dictionary({'/XObject': Dictionary({})})

        self._page = page
        self._content = []
        self._xobject_names = {}
        logger.debug(f"Added page {len(self.pdf.pages)}: {page_size[0]}x{page_size[1]} pts")
        return page

    def draw_image(self, image: Stream, x: float, y: float, width: float, height: float):
        """Draw image into the rectangle (x, y, width, height), in points."""
        if self._page is None:
            self._fail(CompositionError("Cannot draw image: no page added"))

        with self._library_call(CompositionError, "Cannot draw image"):
            name = self._xobject_names.get(image.objgen)
            if name is None:
                name = Name(f"/Im{len(self._xobject_names)}")
                self._page.Resources.XObject[name] = image
                self._xobject_names[image.objgen] = name

        self._content.append(
            f"q\n{width:.4f} 0 0 {height:.4f} {x:.4f} {y:.4f} cm\n{name} Do\nQ"
        )
        self.images_drawn += 1
        logger.debug(f"Drew {name} at ({x:.2f}, {y:.2f}) size {width:.2f}x{height:.2f}")

    def draw_image_at_dpi(self, image: Stream, dpi: float, x: float = 0, y: float = 0):
        """Draw image at its natural size for the given resolution."""
        width = points_for_pixels(int(image.Width), dpi)
        height = points_for_pixels(int(image.Height), dpi)
        self.draw_image(image, x, y, width, height)

    def _finish_page(self):
        if self._page is None:
            return
        with self._library_call(CompositionError, "Cannot write page content"):
            self._page.Contents = self.pdf.make_indirect(
                Stream(self.pdf, "\n".join(self._content).encode("ascii"))
            )

    def save(self, output_path: Path):
        """
        Save PDF to file.

        The document is written to a temporary file beside output_path and
        renamed into place, so a failed save leaves no partial file.
        """
        output_path = Path(output_path)
        self._finish_page()

        tmp_path = None
        with self._library_call(DocumentSaveError, f"Cannot save {output_path}"):
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{output_path.stem}-", suffix=".tmp", dir=output_path.parent
            )
            os.close(fd)
            tmp_path = Path(tmp_name)
            try:
                self.pdf.save(
                    tmp_path,
                    compress_streams=self.compress,
                    object_stream_mode=pikepdf.ObjectStreamMode.generate,
                    deterministic_id=True
                )
                os.replace(tmp_path, output_path)
            finally:
                if tmp_path.exists():
                    tmp_path.unlink()

        logger.info(f"Saved {len(self.pdf.pages)} page(s) to {output_path}")

    def close(self):
        self.pdf.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
