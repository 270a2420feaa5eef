"""
tiff_reader.py - TIFF metadata and scanline reading.

Decoding is done by Pillow (libtiff for compressed data). The reader returns
metadata as a value and the pixels as a contiguous numpy buffer of
scanline_size x height bytes, one row per scanline.
"""

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np
from PIL import Image, TiffImagePlugin

from .errors import BufferAllocationError, TiffReadError
from .photometric import PHOTOMETRIC_MINISWHITE, describe_photometric

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TiffBasicInfo:
    """Basic TIFF metadata, read once per file."""
    width: int
    height: int
    bits_per_sample: int
    samples_per_pixel: int
    photometric: int

    @property
    def total_pixels(self) -> int:
        return self.width * self.height

    @property
    def scanline_size(self) -> int:
        """Bytes per stored scanline (rows are padded to a whole byte)."""
        return math.ceil(self.width * self.bits_per_sample * self.samples_per_pixel / 8)

    @property
    def channel_description(self) -> str:
        if self.samples_per_pixel == 1:
            return "grayscale"
        if self.samples_per_pixel == 3:
            return "RGB color"
        if self.samples_per_pixel == 4:
            return "RGBA or CMYK"
        return f"{self.samples_per_pixel}-channel"


def _first(value) -> int:
    # BitsPerSample is stored once per sample
    if isinstance(value, tuple):
        return int(value[0])
    return int(value)


class TiffReader:
    """
    Open TIFF file. Only the first image directory is read.

    Use as a context manager so the file handle is released on every path.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._image: Optional[Image.Image] = None

        try:
            image = Image.open(self.path)
        except (OSError, Image.DecompressionBombError) as e:
            raise TiffReadError(f"Cannot open TIFF {self.path}: {e}") from e

        if image.format != "TIFF":
            image.close()
            raise TiffReadError(f"Not a TIFF file: {self.path} ({image.format})")

        self._image = image
        try:
            self.info = self._read_info()
        except TiffReadError:
            self.close()
            raise

        logger.debug(
            f"Opened {self.path.name}: {self.info.width}x{self.info.height}, "
            f"scanline {self.info.scanline_size} bytes"
        )

    def _read_info(self) -> TiffBasicInfo:
        tags = self._image.tag_v2
        try:
            photometric = tags[TiffImagePlugin.PHOTOMETRIC_INTERPRETATION]
        except KeyError:
            raise TiffReadError(
                f"{self.path} has no PhotometricInterpretation tag"
            ) from None

        return TiffBasicInfo(
            width=int(tags.get(TiffImagePlugin.IMAGEWIDTH, self._image.width)),
            height=int(tags.get(TiffImagePlugin.IMAGELENGTH, self._image.height)),
            bits_per_sample=_first(tags.get(TiffImagePlugin.BITSPERSAMPLE, 1)),
            samples_per_pixel=_first(tags.get(TiffImagePlugin.SAMPLESPERPIXEL, 1)),
            photometric=int(photometric),
        )

    @property
    def closed(self) -> bool:
        return self._image is None

    def read_scanlines(self) -> np.ndarray:
        """
        Read every scanline, top to bottom, into one buffer.

        1-bit rows keep the bit sense stored in the file.

        Returns:
            uint8 array of shape (height, scanline_size)

        Raises:
            BufferAllocationError: buffer could not be allocated
            TiffReadError: decoding failed or a row has the wrong size
        """
        if self.closed:
            raise TiffReadError(f"{self.path} is closed")

        info = self.info
        stride = info.scanline_size

        try:
            buffer = np.empty((info.height, stride), dtype=np.uint8)
        except MemoryError as e:
            raise BufferAllocationError(
                f"Failed to allocate {stride * info.height:,} bytes for TIFF image data"
            ) from e

        try:
            self._image.load()
            data = self._image.tobytes()
        except MemoryError as e:
            raise BufferAllocationError(f"Out of memory decoding {self.path}") from e
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            raise TiffReadError(f"Failed to decode {self.path}: {e}") from e

        if len(data) != stride * info.height:
            raise TiffReadError(
                f"Decoded {len(data):,} bytes from {self.path}, "
                f"expected {info.height} scanlines of {stride} bytes"
            )

        for row in range(info.height):
            buffer[row] = np.frombuffer(data, dtype=np.uint8, count=stride, offset=row * stride)

        if self._image.mode == "1" and info.photometric == PHOTOMETRIC_MINISWHITE:
            # Pillow normalises 1-bit data to 1 = white
            np.invert(buffer, out=buffer)

        logger.debug(f"Read {info.height} scanlines of {stride} bytes")
        return buffer

    def close(self):
        if self._image is not None:
            self._image.close()
            self._image = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def format_tiff_info(info: TiffBasicInfo) -> str:
    """Human-readable metadata dump."""
    return (
        "=== TIFF image info ===\n"
        f"Dimensions: {info.width} x {info.height} pixels\n"
        f"Bits per sample: {info.bits_per_sample}\n"
        f"Samples per pixel: {info.samples_per_pixel}\n"
        f"Photometric: {info.photometric} ({describe_photometric(info.photometric)})\n"
        f"Total pixels: {info.total_pixels:,}\n"
        f"Image type: {info.channel_description}\n"
        "======================="
    )
