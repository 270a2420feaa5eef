"""
errors.py - Failures that end a composition run.

Every failure is terminal for the run. The pipeline catches CompositionError
once and reports it in the CompositionResult.
"""


class CompositionError(Exception):
    """Base class for all composition failures."""


class TiffReadError(CompositionError):
    """TIFF file missing, not a TIFF, or a scanline could not be read."""


class BufferAllocationError(CompositionError):
    """Raw pixel buffer could not be allocated."""


class UnsupportedPhotometricError(CompositionError):
    """Photometric interpretation outside the supported set."""

    def __init__(self, photometric: int, meaning: str):
        super().__init__(
            f"Unsupported photometric interpretation: {photometric} ({meaning})"
        )
        self.photometric = photometric


class UnsupportedBitDepthError(CompositionError):
    """Foreground is not a 1-bit image."""

    def __init__(self, bits_per_sample: int):
        super().__init__(
            f"1-bit image required, but got {bits_per_sample} bits per sample"
        )
        self.bits_per_sample = bits_per_sample


class ImageLoadError(CompositionError):
    """An image could not be turned into a PDF image resource."""


class DocumentSaveError(CompositionError):
    """The PDF document could not be written."""
