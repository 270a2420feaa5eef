"""
photometric.py - Map the TIFF PhotometricInterpretation tag to a PDF colour space.

Only intensity (0, 1) and RGB (2) data is accepted; there is no
best-effort conversion for anything else.
"""

from enum import Enum

from .errors import UnsupportedPhotometricError

PHOTOMETRIC_MINISWHITE = 0
PHOTOMETRIC_MINISBLACK = 1
PHOTOMETRIC_RGB = 2

PHOTOMETRIC_MEANINGS = {
    0: "WhiteIsZero",
    1: "BlackIsZero",
    2: "RGB color",
    3: "palette color",
    4: "transparency mask",
    5: "CMYK",
    6: "YCbCr",
}


class ColorSpace(Enum):
    GRAY = "/DeviceGray"
    RGB = "/DeviceRGB"


def describe_photometric(photometric: int) -> str:
    return PHOTOMETRIC_MEANINGS.get(photometric, "unknown")


def classify_photometric(photometric: int) -> ColorSpace:
    """
    Return the colour space for a photometric tag value.

    Raises:
        UnsupportedPhotometricError: for any value other than 0, 1 or 2
    """
    if photometric in (PHOTOMETRIC_MINISWHITE, PHOTOMETRIC_MINISBLACK):
        return ColorSpace.GRAY
    if photometric == PHOTOMETRIC_RGB:
        return ColorSpace.RGB
    raise UnsupportedPhotometricError(photometric, describe_photometric(photometric))
