import pytest

from pdf_composer.errors import UnsupportedPhotometricError
from pdf_composer.photometric import ColorSpace, classify_photometric, describe_photometric


@pytest.mark.parametrize("photometric, expected", [
    (0, ColorSpace.GRAY),
    (1, ColorSpace.GRAY),
    (2, ColorSpace.RGB),
])
def test_supported_values(photometric, expected):
    assert classify_photometric(photometric) is expected


@pytest.mark.parametrize("photometric", [3, 4, 5, 6, 8, 32844])
def test_unsupported_values(photometric):
    with pytest.raises(UnsupportedPhotometricError) as exc:
        classify_photometric(photometric)
    assert exc.value.photometric == photometric
    assert str(photometric) in str(exc.value)


def test_descriptions():
    assert describe_photometric(3) == "palette color"
    assert describe_photometric(5) == "CMYK"
    assert describe_photometric(99) == "unknown"

