"""
versions.py - Report the versions of the linked image and PDF libraries.
"""

import sys
from typing import Dict, TextIO

import numpy as np
import pikepdf
import PIL
from PIL import features

try:
    import fitz  # pip install pymupdf
except ImportError:
    import pymupdf as fitz  # apt install python3-pymupdf

UNAVAILABLE = "unavailable"


def library_versions() -> Dict[str, str]:
    """Collect version strings, keyed by the name printed in the banner."""
    return {
        "tiff": features.version_codec("libtiff") or UNAVAILABLE,
        "pikepdf": pikepdf.__version__,
        "qpdf": pikepdf.__libqpdf_version__,
        "jpeg": features.version_codec("jpg") or UNAVAILABLE,
        "pillow": PIL.__version__,
        "numpy": np.__version__,
        "pymupdf": fitz.VersionBind,
    }


def show_versions(stream: TextIO = None):
    """Print one line per library."""
    stream = stream or sys.stdout
    for name, version in library_versions().items():
        print(f"{name} version {version}", file=stream)
