"""
PDF Composer - JPEG background + 1-bit TIFF mask compositing.

This package places a JPEG background and a 1-bit TIFF foreground, masked by
itself, onto a single A4 page and writes the result as a PDF.
"""

__version__ = "1.0.0"
__author__ = "PDF Composer"
