import io

import pikepdf

from pdf_composer.versions import library_versions, show_versions


def test_reports_every_library():
    versions = library_versions()

    assert set(versions) == {"tiff", "pikepdf", "qpdf", "jpeg", "pillow", "numpy", "pymupdf"}
    assert versions["pikepdf"] == pikepdf.__version__
    assert all(isinstance(v, str) and v for v in versions.values())


def test_show_versions_prints_one_line_each():
    out = io.StringIO()
    show_versions(out)

    lines = out.getvalue().splitlines()
    assert len(lines) == len(library_versions())
    assert all(" version " in line for line in lines)
