import pytest
from PIL import Image

from compose_pdf import main


@pytest.fixture(autouse=True)
def restore_pixel_limit(monkeypatch):
    # main() lifts the limit process-wide
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", Image.MAX_IMAGE_PIXELS)


def test_writes_output_pdf_in_cwd(inputs, tmp_path, monkeypatch, capsys):
    background, foreground = inputs
    monkeypatch.chdir(tmp_path)

    with pytest.raises(SystemExit) as exc:
        main([str(background), str(foreground)])

    assert exc.value.code == 0
    assert (tmp_path / "output.pdf").is_file()

    out = capsys.readouterr().out
    assert "pikepdf version" in out
    assert "Dimensions: 120 x 80 pixels" in out
    assert "Photometric: 1 (BlackIsZero)" in out
    assert "Images placed: 2" in out
    assert "PDF created successfully" in out


def test_unsupported_tiff_exits_nonzero(make_jpeg, make_tiff, tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)

    with pytest.raises(SystemExit) as exc:
        main([str(make_jpeg()), str(make_tiff(mode="L"))])

    assert exc.value.code == 1
    assert not (tmp_path / "output.pdf").exists()
    assert "Error: 1-bit image required" in capsys.readouterr().err


def test_requires_two_arguments(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["only_one.jpg"])

    assert exc.value.code == 2


def test_lifts_pixel_limit_for_large_scans(inputs, tmp_path, monkeypatch):
    background, foreground = inputs
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)

    with pytest.raises(SystemExit) as exc:
        main([str(background), str(foreground)])

    assert exc.value.code == 0
    assert Image.MAX_IMAGE_PIXELS is None
    assert (tmp_path / "output.pdf").is_file()
