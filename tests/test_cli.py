import numpy as np
import pytest
from PIL import Image

from asciinmf import converter
from asciinmf.cli import main
from asciinmf.dictionary import GlyphDictionary


def _write_inputs(tmp_path):
    bitmaps = np.zeros((3, 4, 4))
    bitmaps[0, :2, :2] = 1.0
    bitmaps[1, :2, 2:] = 1.0
    bitmaps[2, 2:, :] = 1.0
    dictionary_path = tmp_path / "glyphs.npz"
    GlyphDictionary.from_bitmaps(bitmaps, first_glyph_code=ord('A')).save(dictionary_path)

    ink = np.zeros((4, 16), dtype=np.uint8)
    ink[:2, 0:2] = 255
    ink[:2, 6:8] = 255
    ink[2:, 8:12] = 255
    image_path = tmp_path / "glyphs.png"
    Image.fromarray(255 - ink).save(image_path)

    return image_path, dictionary_path


def test_writes_html(tmp_path, capsys) -> None:
    image_path, dictionary_path = _write_inputs(tmp_path)
    output_name = tmp_path / "result"

    code = main([
        str(image_path), "-d", str(dictionary_path),
        "-t", "0.5", "-i", "20", "-j", "2", "--seed", "0",
        "-o", str(output_name),
    ])

    assert code == 0
    out = capsys.readouterr().out
    assert "Converting image..." in out
    assert "10%" in out
    assert out.rstrip().endswith("Done!")

    content = (tmp_path / "result.html").read_text(encoding="utf-8")
    assert content == '<font face="courier"><pre>\nABC \n</pre></font>'


def test_pseudoinverse_text_output(tmp_path, capsys) -> None:
    image_path, dictionary_path = _write_inputs(tmp_path)

    code = main([str(image_path), "-d", str(dictionary_path), "-p", "-t", "0.5", "--text"])

    assert code == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[-1] == "ABC "
    assert "100%" in lines


def test_named_beta(tmp_path, capsys) -> None:
    image_path, dictionary_path = _write_inputs(tmp_path)

    code = main([
        str(image_path), "-d", str(dictionary_path),
        "-b", "kullback-leibler", "-i", "5", "--text",
    ])

    assert code == 0


@pytest.mark.parametrize(
    "extra",
    [["-t", "1.5"], ["-i", "0"], ["-i", "65536"], ["-j", "0"], ["-b", "bogus"]],
)
def test_rejects_invalid_arguments(tmp_path, extra) -> None:
    image_path, dictionary_path = _write_inputs(tmp_path)

    with pytest.raises(SystemExit) as excinfo:
        main([str(image_path), "-d", str(dictionary_path)] + extra)
    assert excinfo.value.code == 2


def test_missing_dictionary(tmp_path) -> None:
    image_path, _ = _write_inputs(tmp_path)

    with pytest.raises(SystemExit):
        main([str(image_path), "-d", str(tmp_path / "missing.npz")])


def test_unreadable_image(tmp_path, capsys) -> None:
    _, dictionary_path = _write_inputs(tmp_path)
    bad = tmp_path / "broken.png"
    bad.write_bytes(b"not an image")

    code = main([str(bad), "-d", str(dictionary_path)])

    assert code == 1
    assert f"Cannot open file {bad}" in capsys.readouterr().out


def test_image_smaller_than_a_cell(tmp_path, capsys) -> None:
    image_path, _ = _write_inputs(tmp_path)
    dictionary_path = tmp_path / "big.npz"
    GlyphDictionary.from_bitmaps(np.ones((2, 16, 16))).save(dictionary_path)

    code = main([str(image_path), "-d", str(dictionary_path), "-i", "2", "--text"])

    assert code == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[-2:] == ["100%", ""]


def test_conversion_failure(tmp_path, capsys, monkeypatch) -> None:
    image_path, dictionary_path = _write_inputs(tmp_path)

    def fail(*args, **kwargs):
        raise FloatingPointError("overflow")

    monkeypatch.setattr(converter, "convert_image", fail)

    code = main([str(image_path), "-d", str(dictionary_path), "-o", str(tmp_path / "out")])

    assert code == 1
    assert "Cannot convert specified image" in capsys.readouterr().out
    assert not (tmp_path / "out.html").exists()
