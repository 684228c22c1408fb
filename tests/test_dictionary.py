import numpy as np
import pytest

from asciinmf.dictionary import GlyphDictionary


def _quadrant_bitmaps() -> np.ndarray:
    """Three orthogonal 4x4 glyphs: top-left, top-right, bottom half."""
    bitmaps = np.zeros((3, 4, 4))
    bitmaps[0, :2, :2] = 1.0
    bitmaps[1, :2, 2:] = 1.0
    bitmaps[2, 2:, :] = 1.0
    return bitmaps


def test_from_bitmaps_normalizes_columns() -> None:
    bitmaps = _quadrant_bitmaps() * 200.0
    dictionary = GlyphDictionary.from_bitmaps(bitmaps, first_glyph_code=ord('A'))

    assert dictionary.w.shape == (16, 3)
    assert dictionary.n_glyphs == 3
    assert dictionary.cell_size == 16
    assert (dictionary.glyph_width, dictionary.glyph_height) == (4, 4)
    np.testing.assert_allclose(np.linalg.norm(dictionary.w, axis=0), 1.0)
    # first glyph is row-major top-left quadrant
    np.testing.assert_allclose(dictionary.w[[0, 1, 4, 5], 0], 0.5)


def test_blank_glyph_stays_zero() -> None:
    bitmaps = np.zeros((2, 2, 2))
    bitmaps[1] = 1.0
    dictionary = GlyphDictionary.from_bitmaps(bitmaps)

    assert np.all(dictionary.w[:, 0] == 0.0)
    assert dictionary.characters == ' !'


def test_dictionary_is_read_only() -> None:
    dictionary = GlyphDictionary.from_bitmaps(_quadrant_bitmaps())

    with pytest.raises(ValueError):
        dictionary.w[0, 0] = 2.0
    with pytest.raises(AttributeError):
        dictionary.glyph_width = 8


def test_character_mapping() -> None:
    dictionary = GlyphDictionary.from_bitmaps(_quadrant_bitmaps(), first_glyph_code=ord('a'))

    assert dictionary.characters == 'abc'
    assert dictionary.character(2) == 'c'
    with pytest.raises(IndexError):
        dictionary.character(3)


def test_rejects_inconsistent_dictionaries() -> None:
    w = np.eye(4)
    with pytest.raises(ValueError):
        GlyphDictionary(w, glyph_width=3, glyph_height=1)
    with pytest.raises(ValueError):
        GlyphDictionary(w * 2.0, glyph_width=2, glyph_height=2)
    with pytest.raises(ValueError):
        GlyphDictionary(np.zeros((4, 0)), glyph_width=2, glyph_height=2)
    with pytest.raises(ValueError):
        GlyphDictionary.from_bitmaps(np.ones((4, 4)))


def test_rejects_negative_entries() -> None:
    w = np.array([[0.6, 1.0], [-0.8, 0.0]])
    with pytest.raises(ValueError, match="non-negative"):
        GlyphDictionary(w, glyph_width=1, glyph_height=2, first_glyph_code=65)
    with pytest.raises(ValueError):
        GlyphDictionary(np.full((2, 1), np.nan), glyph_width=1, glyph_height=2)


def test_from_strip_slices_glyphs_left_to_right() -> None:
    bitmaps = _quadrant_bitmaps()
    strip = np.hstack([255 - 255 * b for b in bitmaps]).astype(np.uint8)

    from_strip = GlyphDictionary.from_strip(strip, 4, 4, first_glyph_code=ord('A'))
    from_bitmaps = GlyphDictionary.from_bitmaps(bitmaps, first_glyph_code=ord('A'))

    np.testing.assert_allclose(from_strip.w, from_bitmaps.w)
    assert from_strip.characters == 'ABC'


def test_from_strip_rejects_partial_glyphs() -> None:
    with pytest.raises(ValueError):
        GlyphDictionary.from_strip(np.full((4, 10), 255, dtype=np.uint8), 4, 4)
    with pytest.raises(ValueError):
        GlyphDictionary.from_strip(np.full((5, 8), 255, dtype=np.uint8), 4, 4)


def test_save_and_load(tmp_path) -> None:
    path = tmp_path / "glyphs.npz"
    dictionary = GlyphDictionary.from_bitmaps(_quadrant_bitmaps(), first_glyph_code=60)
    dictionary.save(path)

    loaded = GlyphDictionary.load(path)
    np.testing.assert_array_equal(loaded.w, dictionary.w)
    assert loaded.glyph_width == 4
    assert loaded.glyph_height == 4
    assert loaded.first_glyph_code == 60


def test_load_rejects_other_archives(tmp_path) -> None:
    path = tmp_path / "other.npz"
    np.savez(path, w=np.eye(4))

    with pytest.raises(ValueError):
        GlyphDictionary.load(path)
