import numpy as np
import pytest
from PIL import Image

from asciinmf.cells import grid_shape, image_to_array, load_image, split_image


def _ink_image(ink: np.ndarray) -> np.ndarray:
    """Grayscale array whose extracted ink equals ``ink``."""
    return (255 - ink).astype(np.uint8)


def test_grid_shape_rounds_half_to_even() -> None:
    assert grid_shape(20, 12, 8, 8) == (2, 2)
    assert grid_shape(13, 4, 8, 8) == (0, 2)
    assert grid_shape(16, 32, 8, 16) == (2, 2)


def test_grid_shape_rejects_empty_cells() -> None:
    with pytest.raises(ValueError):
        grid_shape(10, 10, 0, 8)


def test_split_image_layout() -> None:
    ink = np.arange(1, 17, dtype=float).reshape(4, 4)
    V, n_rows, n_cols = split_image(_ink_image(ink), 2, 2)

    assert (n_rows, n_cols) == (2, 2)
    assert V.shape == (4, 4)

    # cell (x=1, y=0) is column 1, pixels in row-major order
    expected = np.array([ink[0, 2], ink[0, 3], ink[1, 2], ink[1, 3]])
    np.testing.assert_allclose(V[:, 1], expected / np.linalg.norm(expected))

    # cell (x=0, y=1) is column 2
    expected = np.array([ink[2, 0], ink[2, 1], ink[3, 0], ink[3, 1]])
    np.testing.assert_allclose(V[:, 2], expected / np.linalg.norm(expected))


def test_columns_are_unit_or_zero() -> None:
    rng = np.random.RandomState(0)
    ink = rng.randint(0, 256, size=(24, 32)).astype(float)
    ink[:8, :8] = 0.0
    V, _, _ = split_image(_ink_image(ink), 8, 8)

    norms = np.linalg.norm(V, axis=0)
    assert norms[0] == 0.0
    assert np.all(V[:, 0] == 0.0)
    np.testing.assert_allclose(norms[1:], 1.0)


def test_cells_past_the_border_are_zero_padded() -> None:
    black = np.zeros((8, 12), dtype=np.uint8)
    V, n_rows, n_cols = split_image(black, 8, 8)

    assert (n_rows, n_cols) == (1, 2)
    cell = V[:, 1].reshape(8, 8)
    assert np.all(cell[:, 4:] == 0.0)
    np.testing.assert_allclose(cell[:, :4], 1.0 / np.sqrt(32))


def test_pixels_beyond_the_grid_are_ignored() -> None:
    ink = np.zeros((8, 11))
    ink[:, 8:] = 255.0
    V, n_rows, n_cols = split_image(_ink_image(ink), 8, 8)

    assert (n_rows, n_cols) == (1, 1)
    assert np.all(V == 0.0)


def test_pil_image_uses_red_channel() -> None:
    image = Image.new("RGB", (8, 8), color=(0, 255, 255))
    V, _, _ = split_image(image, 8, 8)

    np.testing.assert_allclose(V[:, 0], 1.0 / 8.0)


def test_image_to_array_accepts_rgb_arrays() -> None:
    rgb = np.zeros((2, 3, 3), dtype=np.uint8)
    rgb[..., 0] = 10
    rgb[..., 1] = 200

    np.testing.assert_array_equal(image_to_array(rgb), np.full((2, 3), 10.0))


def test_invalid_image_raises() -> None:
    with pytest.raises(ValueError):
        split_image(np.zeros(5), 2, 2)
    with pytest.raises(ValueError):
        split_image(np.zeros((0, 4)), 2, 2)


def test_load_image_converts_to_rgb(tmp_path) -> None:
    path = tmp_path / "gray.png"
    Image.new("L", (4, 4), color=100).save(path)

    image = load_image(str(path))
    assert image.mode == "RGB"
    assert image.getpixel((0, 0)) == (100, 100, 100)


def test_load_image_missing_file_raises(tmp_path) -> None:
    with pytest.raises(OSError):
        load_image(str(tmp_path / "missing.png"))
