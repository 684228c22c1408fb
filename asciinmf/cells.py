"""
Cell Extraction

Slices a source image into glyph-sized cells and builds the cell-intensity
matrix V that the solvers factorize against the glyph dictionary.

Layout of V
-----------
- Rows: pixel positions inside one cell, row-major (``glyph_width * j + i``
  for pixel column i and pixel row j of the cell).
- Columns: output character positions, row-major over the output grid
  (``n_cols * y + x``).

Every column is scaled to unit Euclidean length; a blank cell stays the zero
vector.
"""

from typing import Tuple, Union

import numpy as np
from PIL import Image
from sklearn.preprocessing import normalize

from asciinmf.utils.validation import check_image_array

ImageLike = Union[Image.Image, np.ndarray]


def load_image(path: str) -> Image.Image:
    """Load an image from *path* into an RGB Pillow image."""
    image = Image.open(path)
    return image.convert("RGB")


def image_to_array(image: ImageLike) -> np.ndarray:
    """
    Return the red channel of *image* as a float64 (height, width) array.

    Pillow images are converted to RGB first; arrays may be (H, W) grayscale
    or (H, W, C) with the red channel first.
    """
    if isinstance(image, Image.Image):
        image = np.asarray(image.convert("RGB"))
    image = check_image_array(image)
    if image.ndim == 3:
        image = image[:, :, 0]
    return image.astype(np.float64)


def grid_shape(
    image_width: int,
    image_height: int,
    glyph_width: int,
    glyph_height: int
) -> Tuple[int, int]:
    """
    Number of output rows and columns for an image.

    Both counts are rounded (half to even), so the last row or column may
    reach past the image border; those pixels are treated as blank.
    """
    if glyph_width <= 0 or glyph_height <= 0:
        raise ValueError(
            f"glyph size must be positive, got {glyph_width}x{glyph_height}"
        )
    n_cols = int(round(image_width / glyph_width))
    n_rows = int(round(image_height / glyph_height))
    return n_rows, n_cols


def split_image(
    image: ImageLike,
    glyph_width: int,
    glyph_height: int
) -> Tuple[np.ndarray, int, int]:
    r"""
    Build the normalized cell-intensity matrix of *image*.

    Parameters
    ----------
    image : PIL.Image.Image or np.ndarray
        Source image. Only the red channel is read.
    glyph_width, glyph_height : int
        Cell size in pixels, taken from the glyph dictionary.

    Returns
    -------
    V : np.ndarray
        Matrix of shape (glyph_height * glyph_width, n_rows * n_cols).
    n_rows : int
        Output grid rows.
    n_cols : int
        Output grid columns.

    Notes
    -----
    Each pixel contributes ``255 - red`` so that dark pixels carry more
    "ink". Pixels outside the image contribute 0; pixels beyond the last
    full row or column of the rounded grid are dropped.
    """
    red = image_to_array(image)
    height, width = red.shape
    n_rows, n_cols = grid_shape(width, height, glyph_width, glyph_height)

    ink = np.zeros((n_rows * glyph_height, n_cols * glyph_width))
    h = min(height, ink.shape[0])
    w = min(width, ink.shape[1])
    ink[:h, :w] = 255.0 - red[:h, :w]

    # (y, j, x, i) -> (j, i, y, x)
    cells = ink.reshape(n_rows, glyph_height, n_cols, glyph_width)
    V = cells.transpose(1, 3, 0, 2).reshape(
        glyph_height * glyph_width, n_rows * n_cols
    )

    if V.size:
        V = normalize(V, norm='l2', axis=0)

    return V, n_rows, n_cols
