"""
Glyph Selection

Turns an activation matrix into the character grid: every output cell takes
the glyph with the strongest activation, or a space when that activation
does not reach the threshold.
"""

from typing import Tuple

import numpy as np

from asciinmf.dictionary import GlyphDictionary
from asciinmf.utils.validation import check_threshold

BLANK = ' '


def max_activation(H: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    r"""
    Strongest activation of every column of H.

    The running maximum starts at 0.0 and is replaced only by strictly
    larger values, so:

    - ties go to the lowest row index;
    - a column without any positive entry reports index 0 and value 0.0,
      which means negative projections never win over the zero floor;
    - NaN entries are skipped; an all-NaN column falls back to index 0.

    Parameters
    ----------
    H : np.ndarray
        Activation matrix of shape (r, n).

    Returns
    -------
    indices : np.ndarray
        Integer array of shape (n,).
    values : np.ndarray
        Float array of shape (n,), always >= 0.
    """
    if H.ndim != 2:
        raise ValueError(f"H must be 2D matrix, got shape {H.shape}")

    n = H.shape[1]
    if H.shape[0] == 0 or n == 0:
        return np.zeros(n, dtype=int), np.zeros(n)

    # NaN never wins a comparison, so it behaves like -inf here
    H = np.where(np.isnan(H), -np.inf, H)
    column_max = H.max(axis=0)
    positive = column_max > 0.0
    indices = np.where(positive, H.argmax(axis=0), 0)
    values = np.where(positive, column_max, 0.0)
    return indices, values


def select_glyphs(
    H: np.ndarray,
    n_rows: int,
    n_cols: int,
    dictionary: GlyphDictionary,
    threshold: float = 0.0
) -> np.ndarray:
    r"""
    Build the character grid from activations.

    Parameters
    ----------
    H : np.ndarray
        Activation matrix of shape (dictionary.n_glyphs, n_rows * n_cols),
        columns in row-major grid order.
    n_rows, n_cols : int
        Output grid shape.
    dictionary : GlyphDictionary
        Maps row indices of H to characters.
    threshold : float
        Minimum activation for a glyph to be drawn, in [0.0, 1.0].

    Returns
    -------
    np.ndarray
        Array of shape (n_rows, n_cols) and dtype '<U1'.
    """
    threshold = check_threshold(threshold)
    if H.shape != (dictionary.n_glyphs, n_rows * n_cols):
        raise ValueError(
            f"H shape must be ({dictionary.n_glyphs}, {n_rows * n_cols}), got {H.shape}"
        )

    indices, values = max_activation(H)

    glyphs = np.array(list(dictionary.characters), dtype='<U1')
    chars = np.where(values >= threshold, glyphs[indices], BLANK)
    return chars.reshape(n_rows, n_cols)
