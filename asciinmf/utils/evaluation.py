"""
Evaluation Helpers for Glyph Factorization

Objective values and norms used by the divergence solver's convergence
history and by the dictionary invariants.
"""

import numpy as np

from asciinmf.config import EPSILON


def beta_divergence(
    V: np.ndarray,
    V_approx: np.ndarray,
    beta: float
) -> float:
    r"""
    Total beta-divergence between V and its reconstruction.

    .. math::
        d_\beta(x | y) = \frac{x^\beta + (\beta - 1) y^\beta - \beta x y^{\beta-1}}
                              {\beta(\beta - 1)}

    with the limits

    - beta = 1 (Kullback-Leibler): :math:`x \log(x/y) - x + y`
    - beta = 0 (Itakura-Saito): :math:`x/y - \log(x/y) - 1`

    Parameters
    ----------
    V : np.ndarray
        Observed cell-intensity matrix (non-negative).
    V_approx : np.ndarray
        Reconstruction ``W @ H``, same shape as V.
    beta : float
        Divergence parameter.

    Returns
    -------
    float
        Sum of element-wise divergences.

    Notes
    -----
    Entries are clipped at ``EPSILON`` before logarithms and negative powers
    so blank cells do not turn the objective into NaN or Inf.
    """
    if V.shape != V_approx.shape:
        raise ValueError(
            f"V and V_approx must have same shape, got {V.shape} and {V_approx.shape}"
        )

    if beta == 2.0:
        return float(0.5 * np.sum((V - V_approx) ** 2))

    X = np.maximum(V, EPSILON)
    Y = np.maximum(V_approx, EPSILON)

    if beta == 1.0:
        return float(np.sum(X * np.log(X / Y) - X + Y))

    if beta == 0.0:
        ratio = X / Y
        return float(np.sum(ratio - np.log(ratio) - 1.0))

    return float(np.sum(
        (X ** beta + (beta - 1.0) * Y ** beta - beta * X * Y ** (beta - 1.0))
        / (beta * (beta - 1.0))
    ))


def column_norms(X: np.ndarray) -> np.ndarray:
    """Euclidean norm of every column of X."""
    return np.linalg.norm(X, axis=0)
