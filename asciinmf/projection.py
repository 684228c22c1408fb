"""
Direct Projection Solver

Projects every cell vector onto the glyph dictionary in one shot:

.. math::
    H = W^{+} V

where :math:`W^{+}` is the Moore-Penrose pseudoinverse of the dictionary.
This is the unconstrained least-squares solution of :math:`\\min_H \\|V - WH\\|_F`,
so activations may be negative.
"""

import numpy as np
from scipy.linalg import pinv


def pinv_projection(V: np.ndarray, W: np.ndarray) -> np.ndarray:
    r"""
    Least-squares activations of V on the dictionary W.

    Parameters
    ----------
    V : np.ndarray
        Cell-intensity matrix of shape (m, n).
    W : np.ndarray
        Glyph dictionary of shape (m, r).

    Returns
    -------
    H : np.ndarray
        Activation matrix of shape (r, n). Signed.

    Raises
    ------
    ValueError
        If the row counts of V and W differ.
    numpy.linalg.LinAlgError
        If the SVD behind the pseudoinverse does not converge.
    """
    if V.ndim != 2 or W.ndim != 2:
        raise ValueError(f"V and W must be 2D, got shapes {V.shape} and {W.shape}")
    if V.shape[0] != W.shape[0]:
        raise ValueError(
            f"V has {V.shape[0]} rows but W has {W.shape[0]}; "
            f"cell size and dictionary do not match"
        )

    return pinv(W) @ V
