"""
Iterative Divergence Solver

Multiplicative-update NMF with a fixed basis: the glyph dictionary W is held
constant and only the activation matrix H is optimized, minimizing the
beta-divergence between the cell-intensity matrix V and its reconstruction WH.

Mathematical Background:
-----------------------
For the beta-divergence family

- beta = 0: Itakura-Saito
- beta = 1: Kullback-Leibler
- beta = 2: squared Euclidean (Frobenius)

the multiplicative update of H with W fixed is

.. math::
    H_{jk} \\leftarrow H_{jk}
        \\frac{\\sum_i W_{ij} V_{ik} \\hat V_{ik}^{\\beta-2}}
             {\\sum_i W_{ij} \\hat V_{ik}^{\\beta-1}},
    \\qquad \\hat V = WH

Every factor of the ratio is non-negative, so H stays non-negative when it
starts positive.

Numerical guards:
----------------
Blank or nearly blank cells make :math:`\\hat V_{ik}` vanish, and for
beta <= 1 the powers above then overflow to Inf/NaN. Wherever
:math:`|\\hat V_{ik}| \\le \\epsilon`:

- the numerator term becomes :math:`W_{ij} V_{ik}`;
- the denominator term stays :math:`W_{ij} \\hat V_{ik}^{\\beta-1}` when
  beta > 1 (it tends to 0), otherwise becomes :math:`W_{ij}`.

When the accumulated denominator is itself within epsilon of 0, H is
multiplied by the numerator alone.

Parallel execution:
------------------
Rows of H are independent given the previous iterate and :math:`\\hat V`.
Each iteration computes :math:`\\hat V` once, fans contiguous row blocks out
to a thread pool and waits for every block before the next iteration starts.
Blocks are disjoint, so no locking is needed.
"""

import contextlib
import time
import warnings
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Optional, Tuple, Union

import numpy as np
from sklearn.utils import check_random_state

from asciinmf.config import (
    DEFAULT_BETA,
    DEFAULT_ITERATIONS,
    EPSILON,
    H_INIT_RANGE,
)
from asciinmf.utils.evaluation import beta_divergence
from asciinmf.utils.validation import check_beta, check_n_iter, check_n_jobs

ProgressCallback = Callable[[int], None]


def divergence_weights(
    V: np.ndarray,
    V_approx: np.ndarray,
    beta: float,
    epsilon: float = EPSILON
) -> Tuple[np.ndarray, np.ndarray]:
    r"""
    Per-entry numerator and denominator multipliers of the update rule.

    These are the guarded terms of :func:`safe_divergence_term` with the
    dictionary weight factored out, so that the accumulation over pixels
    becomes a matrix product: ``numerator = W.T @ a``,
    ``denominator = W.T @ b``.

    Parameters
    ----------
    V : np.ndarray
        Observed values.
    V_approx : np.ndarray
        Current reconstruction, broadcastable against V.
    beta : float
        Divergence parameter.
    epsilon : float
        Threshold below which a reconstruction value is treated as zero.

    Returns
    -------
    a : np.ndarray
        ``V * V_approx**(beta - 2)``, or ``V`` where guarded.
    b : np.ndarray
        ``V_approx**(beta - 1)``, or 1 where guarded and beta <= 1.
    """
    V = np.asarray(V, dtype=np.float64)
    V_approx = np.asarray(V_approx, dtype=np.float64)

    stable = np.abs(V_approx) > epsilon
    # Unstable entries are replaced before the power so no Inf is produced
    safe = np.where(stable, V_approx, 1.0)

    a = V * np.where(stable, safe ** (beta - 2.0), 1.0)

    if beta - 1.0 > 0.0:
        b = V_approx ** (beta - 1.0)
    else:
        b = np.where(stable, safe ** (beta - 1.0), 1.0)

    return a, b


def safe_divergence_term(
    w: Union[float, np.ndarray],
    v: Union[float, np.ndarray],
    v_approx: Union[float, np.ndarray],
    beta: float,
    epsilon: float = EPSILON
) -> Tuple[Union[float, np.ndarray], Union[float, np.ndarray]]:
    r"""
    Guarded contribution of one pixel to the numerator and denominator.

    Parameters
    ----------
    w : float or np.ndarray
        Dictionary entry :math:`W_{ij}`.
    v : float or np.ndarray
        Observed value :math:`V_{ik}`.
    v_approx : float or np.ndarray
        Reconstruction :math:`\\hat V_{ik}`.
    beta : float
        Divergence parameter.
    epsilon : float
        Guard threshold.

    Returns
    -------
    numerator, denominator : float or np.ndarray
        Floats when all inputs are scalars, arrays otherwise.

    Notes
    -----
    .. math::
        (n, d) = \\begin{cases}
            (w v \\hat v^{\\beta-2},\\; w \\hat v^{\\beta-1})
                & |\\hat v| > \\epsilon \\\\
            (w v,\\; w \\hat v^{\\beta-1}) & |\\hat v| \\le \\epsilon,\\ \\beta > 1 \\\\
            (w v,\\; w) & |\\hat v| \\le \\epsilon,\\ \\beta \\le 1
        \\end{cases}
    """
    a, b = divergence_weights(v, v_approx, beta, epsilon)
    numerator = np.asarray(w, dtype=np.float64) * a
    denominator = np.asarray(w, dtype=np.float64) * b
    if numerator.ndim == 0:
        return float(numerator), float(denominator)
    return numerator, denominator


def row_blocks(n_rows: int, n_blocks: int) -> List[slice]:
    """Split ``range(n_rows)`` into at most ``n_blocks`` contiguous slices."""
    n_blocks = max(1, min(n_blocks, n_rows))
    bounds = np.linspace(0, n_rows, n_blocks + 1).astype(int)
    return [
        slice(start, stop)
        for start, stop in zip(bounds[:-1], bounds[1:])
        if stop > start
    ]


def update_h(
    V: np.ndarray,
    W: np.ndarray,
    H: np.ndarray,
    beta: float,
    blocks: Optional[List[slice]] = None,
    executor: Optional[ThreadPoolExecutor] = None,
    epsilon: float = EPSILON
) -> np.ndarray:
    r"""
    One synchronous multiplicative update of H, in place.

    Parameters
    ----------
    V : np.ndarray
        Cell-intensity matrix (m, n).
    W : np.ndarray
        Glyph dictionary (m, r). Read only.
    H : np.ndarray
        Activation matrix (r, n). Updated in place.
    beta : float
        Divergence parameter.
    blocks : list of slice, optional
        Disjoint row blocks of H. Default: a single block.
    executor : ThreadPoolExecutor, optional
        Pool running the blocks. Without one the blocks run inline.
    epsilon : float
        Guard threshold.

    Returns
    -------
    H : np.ndarray
        The same array, updated.
    """
    # Frozen for the whole iteration; every block reads the same snapshot
    V_approx = W @ H
    a, b = divergence_weights(V, V_approx, beta, epsilon)

    def _update_rows(rows: slice) -> None:
        W_rows = W[:, rows]
        numerator = W_rows.T @ a
        denominator = W_rows.T @ b

        stable = np.abs(denominator) > epsilon
        ratio = np.where(
            stable,
            numerator / np.where(stable, denominator, 1.0),
            numerator,
        )
        H[rows] *= ratio

    if blocks is None:
        blocks = [slice(0, H.shape[0])]

    if executor is None:
        for rows in blocks:
            _update_rows(rows)
    else:
        # Consuming the iterator waits for every block and re-raises failures
        for _ in executor.map(_update_rows, blocks):
            pass

    return H


def init_h(
    r: int,
    n: int,
    random_state=None
) -> np.ndarray:
    """Strictly positive uniform initial activations of shape (r, n)."""
    low, high = H_INIT_RANGE
    rng = check_random_state(random_state)
    return rng.uniform(low, high, size=(r, n))


def divergence_nmf(
    V: np.ndarray,
    W: np.ndarray,
    beta: Union[float, str] = DEFAULT_BETA,
    n_iter: int = DEFAULT_ITERATIONS,
    n_jobs: Optional[int] = None,
    progress_callback: Optional[ProgressCallback] = None,
    h_init: Optional[np.ndarray] = None,
    random_state=None,
    verbose: int = 0
) -> Tuple[np.ndarray, float, Dict]:
    r"""
    Fit activations H so that WH approximates V under a beta-divergence.

    Parameters
    ----------
    V : np.ndarray
        Cell-intensity matrix of shape (m, n). Non-negative.

    W : np.ndarray
        Fixed glyph dictionary of shape (m, r). Never modified.

    beta : float or str, optional
        Divergence parameter, any finite real or one of 'itakura-saito',
        'kullback-leibler', 'frobenius'. Default: 2.0.

    n_iter : int, optional
        Number of iterations, 1 to 65535. Default: 100.
        There is no early stopping; all iterations run.

    n_jobs : int, optional
        Maximum number of worker threads for the row updates.
        Default: one per CPU. Never more than r.

    progress_callback : callable, optional
        Called with 10, 20, ..., 90 at every tenth of the run and with 100
        once the loop has finished. When n_iter < 10 only 100 is reported.

    h_init : np.ndarray, optional
        Initial activations of shape (r, n). Should be positive.
        If None, drawn from U(0.01, 1).

    random_state : int, RandomState or None, optional
        Seed for the random initialization.

    verbose : int, optional
        Verbosity level. Default: 0.
        - 0: No output
        - 1: Record divergence history in HIS
        - 2: Also print progress every 10 iterations

    Returns
    -------
    H : np.ndarray
        Non-negative activation matrix of shape (r, n).

    elapse : float
        Wall-clock time in seconds.

    HIS : dict
        Convergence history. Contains:
        - 'niter': Iterations performed
        - 't': Elapsed times (only if verbose >= 1)
        - 'f': Beta-divergence values (only if verbose >= 1)

    Raises
    ------
    ValueError
        If shapes do not match or a parameter is out of range.

    Examples
    --------
    >>> import numpy as np
    >>> from asciinmf import divergence_nmf
    >>> W = np.eye(4)
    >>> V = np.abs(np.random.rand(4, 6))
    >>> H, elapse, HIS = divergence_nmf(V, W, beta=1.0, n_iter=50, n_jobs=2)
    """

    # ============================================================================
    # Input Validation
    # ============================================================================
    beta = check_beta(beta)
    n_iter = check_n_iter(n_iter)
    n_workers = check_n_jobs(n_jobs)

    if V.ndim != 2 or W.ndim != 2:
        raise ValueError(f"V and W must be 2D, got shapes {V.shape} and {W.shape}")
    if V.shape[0] != W.shape[0]:
        raise ValueError(
            f"V has {V.shape[0]} rows but W has {W.shape[0]}; "
            f"cell size and dictionary do not match"
        )
    if np.any(W < 0):
        raise ValueError("W must be non-negative")

    if np.any(V < 0):
        warnings.warn("V contains negative values. They will be clipped to 0.")
        V = np.clip(V, 0, None)

    m, n = V.shape
    r = W.shape[1]

    # ============================================================================
    # Initialization
    # ============================================================================
    if h_init is None:
        H = init_h(r, n, random_state)
    else:
        H = np.array(h_init, dtype=np.float64)
        if H.shape != (r, n):
            raise ValueError(f"h_init shape must be ({r}, {n}), got {H.shape}")
        if np.any(H < 0):
            raise ValueError("h_init must be non-negative")

    blocks = row_blocks(r, n_workers)

    step = n_iter // 10
    progress = 0

    HIS = {'niter': 0, 't': [], 'f': []}
    if verbose:
        HIS['t'].append(0.0)
        HIS['f'].append(beta_divergence(V, W @ H, beta))

    start_time = time.time()

    # ============================================================================
    # Main Iterative Loop
    # ============================================================================
    if len(blocks) > 1:
        pool = ThreadPoolExecutor(max_workers=len(blocks), thread_name_prefix="asciinmf")
    else:
        pool = contextlib.nullcontext()

    with pool as executor:
        for iteration in range(n_iter):
            update_h(V, W, H, beta, blocks, executor)
            HIS['niter'] += 1

            if verbose:
                elapsed = time.time() - start_time
                obj_val = beta_divergence(V, W @ H, beta)
                HIS['t'].append(elapsed)
                HIS['f'].append(obj_val)

                if verbose == 2 and (iteration + 1) % 10 == 0:
                    print(f"Iter {iteration + 1:5d}: "
                          f"beta-divergence = {obj_val:.6e}, "
                          f"elapsed time = {elapsed:.3f}s")

            if step and (iteration + 1) % step == 0:
                progress += 10
                if progress < 100 and progress_callback is not None:
                    progress_callback(progress)

    elapsed = time.time() - start_time

    if verbose == 2:
        print(f"\n=== Final Result ===")
        print(f"Total iterations: {n_iter}")
        print(f"Total elapsed time: {elapsed:.3f}s")
        if HIS['f']:
            print(f"Final beta-divergence: {HIS['f'][-1]:.6f}")

    if progress_callback is not None:
        progress_callback(100)

    return H, elapsed, HIS
