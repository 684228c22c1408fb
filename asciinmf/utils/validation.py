"""
Parameter and Input Validation

The command line validates its arguments, but every engine entry point calls
these checks again so that out-of-range values are rejected before any
computation starts when the engine is used directly.
"""

import math
import numbers
import os
from typing import Optional, Union

import numpy as np

from asciinmf.config import BETA_LOSSES, MAX_ITERATIONS, MIN_ITERATIONS


def check_threshold(threshold: float) -> float:
    """Return ``threshold`` as float, raising if it is outside [0.0, 1.0]."""
    if not isinstance(threshold, numbers.Real) or isinstance(threshold, bool):
        raise TypeError(f"threshold must be a real number, got {type(threshold).__name__}")
    threshold = float(threshold)
    if not 0.0 <= threshold <= 1.0:
        raise ValueError(
            f"threshold must be in [0.0, 1.0], got {threshold}"
        )
    return threshold


def check_n_iter(n_iter: int) -> int:
    """Return ``n_iter`` as int, raising if it is outside [1, 65535]."""
    if not isinstance(n_iter, numbers.Integral) or isinstance(n_iter, bool):
        raise TypeError(f"n_iter must be an integer, got {type(n_iter).__name__}")
    if not MIN_ITERATIONS <= n_iter <= MAX_ITERATIONS:
        raise ValueError(
            f"n_iter must be in [{MIN_ITERATIONS}, {MAX_ITERATIONS}], got {n_iter}"
        )
    return int(n_iter)


def check_beta(beta: Union[float, str]) -> float:
    r"""
    Resolve the beta-divergence parameter.

    Parameters
    ----------
    beta : float or str
        Any finite real, or one of the names in ``BETA_LOSSES``
        ('itakura-saito', 'kullback-leibler', 'frobenius' and the short
        aliases 'is', 'kl', 'euclidean').

    Returns
    -------
    float
        Numeric beta.
    """
    if isinstance(beta, str):
        key = beta.strip().lower()
        if key in BETA_LOSSES:
            return BETA_LOSSES[key]
        raise ValueError(
            f"Unknown beta loss {beta!r}, expected a number or one of "
            f"{sorted(BETA_LOSSES)}"
        )
    if not isinstance(beta, numbers.Real) or isinstance(beta, bool):
        raise TypeError(f"beta must be a real number, got {type(beta).__name__}")
    beta = float(beta)
    if not math.isfinite(beta):
        raise ValueError(f"beta must be finite, got {beta}")
    return beta


def check_n_jobs(n_jobs: Optional[int]) -> int:
    """Resolve the worker count; ``None`` means one worker per CPU."""
    if n_jobs is None:
        return os.cpu_count() or 1
    if not isinstance(n_jobs, numbers.Integral) or isinstance(n_jobs, bool):
        raise TypeError(f"n_jobs must be an integer, got {type(n_jobs).__name__}")
    if n_jobs < 1:
        raise ValueError(f"n_jobs must be a positive integer, got {n_jobs}")
    return int(n_jobs)


def check_image_array(image: np.ndarray) -> np.ndarray:
    """Check that ``image`` is a (height, width[, channels]) numeric array."""
    image = np.asarray(image)
    if image.ndim not in (2, 3):
        raise ValueError(
            f"image must be 2D (H, W) or 3D (H, W, C), got shape {image.shape}"
        )
    if image.ndim == 3 and image.shape[2] == 0:
        raise ValueError(f"image has no channels, shape {image.shape}")
    if image.shape[0] == 0 or image.shape[1] == 0:
        raise ValueError(f"image is empty, shape {image.shape}")
    if not np.issubdtype(image.dtype, np.number):
        raise ValueError(f"image must be numeric, got dtype {image.dtype}")
    return image
