"""
Utility modules for glyph factorization.
"""

from .evaluation import (
    beta_divergence,
    column_norms,
)
from .validation import (
    check_beta,
    check_image_array,
    check_n_iter,
    check_n_jobs,
    check_threshold,
)

__all__ = [
    'beta_divergence',
    'column_norms',
    'check_beta',
    'check_image_array',
    'check_n_iter',
    'check_n_jobs',
    'check_threshold',
]
