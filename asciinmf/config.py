"""
Conversion Configuration

Module-level defaults shared by the solvers and the command line, and the
``ConversionConfig`` dataclass that bundles the parameters of one conversion.
"""

from dataclasses import dataclass
from typing import Optional, Union

# Numerical guard of the multiplicative update
EPSILON = 1e-6

DEFAULT_BETA = 2.0
DEFAULT_THRESHOLD = 0.0
DEFAULT_ITERATIONS = 100
MIN_ITERATIONS = 1
MAX_ITERATIONS = 65535
DEFAULT_OUTPUT = "output.html"

# Activations are drawn from U(low, high); must stay strictly positive
H_INIT_RANGE = (1e-2, 1.0)

BETA_LOSSES = {
    "itakura-saito": 0.0,
    "is": 0.0,
    "kullback-leibler": 1.0,
    "kl": 1.0,
    "frobenius": 2.0,
    "euclidean": 2.0,
}

METHODS = ("divergence", "projection", "gpu")


@dataclass
class ConversionConfig:
    """Parameters of a single image conversion"""
    method: str = "divergence"
    beta: Union[float, str] = DEFAULT_BETA
    threshold: float = DEFAULT_THRESHOLD
    n_iter: int = DEFAULT_ITERATIONS
    n_jobs: Optional[int] = None
    random_state: Optional[int] = None
    verbose: int = 0

    def __post_init__(self):
        # Imported here: validation reads the constants above
        from .utils.validation import (
            check_beta, check_n_iter, check_n_jobs, check_threshold
        )

        if self.method not in METHODS:
            raise ValueError(
                f"method must be one of {METHODS}, got {self.method!r}"
            )
        self.beta = check_beta(self.beta)
        self.threshold = check_threshold(self.threshold)
        self.n_iter = check_n_iter(self.n_iter)
        if self.n_jobs is not None:
            check_n_jobs(self.n_jobs)
