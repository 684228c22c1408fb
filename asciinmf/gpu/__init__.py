"""
GPU-Accelerated Glyph Factorization (PyTorch)

This subpackage runs the beta-divergence activation solver on a CUDA device
when one is available, falling back to the CPU otherwise.

Configuration:
- GPUConfig: Device management and GPU detection

Solvers:
- GPUDivergenceSolver: guarded multiplicative updates on tensors

Utilities:
- ensure_torch_tensor, ensure_numpy_array: numpy <-> PyTorch conversions

Example Usage:

    from asciinmf.gpu import GPUConfig, GPUDivergenceSolver

    solver = GPUDivergenceSolver(GPUConfig())
    H, elapse, history = solver.fit(V, dictionary.w, beta=1.0, n_iter=200)
"""

from .config import GPUConfig
from .gpu_divergence import GPUDivergenceSolver
from .utils import ensure_torch_tensor, ensure_numpy_array

__all__ = [
    # Configuration
    'GPUConfig',

    # Solvers
    'GPUDivergenceSolver',

    # Utilities
    'ensure_torch_tensor',
    'ensure_numpy_array',
]
