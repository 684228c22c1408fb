"""
GPU Configuration Management

This module handles GPU detection, device configuration, and related utilities.
"""

import torch
from dataclasses import dataclass


@dataclass
class GPUConfig:
    """GPU configuration and device management"""
    device: torch.device = None
    use_fp64: bool = False  # float64 tensors instead of float32

    def __post_init__(self):
        if self.device is None:
            self.device = torch.device('cuda' if torch.cuda.is_available() else 'cpu')
        elif isinstance(self.device, str):
            self.device = torch.device(self.device)

    @property
    def dtype(self) -> torch.dtype:
        return torch.float64 if self.use_fp64 else torch.float32
