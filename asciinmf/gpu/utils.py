"""
GPU Utilities

Conversions between numpy arrays and PyTorch tensors.
"""

import numpy as np
import torch
from typing import Union


def ensure_torch_tensor(
    data: Union[np.ndarray, torch.Tensor],
    device: torch.device,
    dtype: torch.dtype = torch.float32
) -> torch.Tensor:
    """Convert numpy arrays and tensors to a tensor on ``device``"""
    if isinstance(data, torch.Tensor):
        return data.to(device=device, dtype=dtype)
    elif isinstance(data, np.ndarray):
        return torch.from_numpy(np.ascontiguousarray(data)).to(device=device, dtype=dtype)
    else:
        raise TypeError(f"Unsupported data type: {type(data)}")


def ensure_numpy_array(
    tensor: torch.Tensor
) -> np.ndarray:
    """Convert PyTorch tensor to float64 numpy array"""
    return tensor.cpu().detach().numpy().astype(np.float64)
