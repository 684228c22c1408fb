"""
asciinmf: Image to Glyph Conversion by Matrix Factorization

Converts a raster image into a grid of characters that approximates the
image when rendered in a monospaced font. The image is cut into glyph-sized
cells and every cell is explained as a combination of pre-rendered glyph
bitmaps; the glyph with the strongest activation is printed.

Two ways of computing activations are provided:

- **Projection**: one-shot least squares through the Moore-Penrose
  pseudoinverse of the glyph dictionary. Fast, activations may be negative.

- **Divergence NMF**: multiplicative updates minimizing a beta-divergence
  (Itakura-Saito, Kullback-Leibler, squared Euclidean or any real beta)
  with the dictionary held fixed. Activations stay non-negative; the row
  updates of each iteration run on a thread pool.

Available Implementations
==========================

- **CPU Versions**: NumPy/SciPy implementations (asciinmf.projection,
  asciinmf.divergence)
- **GPU Version**: PyTorch-accelerated divergence solver (from asciinmf.gpu)

Typical Usage
=============

1. Convert an image with a saved dictionary:

    >>> from asciinmf import GlyphDictionary, load_image, convert_via_divergence
    >>> dictionary = GlyphDictionary.load("glyphs.npz")
    >>> image = load_image("photo.png")
    >>> grid = convert_via_divergence(image, dictionary, beta=1.0, n_iter=200)

2. Pseudoinverse projection with a threshold:

    >>> from asciinmf import convert_via_projection, grid_to_text
    >>> grid = convert_via_projection(image, dictionary, threshold=0.3)
    >>> print(grid_to_text(grid))

3. Working with the matrices directly:

    >>> from asciinmf import split_image, divergence_nmf, select_glyphs
    >>> V, n_rows, n_cols = split_image(image, dictionary.glyph_width,
    ...                                 dictionary.glyph_height)
    >>> H, elapse, HIS = divergence_nmf(V, dictionary.w, beta=0.0, n_jobs=4)
    >>> grid = select_glyphs(H, n_rows, n_cols, dictionary, threshold=0.1)

Mathematical Background
=======================

With V (m×n) the unit-normalized cell vectors and W (m×r) the
unit-normalized glyph bitmaps, activations H (r×n) solve

    min_H  D_beta(V | WH)    subject to H >= 0

by the multiplicative update

    H <- H * (W^T (V * (WH)^(beta-2))) / (W^T (WH)^(beta-1))

guarded against vanishing reconstructions.

License: MIT
"""

__version__ = "1.0.0"
__all__ = [
    # Engine
    'convert_via_projection',
    'convert_via_divergence',
    'convert_via_gpu',
    'convert_image',
    'available_methods',
    'describe_method',
    # Building blocks
    'GlyphDictionary',
    'load_image',
    'split_image',
    'grid_shape',
    'pinv_projection',
    'divergence_nmf',
    'safe_divergence_term',
    'max_activation',
    'select_glyphs',
    # Configuration and output
    'ConversionConfig',
    'grid_to_lines',
    'grid_to_text',
    'write_html',
    # GPU subpackage (optional)
    'gpu',
]

from .config import ConversionConfig
from .cells import load_image, split_image, grid_shape
from .dictionary import GlyphDictionary
from .projection import pinv_projection
from .divergence import divergence_nmf, safe_divergence_term
from .selection import max_activation, select_glyphs
from .converter import (
    convert_via_projection,
    convert_via_divergence,
    convert_via_gpu,
    convert_image,
    available_methods,
    describe_method,
)
from .output import grid_to_lines, grid_to_text, write_html

# Optional GPU module import (graceful degradation if PyTorch not installed)
try:
    from . import gpu
except ImportError:
    gpu = None
    import warnings
    warnings.warn(
        "GPU module not available. Install PyTorch to enable GPU acceleration: "
        "pip install torch",
        UserWarning
    )
