"""
Image to Glyph Conversion

Entry points that chain cell extraction, one of the activation solvers and
glyph selection:

- ``convert_via_projection``: pseudoinverse projection, one shot
- ``convert_via_divergence``: beta-divergence NMF on CPU threads
- ``convert_via_gpu``: the same NMF on a PyTorch device

``convert_image`` dispatches on a :class:`~asciinmf.config.ConversionConfig`
through the ``CONVERSION_METHODS`` registry.

All parameters are validated before the image is touched. Any failure while
reading pixels or computing activations propagates to the caller; no partial
grid is ever returned.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional, Union

import numpy as np

from asciinmf.cells import ImageLike, split_image
from asciinmf.config import (
    DEFAULT_BETA,
    DEFAULT_ITERATIONS,
    DEFAULT_THRESHOLD,
    ConversionConfig,
)
from asciinmf.dictionary import GlyphDictionary
from asciinmf.divergence import ProgressCallback, divergence_nmf
from asciinmf.projection import pinv_projection
from asciinmf.selection import select_glyphs
from asciinmf.utils.validation import (
    check_beta,
    check_n_iter,
    check_n_jobs,
    check_threshold,
)


def convert_via_projection(
    image: ImageLike,
    dictionary: GlyphDictionary,
    threshold: float = DEFAULT_THRESHOLD
) -> np.ndarray:
    """Convert *image* using the pseudoinverse of the glyph dictionary."""
    threshold = check_threshold(threshold)

    V, n_rows, n_cols = split_image(
        image, dictionary.glyph_width, dictionary.glyph_height
    )
    H = pinv_projection(V, dictionary.w)

    return select_glyphs(H, n_rows, n_cols, dictionary, threshold)


def convert_via_divergence(
    image: ImageLike,
    dictionary: GlyphDictionary,
    beta: Union[float, str] = DEFAULT_BETA,
    threshold: float = DEFAULT_THRESHOLD,
    n_iter: int = DEFAULT_ITERATIONS,
    n_jobs: Optional[int] = None,
    progress_callback: Optional[ProgressCallback] = None,
    random_state=None,
    verbose: int = 0
) -> np.ndarray:
    r"""
    Convert *image* by beta-divergence NMF against the glyph dictionary.

    Parameters
    ----------
    image : PIL.Image.Image or np.ndarray
        Source image.
    dictionary : GlyphDictionary
        Glyph basis and character mapping.
    beta : float or str
        Divergence parameter. Default: 2.0 (squared Euclidean).
    threshold : float
        Minimum activation for a glyph, in [0.0, 1.0]. Default: 0.0.
    n_iter : int
        Iterations, 1 to 65535. Default: 100.
    n_jobs : int, optional
        Worker threads. Default: one per CPU.
    progress_callback : callable, optional
        Receives non-decreasing percentages, always ending with 100.
    random_state : int or None
        Seed for the activation initialization.
    verbose : int
        Passed to :func:`~asciinmf.divergence.divergence_nmf`.

    Returns
    -------
    np.ndarray
        Character grid of shape (n_rows, n_cols).
    """
    beta = check_beta(beta)
    threshold = check_threshold(threshold)
    n_iter = check_n_iter(n_iter)
    check_n_jobs(n_jobs)

    V, n_rows, n_cols = split_image(
        image, dictionary.glyph_width, dictionary.glyph_height
    )
    H, _, _ = divergence_nmf(
        V,
        dictionary.w,
        beta=beta,
        n_iter=n_iter,
        n_jobs=n_jobs,
        progress_callback=progress_callback,
        random_state=random_state,
        verbose=verbose,
    )

    return select_glyphs(H, n_rows, n_cols, dictionary, threshold)


def convert_via_gpu(
    image: ImageLike,
    dictionary: GlyphDictionary,
    beta: Union[float, str] = DEFAULT_BETA,
    threshold: float = DEFAULT_THRESHOLD,
    n_iter: int = DEFAULT_ITERATIONS,
    progress_callback: Optional[ProgressCallback] = None,
    random_state=None,
    verbose: int = 0,
    gpu_config=None
) -> np.ndarray:
    """Same as :func:`convert_via_divergence`, solved with PyTorch."""
    try:
        from asciinmf.gpu import GPUDivergenceSolver
    except ImportError as exc:
        raise ImportError(
            "The 'gpu' method requires PyTorch: pip install asciinmf[gpu]"
        ) from exc

    beta = check_beta(beta)
    threshold = check_threshold(threshold)
    n_iter = check_n_iter(n_iter)

    V, n_rows, n_cols = split_image(
        image, dictionary.glyph_width, dictionary.glyph_height
    )
    solver = GPUDivergenceSolver(gpu_config)
    H, _, _ = solver.fit(
        V,
        dictionary.w,
        beta=beta,
        n_iter=n_iter,
        progress_callback=progress_callback,
        random_state=random_state,
        verbose=bool(verbose),
    )

    return select_glyphs(H, n_rows, n_cols, dictionary, threshold)


@dataclass(frozen=True)
class ConversionMethod:
    """Container for conversion method metadata."""

    name: str
    apply: Callable[..., np.ndarray]
    description: str


def _apply_projection(image, dictionary, config, progress_callback):
    grid = convert_via_projection(image, dictionary, config.threshold)
    if progress_callback is not None:
        progress_callback(100)
    return grid


def _apply_divergence(image, dictionary, config, progress_callback):
    return convert_via_divergence(
        image,
        dictionary,
        beta=config.beta,
        threshold=config.threshold,
        n_iter=config.n_iter,
        n_jobs=config.n_jobs,
        progress_callback=progress_callback,
        random_state=config.random_state,
        verbose=config.verbose,
    )


def _apply_gpu(image, dictionary, config, progress_callback):
    return convert_via_gpu(
        image,
        dictionary,
        beta=config.beta,
        threshold=config.threshold,
        n_iter=config.n_iter,
        progress_callback=progress_callback,
        random_state=config.random_state,
        verbose=config.verbose,
    )


CONVERSION_METHODS: Dict[str, ConversionMethod] = {
    method.name: method
    for method in (
        ConversionMethod(
            "divergence",
            _apply_divergence,
            "Multiplicative-update NMF minimizing a beta-divergence, parallel over glyph rows.",
        ),
        ConversionMethod(
            "projection",
            _apply_projection,
            "One-shot least-squares projection through the dictionary pseudoinverse.",
        ),
        ConversionMethod(
            "gpu",
            _apply_gpu,
            "Beta-divergence NMF on a PyTorch device (requires the 'gpu' extra).",
        ),
    )
}


def available_methods() -> Iterable[str]:
    """Return the names of available conversion methods."""
    return CONVERSION_METHODS.keys()


def describe_method(name: str) -> str:
    """Return a user-friendly description of the conversion method."""
    return CONVERSION_METHODS[name].description


def convert_image(
    image: ImageLike,
    dictionary: GlyphDictionary,
    config: Optional[ConversionConfig] = None,
    progress_callback: Optional[ProgressCallback] = None
) -> np.ndarray:
    """Convert *image* with the method selected in *config*."""
    config = config or ConversionConfig()
    method = CONVERSION_METHODS.get(config.method)
    if method is None:
        raise ValueError(f"Unknown conversion method: {config.method}")
    return method.apply(image, dictionary, config, progress_callback)
