"""
Glyph Dictionary

The dictionary is the fixed basis W of the factorization: one column per
glyph, each column the unit-length ink pattern of that glyph's pre-rendered
bitmap, flattened in the same row-major order as the cell-intensity matrix.
Column ``i`` maps to the character ``chr(first_glyph_code + i)``.

The dictionary also carries the glyph cell size, so the engine never
hardcodes it. Dictionaries are produced elsewhere (font rasterization is not
part of this package) and reach the engine either as bitmaps, as a sprite
strip image, or as a saved ``.npz`` archive.
"""

import os
from dataclasses import dataclass
from typing import Union

import numpy as np
from sklearn.preprocessing import normalize

from asciinmf.cells import ImageLike, image_to_array, split_image
from asciinmf.utils.evaluation import column_norms

# Tolerance on the unit-norm check of dictionary columns
_NORM_TOLERANCE = 1e-6


@dataclass(frozen=True, eq=False)
class GlyphDictionary:
    """Read-only glyph basis and its character mapping."""

    w: np.ndarray
    glyph_width: int
    glyph_height: int
    first_glyph_code: int = 32

    def __post_init__(self):
        w = np.array(self.w, dtype=np.float64)
        if w.ndim != 2:
            raise ValueError(f"w must be 2D matrix, got shape {w.shape}")
        if self.glyph_width <= 0 or self.glyph_height <= 0:
            raise ValueError(
                f"glyph size must be positive, got {self.glyph_width}x{self.glyph_height}"
            )
        if w.shape[0] != self.glyph_width * self.glyph_height:
            raise ValueError(
                f"w must have glyph_width * glyph_height = "
                f"{self.glyph_width * self.glyph_height} rows, got {w.shape[0]}"
            )
        if w.shape[1] == 0:
            raise ValueError("dictionary must contain at least one glyph")
        if self.first_glyph_code < 0 or self.first_glyph_code + w.shape[1] > 0x110000:
            raise ValueError(
                f"first_glyph_code {self.first_glyph_code} does not map "
                f"{w.shape[1]} glyphs to valid characters"
            )

        if not np.all(np.isfinite(w)):
            raise ValueError("dictionary contains NaN or infinite values")
        if np.any(w < 0):
            raise ValueError("dictionary must be non-negative")

        norms = column_norms(w)
        bad = ~(np.isclose(norms, 1.0, atol=_NORM_TOLERANCE) | (norms == 0.0))
        if np.any(bad):
            raise ValueError(
                f"dictionary columns must be unit length or zero, "
                f"columns {np.flatnonzero(bad).tolist()} are not"
            )

        w.setflags(write=False)
        object.__setattr__(self, 'w', w)
        object.__setattr__(self, 'glyph_width', int(self.glyph_width))
        object.__setattr__(self, 'glyph_height', int(self.glyph_height))
        object.__setattr__(self, 'first_glyph_code', int(self.first_glyph_code))

    @property
    def n_glyphs(self) -> int:
        return self.w.shape[1]

    @property
    def cell_size(self) -> int:
        """Number of pixels in one glyph cell."""
        return self.glyph_width * self.glyph_height

    @property
    def characters(self) -> str:
        """All glyph characters in dictionary column order."""
        return "".join(
            chr(self.first_glyph_code + i) for i in range(self.n_glyphs)
        )

    def character(self, index: int) -> str:
        """Character represented by dictionary column *index*."""
        if not 0 <= index < self.n_glyphs:
            raise IndexError(
                f"glyph index {index} out of range for {self.n_glyphs} glyphs"
            )
        return chr(self.first_glyph_code + index)

    @classmethod
    def from_bitmaps(
        cls,
        bitmaps: np.ndarray,
        first_glyph_code: int = 32
    ) -> "GlyphDictionary":
        r"""
        Build a dictionary from pre-rendered glyph bitmaps.

        Parameters
        ----------
        bitmaps : np.ndarray
            Array of shape (n_glyphs, glyph_height, glyph_width) holding
            ink intensity (higher = darker). Any non-negative scale works,
            columns are normalized here.
        first_glyph_code : int
            Character code of the first bitmap.

        Returns
        -------
        GlyphDictionary
        """
        bitmaps = np.asarray(bitmaps, dtype=np.float64)
        if bitmaps.ndim != 3:
            raise ValueError(
                f"bitmaps must have shape (n_glyphs, height, width), got {bitmaps.shape}"
            )
        n_glyphs, glyph_height, glyph_width = bitmaps.shape
        if n_glyphs == 0:
            raise ValueError("bitmaps must contain at least one glyph")
        w = bitmaps.reshape(n_glyphs, glyph_height * glyph_width).T
        w = normalize(w, norm='l2', axis=0)
        return cls(w, glyph_width, glyph_height, first_glyph_code)

    @classmethod
    def from_strip(
        cls,
        image: ImageLike,
        glyph_width: int,
        glyph_height: int,
        first_glyph_code: int = 32
    ) -> "GlyphDictionary":
        """
        Build a dictionary from a horizontal strip of rendered glyphs.

        The strip is dark text on a light background, ``glyph_height`` pixels
        tall, with glyphs laid out left to right in character code order.
        """
        red = image_to_array(image)
        height, width = red.shape
        if height != glyph_height or width % glyph_width != 0:
            raise ValueError(
                f"strip of size {width}x{height} is not a row of "
                f"{glyph_width}x{glyph_height} glyphs"
            )
        w, _, _ = split_image(red, glyph_width, glyph_height)
        return cls(w, glyph_width, glyph_height, first_glyph_code)

    @classmethod
    def load(cls, path: Union[str, os.PathLike]) -> "GlyphDictionary":
        """Load a dictionary saved with :meth:`save`."""
        with np.load(path) as data:
            missing = {'w', 'glyph_width', 'glyph_height', 'first_glyph_code'} - set(data.files)
            if missing:
                raise ValueError(
                    f"{path} is not a glyph dictionary, missing {sorted(missing)}"
                )
            return cls(
                data['w'],
                int(data['glyph_width']),
                int(data['glyph_height']),
                int(data['first_glyph_code']),
            )

    def save(self, path: Union[str, os.PathLike]) -> None:
        """Write the dictionary to an ``.npz`` archive."""
        np.savez(
            path,
            w=self.w,
            glyph_width=self.glyph_width,
            glyph_height=self.glyph_height,
            first_glyph_code=self.first_glyph_code,
        )
