"""Serialization of character grids to text and HTML."""

import html
import os
from typing import List, Union

import numpy as np

HTML_HEADER = '<font face="courier"><pre>'
HTML_FOOTER = '</pre></font>'


def grid_to_lines(grid: np.ndarray) -> List[str]:
    """Join every row of *grid* into one string."""
    grid = np.asarray(grid)
    if grid.ndim != 2:
        raise ValueError(f"grid must be 2D, got shape {grid.shape}")
    return ["".join(row) for row in grid.tolist()]


def grid_to_text(grid: np.ndarray) -> str:
    """Return the grid as a single newline separated string."""
    return "\n".join(grid_to_lines(grid))


def write_html(grid: np.ndarray, path: Union[str, os.PathLike]) -> None:
    """Write *grid* as a preformatted monospaced HTML fragment."""
    with open(path, "w", encoding="utf-8") as output:
        output.write(HTML_HEADER + "\n")
        for line in grid_to_lines(grid):
            output.write(html.escape(line, quote=False) + "\n")
        output.write(HTML_FOOTER)
