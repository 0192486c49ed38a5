"""
3D LUT baker.

Evaluates the color transform over an N x N x N grid and serializes it
as an Adobe/Resolve .cube file or an Autodesk .3dl mesh. The grid is
processed one outer-axis slab at a time.
"""

import logging
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional, Tuple, Union

import numpy as np

from ..processing.transform import ColorTransform
from ..recipe.models import AdjustmentVector
from .errors import UnsupportedFormatError

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ('cube', '3dl')
DEFAULT_SIZE = 33
MIN_SIZE = 2
MAX_SIZE = 129

# Axis order from outermost to innermost loop
FORMAT_ORDER = {
    'cube': 'bgr',  # red varies fastest
    '3dl': 'rgb',
}
MESH_MAX = 1023

_CHANNEL = {'r': 0, 'g': 1, 'b': 2}

ProgressWrapper = Callable[[Iterable], Iterable]


def normalize_format(fmt: str) -> str:
    """Validate a format tag, raising UnsupportedFormatError for unknown ones."""
    tag = fmt.strip().lower().lstrip('.') if isinstance(fmt, str) else fmt
    if tag not in SUPPORTED_FORMATS:
        raise UnsupportedFormatError(fmt, SUPPORTED_FORMATS)
    return tag


def normalize_size(size) -> int:
    try:
        value = int(size)
    except (TypeError, ValueError):
        logger.warning(f"Invalid LUT size {size!r}, using {DEFAULT_SIZE}")
        return DEFAULT_SIZE
    return max(MIN_SIZE, min(MAX_SIZE, value))


def iter_lut_slabs(vector: AdjustmentVector, size: int,
                   order: str = 'bgr') -> Iterator[Tuple[int, np.ndarray]]:
    """
    Evaluate the grid one outer-axis slab at a time.

    Args:
        vector: Adjustments to bake
        size: Grid points per axis
        order: Axis letters from outermost to innermost, e.g. 'bgr'

    Yields:
        (outer index, (size * size, 3) array of output RGB) in file order
    """
    transform = ColorTransform(vector)
    axis = np.linspace(0.0, 1.0, size)
    middle, inner = np.meshgrid(axis, axis, indexing='ij')
    middle, inner = middle.ravel(), inner.ravel()

    for index, outer in enumerate(axis):
        rgb = np.empty((size * size, 3))
        rgb[:, _CHANNEL[order[0]]] = outer
        rgb[:, _CHANNEL[order[1]]] = middle
        rgb[:, _CHANNEL[order[2]]] = inner
        yield index, transform(rgb)


def bake_lut_table(vector: AdjustmentVector, size: int = DEFAULT_SIZE,
                   order: str = 'bgr') -> np.ndarray:
    """Return the full (size**3, 3) output table in file order."""
    size = normalize_size(size)
    return np.concatenate([slab for _, slab in iter_lut_slabs(vector, size, order)])


def _cube_header(vector: AdjustmentVector, size: int) -> str:
    title = (vector.name or 'PhotoRecipe').replace('"', "'")
    lines = [
        '# Created by PhotoRecipe',
        f'# LUT size: {size}',
        f'# Description: {vector.description or "Color recipe"}'.replace('\n', ' '),
        f'TITLE "{title}"',
        f'LUT_3D_SIZE {size}',
        'DOMAIN_MIN 0.0 0.0 0.0',
        'DOMAIN_MAX 1.0 1.0 1.0',
        '',
    ]
    return '\n'.join(lines) + '\n'


def _cube_rows(slab: np.ndarray) -> str:
    # +0.0 turns -0.0 into 0.0
    return ''.join('%.6f %.6f %.6f\n' % tuple(row) for row in slab + 0.0)


def _mesh_rows(slab: np.ndarray) -> str:
    values = np.floor(slab * MESH_MAX + 0.5).astype(int)
    return ''.join('%d %d %d\n' % tuple(row) for row in values)


def generate_lut(vector: AdjustmentVector, size: int = DEFAULT_SIZE, fmt: str = 'cube',
                 progress: Optional[ProgressWrapper] = None) -> str:
    """
    Bake a vector into LUT text.

    Args:
        vector: Adjustments to bake
        size: Grid points per axis (clamped to 2..129)
        fmt: 'cube' or '3dl'
        progress: Optional wrapper over the slab iterator (e.g. tqdm)

    Returns:
        LUT file contents

    Raises:
        UnsupportedFormatError: fmt is not a supported tag
    """
    tag = normalize_format(fmt)
    size = normalize_size(size)

    slabs: Iterable = iter_lut_slabs(vector, size, FORMAT_ORDER[tag])
    if progress is not None:
        slabs = progress(slabs)

    if tag == 'cube':
        parts = [_cube_header(vector, size)]
        row_writer = _cube_rows
    else:
        parts = [f'3DMESH\nMesh {size} {size} {size}\n\n']
        row_writer = _mesh_rows

    for _, slab in slabs:
        parts.append(row_writer(slab))

    logger.debug(f"Baked {size}^3 {tag} LUT")
    return ''.join(parts)


def write_lut(path: Union[str, Path], vector: AdjustmentVector, size: int = DEFAULT_SIZE,
              fmt: Optional[str] = None, progress: Optional[ProgressWrapper] = None) -> Path:
    """
    Bake and write a LUT file; the format defaults to the file extension.

    Returns:
        Path written
    """
    path = Path(path)
    tag = normalize_format(fmt if fmt is not None else (path.suffix or '.cube'))
    path.write_text(generate_lut(vector, size, tag, progress), encoding='utf-8')
    logger.info(f"Wrote {tag} LUT to {path}")
    return path
