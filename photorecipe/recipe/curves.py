"""
Point curve normalization and evaluation.

Curves are stored as ordered tuples of CurvePoint in the 0..255 domain.
Input may come as dicts ({input, output} or {x, y}) or as pairs; a curve
whose values all lie in 0..1 is read as normalized and scaled up.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .ranges import is_number, clamp

logger = logging.getLogger(__name__)

CURVE_MAX = 255.0


@dataclass(frozen=True)
class CurvePoint:
    """A single (input, output) control point in 0..255."""
    input: float
    output: float

    def to_dict(self) -> dict:
        return {'input': self.input, 'output': self.output}


def _point_pair(raw: Any) -> Optional[Tuple[float, float]]:
    if isinstance(raw, CurvePoint):
        return raw.input, raw.output
    if isinstance(raw, dict):
        x = raw.get('input', raw.get('x'))
        y = raw.get('output', raw.get('y'))
    elif isinstance(raw, (list, tuple)) and len(raw) >= 2:
        x, y = raw[0], raw[1]
    else:
        return None
    if not (is_number(x) and is_number(y)):
        return None
    return float(x), float(y)


def normalize_curve(points: Optional[Iterable[Any]]) -> Tuple[CurvePoint, ...]:
    """
    Normalize raw curve points into sorted CurvePoints in 0..255.

    Args:
        points: Iterable of dicts, pairs, or CurvePoint instances

    Returns:
        Tuple of CurvePoint sorted by input with duplicate inputs collapsed
        (the last one wins). Empty when nothing usable was given.
    """
    if not points or isinstance(points, (str, bytes)):
        return ()

    pairs = [p for p in (_point_pair(raw) for raw in points) if p is not None]
    if not pairs:
        return ()

    # Normalized 0..1 curves get scaled to the 8-bit domain
    if all(0.0 <= x <= 1.0 and 0.0 <= y <= 1.0 for x, y in pairs) and \
            any(x > 0.0 or y > 0.0 for x, y in pairs):
        pairs = [(x * CURVE_MAX, y * CURVE_MAX) for x, y in pairs]

    by_input = {}
    for x, y in pairs:
        by_input[clamp(x, 0.0, CURVE_MAX)] = clamp(y, 0.0, CURVE_MAX)

    return tuple(CurvePoint(x, by_input[x]) for x in sorted(by_input))


def is_identity_curve(points: Sequence[CurvePoint]) -> bool:
    """True when the curve leaves every value unchanged."""
    if not points:
        return True
    if len(points) == 1:
        return False
    return all(abs(p.input - p.output) < 1e-6 for p in points) and \
        points[0].input <= 0.0 and points[-1].input >= CURVE_MAX


def evaluate_curve(points: Sequence[CurvePoint], values: np.ndarray) -> np.ndarray:
    """
    Apply a curve to values in 0..1 by linear interpolation in 0..255.

    Values outside the first/last control point take the endpoint output.
    """
    if not points:
        return values
    xs = np.array([p.input for p in points], dtype=np.float64)
    ys = np.array([p.output for p in points], dtype=np.float64)
    return np.interp(values * CURVE_MAX, xs, ys) / CURVE_MAX


def curve_to_list(points: Sequence[CurvePoint]) -> List[dict]:
    return [p.to_dict() for p in points]
