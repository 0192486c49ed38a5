"""
Recipe data model for PhotoRecipe

The AdjustmentVector and its parts, the local mask taxonomy, and the
range and curve helpers every codec relies on.
"""

from .models import (
    AdjustmentVector,
    ColorTreatment,
    MonochromeTreatment,
    HSLBand,
    HSLAdjustments,
    GrayMixer,
    ColorWheel,
    ColorGrading,
    ParametricCurve,
    ToneCurves,
    Grain,
    Vignette,
    PointColors,
)
from .curves import CurvePoint, normalize_curve, evaluate_curve
from .masks import (
    Mask,
    MaskKind,
    AIRegion,
    LocalAdjustments,
    RadialGeometry,
    LinearGeometry,
    BrushGeometry,
    ColorRangeGeometry,
    LuminanceRangeGeometry,
    RegionGeometry,
    normalize_mask_type,
    region_from_xmp,
)
from .ranges import BANDS

__all__ = [
    'AdjustmentVector',
    'ColorTreatment',
    'MonochromeTreatment',
    'HSLBand',
    'HSLAdjustments',
    'GrayMixer',
    'ColorWheel',
    'ColorGrading',
    'ParametricCurve',
    'ToneCurves',
    'Grain',
    'Vignette',
    'PointColors',
    'CurvePoint',
    'normalize_curve',
    'evaluate_curve',
    'Mask',
    'MaskKind',
    'AIRegion',
    'LocalAdjustments',
    'RadialGeometry',
    'LinearGeometry',
    'BrushGeometry',
    'ColorRangeGeometry',
    'LuminanceRangeGeometry',
    'RegionGeometry',
    'normalize_mask_type',
    'region_from_xmp',
    'BANDS',
]
