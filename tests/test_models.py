"""
Tests for the recipe data model: sanitizing, treatments, and the flat
key conversion.
"""

import dataclasses
import math

import pytest

from photorecipe.recipe import (
    AdjustmentVector, ColorGrading, ColorTreatment, ColorWheel, CurvePoint, GrayMixer,
    HSLAdjustments, HSLBand, MonochromeTreatment, ToneCurves, Vignette, normalize_curve,
)
from photorecipe.recipe.ranges import is_number, sanitize, wrap_hue


class TestRanges:
    """Test the shared sanitizing helpers."""

    def test_is_number_rejects_non_finite_and_bools(self):
        assert is_number(3)
        assert is_number(-2.5)
        assert not is_number(float('nan'))
        assert not is_number(float('inf'))
        assert not is_number(True)
        assert not is_number('10')
        assert not is_number(None)

    def test_sanitize_clamps(self):
        assert sanitize(150, (-100.0, 100.0)) == 100.0
        assert sanitize(-150, (-100.0, 100.0)) == -100.0
        assert sanitize(12, (-100.0, 100.0)) == 12.0
        assert sanitize(float('nan'), (-100.0, 100.0)) is None

    def test_wrap_hue(self):
        assert wrap_hue(370) == pytest.approx(10.0)
        assert wrap_hue(-30) == pytest.approx(330.0)
        assert wrap_hue(360) == 0.0
        assert 0.0 <= wrap_hue(-1e-20) < 360.0
        assert wrap_hue(None) is None


class TestAdjustmentVector:
    """Test construction-time sanitizing of the vector."""

    def test_out_of_range_values_are_clamped(self):
        vector = AdjustmentVector(contrast=200, highlights=-200, exposure=9, tint=400)
        assert vector.contrast == 100.0
        assert vector.highlights == -100.0
        assert vector.exposure == 5.0
        assert vector.tint == 150.0

    def test_non_finite_values_become_absent(self):
        vector = AdjustmentVector(contrast=float('nan'), shadows=float('inf'), whites='7')
        assert vector.contrast is None
        assert vector.shadows is None
        assert vector.whites is None

    def test_default_vector_is_neutral(self):
        vector = AdjustmentVector()
        assert vector.is_neutral()
        assert not vector.is_monochrome
        assert vector.treatment_name == 'color'

    def test_neutral_temperature_is_neutral(self):
        assert AdjustmentVector(temperature=6500, tint=0).is_neutral()
        assert not AdjustmentVector(temperature=5000).is_neutral()

    def test_monochrome_from_profile_name(self):
        vector = AdjustmentVector(profile_name='Adobe Monochrome')
        assert vector.is_monochrome
        assert isinstance(vector.treatment, MonochromeTreatment)
        assert vector.hsl is None
        assert isinstance(vector.gray_mixer, GrayMixer)

    def test_monochrome_from_full_desaturation(self):
        assert AdjustmentVector(saturation=-100).is_monochrome
        assert not AdjustmentVector(saturation=-99).is_monochrome

    def test_replace_resanitizes(self):
        vector = AdjustmentVector(contrast=10).replace(contrast=500)
        assert vector.contrast == 100.0

    @pytest.mark.parametrize("treatment", ['black_and_white', 'Black & White', 'monochrome', True])
    def test_monochrome_treatment_names(self, treatment):
        vector = AdjustmentVector(treatment=treatment, saturation=20)
        assert vector.is_monochrome
        assert vector.treatment_name == 'black_and_white'
        assert vector.hsl is None

    def test_color_treatment_name(self):
        vector = AdjustmentVector(treatment='color')
        assert not vector.is_monochrome
        assert vector.treatment_name == 'color'
        assert isinstance(vector.hsl, HSLAdjustments)

    def test_replace_with_treatment_name(self):
        vector = AdjustmentVector(contrast=10).replace(treatment='black_and_white')
        assert vector.is_monochrome
        assert vector.contrast == 10.0

    def test_xml_illegal_characters_stripped(self):
        vector = AdjustmentVector(name='Look\x0bOne', description='desc\x01\tok',
                                  profile_name='Adobe\x00 Color')
        assert vector.name == 'LookOne'
        assert vector.description == 'desc\tok'
        assert vector.profile_name == 'Adobe Color'

    def test_vector_is_immutable(self):
        vector = AdjustmentVector(contrast=10)
        with pytest.raises(dataclasses.FrozenInstanceError):
            vector.contrast = 20


class TestNestedGroups:
    """Test the per-group records."""

    def test_hsl_band_clamping(self):
        band = HSLBand(hue=-300, saturation=50, luminance=float('nan'))
        assert band.hue == -100.0
        assert band.saturation == 50.0
        assert band.luminance is None

    def test_hsl_accepts_dict_bands(self):
        hsl = HSLAdjustments(red={'hue': -10})
        assert hsl.red.hue == -10.0
        assert not hsl.is_neutral()

    def test_color_wheel_hue_wraps(self):
        wheel = ColorWheel(hue=-90, saturation=120)
        assert wheel.hue == pytest.approx(270.0)
        assert wheel.saturation == 100.0

    def test_grading_neutral_without_saturation_or_luminance(self):
        grading = ColorGrading(shadow=ColorWheel(hue=200))
        assert grading.is_neutral()
        assert grading.has_values()

    def test_vignette_style_is_integer(self):
        assert Vignette(style=1.4).style == 1
        assert Vignette(style=7).style == 2
        assert Vignette(style=None).style is None

    def test_tone_curves_normalized(self):
        curves = ToneCurves(composite=[{'x': 0.0, 'y': 0.1}, {'x': 1.0, 'y': 0.9}])
        assert curves.composite[0] == CurvePoint(0.0, pytest.approx(25.5))
        assert curves.composite[-1].input == 255.0


class TestCurves:
    """Test point curve normalization."""

    def test_sorts_and_dedupes(self):
        points = normalize_curve([[200, 210], [0, 0], [200, 190], [255, 255]])
        assert [p.input for p in points] == [0.0, 200.0, 255.0]
        # Last duplicate wins
        assert points[1].output == 190.0

    def test_clamps_to_byte_domain(self):
        points = normalize_curve([[-20, -5], [300, 400]])
        assert points[0] == CurvePoint(0.0, 0.0)
        assert points[-1] == CurvePoint(255.0, 255.0)

    def test_drops_malformed_points(self):
        points = normalize_curve([[0, 0], ['a', 3], [float('nan'), 1], {'input': 128}, [255, 250]])
        assert len(points) == 2

    def test_empty_input(self):
        assert normalize_curve(None) == ()
        assert normalize_curve([]) == ()
        assert normalize_curve('0,0') == ()


class TestFlatKeys:
    """Test from_dict / to_dict with the collaborator key scheme."""

    def test_from_dict_reads_groups(self):
        vector = AdjustmentVector.from_dict({
            'preset_name': 'Warm Film',
            'contrast': 15,
            'hue_red': -10,
            'sat_orange': 12,
            'color_grade_shadow_hue': 210,
            'color_grade_shadow_sat': 20,
            'color_grade_global_lum': -5,
            'color_grade_blending': 60,
            'grain_amount': 25,
            'vignette_amount': -15,
            'parametric_shadows': 8,
            'tone_curve': [[0, 10], [255, 245]],
            'point_colors': [[1, 2, 3, 4, 5, 6]],
            'reasoning': 'Lifted blacks and warm shadows',
        })
        assert vector.name == 'Warm Film'
        assert vector.description == 'Lifted blacks and warm shadows'
        assert vector.hsl.red.hue == -10.0
        assert vector.hsl.orange.saturation == 12.0
        assert vector.grading.shadow.hue == 210.0
        assert vector.grading.global_.luminance == -5.0
        assert vector.grading.blending == 60.0
        assert vector.grain.amount == 25.0
        assert vector.vignette.amount == -15.0
        assert vector.parametric.shadows == 8.0
        assert vector.curves.composite[0] == CurvePoint(0.0, 10.0)
        assert vector.point_colors.colors == ((1.0, 2.0, 3.0, 4.0, 5.0, 6.0),)

    def test_from_dict_tone_curve_mapping(self):
        vector = AdjustmentVector.from_dict({
            'tone_curve': {'rgb': [[0, 0], [255, 240]], 'red': [[0, 5], [255, 255]]},
        })
        assert vector.curves.composite[-1].output == 240.0
        assert vector.curves.red[0].output == 5.0

    def test_monochrome_ignores_hsl_keys(self):
        vector = AdjustmentVector.from_dict({
            'treatment': 'black_and_white',
            'hue_red': 20,
            'gray_red': -30,
        })
        assert vector.is_monochrome
        assert vector.hsl is None
        assert vector.gray_mixer.red == -30.0
        assert 'hue_red' not in vector.to_dict()

    def test_unknown_keys_are_ignored(self):
        vector = AdjustmentVector.from_dict({'contrast': 5, 'sharpening': 40})
        assert vector.contrast == 5.0

    def test_to_dict_round_trip(self):
        data = {
            'preset_name': 'Round Trip',
            'exposure': 0.3,
            'temperature': 5200,
            'lum_blue': -20,
            'color_grade_highlight_hue': 45,
            'color_grade_highlight_sat': 10,
            'grain_size': 30,
            'masks': [{'type': 'radial', 'name': 'Center',
                       'adjustments': {'local_exposure': 0.2}}],
        }
        vector = AdjustmentVector.from_dict(data)
        again = AdjustmentVector.from_dict(vector.to_dict())
        assert again == vector

    def test_to_dict_omits_absent_fields(self):
        result = AdjustmentVector(contrast=10).to_dict()
        assert result == {'treatment': 'color', 'contrast': 10.0}

    def test_treatment_defaults_to_color(self):
        vector = AdjustmentVector(treatment='nonsense')
        assert isinstance(vector.treatment, ColorTreatment)

    def test_nan_in_nested_values(self):
        vector = AdjustmentVector.from_dict({'hue_red': math.nan, 'grain_amount': math.inf})
        assert vector.hsl.red.hue is None
        assert vector.grain.amount is None
