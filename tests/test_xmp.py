"""
Tests for the Lightroom XMP preset generator and parser
"""

import xml.etree.ElementTree as ET

import pytest

from photorecipe.export import ExportOptions, generate_xmp, parse_xmp, resolve_profile_name
from photorecipe.export.xmp_generator import clean_preset_name, normalize_profile_name
from photorecipe.recipe import AIRegion, AdjustmentVector, CurvePoint, MaskKind


@pytest.fixture
def recipe():
    """A color recipe touching most adjustment groups."""
    return AdjustmentVector.from_dict({
        'preset_name': 'Golden Hour',
        'description': 'Warm film look',
        'exposure': 0.35,
        'temperature': 5200,
        'tint': 10,
        'contrast': 25,
        'highlights': -30,
        'vibrance': 15,
        'hue_red': -10,
        'sat_orange': 12,
        'lum_blue': -20,
        'color_grade_shadow_hue': 210,
        'color_grade_shadow_sat': 20,
        'color_grade_blending': 60,
        'color_grade_balance': -10,
        'parametric_shadows': 8,
        'tone_curve': [[0, 10], [128, 120], [255, 245]],
        'grain_amount': 25,
        'grain_size': 30,
        'vignette_amount': -15,
        'point_colors': [[1, 2, 3, 4, 5, 6]],
    })


@pytest.fixture
def masked_recipe():
    return AdjustmentVector.from_dict({
        'preset_name': 'Masked',
        'contrast': 10,
        'masks': [
            {'type': 'radial', 'name': 'Center', 'adjustments': {'local_exposure': 0.35}},
            {'type': 'sky', 'name': 'Sky', 'adjustments': {'local_saturation': -0.2}},
            {'type': 'person', 'adjustments': {'local_shadows': 0.1}},
        ],
    })


class TestGeneratorStructure:
    """Test the generated document."""

    def test_well_formed_packet(self, recipe):
        xmp = generate_xmp(recipe)
        assert xmp.startswith('<?xpacket begin=')
        assert xmp.rstrip().endswith('<?xpacket end="w"?>')
        ET.fromstring(xmp)

    def test_control_characters_stripped(self):
        vector = AdjustmentVector.from_dict({
            'preset_name': 'Look\x0bOne', 'description': 'desc\x01', 'contrast': 5,
            'masks': [{'type': 'radial', 'name': 'Cen\x1fter', 'adjustments': {'local_exposure': 0.2}}],
        })
        xmp = generate_xmp(vector, ExportOptions(masks=True, group_name='Film\x02'))
        ET.fromstring(xmp)
        assert '<rdf:li xml:lang="x-default">LookOne</rdf:li>' in xmp
        assert '<rdf:li xml:lang="x-default">desc</rdf:li>' in xmp
        assert 'crs:Cluster="Film"' in xmp
        assert 'crs:CorrectionName="Center"' in xmp

    def test_header_attributes(self, recipe):
        xmp = generate_xmp(recipe, ExportOptions(group_name='Film'))
        assert 'crs:PresetType="Normal"' in xmp
        assert 'crs:ProcessVersion="15.4"' in xmp
        assert 'crs:Cluster="Film"' in xmp
        assert 'crs:SupportsAmount="True"' in xmp
        assert '<rdf:li xml:lang="x-default">Golden Hour</rdf:li>' in xmp
        assert '<rdf:li xml:lang="x-default">Film</rdf:li>' in xmp
        assert '<rdf:li xml:lang="x-default">Warm film look</rdf:li>' in xmp

    def test_basic_section(self, recipe):
        xmp = generate_xmp(recipe)
        assert '<crs:Treatment>Color</crs:Treatment>' in xmp
        assert '<crs:Temperature>5200</crs:Temperature>' in xmp
        assert '<crs:Contrast2012>25</crs:Contrast2012>' in xmp
        assert '<crs:Highlights2012>-30</crs:Highlights2012>' in xmp
        # Absent fields are not written
        assert 'Shadows2012' not in xmp

    def test_exposure_only_when_enabled(self, recipe):
        assert 'Exposure2012' not in generate_xmp(recipe)
        xmp = generate_xmp(recipe, ExportOptions(exposure=True))
        assert '<crs:Exposure2012>0.35</crs:Exposure2012>' in xmp

    def test_exposure_two_decimals(self):
        xmp = generate_xmp(AdjustmentVector(exposure=0.5), ExportOptions(exposure=True))
        assert '<crs:Exposure2012>0.50</crs:Exposure2012>' in xmp

    def test_sections_follow_flags(self, recipe):
        options = ExportOptions(hsl=False, color_grading=False, curves=False,
                                grain=False, vignette=False, point_color=False)
        xmp = generate_xmp(recipe, options)
        for tag in ('HueAdjustment', 'ColorGrade', 'ToneCurvePV2012', 'ParametricShadows',
                    'GrainAmount', 'PostCropVignette', 'PointColor1'):
            assert tag not in xmp
        assert 'Contrast2012' in xmp

    def test_basic_flag_off(self, recipe):
        xmp = generate_xmp(recipe, ExportOptions(wb_basic=False))
        assert 'Contrast2012' not in xmp
        assert 'Temperature' not in xmp
        assert 'HueAdjustmentRed' in xmp

    def test_curve_items(self, recipe):
        xmp = generate_xmp(recipe)
        assert '<crs:ToneCurveName2012>Custom</crs:ToneCurveName2012>' in xmp
        assert '<rdf:li>0, 10</rdf:li>' in xmp
        assert '<rdf:li>255, 245</rdf:li>' in xmp

    def test_point_color_format(self, recipe):
        xmp = generate_xmp(recipe)
        assert '1.000000,2.000000,3.000000,4.000000,5.000000,6.000000' in xmp


class TestStrength:
    """Test the strength multiplier."""

    def test_half_strength(self):
        xmp = generate_xmp(AdjustmentVector(contrast=40), ExportOptions(strength=0.5))
        assert '<crs:Contrast2012>20</crs:Contrast2012>' in xmp

    def test_double_strength_clamps(self):
        xmp = generate_xmp(AdjustmentVector(contrast=80), ExportOptions(strength=2.0))
        assert '<crs:Contrast2012>100</crs:Contrast2012>' in xmp

    def test_temperature_and_hue_not_scaled(self, recipe):
        xmp = generate_xmp(recipe, ExportOptions(strength=0.5))
        assert '<crs:Temperature>5200</crs:Temperature>' in xmp
        assert '<crs:HueAdjustmentRed>-10</crs:HueAdjustmentRed>' in xmp
        assert '<crs:SaturationAdjustmentOrange>6</crs:SaturationAdjustmentOrange>' in xmp
        assert '<crs:ColorGradeShadowHue>210</crs:ColorGradeShadowHue>' in xmp
        assert '<crs:ColorGradeShadowSat>10</crs:ColorGradeShadowSat>' in xmp

    def test_strength_option_clamped(self):
        assert ExportOptions(strength=5).strength == 2.0
        assert ExportOptions(strength=-1).strength == 0.0
        assert ExportOptions(strength=float('nan')).strength == 1.0


class TestMonochrome:
    """Test black & white presets."""

    @pytest.fixture
    def mono(self):
        return AdjustmentVector.from_dict({
            'treatment': 'black_and_white',
            'saturation': 20,
            'hue_red': 20,
            'gray_red': -30,
            'gray_blue': 15,
        })

    def test_monochrome_document(self, mono):
        xmp = generate_xmp(mono)
        assert 'crs:ProfileName="Adobe Monochrome"' in xmp
        assert '<crs:Treatment>Black &amp; White</crs:Treatment>' in xmp
        assert '<crs:ConvertToGrayscale>True</crs:ConvertToGrayscale>' in xmp
        assert '<crs:Saturation>0</crs:Saturation>' in xmp
        assert '<crs:GrayMixerRed>-30</crs:GrayMixerRed>' in xmp
        assert 'HueAdjustment' not in xmp

    def test_monochrome_round_trip(self, mono):
        result = parse_xmp(generate_xmp(mono))
        assert result.success
        vector = result.adjustments
        assert vector.is_monochrome
        assert vector.hsl is None
        assert vector.gray_mixer.red == -30.0
        assert vector.gray_mixer.blue == 15.0

    def test_color_preset_has_no_gray_mixer(self, recipe):
        assert 'GrayMixer' not in generate_xmp(recipe)


class TestProfileAndName:
    """Test profile selection and preset naming."""

    @pytest.mark.parametrize("name,expected", [
        ('Adobe Monochrome', 'Adobe Monochrome'),
        ('B&W film', 'Adobe Monochrome'),
        ('Portrait', 'Adobe Portrait'),
        ('landscape vivid', 'Adobe Landscape'),
        ('Adobe Standard', 'Adobe Color'),
        (None, None),
    ])
    def test_normalize_profile_name(self, name, expected):
        assert normalize_profile_name(name) == expected

    def test_auto_profile_from_masks(self):
        portrait = AdjustmentVector.from_dict({'masks': [{'type': 'face_skin'}]})
        landscape = AdjustmentVector.from_dict({'masks': [{'type': 'sky'}]})
        geometric = AdjustmentVector.from_dict({'masks': [{'type': 'radial'}]})
        assert resolve_profile_name(portrait) == 'Adobe Portrait'
        assert resolve_profile_name(landscape) == 'Adobe Landscape'
        assert resolve_profile_name(geometric) == 'Adobe Color'
        assert 'crs:ProfileName="Adobe Portrait"' in generate_xmp(portrait)

    def test_explicit_profile_wins_over_masks(self):
        vector = AdjustmentVector.from_dict({'camera_profile': 'Landscape',
                                             'masks': [{'type': 'face_skin'}]})
        assert resolve_profile_name(vector) == 'Adobe Landscape'

    def test_clean_preset_name(self):
        assert clean_preset_name('AI Image Match Warm') == 'Warm'
        assert clean_preset_name('Moody Teal') == 'Moody Teal'
        assert clean_preset_name('Photo Match').startswith('Preset-')
        assert clean_preset_name(None).startswith('Preset-')

    def test_unnamed_preset_gets_timestamp(self):
        xmp = generate_xmp(AdjustmentVector(contrast=5))
        assert '<rdf:li xml:lang="x-default">Preset-' in xmp


class TestMasks:
    """Test local correction output and parsing."""

    def test_masks_off_by_default(self, masked_recipe):
        assert 'MaskGroupBasedCorrections' not in generate_xmp(masked_recipe)

    def test_mask_output(self, masked_recipe):
        xmp = generate_xmp(masked_recipe, ExportOptions(masks=True))
        assert 'crs:What="Mask/CircularGradient"' in xmp
        assert 'crs:LocalExposure2012="0.350"' in xmp
        assert 'crs:What="Mask/Image"' in xmp
        assert 'crs:MaskSubType="0"' in xmp
        assert 'crs:MaskSubCategoryID="50006"' in xmp
        assert 'crs:CorrectionName="Mask 3"' in xmp

    def test_local_values_follow_strength(self):
        vector = AdjustmentVector.from_dict({'masks': [
            {'type': 'radial', 'adjustments': {'local_exposure': 0.4, 'local_contrast': 0.8}},
        ]})
        xmp = generate_xmp(vector, ExportOptions(masks=True, strength=0.5))
        assert 'crs:LocalExposure2012="0.200"' in xmp
        assert 'crs:LocalContrast2012="0.400"' in xmp
        # Scaled values stay inside the local range
        xmp = generate_xmp(vector, ExportOptions(masks=True, strength=2.0))
        assert 'crs:LocalContrast2012="1.000"' in xmp

    def test_mask_round_trip(self, masked_recipe):
        result = parse_xmp(generate_xmp(masked_recipe, ExportOptions(masks=True)))
        assert result.success
        assert result.metadata['has_masks']
        masks = result.adjustments.masks
        assert len(masks) == 3

        assert masks[0].kind is MaskKind.RADIAL
        assert masks[0].name == 'Center'
        assert masks[0].adjustments.exposure == pytest.approx(0.35)
        assert masks[0].geometry.feather == 75.0

        assert masks[1].region is AIRegion.SKY
        assert masks[1].adjustments.saturation == pytest.approx(-0.2)

        # Person and subject share the same Lightroom key
        assert masks[2].region is AIRegion.SUBJECT
        assert masks[2].adjustments.shadows == pytest.approx(0.1)

    def test_range_mask_round_trip(self):
        vector = AdjustmentVector.from_dict({'masks': [
            {'type': 'range_color', 'colorAmount': 0.7, 'pointModels': [[0.1, 0.2, 0.3]],
             'adjustments': {'local_exposure': 0.1}},
            {'type': 'range_luminance', 'lumRange': [0.1, 0.2, 0.8, 0.9],
             'adjustments': {'local_contrast': -0.1}},
            {'type': 'linear', 'fullY': 0.3},
        ]})
        masks = parse_xmp(generate_xmp(vector, ExportOptions(masks=True))).adjustments.masks
        assert [m.kind for m in masks] == [MaskKind.RANGE_COLOR, MaskKind.RANGE_LUMINANCE, MaskKind.LINEAR]
        assert masks[0].geometry.color_amount == pytest.approx(0.7)
        assert masks[0].geometry.point_models == ((0.1, 0.2, 0.3),)
        assert masks[1].geometry.lum_range == (0.1, 0.2, 0.8, 0.9)
        assert masks[2].geometry.full_y == pytest.approx(0.3)


class TestRoundTrip:
    """Test generate-then-parse."""

    def test_all_groups(self, recipe):
        result = parse_xmp(generate_xmp(recipe, ExportOptions(exposure=True)))
        assert result.success
        assert result.preset_name == 'Golden Hour'
        assert result.description == 'Warm film look'

        v = result.adjustments
        assert v.exposure == pytest.approx(0.35)
        assert v.temperature == 5200.0
        assert v.tint == 10.0
        assert v.contrast == 25.0
        assert v.highlights == -30.0
        assert v.vibrance == 15.0
        assert v.hsl.red.hue == -10.0
        assert v.hsl.orange.saturation == 12.0
        assert v.hsl.blue.luminance == -20.0
        assert v.grading.shadow.hue == 210.0
        assert v.grading.shadow.saturation == 20.0
        assert v.grading.blending == 60.0
        assert v.grading.balance == -10.0
        assert v.parametric.shadows == 8.0
        assert v.curves.composite == (CurvePoint(0.0, 10.0), CurvePoint(128.0, 120.0),
                                      CurvePoint(255.0, 245.0))
        assert v.grain.amount == 25.0
        assert v.grain.size == 30.0
        assert v.vignette.amount == -15.0
        assert v.point_colors.colors == ((1.0, 2.0, 3.0, 4.0, 5.0, 6.0),)
        assert v.profile_name == 'Adobe Color'

    def test_excluded_groups_absent(self, recipe):
        result = parse_xmp(generate_xmp(recipe, ExportOptions(hsl=False, grain=False)))
        v = result.adjustments
        assert v.hsl.is_neutral()
        assert v.grain.amount is None
        assert v.contrast == 25.0
        assert not result.metadata['has_hsl']

    def test_metadata(self, recipe):
        metadata = parse_xmp(generate_xmp(recipe)).metadata
        assert metadata['preset_type'] == 'Normal'
        assert metadata['version'] == '17.5'
        assert metadata['has_color_grading']
        assert metadata['has_hsl']
        assert metadata['has_curves']
        assert not metadata['has_masks']


LEGACY_PRESET = """<x:xmpmeta xmlns:x="adobe:ns:meta/">
 <rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">
  <rdf:Description rdf:about=""
    xmlns:crs="http://ns.adobe.com/camera-raw-settings/1.0/"
    crs:PresetType="Normal"
    crs:Version="15.0"
    crs:Contrast2012="+15"
    crs:Highlights2012="abc"
    crs:SaturationAdjustmentBlue="-20"
    crs:ColorGradeMidtoneHue="45"
    crs:ColorGradeMidtoneSat="10"
    crs:PointColor1="10.000000, 20.000000, 0.000000, 0.000000, 0.000000, 0.000000">
   <crs:Name>
    <rdf:Alt>
     <rdf:li xml:lang="x-default">Legacy Look</rdf:li>
    </rdf:Alt>
   </crs:Name>
   <crs:ToneCurvePV2012>
    <rdf:Seq>
     <rdf:li>0, 0</rdf:li>
     <rdf:li>bad</rdf:li>
     <rdf:li>255, 240</rdf:li>
    </rdf:Seq>
   </crs:ToneCurvePV2012>
  </rdf:Description>
 </rdf:RDF>
</x:xmpmeta>
"""


class TestParser:
    """Test parsing of hand-written and malformed presets."""

    def test_attribute_form(self):
        result = parse_xmp(LEGACY_PRESET)
        assert result.success
        assert result.preset_name == 'Legacy Look'
        v = result.adjustments
        assert v.name == 'Legacy Look'
        assert v.contrast == 15.0
        assert v.highlights is None
        assert v.hsl.blue.saturation == -20.0
        assert v.grading.midtone.hue == 45.0
        assert v.point_colors.colors[0][:2] == (10.0, 20.0)
        assert [p.input for p in v.curves.composite] == [0.0, 255.0]
        assert result.metadata['version'] == '15.0'

    def test_byte_order_mark(self):
        assert parse_xmp('\ufeff' + LEGACY_PRESET).success

    @pytest.mark.parametrize("text", ['', '   ', None, 42])
    def test_empty_or_non_text(self, text):
        result = parse_xmp(text)
        assert not result.success
        assert result.error == 'Invalid XMP content'
        assert result.adjustments is None

    def test_not_a_preset(self):
        result = parse_xmp('<x/>')
        assert not result.success
        assert result.error == 'Not a valid Lightroom XMP preset'

    def test_malformed_xml(self):
        text = '<x:xmpmeta xmlns:x="adobe:ns:meta/"><rdf:RDF crs:Contrast2012="10">'
        result = parse_xmp(text)
        assert not result.success
        assert result.error.startswith('Invalid XMP content')

    def test_monochrome_flag_from_grayscale(self):
        text = LEGACY_PRESET.replace('crs:Version="15.0"',
                                     'crs:Version="15.0" crs:ConvertToGrayscale="True"')
        assert parse_xmp(text).adjustments.is_monochrome
