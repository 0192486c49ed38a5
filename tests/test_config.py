"""
Tests for configuration loading and export options
"""

import pytest

from photorecipe.config import (
    get_config_value, get_default_config, load_config, save_config, update_config_value,
)
from photorecipe.export import ExportOptions


class TestLoadConfig:
    """Test reading config.yaml files."""

    def test_packaged_config_matches_defaults(self):
        config = load_config()
        assert config['lut'] == get_default_config()['lut']
        assert config['export']['masks'] is False

    def test_missing_file_uses_defaults(self, tmp_path):
        assert load_config(tmp_path / 'missing.yaml') == get_default_config()

    def test_partial_file_is_merged(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text("lut:\n  size: 17\nexport:\n  masks: true\n")
        config = load_config(path)
        assert config['lut']['size'] == 17
        assert config['lut']['format'] == 'cube'
        assert config['export']['masks'] is True
        assert config['export']['hsl'] is True
        assert config['logging']['level'] == 'INFO'

    def test_invalid_yaml_uses_defaults(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text("lut: [unclosed\n")
        assert load_config(path) == get_default_config()

    def test_non_mapping_uses_defaults(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text("- just\n- a list\n")
        assert load_config(path) == get_default_config()

    def test_environment_expansion(self, tmp_path, monkeypatch):
        monkeypatch.setenv('PHOTORECIPE_GROUP', 'Client Looks')
        path = tmp_path / 'config.yaml'
        path.write_text("export:\n  group_name: ${PHOTORECIPE_GROUP}\n  strength: 0.8\n")
        config = load_config(path)
        assert config['export']['group_name'] == 'Client Looks'
        assert config['export']['strength'] == 0.8

    def test_unset_variable_is_kept(self, tmp_path, monkeypatch):
        monkeypatch.delenv('PHOTORECIPE_UNSET', raising=False)
        path = tmp_path / 'config.yaml'
        path.write_text("export:\n  group_name: ${PHOTORECIPE_UNSET}\n")
        assert load_config(path)['export']['group_name'] == '${PHOTORECIPE_UNSET}'


class TestConfigValues:
    """Test dotted access and saving."""

    def test_get_config_value(self):
        config = get_default_config()
        assert get_config_value(config, 'lut.size') == 33
        assert get_config_value(config, 'lut.missing', 'x') == 'x'
        assert get_config_value(config, 'lut.size.deeper', 5) == 5

    def test_update_config_value(self):
        config = {}
        update_config_value(config, 'export.strength', 0.5)
        assert config == {'export': {'strength': 0.5}}

    def test_save_and_reload(self, tmp_path):
        config = get_default_config()
        update_config_value(config, 'lut.format', '3dl')
        path = tmp_path / 'saved.yaml'
        assert save_config(config, path)
        assert load_config(path)['lut']['format'] == '3dl'

    def test_save_to_bad_path(self, tmp_path):
        assert not save_config(get_default_config(), tmp_path / 'no' / 'such' / 'dir.yaml')


class TestExportOptions:
    """Test building inclusion flags."""

    def test_defaults(self):
        options = ExportOptions()
        assert options.wb_basic and options.hsl and options.curves
        assert not options.exposure
        assert not options.masks
        assert options.strength == 1.0
        assert options.group_name == 'PhotoRecipe'

    def test_from_config(self):
        config = get_default_config()
        update_config_value(config, 'export.masks', True)
        update_config_value(config, 'export.strength', 1.5)
        options = ExportOptions.from_config(config)
        assert options.masks
        assert options.strength == 1.5

    def test_from_dict_camel_case(self):
        options = ExportOptions.from_dict({'wbBasic': False, 'colorGrading': False,
                                           'pointColor': False, 'groupName': 'Mine',
                                           'unknownFlag': True})
        assert not options.wb_basic
        assert not options.color_grading
        assert not options.point_color
        assert options.group_name == 'Mine'

    def test_blank_group_name(self):
        assert ExportOptions(group_name='  ').group_name == 'PhotoRecipe'

    @pytest.mark.parametrize("strength,expected", [(0.5, 0.5), (3, 2.0), ('a', 1.0)])
    def test_strength(self, strength, expected):
        assert ExportOptions.from_dict({'strength': strength}).strength == expected

    def test_scale(self):
        options = ExportOptions(strength=0.5)
        assert options.scale(40) == 20
        assert options.scale(None) is None
