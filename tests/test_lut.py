"""
Tests for the 3D LUT baker
"""

import numpy as np
import pytest

from photorecipe.export import (
    ExportError, UnsupportedFormatError, bake_lut_table, generate_lut, write_lut,
)
from photorecipe.export.lut import normalize_size
from photorecipe.recipe import AdjustmentVector


def data_rows(text):
    """Numeric rows following the header of a .cube or .3dl file."""
    rows = []
    for line in text.splitlines():
        parts = line.split()
        if len(parts) == 3 and all(p.replace('.', '', 1).lstrip('-').isdigit() for p in parts):
            rows.append(parts)
    return rows


class TestCubeFormat:
    """Test .cube output."""

    def test_header(self):
        vector = AdjustmentVector(name='Warm Film', description='Golden hour')
        text = generate_lut(vector, size=3, fmt='cube')
        lines = text.splitlines()
        assert lines[0] == '# Created by PhotoRecipe'
        assert '# Description: Golden hour' in lines
        assert 'TITLE "Warm Film"' in lines
        assert 'LUT_3D_SIZE 3' in lines
        assert 'DOMAIN_MIN 0.0 0.0 0.0' in lines
        assert 'DOMAIN_MAX 1.0 1.0 1.0' in lines

    def test_row_count(self):
        text = generate_lut(AdjustmentVector(contrast=20), size=5)
        assert len(data_rows(text)) == 5 ** 3

    def test_identity_order_red_fastest(self):
        rows = data_rows(generate_lut(AdjustmentVector(), size=2))
        assert rows[0] == ['0.000000', '0.000000', '0.000000']
        assert rows[1] == ['1.000000', '0.000000', '0.000000']
        assert rows[2] == ['0.000000', '1.000000', '0.000000']
        assert rows[4] == ['0.000000', '0.000000', '1.000000']
        assert rows[-1] == ['1.000000', '1.000000', '1.000000']

    def test_values_in_range(self):
        vector = AdjustmentVector(exposure=3, contrast=80, saturation=60)
        rows = data_rows(generate_lut(vector, size=4))
        values = np.array(rows, dtype=float)
        assert values.min() >= 0.0
        assert values.max() <= 1.0


class TestMeshFormat:
    """Test .3dl output."""

    def test_header(self):
        lines = generate_lut(AdjustmentVector(), size=2, fmt='3dl').splitlines()
        assert lines[0] == '3DMESH'
        assert lines[1] == 'Mesh 2 2 2'

    def test_identity_order_blue_fastest(self):
        rows = data_rows(generate_lut(AdjustmentVector(), size=2, fmt='3dl'))
        assert len(rows) == 8
        assert rows[0] == ['0', '0', '0']
        assert rows[1] == ['0', '0', '1023']
        assert rows[2] == ['0', '1023', '0']
        assert rows[4] == ['1023', '0', '0']

    def test_format_tag_is_case_insensitive(self):
        assert generate_lut(AdjustmentVector(), size=2, fmt='3DL').startswith('3DMESH')


class TestValidation:
    """Test format and size handling."""

    @pytest.mark.parametrize("fmt", ['davinci', 'lut', 'png', ''])
    def test_unsupported_format(self, fmt):
        with pytest.raises(UnsupportedFormatError) as exc_info:
            generate_lut(AdjustmentVector(), fmt=fmt)
        assert 'Unsupported LUT format' in str(exc_info.value)

    def test_unsupported_format_is_value_error(self):
        with pytest.raises(ValueError):
            generate_lut(AdjustmentVector(), fmt='davinci')
        with pytest.raises(ExportError):
            generate_lut(AdjustmentVector(), fmt='davinci')

    def test_size_clamped(self):
        assert normalize_size(1) == 2
        assert normalize_size(-5) == 2
        assert normalize_size(500) == 129
        assert normalize_size('17') == 17
        assert normalize_size(None) == 33
        assert normalize_size('big') == 33

    def test_small_size_still_valid(self):
        text = generate_lut(AdjustmentVector(), size=1)
        assert 'LUT_3D_SIZE 2' in text
        assert len(data_rows(text)) == 8


class TestTable:
    """Test the raw table and file output."""

    def test_table_matches_text(self):
        vector = AdjustmentVector(temperature=4500, vibrance=30)
        table = bake_lut_table(vector, size=3)
        rows = np.array(data_rows(generate_lut(vector, size=3)), dtype=float)
        assert table.shape == (27, 3)
        np.testing.assert_allclose(table, rows, atol=1e-6)

    def test_write_lut_uses_suffix(self, tmp_path):
        path = write_lut(tmp_path / 'look.3dl', AdjustmentVector(), size=2)
        assert path.exists()
        assert path.read_text().startswith('3DMESH')

    def test_write_lut_explicit_format(self, tmp_path):
        path = write_lut(tmp_path / 'look.txt', AdjustmentVector(), size=2, fmt='cube')
        assert 'LUT_3D_SIZE 2' in path.read_text()

    def test_write_lut_rejects_unknown_suffix(self, tmp_path):
        with pytest.raises(UnsupportedFormatError):
            write_lut(tmp_path / 'look.png', AdjustmentVector(), size=2)
        assert not (tmp_path / 'look.png').exists()

    def test_progress_wrapper_sees_every_slab(self):
        seen = []

        def progress(slabs):
            for item in slabs:
                seen.append(item[0])
                yield item

        generate_lut(AdjustmentVector(), size=4, progress=progress)
        assert seen == [0, 1, 2, 3]
