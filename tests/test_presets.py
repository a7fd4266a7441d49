"""
Preset Tests
============
"""

import pytest
from pydantic import ValidationError

from ascii_cache.conversion.charsets import CharsetKey
from ascii_cache.presets import DEFAULT_PRESET, PRESETS, ConversionPreset, get_preset


class TestPresets:
    """Tests for the built-in preset table."""
    
    def test_default_is_portrait_sd(self):
        assert DEFAULT_PRESET.name == "iPhone Portrait SD"
        assert DEFAULT_PRESET.num_rows == 71
        assert DEFAULT_PRESET.resolution == "80x71"
        assert DEFAULT_PRESET.bytes_per_frame == 22720
        assert DEFAULT_PRESET.frame_interval_ms == 50
    
    def test_square_and_landscape_grids(self):
        assert get_preset("Square SD").resolution == "70x35"
        assert get_preset("Landscape SD").resolution == "100x28"
    
    def test_fifteen_fps_interval(self):
        assert get_preset("Retro Terminal").frame_interval_ms == 67
    
    def test_names_are_unique(self):
        assert len({p.name for p in PRESETS}) == len(PRESETS) == 10
    
    @pytest.mark.parametrize("name", ["Blocky", "blocky", "  BLOCKY "])
    def test_lookup_case_insensitive(self, name):
        assert get_preset(name).charset_key == CharsetKey.BLOCKS
    
    def test_lookup_by_slug(self):
        assert get_preset("iphone-portrait-hd").num_columns == 120
    
    def test_unknown_preset(self):
        with pytest.raises(KeyError):
            get_preset("VHS")
    
    def test_columns_validated(self):
        with pytest.raises(ValidationError):
            ConversionPreset(name="Tiny", num_columns=10)
    
    def test_fps_validated(self):
        with pytest.raises(ValidationError):
            ConversionPreset(name="Fast", num_columns=80, fps=120)
