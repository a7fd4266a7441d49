"""
Configuration Tests
===================

YAML loading, environment overrides and validation of Settings.
"""

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from ascii_cache.config import RecordingConfig, Settings, load_config
from ascii_cache.conversion.charsets import CharsetKey


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Drop any ASCII_CACHE_* variables from the developer's shell."""
    for name in list(os.environ):
        if name.startswith("ASCII_CACHE_"):
            monkeypatch.delenv(name)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "cache:\n"
        "  directory: /tmp/frames\n"
        "recording:\n"
        "  num_columns: 120\n"
        "  charset: Blocks\n"
        "logging:\n"
        "  format: json\n"
    )
    return path


class TestLoadConfig:
    """Tests for load_config()."""
    
    def test_defaults(self, tmp_path):
        settings = load_config(str(tmp_path / "missing.yaml"))
        assert settings == Settings()
        assert settings.recording.num_columns == 80
        assert settings.recording.charset == CharsetKey.STANDARD
        assert settings.recording.frame_interval_ms == 50
        assert settings.logging.level == "INFO"
    
    def test_yaml_values(self, config_file):
        settings = load_config(str(config_file))
        assert settings.cache.directory == "/tmp/frames"
        assert settings.cache.path == Path("/tmp/frames")
        assert settings.recording.num_columns == 120
        assert settings.recording.charset == CharsetKey.BLOCKS
        assert settings.recording.brightness == 1.0
        assert settings.logging.format == "json"
    
    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(str(path)) == Settings()
    
    def test_env_overrides_yaml(self, config_file, monkeypatch):
        monkeypatch.setenv("ASCII_CACHE_DIR", "/srv/cache")
        monkeypatch.setenv("ASCII_CACHE_COLUMNS", "60")
        monkeypatch.setenv("ASCII_CACHE_BRIGHTNESS", "1.5")
        monkeypatch.setenv("ASCII_CACHE_CHARSET", "emoji")
        monkeypatch.setenv("ASCII_CACHE_FRAME_INTERVAL_MS", "40")
        monkeypatch.setenv("ASCII_CACHE_LOG_LEVEL", "DEBUG")
        
        settings = load_config(str(config_file))
        
        assert settings.cache.directory == "/srv/cache"
        assert settings.recording.num_columns == 60
        assert settings.recording.brightness == 1.5
        assert settings.recording.charset == CharsetKey.EMOJI
        assert settings.recording.frame_interval_ms == 40
        assert settings.logging.level == "DEBUG"
        assert settings.logging.format == "json"
    
    def test_cache_path_expands_user(self):
        assert "~" not in str(Settings().cache.path)


class TestValidation:
    """Tests for rejected configuration values."""
    
    def test_columns_out_of_range(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ASCII_CACHE_COLUMNS", "500")
        with pytest.raises(ValidationError):
            load_config(str(tmp_path / "missing.yaml"))
    
    def test_unknown_charset(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("recording:\n  charset: sparkles\n")
        with pytest.raises(ValidationError):
            load_config(str(path))
    
    def test_brightness_out_of_range(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("recording:\n  brightness: 3.0\n")
        with pytest.raises(ValidationError):
            load_config(str(path))


class TestRecordingPreset:
    """Tests for turning recording settings into a capture preset."""
    
    def test_defaults_match_portrait_sd_settings(self):
        preset = Settings().recording.to_preset()
        assert preset.num_columns == 80
        assert preset.brightness == 1.0
        assert preset.charset_key == CharsetKey.STANDARD
        assert preset.fps == 20
        assert preset.frame_interval_ms == 50
    
    def test_env_settings_flow_into_preset(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ASCII_CACHE_COLUMNS", "120")
        monkeypatch.setenv("ASCII_CACHE_CHARSET", "Blocks")
        monkeypatch.setenv("ASCII_CACHE_FRAME_INTERVAL_MS", "67")
        
        preset = load_config(str(tmp_path / "missing.yaml")).recording.to_preset()
        
        assert preset.num_columns == 120
        assert preset.charset_key == CharsetKey.BLOCKS
        assert preset.fps == 15
        assert preset.frame_interval_ms == 67
    
    @pytest.mark.parametrize("interval, fps", [(1, 60), (5, 60), (2000, 1)])
    def test_frame_rate_limited(self, interval, fps):
        recording = RecordingConfig(frame_interval_ms=interval)
        assert recording.to_preset().fps == fps
