"""
CLI Tests
=========

End-to-end runs of the ascii-cache command against a temp cache dir.
"""

import json

import pytest

from conftest import solid_rgba

from ascii_cache import batch, cli
from ascii_cache.cache import FrameStore
from ascii_cache.capture import CapturedFrame
from ascii_cache.cli import main
from ascii_cache.config import RecordingConfig, Settings
from ascii_cache.conversion.charsets import CharsetKey


@pytest.fixture
def saved_store(recorded_store):
    assert recorded_store.save_to_disk()
    return recorded_store


def _run(cache_dir, *args) -> int:
    return main(["--cache-dir", str(cache_dir.root), *args])


class TestList:
    
    def test_empty(self, cache_dir, capsys):
        assert _run(cache_dir, "list") == 0
        assert "No cached videos" in capsys.readouterr().out
    
    def test_table(self, cache_dir, saved_store, capsys):
        assert _run(cache_dir, "list") == 0
        out = capsys.readouterr().out
        assert "clip.mp4" in out
        assert "3 frames" in out
    
    def test_json(self, cache_dir, saved_store, capsys):
        assert _run(cache_dir, "list", "--json") == 0
        (entry,) = json.loads(capsys.readouterr().out)
        assert entry["video_id"] == "clip.mp4"
        assert entry["frame_count"] == 3
        assert entry["num_columns"] == 8
        assert entry["display_name"] == "clip.mp4"


class TestShow:
    
    def test_prints_frame_at_time(self, cache_dir, saved_store, capsys):
        assert _run(cache_dir, "show", "clip.mp4", "--at", "120") == 0
        assert capsys.readouterr().out == "@@@@@@@@\n@@@@@@@@\n"
    
    def test_first_frame_by_default(self, cache_dir, saved_store, capsys):
        assert _run(cache_dir, "show", "clip.mp4") == 0
        assert capsys.readouterr().out.strip("\n") == "        \n        "
    
    def test_missing_video(self, cache_dir, capsys):
        assert _run(cache_dir, "show", "nope") == 1
        assert "Could not load 'nope'" in capsys.readouterr().err


class TestDelete:
    
    def test_delete(self, cache_dir, saved_store):
        assert _run(cache_dir, "delete", "clip.mp4") == 0
        assert cache_dir.list() == []
    
    def test_delete_missing(self, cache_dir, capsys):
        assert _run(cache_dir, "delete", "nope") == 1
        assert "No cache for 'nope'" in capsys.readouterr().err


class TestConvert:
    
    @pytest.fixture
    def fake_video_source(self, monkeypatch):
        def source(path, fps):
            return [
                CapturedFrame(timestamp_ms=i * 50, pixels=solid_rgba(90, 160), width=90, height=160)
                for i in range(2)
            ]
        monkeypatch.setattr(batch, "VideoFrameSource", source)
    
    def test_convert(self, cache_dir, fake_video_source, capsys):
        assert _run(cache_dir, "convert", "videos/a.mp4", "--preset", "square-sd") == 0
        assert "a.mp4: Done!" in capsys.readouterr().out
        assert cache_dir.list() == ["a.ascache"]
    
    def test_output_directory(self, cache_dir, tmp_path, fake_video_source):
        out_dir = tmp_path / "out"
        assert _run(cache_dir, "convert", "a.mp4", "--output", str(out_dir)) == 0
        assert [p.name for p in out_dir.iterdir()] == ["a.ascache"]
        assert cache_dir.list() == []
    
    def test_recording_settings_without_preset(self, cache_dir, fake_video_source, monkeypatch):
        configured = Settings(recording=RecordingConfig(
            num_columns=40, brightness=1.5, charset="dots", frame_interval_ms=40,
        ))
        monkeypatch.setattr(cli, "settings", configured)
        
        assert _run(cache_dir, "convert", "a.mp4") == 0
        
        store = FrameStore(cache_dir)
        assert store.load_from_disk("a")
        assert store.metadata.num_columns == 40
        assert store.metadata.brightness == 1.5
        assert store.metadata.charset_key == CharsetKey.DOTS
        assert store.metadata.frame_interval_ms == 40
    
    def test_overrides_apply_to_preset(self, cache_dir, fake_video_source):
        assert _run(
            cache_dir, "convert", "a.mp4",
            "--preset", "square-sd", "--columns", "120", "--charset", "BLOCKS",
        ) == 0
        
        store = FrameStore(cache_dir)
        assert store.load_from_disk("a")
        assert store.metadata.num_columns == 120
        assert store.metadata.charset_key == CharsetKey.BLOCKS
        assert store.metadata.frame_interval_ms == 50
    
    def test_invalid_override(self, cache_dir, fake_video_source, capsys):
        assert _run(cache_dir, "convert", "a.mp4", "--columns", "10") == 2
        assert "Invalid capture settings" in capsys.readouterr().err
        assert cache_dir.list() == []
    
    def test_unknown_preset(self, cache_dir, capsys):
        assert _run(cache_dir, "convert", "a.mp4", "--preset", "VHS") == 2
        assert "Unknown preset" in capsys.readouterr().err


class TestPresets:
    
    def test_lists_all_presets(self, cache_dir, capsys):
        assert _run(cache_dir, "presets") == 0
        out = capsys.readouterr().out
        assert "iPhone Portrait SD" in out
        assert "80x71" in out
        assert len(out.strip().splitlines()) == 10
