"""
Cache Directory Tests
=====================

Naming, atomic writes, listing and the CachedVideoInfo summary.
"""

import os
from datetime import datetime

import pytest
from pydantic import ValidationError

from ascii_cache.cache import CacheDirectory, display_name, encode, sanitize
from ascii_cache.errors import CacheIOError
from ascii_cache.models import CacheMetadata, CachedVideoInfo, CompressedFrame
from ascii_cache.models.cache_info import format_byte_size


def _payload(num_columns: int = 8, frames: int = 2) -> bytes:
    frame = CompressedFrame(data=bytes(8 * 4), width=8, height=1)
    return encode(CacheMetadata(video_id="x", num_columns=num_columns), [frame] * frames)


class TestNaming:
    """Tests for video ID sanitization."""
    
    def test_sanitize_scenario(self):
        assert sanitize("my video/clip #1.mp4") == "my_video_clip__1.mp4"
    
    def test_sanitize_keeps_safe_characters(self):
        assert sanitize("Clip-01_final.v2") == "Clip-01_final.v2"
    
    def test_no_path_separators_survive(self):
        assert "/" not in sanitize("../../etc/passwd")
        assert "\\" not in sanitize("..\\windows")
    
    def test_filename_for(self, cache_dir):
        assert cache_dir.filename_for("my video.mp4") == "my_video.mp4.ascache"
        assert cache_dir.path_for("a.ascache") == cache_dir.root / "a.ascache"
    
    def test_root_expands_user(self):
        directory = CacheDirectory("~/caches")
        assert "~" not in str(directory.root)


class TestDisplayName:
    """Tests for list-view titles."""
    
    @pytest.mark.parametrize("video_id, expected", [
        ("assets_videos_intro.mp4", "intro"),
        ("my-clip", "my clip"),
        ("plain_name", "plain name"),
        ("a_really_long_video_name_without_dots", "a really long vid..."),
        ("", "Untitled"),
    ])
    def test_display_name(self, video_id, expected):
        assert display_name(video_id) == expected
    
    def test_twenty_characters_not_truncated(self):
        assert display_name("x" * 20) == "x" * 20


class TestFileOperations:
    """Tests for write/read/delete/list."""
    
    def test_write_creates_root(self, cache_dir):
        assert not cache_dir.root.exists()
        path = cache_dir.write("a.ascache", b"payload")
        assert path == cache_dir.root / "a.ascache"
        assert cache_dir.read("a.ascache") == b"payload"
    
    def test_write_leaves_no_temp_files(self, cache_dir):
        cache_dir.write("a.ascache", b"first")
        cache_dir.write("a.ascache", b"second")
        assert os.listdir(cache_dir.root) == ["a.ascache"]
        assert cache_dir.read("a.ascache") == b"second"
    
    def test_failed_write_keeps_previous_file(self, cache_dir, monkeypatch):
        cache_dir.write("a.ascache", b"original")
        
        def broken_replace(src, dst):
            raise OSError("disk full")
        
        monkeypatch.setattr(os, "replace", broken_replace)
        with pytest.raises(CacheIOError):
            cache_dir.write("a.ascache", b"replacement")
        monkeypatch.undo()
        
        assert cache_dir.read("a.ascache") == b"original"
        assert os.listdir(cache_dir.root) == ["a.ascache"]
    
    def test_read_missing(self, cache_dir):
        with pytest.raises(CacheIOError):
            cache_dir.read("missing.ascache")
    
    def test_delete(self, cache_dir):
        cache_dir.write("a.ascache", b"x")
        assert cache_dir.delete("a.ascache")
        assert not cache_dir.exists("a.ascache")
        assert cache_dir.delete("a.ascache")
    
    def test_list_filters_extension(self, cache_dir):
        cache_dir.write("b.ascache", b"x")
        cache_dir.write("a.ascache", b"x")
        cache_dir.write("notes.txt", b"x")
        (cache_dir.root / "dir.ascache").mkdir()
        assert cache_dir.list() == ["a.ascache", "b.ascache"]
    
    def test_list_missing_root(self, cache_dir):
        assert cache_dir.list() == []


class TestInfo:
    """Tests for header-derived listing info."""
    
    def test_info_from_header(self, cache_dir):
        payload = _payload(num_columns=8, frames=2)
        cache_dir.write("assets_intro.mp4.ascache", payload)
        
        info = cache_dir.info("assets_intro.mp4.ascache")
        assert info.video_id == "assets_intro.mp4"
        assert info.display_name == "intro"
        assert info.file_size_bytes == len(payload)
        assert info.frame_count == 2
        assert info.num_columns == 8
        assert isinstance(info.modified_at, datetime)
    
    def test_short_file_lists_with_zero_counts(self, cache_dir):
        cache_dir.write("stub.ascache", b"ASC")
        info = cache_dir.info("stub.ascache")
        assert info.frame_count == 0
        assert info.num_columns == 0
        assert info.file_size_bytes == 3
    
    def test_list_info_newest_first(self, cache_dir):
        cache_dir.write("old.ascache", _payload())
        cache_dir.write("new.ascache", _payload())
        os.utime(cache_dir.path_for("old.ascache"), (1_000_000, 1_000_000))
        os.utime(cache_dir.path_for("new.ascache"), (2_000_000, 2_000_000))
        
        assert [i.video_id for i in cache_dir.list_info()] == ["new", "old"]


class TestCachedVideoInfo:
    """Tests for the listing model's derived strings."""
    
    def _info(self, **overrides) -> CachedVideoInfo:
        values = dict(
            video_id="clip",
            display_name="clip",
            file_size_bytes=0,
            frame_count=0,
            num_columns=80,
            modified_at=datetime(2024, 1, 1),
        )
        values.update(overrides)
        return CachedVideoInfo(**values)
    
    @pytest.mark.parametrize("frames, expected", [
        (0, "0s"),
        (10, "1s"),
        (200, "10s"),
        (1200, "1m 0s"),
        (1530, "1m 17s"),
    ])
    def test_duration_estimate(self, frames, expected):
        assert self._info(frame_count=frames).duration_estimate == expected
    
    @pytest.mark.parametrize("size, expected", [
        (0, "0 B"),
        (1023, "1023 B"),
        (1536, "1.5 KB"),
        (2 * 1024 * 1024, "2.0 MB"),
    ])
    def test_format_byte_size(self, size, expected):
        assert format_byte_size(size) == expected
        assert self._info(file_size_bytes=size).file_size_string == expected
    
    def test_is_frozen(self):
        info = self._info()
        with pytest.raises(ValidationError):
            info.frame_count = 5
