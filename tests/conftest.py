"""
Test Configuration
==================

Pytest fixtures and test configuration for ascii_cache.
"""

import numpy as np
import pytest

from ascii_cache.cache import CacheDirectory, FrameStore
from ascii_cache.conversion import CharsetKey


def solid_rgba(width: int, height: int, rgb=(0, 0, 0), alpha: int = 255) -> np.ndarray:
    """Uniform RGBA image, shape (height, width, 4)."""
    image = np.empty((height, width, 4), dtype=np.uint8)
    image[..., :3] = rgb
    image[..., 3] = alpha
    return image


def gradient_rgba(width: int, height: int) -> np.ndarray:
    """Left-to-right grey ramp from black to white."""
    ramp = np.linspace(0, 255, width).round().astype(np.uint8)
    image = np.empty((height, width, 4), dtype=np.uint8)
    image[..., 0] = ramp
    image[..., 1] = ramp
    image[..., 2] = ramp
    image[..., 3] = 255
    return image


@pytest.fixture
def cache_dir(tmp_path):
    """Empty cache directory under pytest's tmp_path."""
    return CacheDirectory(tmp_path / "cache")


@pytest.fixture
def recorded_store(cache_dir):
    """Stopped store holding three distinct frames at 50ms spacing."""
    store = FrameStore(cache_dir)
    store.start_recording(
        video_id="clip.mp4",
        num_columns=8,
        brightness=1.0,
        charset_key=CharsetKey.STANDARD,
        frame_interval_ms=50,
    )
    for i, grey in enumerate((0, 128, 255)):
        store.add_frame(i * 50, solid_rgba(32, 16, (grey, grey, grey)), 32, 16)
    store.stop_recording()
    return store
