"""
ascii_cache
===========

Glyph-based frame compression and the .ascache binary cache.

Raw RGBA frames are sampled on a coarse grid, each cell mapped to a glyph
index by perceptual luma, and the resulting compact frames collected in a
FrameStore that can be persisted and replayed without re-converting.

Components:
    - conversion: Glyph registry, luma mapping, frame compression
    - models: Frame, metadata, state and listing types
    - cache: FrameStore, binary codec, cache directory
    - capture: OpenCV frame sources feeding a recording store
    - batch: Multi-video conversion with cancellation
    - presets: Named capture settings

Example:
    from ascii_cache.cache import CacheDirectory, FrameStore
    from ascii_cache.conversion import CharsetKey
    
    store = FrameStore(CacheDirectory("~/.ascii_cache"))
    store.start_recording("clip", num_columns=80, brightness=1.0,
                          charset_key=CharsetKey.STANDARD)
    store.add_frame(0, pixels, width, height)
    store.stop_recording()
    store.save_to_disk()
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
