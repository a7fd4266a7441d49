"""
Data Models
===========

Models:
    Frames:
        - CompressedFrame: 4-bytes-per-cell encoding of one frame
        - CacheMetadata: Capture settings shared by a store's frames
    
    State:
        - StoreState: Frame store lifecycle (IDLE, RECORDING, LOADED)
    
    Listing:
        - CachedVideoInfo: Header-derived summary of a cache file
"""

from ascii_cache.models.frame import CacheMetadata, CompressedFrame
from ascii_cache.models.state import StoreState
from ascii_cache.models.cache_info import CachedVideoInfo, format_byte_size

__all__ = [
    # Frames
    "CompressedFrame",
    "CacheMetadata",
    # State
    "StoreState",
    # Listing
    "CachedVideoInfo",
    "format_byte_size",
]
