"""
Cache Module
============

Frame storage and the .ascache persistence layer.

Components:
    - FrameStore: Ordered frame cache with recording state machine
    - codec: Byte-exact .ascache encoder/decoder
    - CacheDirectory: Filesystem naming, atomic writes, listings

Example:
    from ascii_cache.cache import CacheDirectory, FrameStore
    
    store = FrameStore(CacheDirectory("~/.ascii_cache"))
    if store.load_from_disk("intro.mp4"):
        frame = store.get_frame_at_time(1500)
"""

from ascii_cache.cache.codec import (
    FILE_EXTENSION,
    FORMAT_VERSION,
    HEADER_SIZE,
    MAGIC,
    DecodedCache,
    HeaderInfo,
    decode,
    encode,
    parse_header_info,
)
from ascii_cache.cache.directory import CacheDirectory, display_name, sanitize
from ascii_cache.cache.store import FrameStore


__all__ = [
    "FILE_EXTENSION",
    "FORMAT_VERSION",
    "HEADER_SIZE",
    "MAGIC",
    "DecodedCache",
    "HeaderInfo",
    "decode",
    "encode",
    "parse_header_info",
    "CacheDirectory",
    "display_name",
    "sanitize",
    "FrameStore",
]
