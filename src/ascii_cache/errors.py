"""
Error Taxonomy
==============

Exceptions raised by the conversion and cache layers.

Pure functions (compression, encode/decode) raise these directly.
FrameStore operations with a boolean contract (save/load/delete) catch
them, log, and expose the failure through ``FrameStore.last_error``.

Hierarchy:
    AsciiCacheError
        InvalidInputError       - bad dimensions, short pixel buffers, values
                                  that do not fit their wire field
        CacheFormatError
            CorruptCacheError       - bad magic, truncated data, offset overrun
            UnsupportedVersionError - version byte not recognised
        CacheIOError            - filesystem read/write/delete failure
"""


class AsciiCacheError(Exception):
    """Base class for all ascii_cache errors."""
    pass


class InvalidInputError(AsciiCacheError, ValueError):
    """Raised when caller-supplied frame data or settings are unusable."""
    pass


class CacheFormatError(AsciiCacheError):
    """Raised when a byte stream is not a readable .ascache payload."""
    pass


class CorruptCacheError(CacheFormatError):
    """Raised for bad magic, truncated frames or out-of-range fields."""
    pass


class UnsupportedVersionError(CacheFormatError):
    """Raised when the version byte is not one this reader understands."""
    
    def __init__(self, version: int) -> None:
        super().__init__(f"Unsupported cache version: {version}")
        self.version = version


class CacheIOError(AsciiCacheError, OSError):
    """Raised when the cache directory cannot be read or written."""
    pass
