"""
Frame Data Models
=================

Compressed frame and cache metadata representations.

CompressedFrame Layout:
    4 bytes per cell, row-major, row 0 = top:
        [glyph_index, r, g, b]
    Cell (row, col) starts at offset (row * width + col) * 4.

The glyph index refers to the charset recorded in CacheMetadata; frames
are not self-describing.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from ascii_cache.conversion.charsets import DEFAULT_CHARSET, CharsetKey
from ascii_cache.errors import InvalidInputError


BYTES_PER_CELL = 4
DEFAULT_FRAME_INTERVAL_MS = 50


@dataclass(frozen=True, slots=True)
class CompressedFrame:
    """
    One converted video frame, 4 bytes per cell.
    
    Attributes:
        data: Raw cell bytes, len == width * height * 4
        width: Number of glyph columns
        height: Number of glyph rows
    """
    
    data: bytes
    width: int
    height: int
    
    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.width < 0 or self.height < 0:
            raise InvalidInputError(
                f"Frame dimensions must be non-negative: {self.width}x{self.height}"
            )
        expected = self.width * self.height * BYTES_PER_CELL
        if len(self.data) != expected:
            raise InvalidInputError(
                f"Frame data length {len(self.data)} does not match "
                f"{self.width}x{self.height} cells ({expected} bytes)"
            )
    
    @property
    def cell_count(self) -> int:
        return self.width * self.height
    
    @property
    def byte_size(self) -> int:
        return len(self.data)
    
    def _offset(self, col: int, row: int) -> int:
        if not (0 <= col < self.width and 0 <= row < self.height):
            raise IndexError(f"Cell ({col}, {row}) outside {self.width}x{self.height}")
        return (row * self.width + col) * BYTES_PER_CELL
    
    def glyph_index(self, col: int, row: int) -> int:
        """Glyph index stored at a cell."""
        return self.data[self._offset(col, row)]
    
    def rgb(self, col: int, row: int) -> Tuple[int, int, int]:
        """Sampled source colour stored at a cell."""
        offset = self._offset(col, row)
        return (
            self.data[offset + 1],
            self.data[offset + 2],
            self.data[offset + 3],
        )
    
    def __repr__(self) -> str:
        """Compact repr that doesn't dump the cell data."""
        return (
            f"CompressedFrame(width={self.width}, "
            f"height={self.height}, "
            f"bytes={len(self.data)})"
        )


@dataclass(frozen=True, slots=True)
class CacheMetadata:
    """
    Capture settings shared by every frame in a store.
    
    Set once when recording starts, replaced wholesale on load.
    
    Attributes:
        video_id: Logical video identifier (None when unset)
        num_columns: Requested glyph columns per frame
        brightness: Brightness multiplier used during capture
        charset_key: Charset the glyph indices refer to
        frame_interval_ms: Nominal spacing between captured frames
    """
    
    video_id: Optional[str] = None
    num_columns: int = 0
    brightness: float = 1.0
    charset_key: CharsetKey = DEFAULT_CHARSET
    frame_interval_ms: int = DEFAULT_FRAME_INTERVAL_MS
    
    @classmethod
    def unset(cls) -> "CacheMetadata":
        """Metadata of an empty, never-recorded store."""
        return cls()
    
    @property
    def is_set(self) -> bool:
        return self.video_id is not None
    
    def to_dict(self) -> dict:
        """Export as dictionary for logging/serialization."""
        return {
            "video_id": self.video_id,
            "num_columns": self.num_columns,
            "brightness": round(self.brightness, 2),
            "charset": self.charset_key.value,
            "frame_interval_ms": self.frame_interval_ms,
        }
