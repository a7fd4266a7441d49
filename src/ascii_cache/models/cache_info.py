"""
Cached Video Listing
====================

Read-only summary of a persisted .ascache file, built from the file's
stat() and its 16-byte header without decoding any frame data.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


ASSUMED_CAPTURE_FPS = 20


def format_byte_size(num_bytes: int) -> str:
    """Human-readable byte count: '512 B', '1.5 KB', '2.0 MB'."""
    if num_bytes < 1024:
        return f"{num_bytes} B"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024:.1f} KB"
    return f"{num_bytes / (1024 * 1024):.1f} MB"


class CachedVideoInfo(BaseModel):
    """
    Summary of one cached video.
    
    Attributes:
        video_id: Cache filename without extension
        display_name: Short human-friendly title
        file_size_bytes: Size of the cache file
        frame_count: Frame count from the header (0 if unreadable)
        num_columns: Column count from the header (0 if unreadable)
        modified_at: File modification time
    """
    
    model_config = ConfigDict(frozen=True)
    
    video_id: str = Field(..., description="Cache filename without extension")
    display_name: str = Field(..., description="Short human-friendly title")
    file_size_bytes: int = Field(..., ge=0, description="Size of the cache file")
    frame_count: int = Field(default=0, ge=0, description="Frames in the cache")
    num_columns: int = Field(default=0, ge=0, description="Glyph columns per frame")
    modified_at: datetime = Field(..., description="File modification time")
    
    @property
    def file_size_string(self) -> str:
        return format_byte_size(self.file_size_bytes)
    
    @property
    def duration_estimate(self) -> str:
        """Playback length assuming the default 20 fps capture rate."""
        seconds = int(self.frame_count / ASSUMED_CAPTURE_FPS + 0.5)
        if seconds < 60:
            return f"{seconds}s"
        return f"{seconds // 60}m {seconds % 60}s"
