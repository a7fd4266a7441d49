"""
Binary Codec
============

Serializes cache metadata plus compressed frames to the .ascache format.

Wire Format (big-endian, unsigned):
    Header (16 bytes):
        magic            4   "ASC\\0"
        version          1   currently 1
        num_columns      2
        brightness_centi 2   round(brightness * 100)
        charset_index    1   ordinal of the CharsetKey
        frame_interval   2   milliseconds
        frame_count      4
    Per frame (frame_count times):
        width            2
        height           2
        data_length      4
        data             data_length bytes

Both layouts are declared once as schema tables; struct formats, sizes
and value ranges are derived from them.

Design Rules:
    - decode() is pure and all-or-nothing: it returns fully parsed
      metadata and frames or raises, never a partial result
    - Every read is bounds-checked; overruns raise CorruptCacheError
    - No version negotiation: anything but version 1 is rejected
"""

import logging
import struct
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from ascii_cache.conversion.charsets import charset_from_index, charset_index
from ascii_cache.conversion.luma import round_half_up
from ascii_cache.errors import (
    CorruptCacheError,
    InvalidInputError,
    UnsupportedVersionError,
)
from ascii_cache.models.frame import BYTES_PER_CELL, CacheMetadata, CompressedFrame


logger = logging.getLogger(__name__)


MAGIC = b"ASC\x00"
FORMAT_VERSION = 1
FILE_EXTENSION = ".ascache"


@dataclass(frozen=True)
class FieldSpec:
    """One fixed-width field of a binary record."""
    
    name: str
    fmt: str
    
    @property
    def max_value(self) -> Optional[int]:
        """Largest storable value for integer fields."""
        if self.fmt.endswith("s"):
            return None
        return (1 << (8 * struct.calcsize(">" + self.fmt))) - 1


HEADER_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("magic", "4s"),
    FieldSpec("version", "B"),
    FieldSpec("num_columns", "H"),
    FieldSpec("brightness_centi", "H"),
    FieldSpec("charset_index", "B"),
    FieldSpec("frame_interval_ms", "H"),
    FieldSpec("frame_count", "I"),
)

FRAME_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("width", "H"),
    FieldSpec("height", "H"),
    FieldSpec("data_length", "I"),
)


class RecordSchema:
    """
    Big-endian struct built from a field table.
    
    pack() takes a mapping of field name -> value and range-checks every
    integer against its field width before packing. unpack_from() checks
    that the record fits in the buffer before reading it.
    """
    
    def __init__(self, name: str, fields: Sequence[FieldSpec]) -> None:
        self.name = name
        self.fields = tuple(fields)
        self._struct = struct.Struct(">" + "".join(f.fmt for f in self.fields))
    
    @property
    def size(self) -> int:
        return self._struct.size
    
    def pack(self, values: Dict[str, object]) -> bytes:
        ordered = []
        for spec in self.fields:
            value = values[spec.name]
            limit = spec.max_value
            if limit is not None and not 0 <= value <= limit:
                raise InvalidInputError(
                    f"{self.name}.{spec.name}={value} does not fit "
                    f"in {spec.fmt} (0..{limit})"
                )
            ordered.append(value)
        return self._struct.pack(*ordered)
    
    def unpack_from(self, data: bytes, offset: int = 0) -> Dict[str, object]:
        end = offset + self.size
        if end > len(data):
            raise CorruptCacheError(
                f"Truncated {self.name} at offset {offset}: "
                f"need {self.size} bytes, {max(0, len(data) - offset)} available"
            )
        values = self._struct.unpack_from(data, offset)
        return dict(zip((f.name for f in self.fields), values))


HEADER = RecordSchema("header", HEADER_FIELDS)
FRAME_HEADER = RecordSchema("frame", FRAME_FIELDS)

HEADER_SIZE = HEADER.size


@dataclass(frozen=True)
class DecodedCache:
    """Result of a successful decode."""
    
    metadata: CacheMetadata
    frames: List[CompressedFrame]
    
    @property
    def frame_count(self) -> int:
        return len(self.frames)


@dataclass(frozen=True)
class HeaderInfo:
    """Fields readable from the header alone."""
    
    num_columns: int = 0
    frame_count: int = 0


# =============================================================================
# Encoding
# =============================================================================

def encode(metadata: CacheMetadata, frames: Sequence[CompressedFrame]) -> bytes:
    """
    Serialize metadata and frames.
    
    Args:
        metadata: Capture settings written to the header
        frames: Frames in temporal order
        
    Returns:
        Complete .ascache payload
        
    Raises:
        InvalidInputError: If a value does not fit its field
    """
    parts = [
        HEADER.pack({
            "magic": MAGIC,
            "version": FORMAT_VERSION,
            "num_columns": metadata.num_columns,
            "brightness_centi": round_half_up(metadata.brightness * 100),
            "charset_index": charset_index(metadata.charset_key),
            "frame_interval_ms": metadata.frame_interval_ms,
            "frame_count": len(frames),
        })
    ]
    
    for frame in frames:
        parts.append(FRAME_HEADER.pack({
            "width": frame.width,
            "height": frame.height,
            "data_length": len(frame.data),
        }))
        parts.append(bytes(frame.data))
    
    return b"".join(parts)


# =============================================================================
# Decoding
# =============================================================================

def decode(data: bytes, video_id: Optional[str] = None) -> DecodedCache:
    """
    Parse a complete .ascache payload.
    
    Args:
        data: Raw file contents
        video_id: Identifier to attach to the metadata (not stored in
            the file itself)
        
    Returns:
        DecodedCache with metadata and frames in file order
        
    Raises:
        CorruptCacheError: Bad magic, truncation, overrun, unknown charset
            ordinal, zero frame interval or a frame whose length disagrees
            with its dimensions
        UnsupportedVersionError: Version byte other than 1
    """
    data = bytes(data)
    
    if data[:len(MAGIC)] != MAGIC:
        raise CorruptCacheError(f"Bad magic: {data[:len(MAGIC)]!r}")
    
    if len(data) > len(MAGIC) and data[len(MAGIC)] != FORMAT_VERSION:
        raise UnsupportedVersionError(data[len(MAGIC)])
    
    header = HEADER.unpack_from(data, 0)
    offset = HEADER.size
    
    try:
        charset_key = charset_from_index(header["charset_index"])
    except ValueError as e:
        raise CorruptCacheError(str(e)) from e
    
    if header["frame_interval_ms"] == 0:
        raise CorruptCacheError("Frame interval must be at least 1 ms, got 0")
    
    metadata = CacheMetadata(
        video_id=video_id,
        num_columns=header["num_columns"],
        brightness=header["brightness_centi"] / 100.0,
        charset_key=charset_key,
        frame_interval_ms=header["frame_interval_ms"],
    )
    
    frame_count = header["frame_count"]
    frames: List[CompressedFrame] = []
    
    for index in range(frame_count):
        fields = FRAME_HEADER.unpack_from(data, offset)
        offset += FRAME_HEADER.size
        
        width = fields["width"]
        height = fields["height"]
        length = fields["data_length"]
        
        if length != width * height * BYTES_PER_CELL:
            raise CorruptCacheError(
                f"Frame {index}: data_length {length} does not match "
                f"{width}x{height} cells"
            )
        if offset + length > len(data):
            raise CorruptCacheError(
                f"Frame {index}: truncated data at offset {offset} "
                f"(need {length} bytes, {len(data) - offset} available)"
            )
        
        frames.append(CompressedFrame(
            data=data[offset:offset + length],
            width=width,
            height=height,
        ))
        offset += length
    
    if offset < len(data):
        logger.warning(
            f"Ignoring {len(data) - offset} trailing bytes after "
            f"{frame_count} frames"
        )
    
    return DecodedCache(metadata=metadata, frames=frames)


def parse_header_info(head: bytes) -> HeaderInfo:
    """
    Read column and frame counts from the first 16 bytes of a cache.
    
    Short or foreign headers yield HeaderInfo(0, 0) rather than raising,
    so directory listings never fail on a single bad file.
    """
    if len(head) < HEADER_SIZE or head[:len(MAGIC)] != MAGIC:
        return HeaderInfo()
    
    fields = HEADER.unpack_from(head, 0)
    return HeaderInfo(
        num_columns=fields["num_columns"],
        frame_count=fields["frame_count"],
    )
