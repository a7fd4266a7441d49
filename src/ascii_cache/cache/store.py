"""
Frame Store
===========

Ordered collection of compressed frames for one logical video, with a
recording state machine, timestamp lookup and disk persistence.

State Machine:
    IDLE --start_recording--> RECORDING --stop_recording--> IDLE
    any  --load_from_disk---> LOADED
    any  --clear------------> IDLE (empty)

Design Rules:
    - Frames are appended only while RECORDING; add_frame() in any other
      state is a silent no-op
    - save/load/delete follow a boolean contract: failures are logged and
      kept in last_error, never raised
    - load_from_disk() decodes the whole file before touching the store,
      so a corrupt cache leaves the previous contents intact
    - A re-entrant lock serialises every mutation; the store is safe to
      hand to a capture thread, but recording and playback are expected
      to be mutually exclusive

Lookup Approximation:
    get_frame_at_time() assumes frames were captured exactly
    frame_interval_ms apart and computes round(t / interval). The
    per-frame timestamp map recorded by add_frame() is NOT consulted.
    Persisted caches rely on this rule; on variable-rate capture a query
    can land on a neighbouring frame.
"""

import logging
import threading
from typing import Dict, List, Optional, Tuple, Union

from ascii_cache.cache.codec import decode, encode
from ascii_cache.cache.directory import CacheDirectory
from ascii_cache.conversion.charsets import CharsetKey, to_charset_key, DEFAULT_CHARSET
from ascii_cache.conversion.compressor import PixelBuffer, compress
from ascii_cache.conversion.luma import clamp_brightness, round_half_up
from ascii_cache.errors import AsciiCacheError, CacheIOError, InvalidInputError
from ascii_cache.models.cache_info import CachedVideoInfo, format_byte_size
from ascii_cache.models.frame import (
    DEFAULT_FRAME_INTERVAL_MS,
    CacheMetadata,
    CompressedFrame,
)
from ascii_cache.models.state import StoreState


logger = logging.getLogger(__name__)


MAX_FRAME_INTERVAL_MS = 0xFFFF


class FrameStore:
    """
    In-memory frame cache for one video.
    
    Attributes:
        directory: CacheDirectory used for persistence (optional)
        state: Current StoreState
        metadata: Capture settings of the held frames
        last_error: Exception from the most recent failed save/load/delete
        
    Example:
        store = FrameStore(CacheDirectory("~/.ascii_cache"))
        store.start_recording("intro.mp4", num_columns=80, brightness=1.0,
                              charset_key=CharsetKey.STANDARD)
        for frame in source:
            store.add_frame(frame.timestamp_ms, frame.pixels,
                            frame.width, frame.height)
        store.stop_recording()
        store.save_to_disk()
    """
    
    def __init__(self, directory: Optional[CacheDirectory] = None) -> None:
        self.directory = directory
        
        self._lock = threading.RLock()
        self._frames: List[CompressedFrame] = []
        self._timestamp_to_index: Dict[int, int] = {}
        self._metadata = CacheMetadata.unset()
        self._state = StoreState.IDLE
        self.last_error: Optional[Exception] = None
    
    def __repr__(self) -> str:
        return (
            f"FrameStore(video_id={self._metadata.video_id!r}, "
            f"state={self._state.value}, "
            f"frames={len(self._frames)})"
        )
    
    # =========================================================================
    # Accessors
    # =========================================================================
    
    @property
    def state(self) -> StoreState:
        return self._state
    
    @property
    def metadata(self) -> CacheMetadata:
        return self._metadata
    
    @property
    def video_id(self) -> Optional[str]:
        return self._metadata.video_id
    
    @property
    def frames(self) -> Tuple[CompressedFrame, ...]:
        """Snapshot of the held frames in temporal order."""
        with self._lock:
            return tuple(self._frames)
    
    @property
    def frame_count(self) -> int:
        return len(self._frames)
    
    @property
    def is_empty(self) -> bool:
        return not self._frames
    
    @property
    def is_recording(self) -> bool:
        return self._state == StoreState.RECORDING
    
    @property
    def is_loaded(self) -> bool:
        return self._state == StoreState.LOADED
    
    @property
    def memory_usage_bytes(self) -> int:
        """Total bytes of frame data held."""
        with self._lock:
            return sum(frame.byte_size for frame in self._frames)
    
    @property
    def memory_usage_string(self) -> str:
        return format_byte_size(self.memory_usage_bytes)
    
    @property
    def recorded_timestamps(self) -> Dict[int, int]:
        """Copy of the timestamp_ms -> frame index map."""
        with self._lock:
            return dict(self._timestamp_to_index)
    
    # =========================================================================
    # Recording
    # =========================================================================
    
    def start_recording(
        self,
        video_id: str,
        num_columns: int,
        brightness: float = 1.0,
        charset_key: Union[CharsetKey, str] = DEFAULT_CHARSET,
        frame_interval_ms: int = DEFAULT_FRAME_INTERVAL_MS,
    ) -> None:
        """
        Discard held frames and begin recording.
        
        Calling again while recording restarts cleanly.
        
        Args:
            video_id: Logical video identifier (used as cache name)
            num_columns: Glyph columns per frame (>= 1)
            brightness: Multiplier, clamped to [0, 2]
            charset_key: Charset for glyph indices
            frame_interval_ms: Nominal capture spacing, clamped to [1, 65535]
            
        Raises:
            InvalidInputError: If num_columns < 1 or the charset is unknown
        """
        if num_columns < 1:
            raise InvalidInputError(f"num_columns must be >= 1, got {num_columns}")
        try:
            key = to_charset_key(charset_key)
        except ValueError as e:
            raise InvalidInputError(str(e)) from e
        
        interval = min(MAX_FRAME_INTERVAL_MS, max(1, int(frame_interval_ms)))
        
        with self._lock:
            self._reset()
            self._metadata = CacheMetadata(
                video_id=video_id,
                num_columns=num_columns,
                brightness=clamp_brightness(brightness),
                charset_key=key,
                frame_interval_ms=interval,
            )
            self._state = StoreState.RECORDING
            started = self._metadata.to_dict()
        
        logger.info(f"Recording started: {started}")
    
    def add_frame(
        self,
        timestamp_ms: int,
        pixels: PixelBuffer,
        width: int,
        height: int,
    ) -> Optional[CompressedFrame]:
        """
        Compress and append a frame while recording.
        
        Args:
            timestamp_ms: Capture time of the frame
            pixels: RGBA pixel buffer
            width: Image width in pixels
            height: Image height in pixels
            
        Returns:
            The stored CompressedFrame, or None if not recording
            
        Raises:
            InvalidInputError: On unusable pixel data (store unchanged)
        """
        with self._lock:
            if self._state != StoreState.RECORDING:
                logger.debug(
                    f"add_frame ignored in state {self._state.value}"
                )
                return None
            
            meta = self._metadata
            frame = compress(
                pixels,
                width,
                height,
                num_columns=meta.num_columns,
                charset_key=meta.charset_key,
                brightness=meta.brightness,
            )
            self._timestamp_to_index[timestamp_ms] = len(self._frames)
            self._frames.append(frame)
            return frame
    
    def stop_recording(self) -> None:
        """Stop recording; held frames are kept."""
        with self._lock:
            if self._state == StoreState.RECORDING:
                self._state = StoreState.IDLE
                logger.info(
                    f"Recording stopped: {len(self._frames)} frames, "
                    f"{self.memory_usage_string}"
                )
    
    # =========================================================================
    # Lookup
    # =========================================================================
    
    def get_frame(self, index: int) -> Optional[CompressedFrame]:
        with self._lock:
            if 0 <= index < len(self._frames):
                return self._frames[index]
            return None
    
    def get_frame_index_for_time(self, timestamp_ms: float) -> int:
        """
        Index of the frame shown at a playback position.
        
        Uses the nominal interval: round(t / frame_interval_ms), clamped
        to the held frames. Returns 0 for an empty store.
        """
        with self._lock:
            if not self._frames:
                return 0
            index = round_half_up(timestamp_ms / self._metadata.frame_interval_ms)
            return min(len(self._frames) - 1, max(0, index))
    
    def get_frame_at_time(self, timestamp_ms: float) -> Optional[CompressedFrame]:
        """Frame for a playback position, or None if the store is empty."""
        with self._lock:
            if not self._frames:
                return None
            return self._frames[self.get_frame_index_for_time(timestamp_ms)]
    
    # =========================================================================
    # Reset
    # =========================================================================
    
    def _reset(self) -> None:
        self._frames = []
        self._timestamp_to_index = {}
        self._metadata = CacheMetadata.unset()
        self._state = StoreState.IDLE
    
    def clear(self) -> None:
        """Drop all frames and metadata, returning to IDLE."""
        with self._lock:
            self._reset()
        logger.debug("FrameStore cleared")
    
    # =========================================================================
    # Serialization
    # =========================================================================
    
    def to_bytes(self) -> bytes:
        """Encode held frames and metadata to the .ascache format."""
        with self._lock:
            return encode(self._metadata, self._frames)
    
    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        video_id: Optional[str] = None,
        directory: Optional[CacheDirectory] = None,
    ) -> "FrameStore":
        """
        Build a LOADED store from an .ascache payload.
        
        Raises:
            CorruptCacheError, UnsupportedVersionError: On malformed input
        """
        store = cls(directory)
        store._apply_decoded(data, video_id)
        return store
    
    def _apply_decoded(self, data: bytes, video_id: Optional[str]) -> None:
        decoded = decode(data, video_id=video_id)
        interval = decoded.metadata.frame_interval_ms
        
        with self._lock:
            self._frames = list(decoded.frames)
            self._timestamp_to_index = {
                i * interval: i for i in range(len(decoded.frames))
            }
            self._metadata = decoded.metadata
            self._state = StoreState.LOADED
    
    # =========================================================================
    # Persistence
    # =========================================================================
    
    def _require_directory(self) -> CacheDirectory:
        if self.directory is None:
            raise CacheIOError("FrameStore has no cache directory configured")
        return self.directory
    
    def save_to_disk(self) -> bool:
        """
        Persist held frames to <directory>/<sanitized video_id>.ascache.
        
        Refused (False) while recording, when empty or without a video ID.
        
        Returns:
            True if the cache file was written
        """
        with self._lock:
            if self._state == StoreState.RECORDING:
                logger.warning("save_to_disk refused: stop recording first")
                return False
            if not self._frames or self._metadata.video_id is None:
                logger.warning("save_to_disk refused: nothing to save")
                return False
            
            try:
                directory = self._require_directory()
                filename = directory.filename_for(self._metadata.video_id)
                path = directory.write(filename, self.to_bytes())
            except (AsciiCacheError, OSError) as e:
                self.last_error = e
                logger.error(f"Failed to save cache: {e}")
                return False
        
        self.last_error = None
        logger.info(f"Saved {self.frame_count} frames to {path}")
        return True
    
    def load_from_disk(self, video_id: str) -> bool:
        """
        Replace the store contents with a persisted cache.
        
        On failure the current frames and metadata are left untouched.
        
        Returns:
            True if the cache was loaded
        """
        try:
            directory = self._require_directory()
            filename = directory.filename_for(video_id)
            if not directory.exists(filename):
                raise CacheIOError(f"No cache for {video_id!r}")
            payload = directory.read(filename)
            self._apply_decoded(payload, video_id)
        except (AsciiCacheError, OSError) as e:
            self.last_error = e
            logger.error(f"Failed to load cache for {video_id!r}: {e}")
            return False
        
        self.last_error = None
        logger.info(
            f"Loaded {self.frame_count} frames for {video_id!r} "
            f"({self.memory_usage_string})"
        )
        return True
    
    def cache_exists(self, video_id: str) -> bool:
        if self.directory is None:
            return False
        return self.directory.exists(self.directory.filename_for(video_id))
    
    def delete_cache(self, video_id: str) -> bool:
        """Delete a persisted cache; a missing file counts as deleted."""
        try:
            directory = self._require_directory()
        except CacheIOError as e:
            self.last_error = e
            logger.error(str(e))
            return False
        
        filename = directory.filename_for(video_id)
        if not directory.delete(filename):
            self.last_error = CacheIOError(
                f"Failed to delete {directory.path_for(filename)}"
            )
            return False
        
        self.last_error = None
        return True
    
    def list_cached_videos(self) -> List[str]:
        """Video IDs (filename stems) of all persisted caches."""
        if self.directory is None:
            return []
        try:
            return [
                name.rsplit(".", 1)[0] for name in self.directory.list()
            ]
        except CacheIOError as e:
            self.last_error = e
            logger.error(str(e))
            return []
    
    def list_cached_videos_with_info(self) -> List[CachedVideoInfo]:
        """Header-derived info for all persisted caches, newest first."""
        if self.directory is None:
            return []
        try:
            return self.directory.list_info()
        except CacheIOError as e:
            self.last_error = e
            logger.error(str(e))
            return []
