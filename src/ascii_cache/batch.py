"""
Batch Converter
===============

Converts a queue of video files into .ascache files.

Each video is decoded through a FrameSource, recorded into its own
FrameStore with the active preset's settings, then saved into the
output CacheDirectory.

Design Rules:
    - Videos are processed sequentially, one FrameStore at a time
    - Cancellation is checked between videos only; a video already in
      progress always finishes (or fails) as a whole
    - A failing video is marked FAILED with its error and the queue
      moves on; nothing is retried
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

import cv2

from ascii_cache.cache.directory import CacheDirectory
from ascii_cache.cache.store import FrameStore
from ascii_cache.capture import CapturedFrame, VideoFrameSource, record
from ascii_cache.errors import AsciiCacheError
from ascii_cache.presets import DEFAULT_PRESET, ConversionPreset


logger = logging.getLogger(__name__)


SourceFactory = Callable[[Path, float], Iterable[CapturedFrame]]


class VideoStatus(str, Enum):
    """Progress of one queued video."""
    
    PENDING = "pending"
    EXTRACTING = "extracting"
    CONVERTING = "converting"
    SAVING = "saving"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class VideoItem:
    """
    One video in the conversion queue.
    
    Attributes:
        path: Source video path
        name: Filename shown in listings
        status: Current VideoStatus
        frame_count: Frames recorded (set once converting finishes)
        error: Failure message when status is FAILED
        output_path: Written cache path when status is COMPLETED
    """
    
    path: Path
    name: str
    status: VideoStatus = VideoStatus.PENDING
    frame_count: Optional[int] = None
    error: Optional[str] = None
    output_path: Optional[Path] = None
    
    @property
    def video_id(self) -> str:
        """Cache ID: the filename without its extension."""
        return self.path.stem
    
    @property
    def status_text(self) -> str:
        if self.status == VideoStatus.PENDING:
            return "Waiting..."
        if self.status == VideoStatus.EXTRACTING:
            return "Extracting frames..."
        if self.status == VideoStatus.CONVERTING:
            return "Converting..."
        if self.status == VideoStatus.SAVING:
            return "Saving..."
        if self.status == VideoStatus.COMPLETED:
            return "Done!"
        return f"Failed: {self.error or 'Unknown error'}"


class BatchConverter:
    """
    Sequential multi-video converter with cooperative cancellation.
    
    Example:
        converter = BatchConverter(CacheDirectory("./out"))
        converter.add_videos(["a.mp4", "b.mp4"])
        converter.run()
        
        # From another thread:
        converter.cancel()
    """
    
    def __init__(
        self,
        output: CacheDirectory,
        preset: ConversionPreset = DEFAULT_PRESET,
        source_factory: Optional[SourceFactory] = None,
    ) -> None:
        """
        Initialize batch converter.
        
        Args:
            output: Directory receiving the .ascache files
            preset: Capture settings applied to every video
            source_factory: Builds a frame source from (path, fps);
                defaults to OpenCV video decoding
        """
        self.output = output
        self.preset = preset
        self.source_factory = source_factory or VideoFrameSource
        
        self._videos: List[VideoItem] = []
        self._cancel_event = threading.Event()
        self._run_lock = threading.Lock()
    
    @property
    def videos(self) -> List[VideoItem]:
        return list(self._videos)
    
    @property
    def is_converting(self) -> bool:
        return self._run_lock.locked()
    
    @property
    def completed_count(self) -> int:
        return sum(1 for v in self._videos if v.status == VideoStatus.COMPLETED)
    
    @property
    def failed_count(self) -> int:
        return sum(1 for v in self._videos if v.status == VideoStatus.FAILED)
    
    # -------------------------------------------------------------------------
    # Queue management
    # -------------------------------------------------------------------------
    
    def add_videos(self, paths: Iterable[Union[str, Path]]) -> None:
        """Queue videos, skipping paths already queued."""
        known = {v.path for v in self._videos}
        for raw in paths:
            path = Path(raw)
            if path in known:
                continue
            known.add(path)
            self._videos.append(VideoItem(path=path, name=path.name))
    
    def remove_video(self, index: int) -> None:
        if 0 <= index < len(self._videos):
            del self._videos[index]
    
    def clear_all(self) -> None:
        self._videos.clear()
    
    # -------------------------------------------------------------------------
    # Conversion
    # -------------------------------------------------------------------------
    
    def cancel(self) -> None:
        """
        Request cancellation; takes effect before the next video.
        
        A request made before run() starts stops that run before its
        first video. The request is consumed when the run ends.
        """
        self._cancel_event.set()
    
    def run(self) -> List[VideoItem]:
        """
        Convert every queued video that is not yet completed.
        
        Returns:
            Snapshot of the queue after the run
        """
        if not self._run_lock.acquire(blocking=False):
            logger.warning("BatchConverter.run() called while already running")
            return self.videos
        
        logger.info(
            f"Batch conversion starting: {len(self._videos)} videos, "
            f"preset={self.preset.name!r}, output={self.output.root}"
        )
        
        try:
            for video in self._videos:
                if self._cancel_event.is_set():
                    logger.info("Batch conversion cancelled")
                    break
                if video.status == VideoStatus.COMPLETED:
                    continue
                self._convert_video(video)
        finally:
            self._cancel_event.clear()
            self._run_lock.release()
        
        logger.info(
            f"Batch conversion finished: {self.completed_count} completed, "
            f"{self.failed_count} failed"
        )
        return self.videos
    
    def _convert_video(self, video: VideoItem) -> None:
        preset = self.preset
        store = FrameStore(self.output)
        
        try:
            video.status = VideoStatus.EXTRACTING
            video.error = None
            source = self.source_factory(video.path, preset.fps)
            
            video.status = VideoStatus.CONVERTING
            store.start_recording(
                video_id=video.video_id,
                num_columns=preset.num_columns,
                brightness=preset.brightness,
                charset_key=preset.charset_key,
                frame_interval_ms=preset.frame_interval_ms,
            )
            video.frame_count = record(store, source)
            store.stop_recording()
            
            if video.frame_count == 0:
                raise AsciiCacheError("No frames extracted")
            
            video.status = VideoStatus.SAVING
            if not store.save_to_disk():
                raise store.last_error or AsciiCacheError("Save failed")
            
            video.output_path = self.output.path_for(
                self.output.filename_for(video.video_id)
            )
            video.status = VideoStatus.COMPLETED
            logger.info(f"Converted {video.name}: {video.frame_count} frames")
        
        except (AsciiCacheError, OSError, ValueError, cv2.error) as e:
            video.status = VideoStatus.FAILED
            video.error = str(e)
            logger.error(f"Failed to convert {video.name}: {e}")
        
        finally:
            store.clear()
