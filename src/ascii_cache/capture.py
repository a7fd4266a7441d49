"""
Frame Capture
=============

Producers of raw RGBA frames for recording.

A capture source yields CapturedFrame items on a fixed cadence; the
FrameStore consumes them synchronously through record() and knows
nothing about how they were scheduled or decoded.

Design Rules:
    - This is the ONLY place in the codebase that decodes images/video
    - Output is always RGBA uint8, shape (H, W, 4)
    - Timestamps are nominal: round(i * 1000 / fps), matching the
      uniform-interval lookup used on playback
    - Fails fast on undecodable input (InvalidInputError)
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Protocol, Sequence, Union

import cv2
import numpy as np

from ascii_cache.cache.store import FrameStore
from ascii_cache.conversion.luma import round_half_up
from ascii_cache.errors import InvalidInputError


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CapturedFrame:
    """
    One raw frame ready for compression.
    
    Attributes:
        timestamp_ms: Nominal capture time
        pixels: RGBA image as np.ndarray (H, W, 4), dtype=uint8
        width: Image width in pixels
        height: Image height in pixels
    """
    
    timestamp_ms: int
    pixels: np.ndarray
    width: int
    height: int
    
    def __repr__(self) -> str:
        """Compact repr that doesn't dump the pixels."""
        return (
            f"CapturedFrame(timestamp_ms={self.timestamp_ms}, "
            f"size={self.width}x{self.height})"
        )


class FrameSource(Protocol):
    """
    Protocol for capture producers.
    
    Implementations yield CapturedFrame items in temporal order.
    """
    
    def __iter__(self) -> Iterator[CapturedFrame]:
        ...


def nominal_timestamp_ms(index: int, fps: float) -> int:
    """Capture time of the index-th frame at a fixed rate."""
    return round_half_up(index * 1000 / fps)


def frame_interval_ms(fps: float) -> int:
    """Nominal spacing between frames at a fixed rate."""
    return round_half_up(1000 / fps)


def bgr_to_captured(bgr: np.ndarray, timestamp_ms: int) -> CapturedFrame:
    """
    Convert an OpenCV BGR image into a CapturedFrame.
    
    Raises:
        InvalidInputError: If the image is not 3-channel uint8
    """
    if bgr is None or bgr.ndim != 3 or bgr.shape[2] != 3:
        shape = None if bgr is None else bgr.shape
        raise InvalidInputError(f"Expected a BGR image, got shape {shape}")
    if bgr.dtype != np.uint8:
        raise InvalidInputError(f"Invalid image dtype: {bgr.dtype}")
    
    rgba = cv2.cvtColor(bgr, cv2.COLOR_BGR2RGBA)
    height, width = rgba.shape[:2]
    return CapturedFrame(
        timestamp_ms=timestamp_ms,
        pixels=rgba,
        width=width,
        height=height,
    )


def decode_image_rgba(data: bytes, timestamp_ms: int = 0) -> CapturedFrame:
    """
    Decode an encoded image (PNG, JPEG, ...) into a CapturedFrame.
    
    Raises:
        InvalidInputError: If OpenCV cannot decode the bytes
    """
    buffer = np.frombuffer(data, np.uint8)
    bgr = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    if bgr is None:
        raise InvalidInputError("Failed to decode image: cv2.imdecode returned None")
    return bgr_to_captured(bgr, timestamp_ms)


class ImageSequenceSource:
    """
    Frames from a sorted list of still images, one per capture tick.
    
    Example:
        source = ImageSequenceSource(sorted(frames_dir.glob("*.png")), fps=20)
    """
    
    def __init__(self, paths: Sequence[Union[str, Path]], fps: float = 20) -> None:
        if fps <= 0:
            raise ValueError("fps must be positive")
        self.paths = [Path(p) for p in paths]
        self.fps = fps
    
    def __iter__(self) -> Iterator[CapturedFrame]:
        for index, path in enumerate(self.paths):
            bgr = cv2.imread(str(path), cv2.IMREAD_COLOR)
            if bgr is None:
                raise InvalidInputError(f"Failed to read image {path}")
            yield bgr_to_captured(bgr, nominal_timestamp_ms(index, self.fps))


class VideoFrameSource:
    """
    Frames decoded from a video file, resampled to a fixed rate.
    
    Source frames are read sequentially; one is emitted each time the
    source clock reaches the next capture tick, so a 30 fps video
    captured at 20 fps drops every third frame.
    
    Attributes:
        path: Video file path
        fps: Capture rate
    """
    
    def __init__(self, path: Union[str, Path], fps: float = 20) -> None:
        if fps <= 0:
            raise ValueError("fps must be positive")
        self.path = Path(path)
        self.fps = fps
    
    def __iter__(self) -> Iterator[CapturedFrame]:
        capture = cv2.VideoCapture(str(self.path))
        if not capture.isOpened():
            raise InvalidInputError(f"Failed to open video {self.path}")
        
        try:
            source_fps = capture.get(cv2.CAP_PROP_FPS) or self.fps
            source_index = 0
            emitted = 0
            
            while True:
                ok, bgr = capture.read()
                if not ok:
                    break
                
                source_ms = source_index * 1000 / source_fps
                source_index += 1
                if source_ms + 1e-6 < emitted * 1000 / self.fps:
                    continue
                
                yield bgr_to_captured(bgr, nominal_timestamp_ms(emitted, self.fps))
                emitted += 1
            
            logger.info(
                f"Decoded {emitted} frames from {self.path.name} "
                f"({source_index} source frames @ {source_fps:.2f} fps)"
            )
        finally:
            capture.release()


def record(store: FrameStore, source: Iterable[CapturedFrame]) -> int:
    """
    Feed every frame of a source into a recording store.
    
    Returns:
        Number of frames the store accepted
    """
    accepted = 0
    for frame in source:
        stored = store.add_frame(
            frame.timestamp_ms, frame.pixels, frame.width, frame.height
        )
        if stored is not None:
            accepted += 1
    return accepted
