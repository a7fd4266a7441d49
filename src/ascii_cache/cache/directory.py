"""
Cache Directory
===============

Filesystem side of the cache: naming, existence checks, atomic writes,
enumeration and deletion of .ascache files under one root directory.

Design Rules:
    - Video IDs are sanitized into flat filenames; nothing escapes root
    - Writes go to a temp file in the same directory, then os.replace(),
      so a failed save never leaves a half-written cache behind
    - Filesystem errors surface as CacheIOError
"""

import logging
import os
import re
import tempfile
from datetime import datetime
from pathlib import Path
from typing import List, Union

from ascii_cache.cache.codec import FILE_EXTENSION, HEADER_SIZE, parse_header_info
from ascii_cache.errors import CacheIOError
from ascii_cache.models.cache_info import CachedVideoInfo


logger = logging.getLogger(__name__)


_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.\-]")
_EXTENSION_SUFFIX = re.compile(r"\.[^.]+$")

DISPLAY_NAME_MAX = 20


def sanitize(video_id: str) -> str:
    """
    Turn a video identifier into a safe filename stem.
    
    Every character outside [A-Za-z0-9_.-] becomes '_'.
    
    Example:
        sanitize("my video/clip #1.mp4") -> "my_video_clip__1.mp4"
    """
    return _UNSAFE_CHARS.sub("_", video_id)


def display_name(video_id: str) -> str:
    """
    Derive a short title from a cache ID.
    
    Path-derived IDs look like 'assets_videos_intro.mp4'; the last
    '_'-separated part containing a dot is taken as the filename and its
    extension dropped. Separators become spaces and long names are cut
    to 17 characters plus '...'.
    """
    name = video_id
    if "_" in name:
        for part in reversed(name.split("_")):
            if "." in part:
                name = _EXTENSION_SUFFIX.sub("", part)
                break
    
    name = name.replace("_", " ").replace("-", " ")
    if len(name) > DISPLAY_NAME_MAX:
        name = f"{name[:17]}..."
    return name or "Untitled"


class CacheDirectory:
    """
    Root directory holding .ascache files.
    
    Attributes:
        root: Directory path (created lazily on first write)
        
    Example:
        directory = CacheDirectory("~/.ascii_cache")
        filename = directory.filename_for("my video.mp4")
        directory.write(filename, payload)
    """
    
    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root).expanduser()
    
    def __repr__(self) -> str:
        return f"CacheDirectory(root={str(self.root)!r})"
    
    # -------------------------------------------------------------------------
    # Naming
    # -------------------------------------------------------------------------
    
    @staticmethod
    def sanitize(video_id: str) -> str:
        return sanitize(video_id)
    
    def filename_for(self, video_id: str) -> str:
        """Cache filename (with extension) for a video ID."""
        return f"{sanitize(video_id)}{FILE_EXTENSION}"
    
    def path_for(self, filename: str) -> Path:
        return self.root / filename
    
    # -------------------------------------------------------------------------
    # File operations
    # -------------------------------------------------------------------------
    
    def exists(self, filename: str) -> bool:
        return self.path_for(filename).is_file()
    
    def write(self, filename: str, payload: bytes) -> Path:
        """
        Atomically write a cache file.
        
        Returns:
            Final path of the written file
            
        Raises:
            CacheIOError: If the directory or file cannot be written
        """
        target = self.path_for(filename)
        tmp_path = None
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{filename}.", suffix=".tmp", dir=self.root
            )
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, target)
            tmp_path = None
        except OSError as e:
            raise CacheIOError(f"Failed to write {target}: {e}") from e
        finally:
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    logger.warning(f"Could not remove temp file {tmp_path}")
        
        logger.debug(f"Wrote {len(payload)} bytes to {target}")
        return target
    
    def read(self, filename: str) -> bytes:
        """
        Read a whole cache file.
        
        Raises:
            CacheIOError: If the file is missing or unreadable
        """
        path = self.path_for(filename)
        try:
            return path.read_bytes()
        except OSError as e:
            raise CacheIOError(f"Failed to read {path}: {e}") from e
    
    def read_header(self, filename: str, size: int = HEADER_SIZE) -> bytes:
        """Read at most `size` leading bytes of a cache file."""
        path = self.path_for(filename)
        try:
            with open(path, "rb") as f:
                return f.read(size)
        except OSError as e:
            raise CacheIOError(f"Failed to read header of {path}: {e}") from e
    
    def delete(self, filename: str) -> bool:
        """
        Delete a cache file.
        
        Returns:
            True if the file is gone afterwards (including when it never
            existed), False if removal failed
        """
        path = self.path_for(filename)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to delete {path}: {e}")
            return False
        logger.info(f"Deleted cache {path}")
        return True
    
    def list(self) -> List[str]:
        """Sorted filenames of all cache files under root."""
        if not self.root.is_dir():
            return []
        try:
            return sorted(
                entry.name
                for entry in self.root.iterdir()
                if entry.is_file() and entry.name.endswith(FILE_EXTENSION)
            )
        except OSError as e:
            raise CacheIOError(f"Failed to list {self.root}: {e}") from e
    
    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------
    
    def info(self, filename: str) -> CachedVideoInfo:
        """
        Build a CachedVideoInfo from stat() and the 16-byte header.
        
        Raises:
            CacheIOError: If the file cannot be stat'ed
        """
        path = self.path_for(filename)
        try:
            stat = path.stat()
        except OSError as e:
            raise CacheIOError(f"Failed to stat {path}: {e}") from e
        
        try:
            header = parse_header_info(self.read_header(filename))
        except CacheIOError as e:
            logger.warning(f"Unreadable header, listing with zero info: {e}")
            header = parse_header_info(b"")
        
        video_id = filename[:-len(FILE_EXTENSION)]
        return CachedVideoInfo(
            video_id=video_id,
            display_name=display_name(video_id),
            file_size_bytes=stat.st_size,
            frame_count=header.frame_count,
            num_columns=header.num_columns,
            modified_at=datetime.fromtimestamp(stat.st_mtime),
        )
    
    def list_info(self) -> List[CachedVideoInfo]:
        """Info for every cache file, most recently modified first."""
        infos = []
        for filename in self.list():
            try:
                infos.append(self.info(filename))
            except CacheIOError as e:
                logger.warning(f"Skipping {filename}: {e}")
        infos.sort(key=lambda info: info.modified_at, reverse=True)
        return infos
