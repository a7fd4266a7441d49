"""
Frame Store States
==================

Transitions:
    IDLE      -> RECORDING   start_recording()
    RECORDING -> RECORDING   start_recording() (restart, frames discarded)
    RECORDING -> IDLE        stop_recording() (frames retained)
    any       -> LOADED      load_from_disk() / from_bytes() on success
    any       -> IDLE        clear() (frames discarded)

Frames are appended only in RECORDING. Saving is refused in RECORDING.
"""

from enum import Enum


class StoreState(str, Enum):
    """
    Lifecycle state of a FrameStore.
    
    Attributes:
        IDLE: Not recording; may hold frames from a finished recording
        RECORDING: Accepting frames via add_frame()
        LOADED: Populated from a persisted cache
    """
    
    IDLE = "IDLE"
    RECORDING = "RECORDING"
    LOADED = "LOADED"
