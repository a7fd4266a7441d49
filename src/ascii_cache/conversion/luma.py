"""
Luma Mapper
===========

Pixel colour + brightness setting -> luma -> glyph index.

Formulas:
    luma0 = (0.299*r + 0.587*g + 0.114*b) / 255
    luma  = clamp(luma0 * brightness, 0, 1)
    index = clamp(floor(luma * (N - 0.001)), 0, N - 1)

The -0.001 term is a boundary correction: luma == 1.0 lands on N-1
instead of overflowing to N. For every other luma it selects the same
bucket as floor(luma * N).

The scalar and array functions perform identical floating-point
operations in identical order, so a frame compressed through numpy
matches the per-pixel definition bit for bit.
"""

import math

import numpy as np


MIN_BRIGHTNESS = 0.0
MAX_BRIGHTNESS = 2.0

_R_WEIGHT = 0.299
_G_WEIGHT = 0.587
_B_WEIGHT = 0.114
_BOUNDARY = 0.001


def round_half_up(value: float) -> int:
    """
    Round to nearest integer, halves away from zero.
    
    Python's round() uses banker's rounding (2.5 -> 2). Grid sizes,
    sample coordinates and frame lookups all need 2.5 -> 3.
    """
    if value < 0:
        return -math.floor(-value + 0.5)
    return math.floor(value + 0.5)


def clamp_brightness(value: float) -> float:
    """Clamp a brightness multiplier to [0.0, 2.0]."""
    return min(MAX_BRIGHTNESS, max(MIN_BRIGHTNESS, float(value)))


def map_pixel(r: int, g: int, b: int, brightness: float = 1.0) -> float:
    """
    Compute perceptual luma of one pixel.
    
    Args:
        r, g, b: Channel values in [0, 255]
        brightness: Multiplier in [0, 2], validated by the caller
        
    Returns:
        Luma in [0.0, 1.0]
    """
    luma = (_R_WEIGHT * r + _G_WEIGHT * g + _B_WEIGHT * b) / 255.0
    return min(1.0, max(0.0, luma * brightness))


def map_luma_to_index(luma: float, num_glyphs: int) -> int:
    """
    Map luma to a glyph index.
    
    Args:
        luma: Value in [0.0, 1.0]
        num_glyphs: Size of the glyph set (>= 1)
        
    Returns:
        Index in [0, num_glyphs - 1]
    """
    index = math.floor(luma * (num_glyphs - _BOUNDARY))
    return min(num_glyphs - 1, max(0, index))


def luma_array(rgb: np.ndarray, brightness: float = 1.0) -> np.ndarray:
    """
    Vectorised map_pixel.
    
    Args:
        rgb: Array (..., 3) of uint8 channel values
        brightness: Multiplier in [0, 2]
        
    Returns:
        float64 array (...) of luma values in [0.0, 1.0]
    """
    channels = rgb.astype(np.float64)
    luma = (
        _R_WEIGHT * channels[..., 0]
        + _G_WEIGHT * channels[..., 1]
        + _B_WEIGHT * channels[..., 2]
    ) / 255.0
    return np.clip(luma * brightness, 0.0, 1.0)


def index_array(luma: np.ndarray, num_glyphs: int) -> np.ndarray:
    """Vectorised map_luma_to_index, returns uint8 indices."""
    indices = np.floor(luma * (num_glyphs - _BOUNDARY))
    return np.clip(indices, 0, num_glyphs - 1).astype(np.uint8)
