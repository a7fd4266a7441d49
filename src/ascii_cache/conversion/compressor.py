"""
Frame Compressor
================

Samples a raw RGBA pixel buffer on a coarse grid and produces a
CompressedFrame (4 bytes per cell: glyph index + sampled RGB).

Grid:
    aspect_ratio = image_width / image_height
    num_rows     = max(1, round(num_columns / aspect_ratio / 2))
    
    Glyph cells are roughly twice as tall as wide, so halving the row
    count keeps the rendered grid visually isometric to the source.

Sampling:
    Each cell takes the single pixel nearest its centre:
        x = round((col + 0.5) * cell_width),  clamped to [0, width - 1]
        y = round((row + 0.5) * cell_height), clamped to [0, height - 1]

Output is fully deterministic for identical inputs.
"""

import logging
from typing import Tuple, Union

import numpy as np

from ascii_cache.conversion.charsets import CharsetKey, resolve
from ascii_cache.conversion.luma import (
    clamp_brightness,
    index_array,
    luma_array,
    round_half_up,
)
from ascii_cache.errors import InvalidInputError
from ascii_cache.models.frame import BYTES_PER_CELL, CompressedFrame


logger = logging.getLogger(__name__)


PixelBuffer = Union[bytes, bytearray, memoryview, np.ndarray]


def grid_size(image_width: int, image_height: int, num_columns: int) -> Tuple[int, int]:
    """
    Compute the glyph grid for an image.
    
    Args:
        image_width: Source width in pixels (> 0)
        image_height: Source height in pixels (> 0)
        num_columns: Requested glyph columns (>= 1)
        
    Returns:
        Tuple of (columns, rows)
        
    Raises:
        InvalidInputError: On non-positive dimensions or columns
    """
    if image_width <= 0 or image_height <= 0:
        raise InvalidInputError(
            f"Image dimensions must be positive: {image_width}x{image_height}"
        )
    if num_columns < 1:
        raise InvalidInputError(f"num_columns must be >= 1, got {num_columns}")
    
    aspect_ratio = image_width / image_height
    num_rows = max(1, round_half_up(num_columns / aspect_ratio / 2))
    return num_columns, num_rows


def _sample_coordinates(count: int, cell_size: float, limit: int) -> np.ndarray:
    """Centre-of-cell pixel coordinates, rounded half-up and clamped."""
    centres = (np.arange(count, dtype=np.float64) + 0.5) * cell_size
    coords = np.floor(centres + 0.5)
    return np.clip(coords, 0, limit - 1).astype(np.intp)


def _as_rgba_image(pixels: PixelBuffer, image_width: int, image_height: int) -> np.ndarray:
    """View a pixel buffer as an (h, w, 4) uint8 array."""
    expected = image_width * image_height * BYTES_PER_CELL
    
    if isinstance(pixels, np.ndarray):
        if pixels.dtype != np.uint8:
            raise InvalidInputError(f"Pixel array must be uint8, got {pixels.dtype}")
        flat = pixels.reshape(-1)
    else:
        flat = np.frombuffer(pixels, dtype=np.uint8)
    
    if flat.size < expected:
        raise InvalidInputError(
            f"Pixel buffer holds {flat.size} bytes, "
            f"{image_width}x{image_height} RGBA needs {expected}"
        )
    
    return flat[:expected].reshape(image_height, image_width, BYTES_PER_CELL)


def compress(
    pixels: PixelBuffer,
    image_width: int,
    image_height: int,
    num_columns: int,
    charset_key: Union[CharsetKey, str] = CharsetKey.STANDARD,
    brightness: float = 1.0,
) -> CompressedFrame:
    """
    Convert an RGBA frame into a CompressedFrame.
    
    Args:
        pixels: RGBA bytes, row-major, at least width*height*4 long
        image_width: Source width in pixels
        image_height: Source height in pixels
        num_columns: Glyph columns in the output
        charset_key: Charset whose length bounds the glyph indices
        brightness: Multiplier, clamped to [0, 2]
        
    Returns:
        CompressedFrame with width == num_columns
        
    Raises:
        InvalidInputError: On non-positive dimensions, bad column count
            or a pixel buffer that is too short
    """
    columns, rows = grid_size(image_width, image_height, num_columns)
    image = _as_rgba_image(pixels, image_width, image_height)
    glyph_count = len(resolve(charset_key))
    
    cell_width = image_width / columns
    cell_height = image_height / rows
    xs = _sample_coordinates(columns, cell_width, image_width)
    ys = _sample_coordinates(rows, cell_height, image_height)
    
    # (rows, columns, 3) sampled colours
    sampled = image[ys[:, None], xs[None, :], :3]
    luma = luma_array(sampled, clamp_brightness(brightness))
    
    cells = np.empty((rows, columns, BYTES_PER_CELL), dtype=np.uint8)
    cells[..., 0] = index_array(luma, glyph_count)
    cells[..., 1:] = sampled
    
    return CompressedFrame(data=cells.tobytes(), width=columns, height=rows)


def render_text(frame: CompressedFrame, charset_key: Union[CharsetKey, str]) -> str:
    """
    Render a frame as plain text, one line per glyph row.
    
    Glyph indices beyond the charset are clamped to its last glyph.
    """
    glyph_set = resolve(charset_key)
    last = len(glyph_set) - 1
    indices = np.frombuffer(frame.data, dtype=np.uint8)[0::BYTES_PER_CELL]
    
    lines = []
    for row in range(frame.height):
        row_indices = indices[row * frame.width:(row + 1) * frame.width]
        lines.append("".join(glyph_set[min(int(i), last)] for i in row_indices))
    return "\n".join(lines)
