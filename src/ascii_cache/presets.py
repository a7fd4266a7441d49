"""
Conversion Presets
==================

Named capture settings for common target formats.

A preset fixes the column count, brightness, charset and capture rate;
target_aspect_ratio is the width/height of the expected source, used only
to estimate the grid and per-frame size before any video is decoded.
"""

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field

from ascii_cache.conversion.charsets import CharsetKey
from ascii_cache.conversion.luma import round_half_up


class ConversionPreset(BaseModel):
    """
    Capture settings for one target format.
    
    Attributes:
        name: Display name
        description: One-line description
        num_columns: Glyph columns per frame
        brightness: Brightness multiplier
        charset_key: Charset for glyph indices
        target_aspect_ratio: Expected source width/height (0.5625 = 9:16)
        fps: Capture rate
    """
    
    model_config = ConfigDict(frozen=True)
    
    name: str = Field(..., description="Display name")
    description: str = Field(default="", description="One-line description")
    num_columns: int = Field(..., ge=20, le=200, description="Glyph columns")
    brightness: float = Field(default=1.0, ge=0.0, le=2.0, description="Brightness multiplier")
    charset_key: CharsetKey = Field(default=CharsetKey.STANDARD, description="Charset")
    target_aspect_ratio: float = Field(default=0.5625, gt=0, description="Source width/height")
    fps: int = Field(default=20, ge=1, le=60, description="Capture rate")
    
    @property
    def slug(self) -> str:
        return self.name.lower().replace(" ", "-")
    
    @property
    def num_rows(self) -> int:
        return round_half_up(self.num_columns / self.target_aspect_ratio / 2)
    
    @property
    def bytes_per_frame(self) -> int:
        return self.num_columns * self.num_rows * 4
    
    @property
    def resolution(self) -> str:
        return f"{self.num_columns}x{self.num_rows}"
    
    @property
    def frame_interval_ms(self) -> int:
        return round_half_up(1000 / self.fps)


PORTRAIT = 0.5625  # 9:16
SQUARE = 1.0
LANDSCAPE = 1.7778  # 16:9


PRESETS: List[ConversionPreset] = [
    ConversionPreset(
        name="iPhone Portrait HD",
        description="9:16 vertical, high detail for Pro displays",
        num_columns=120,
        target_aspect_ratio=PORTRAIT,
    ),
    ConversionPreset(
        name="iPhone Portrait SD",
        description="9:16 vertical, balanced size/quality",
        num_columns=80,
        target_aspect_ratio=PORTRAIT,
    ),
    ConversionPreset(
        name="iPhone Portrait Compact",
        description="9:16 vertical, minimal file size",
        num_columns=60,
        target_aspect_ratio=PORTRAIT,
        fps=15,
    ),
    ConversionPreset(
        name="Square HD",
        description="1:1 square, high detail",
        num_columns=100,
        target_aspect_ratio=SQUARE,
    ),
    ConversionPreset(
        name="Square SD",
        description="1:1 square, balanced",
        num_columns=70,
        target_aspect_ratio=SQUARE,
    ),
    ConversionPreset(
        name="Landscape HD",
        description="16:9 horizontal, high detail",
        num_columns=140,
        target_aspect_ratio=LANDSCAPE,
    ),
    ConversionPreset(
        name="Landscape SD",
        description="16:9 horizontal, balanced",
        num_columns=100,
        target_aspect_ratio=LANDSCAPE,
    ),
    ConversionPreset(
        name="Retro Terminal",
        description="Classic 80x24 terminal look",
        num_columns=80,
        brightness=1.2,
        target_aspect_ratio=PORTRAIT,
        fps=15,
    ),
    ConversionPreset(
        name="Blocky",
        description="Unicode blocks for chunky aesthetic",
        num_columns=60,
        charset_key=CharsetKey.BLOCKS,
        target_aspect_ratio=PORTRAIT,
    ),
    ConversionPreset(
        name="Minimal",
        description="High contrast, few characters",
        num_columns=80,
        brightness=1.3,
        charset_key=CharsetKey.MINIMAL,
        target_aspect_ratio=PORTRAIT,
    ),
]

DEFAULT_PRESET = PRESETS[1]

_BY_NAME: Dict[str, ConversionPreset] = {}
for _preset in PRESETS:
    _BY_NAME[_preset.name.lower()] = _preset
    _BY_NAME[_preset.slug] = _preset


def get_preset(name: str) -> ConversionPreset:
    """
    Look up a preset by display name or slug, case-insensitively.
    
    Raises:
        KeyError: If no preset matches
    """
    key = name.strip().lower()
    if key not in _BY_NAME:
        raise KeyError(f"Unknown preset: {name!r}")
    return _BY_NAME[key]
