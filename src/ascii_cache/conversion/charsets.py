"""
Glyph Registry
==============

Fixed mapping from a charset identifier to an ordered glyph set.

Glyph sets are ordered from dark (low brightness) to bright. The
compressor maps pixel brightness to a glyph index, so index 0 is used
for the darkest cells and index N-1 for the brightest.

Design Rules:
    - The CharsetKey member order is part of the .ascache wire format
      (the header stores the ordinal). Append new members, never reorder.
    - Glyphs are stored as a tuple of strings, one entry per glyph, so
      multi-code-point glyphs are never split.
    - Unknown keys resolve to the default set instead of raising.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple, Union


logger = logging.getLogger(__name__)


MAX_GLYPHS = 256


class CharsetKey(str, Enum):
    """
    Closed enumeration of built-in charsets.
    
    Ordinal positions are persisted in cache headers.
    """
    
    STANDARD = "standard"
    BLOCKS = "blocks"
    MINIMAL = "minimal"
    BINARY = "binary"
    DETAILED = "detailed"
    DOTS = "dots"
    ARROWS = "arrows"
    EMOJI = "emoji"


@dataclass(frozen=True, slots=True)
class GlyphSet:
    """
    Ordered, immutable glyph sequence.
    
    Attributes:
        name: Human-readable charset name
        glyphs: Glyphs ordered dark -> bright
    """
    
    name: str
    glyphs: Tuple[str, ...]
    
    def __post_init__(self) -> None:
        if not 1 <= len(self.glyphs) <= MAX_GLYPHS:
            raise ValueError(
                f"GlyphSet {self.name!r} must hold 1..{MAX_GLYPHS} glyphs, "
                f"got {len(self.glyphs)}"
            )
    
    def __len__(self) -> int:
        return len(self.glyphs)
    
    def __getitem__(self, index: int) -> str:
        return self.glyphs[index]
    
    @property
    def chars(self) -> str:
        """Glyphs joined back into a single string."""
        return "".join(self.glyphs)


def _glyph_set(name: str, *glyphs: str) -> GlyphSet:
    return GlyphSet(name=name, glyphs=tuple(glyphs))


CHARSETS: Dict[CharsetKey, GlyphSet] = {
    # Classic 10-glyph gradient
    CharsetKey.STANDARD: _glyph_set("Standard", *" .:-=+*#%@"),
    CharsetKey.BLOCKS: _glyph_set(
        "Blocks", " ", "░", "▒", "▓", "█",
    ),
    CharsetKey.MINIMAL: _glyph_set("Minimal", *" .oO@"),
    # Pure silhouette
    CharsetKey.BINARY: _glyph_set("Binary", " ", "█"),
    # 68-glyph gradient for high column counts
    CharsetKey.DETAILED: _glyph_set(
        "Detailed",
        *" .'`^\",:;Il!i><~+_-?][}{1)(|/tfjrxnuvczXYUJCLQ0OZmwqpdbkhao*#MW&8%B$",
    ),
    CharsetKey.DOTS: _glyph_set("Dots", " ", "·", "•", "●"),
    CharsetKey.ARROWS: _glyph_set(
        "Arrows",
        " ", "←", "↙", "↓", "↘",
        "→", "↗", "↑", "↖",
    ),
    # Moon phases
    CharsetKey.EMOJI: _glyph_set(
        "Emoji",
        " ", " ", "░", "▒", "▓",
        "\U0001F311", "\U0001F312", "\U0001F313", "\U0001F314", "\U0001F315",
    ),
}

DEFAULT_CHARSET = CharsetKey.STANDARD

_ORDER: Tuple[CharsetKey, ...] = tuple(CharsetKey)


def resolve(key: Union[CharsetKey, str, int, None]) -> GlyphSet:
    """
    Resolve a charset identifier to its glyph set.
    
    Args:
        key: CharsetKey, its string value, or its ordinal
        
    Returns:
        The matching GlyphSet, or the default set for unknown keys
    """
    try:
        charset_key = to_charset_key(key)
    except ValueError:
        logger.debug(f"Unknown charset {key!r}, using {DEFAULT_CHARSET.value}")
        charset_key = DEFAULT_CHARSET
    return CHARSETS.get(charset_key, CHARSETS[DEFAULT_CHARSET])


def to_charset_key(key: Union[CharsetKey, str, int, None]) -> CharsetKey:
    """
    Coerce a key to a CharsetKey.
    
    Raises:
        ValueError: If the key does not name a known charset
    """
    if isinstance(key, CharsetKey):
        return key
    if isinstance(key, bool):
        raise ValueError(f"Unknown charset: {key!r}")
    if isinstance(key, int):
        return charset_from_index(key)
    if isinstance(key, str):
        return CharsetKey(key.strip().lower())
    raise ValueError(f"Unknown charset: {key!r}")


def charset_index(key: CharsetKey) -> int:
    """Ordinal position of a charset, as stored in cache headers."""
    return _ORDER.index(key)


def charset_from_index(index: int) -> CharsetKey:
    """
    Inverse of charset_index.
    
    Raises:
        ValueError: If index is outside the enumeration
    """
    if not 0 <= index < len(_ORDER):
        raise ValueError(f"Charset index out of range: {index}")
    return _ORDER[index]
