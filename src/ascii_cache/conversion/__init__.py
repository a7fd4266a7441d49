"""
Conversion Module
=================

Pixel -> glyph mapping.

Components:
    - charsets: Glyph Registry (CharsetKey, GlyphSet, resolve)
    - luma: Luma Mapper (map_pixel, map_luma_to_index)
    - compressor: Frame Compressor (compress, grid_size, render_text)

Note:
    The compressor depends on ascii_cache.models, which in turn depends on
    the charset registry. Import it as ascii_cache.conversion.compressor
    rather than through this package to keep the import graph acyclic.
"""

from ascii_cache.conversion.charsets import (
    CHARSETS,
    DEFAULT_CHARSET,
    CharsetKey,
    GlyphSet,
    charset_from_index,
    charset_index,
    resolve,
)
from ascii_cache.conversion.luma import (
    clamp_brightness,
    map_luma_to_index,
    map_pixel,
    round_half_up,
)


__all__ = [
    "CHARSETS",
    "DEFAULT_CHARSET",
    "CharsetKey",
    "GlyphSet",
    "charset_from_index",
    "charset_index",
    "resolve",
    "clamp_brightness",
    "map_luma_to_index",
    "map_pixel",
    "round_half_up",
]
