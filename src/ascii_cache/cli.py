"""
ascii-cache Command Line
========================

Usage:
    ascii-cache convert clip.mp4 other.mp4 --preset "Square SD"
    ascii-cache convert clip.mp4 --columns 120 --charset blocks
    ascii-cache list [--json]
    ascii-cache show clip --at 1500
    ascii-cache delete clip
    ascii-cache presets

The cache directory defaults to settings.cache.directory and can be
overridden per call with --cache-dir. Without --preset, convert records
with settings.recording; --columns, --brightness and --charset override
either source.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from ascii_cache.batch import BatchConverter, VideoStatus
from ascii_cache.cache import CacheDirectory, FrameStore
from ascii_cache.config import settings, setup_logging
from ascii_cache.conversion.charsets import CharsetKey
from ascii_cache.conversion.compressor import render_text
from ascii_cache.presets import PRESETS, ConversionPreset, get_preset


logger = logging.getLogger(__name__)


def _directory(args: argparse.Namespace) -> CacheDirectory:
    return CacheDirectory(args.cache_dir or settings.cache.path)


def _capture_preset(args: argparse.Namespace) -> ConversionPreset:
    """Named preset or the configured recording defaults, plus overrides."""
    if args.preset:
        preset = get_preset(args.preset)
    else:
        preset = settings.recording.to_preset()

    overrides = {
        field: value
        for field, value in (
            ("num_columns", args.columns),
            ("brightness", args.brightness),
            ("charset_key", args.charset),
        )
        if value is not None
    }
    if overrides:
        preset = ConversionPreset.model_validate({**preset.model_dump(), **overrides})
    return preset


def cmd_convert(args: argparse.Namespace) -> int:
    try:
        preset = _capture_preset(args)
    except KeyError as e:
        print(e.args[0], file=sys.stderr)
        return 2
    except ValidationError as e:
        print(f"Invalid capture settings: {e}", file=sys.stderr)
        return 2

    logger.info(f"Converting with {preset.name!r} ({preset.resolution}, {preset.fps} fps)")

    output = CacheDirectory(args.output) if args.output else _directory(args)
    converter = BatchConverter(output, preset=preset)
    converter.add_videos(args.videos)

    for video in converter.run():
        print(f"{video.name}: {video.status_text}")

    return 0 if all(v.status == VideoStatus.COMPLETED for v in converter.videos) else 1


def cmd_list(args: argparse.Namespace) -> int:
    infos = FrameStore(_directory(args)).list_cached_videos_with_info()

    if args.json:
        print(json.dumps([info.model_dump(mode="json") for info in infos], indent=2))
        return 0

    if not infos:
        print("No cached videos")
        return 0

    for info in infos:
        print(
            f"{info.video_id:<32} {info.display_name:<20} "
            f"{info.frame_count:>6} frames  {info.num_columns:>4} cols  "
            f"{info.duration_estimate:>7}  {info.file_size_string:>9}"
        )
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    store = FrameStore(_directory(args))
    if not store.load_from_disk(args.video_id):
        print(f"Could not load {args.video_id!r}: {store.last_error}", file=sys.stderr)
        return 1

    frame = store.get_frame_at_time(args.at)
    if frame is None:
        print(f"{args.video_id!r} holds no frames", file=sys.stderr)
        return 1

    print(render_text(frame, store.metadata.charset_key))
    return 0


def cmd_delete(args: argparse.Namespace) -> int:
    store = FrameStore(_directory(args))
    if not store.cache_exists(args.video_id):
        print(f"No cache for {args.video_id!r}", file=sys.stderr)
        return 1
    return 0 if store.delete_cache(args.video_id) else 1


def cmd_presets(args: argparse.Namespace) -> int:
    for preset in PRESETS:
        print(
            f"{preset.name:<24} {preset.resolution:>8} @ {preset.fps:>2} fps  "
            f"{preset.charset_key.value:<8} {preset.description}"
        )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ascii-cache",
        description="Convert videos to glyph frames and manage .ascache files",
    )
    parser.add_argument(
        "--cache-dir",
        default=None,
        help=f"Cache directory (default: {settings.cache.directory})",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    convert = sub.add_parser("convert", help="Convert videos into .ascache files")
    convert.add_argument("videos", nargs="+", help="Video files to convert")
    convert.add_argument(
        "--preset",
        default=None,
        help="Preset name or slug (default: recording settings from config)",
    )
    convert.add_argument("--columns", type=int, default=None, help="Glyph columns (20-200)")
    convert.add_argument("--brightness", type=float, default=None, help="Brightness (0-2)")
    convert.add_argument(
        "--charset",
        type=str.lower,
        choices=[key.value for key in CharsetKey],
        default=None,
        help="Charset for glyph indices",
    )
    convert.add_argument("--output", default=None, help="Output directory (default: cache dir)")
    convert.set_defaults(func=cmd_convert)

    listing = sub.add_parser("list", help="List cached videos")
    listing.add_argument("--json", action="store_true", help="Emit JSON")
    listing.set_defaults(func=cmd_list)

    show = sub.add_parser("show", help="Print one cached frame as text")
    show.add_argument("video_id")
    show.add_argument("--at", type=int, default=0, help="Playback position in ms")
    show.set_defaults(func=cmd_show)

    delete = sub.add_parser("delete", help="Delete a cached video")
    delete.add_argument("video_id")
    delete.set_defaults(func=cmd_delete)

    presets = sub.add_parser("presets", help="List conversion presets")
    presets.set_defaults(func=cmd_presets)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    setup_logging(settings)
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
