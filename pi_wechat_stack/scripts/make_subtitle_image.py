#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Make Subtitle Image
====================
Stacks movie-style subtitle strips under a screenshot, one caption per
non-blank line of text.

Usage:
    python3 scripts/make_subtitle_image.py --image frame.png --text-file lines.txt
    python3 scripts/make_subtitle_image.py --image frame.png --text "第一句" --text "第二句" \\
        --font-size 48 --bg-opacity 0.4 --output out.png

Output (stdout JSON):
    {"success": true, "output_file": "out.png", "frames": 2}
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to Python path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config.settings import settings
from services.subtitle_image_service import SubtitleImageService, SubtitleStyle, caption_lines

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("make_subtitle_image")


def build_parser() -> argparse.ArgumentParser:
    defaults = SubtitleStyle()
    parser = argparse.ArgumentParser(description="Stack subtitle strips under an image.")
    parser.add_argument("--image", required=True, help="Base image.")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--text-file", help="UTF-8 file, one caption per line.")
    source.add_argument("--text", action="append", help="Caption line (repeatable).")
    parser.add_argument("--output", help="Output PNG. Default: <image>_subtitled.png")
    parser.add_argument("--font", help="Font file. Default: the report bold font.")
    parser.add_argument("--font-size", type=int, default=defaults.font_size)
    parser.add_argument("--strip-height", type=int, default=defaults.strip_height)
    parser.add_argument("--text-color", default=defaults.text_color)
    parser.add_argument("--stroke-color", default=defaults.stroke_color)
    parser.add_argument("--stroke-width", type=int, default=defaults.stroke_width)
    parser.add_argument("--bg-color", default=defaults.background_color)
    parser.add_argument("--bg-opacity", type=float, default=defaults.background_opacity)
    parser.add_argument("--bottom-offset", type=int, default=defaults.bottom_offset)
    return parser


def main():
    """CLI entry point."""
    args = build_parser().parse_args()

    try:
        if args.text_file:
            text = Path(args.text_file).read_text(encoding="utf-8")
        else:
            text = "\n".join(args.text)

        style = SubtitleStyle(
            font_size=args.font_size,
            strip_height=args.strip_height,
            text_color=args.text_color,
            stroke_color=args.stroke_color,
            stroke_width=args.stroke_width,
            background_color=args.bg_color,
            background_opacity=args.bg_opacity,
            bottom_offset=args.bottom_offset,
        )
        image_path = Path(args.image)
        output = Path(args.output) if args.output else image_path.with_name(f"{image_path.stem}_subtitled.png")

        service = SubtitleImageService(font_path=args.font or settings.report.font_bold_path, style=style)
        output_file = service.render(image_path, text, output)
        result = {
            "success": True,
            "output_file": str(output_file),
            "frames": max(1, len(caption_lines(text))),
        }

    except Exception as exc:
        logger.exception("Fatal error in make_subtitle_image")
        result = {"success": False, "error": str(exc)}

    print(json.dumps(result, ensure_ascii=False, indent=2, default=str))


if __name__ == "__main__":
    main()
