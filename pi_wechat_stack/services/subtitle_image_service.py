# -*- coding: utf-8 -*-
"""
Subtitle Image Service
=======================
Stacks movie-style subtitles under one screenshot: the first caption is
drawn on the full image, and every further caption gets the bottom strip
of the image repeated below it, so a whole dialogue reads as one picture.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PIL import Image, ImageColor, ImageDraw, ImageFont

logger = logging.getLogger(__name__)

BACKGROUND_PADDING = 20


@dataclass(frozen=True)
class SubtitleStyle:
    """Caption styling; colors are any PIL color string (e.g. "#ffffff")."""

    font_size: int = 40
    strip_height: int = 100
    text_color: str = "#ffffff"
    stroke_color: str = "#000000"
    stroke_width: int = 2
    background_color: str = "#000000"
    background_opacity: float = 0.0
    bottom_offset: int = 30


def caption_lines(text: str) -> list[str]:
    """Non-blank caption lines, one frame each."""
    return [line for line in text.split("\n") if line.strip()]


class SubtitleImageService:
    """
    Renders stacked subtitle images with Pillow.

    Usage:
        service = SubtitleImageService(font_path=settings.report.font_bold_path)
        service.render("frame.png", "第一句\\n第二句", "out.png")
    """

    def __init__(self, font_path: Optional[str] = None, style: Optional[SubtitleStyle] = None):
        self.font_path = font_path
        self.style = style or SubtitleStyle()

    def _font(self) -> ImageFont.ImageFont:
        size = self.style.font_size
        if self.font_path and Path(self.font_path).is_file():
            return ImageFont.truetype(self.font_path, size)
        logger.warning("Subtitle font not found (%s) — using Pillow's default font.", self.font_path)
        return ImageFont.load_default(size=size)

    @staticmethod
    def output_height(image_height: int, line_count: int, strip_height: int) -> int:
        return image_height + max(0, line_count - 1) * min(strip_height, image_height)

    def _draw_caption(self, canvas: Image.Image, text: str, center_x: int, bottom_y: int, font) -> None:
        """Draw one caption centred on center_x with its bottom at bottom_y."""
        if not text:
            return
        style = self.style

        if style.background_opacity > 0:
            left, _, right, _ = font.getbbox(text)
            text_w = right - left
            size = style.font_size
            red, green, blue = ImageColor.getrgb(style.background_color)[:3]
            alpha = int(round(max(0.0, min(1.0, style.background_opacity)) * 255))

            overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
            ImageDraw.Draw(overlay).rectangle(
                (
                    center_x - text_w / 2 - BACKGROUND_PADDING,
                    bottom_y - size + size * 0.2,
                    center_x + text_w / 2 + BACKGROUND_PADDING,
                    bottom_y + size * 0.2 + BACKGROUND_PADDING,
                ),
                fill=(red, green, blue, alpha),
            )
            canvas.alpha_composite(overlay)

        # Pillow paints the stroke underneath the fill in a single call
        ImageDraw.Draw(canvas).text(
            (center_x, bottom_y),
            text,
            font=font,
            fill=style.text_color,
            anchor="md",
            stroke_width=max(0, style.stroke_width),
            stroke_fill=style.stroke_color,
        )

    def compose(self, base: Image.Image, text: str) -> Image.Image:
        """
        Build the stacked image in memory.

        No caption text returns a copy of the base image unchanged.
        """
        base = base.convert("RGBA")
        lines = caption_lines(text)
        if not lines:
            return base.copy()

        width, height = base.size
        strip = min(self.style.strip_height, height)
        canvas = Image.new("RGBA", (width, self.output_height(height, len(lines), self.style.strip_height)))
        canvas.paste(base, (0, 0))

        font = self._font()
        self._draw_caption(canvas, lines[0], width // 2, height - self.style.bottom_offset, font)

        bottom_strip = base.crop((0, height - strip, width, height))
        y = height
        for line in lines[1:]:
            canvas.paste(bottom_strip, (0, y))
            self._draw_caption(canvas, line, width // 2, y + strip - self.style.bottom_offset, font)
            y += strip

        logger.info("Composed %d subtitle frame(s) → %dx%d", len(lines), width, canvas.height)
        return canvas

    def render(self, image_path: Path | str, text: str, output_path: Path | str) -> Path:
        """Load image_path, stack the captions and save a PNG to output_path."""
        source = Path(image_path)
        if not source.is_file():
            raise FileNotFoundError(f"Base image not found: {source}")

        with Image.open(source) as base:
            result = self.compose(base, text)

        out_path = Path(output_path)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        result.save(out_path, "PNG")
        logger.info("Subtitle image saved: %s", out_path)
        return out_path
