# -*- coding: utf-8 -*-
"""
Report Image Service
=====================
Renders the daily report as one long PNG for sharing in WeChat, using
the same dark theme as the HTML page (680px wide, drawn at 2x).

The markdown is split into blocks first (headings, stat grid, topic
cards, gold quotes, dialog lines, list items, paragraphs), each block is
measured, then the canvas is allocated at the final height and drawn.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from PIL import Image, ImageDraw, ImageFont

from services.report_renderer import parse_quote, parse_stats

logger = logging.getLogger(__name__)

PAGE_WIDTH = 680

COLORS = {
    "page": "#0f1419",
    "card": "#1a1f2e",
    "section": "#272f3d",
    "topic": "#1d2636",
    "stat": "#1c2b34",
    "dialog": "#21262f",
    "quote": "#25262a",
    "quote_border": "#3d3625",
    "thinking": "#15191f",
    "accent": "#4fd1c5",
    "pink": "#f472b6",
    "text": "#e2e8f0",
    "secondary": "#a0aec0",
    "muted": "#718096",
    "gold": "#fbbf24",
    "stat_value": "#a78bfa",
    "border": "#262b38",
}

TAG_BLOCK_RE = re.compile(r"\[(STATS|TOPIC|QUOTE)\](.*?)\[/\1\]", re.DOTALL)
DIALOG_RE = re.compile(r'^>\s*\*\*(.+?):\*\*\s*"?(.+?)"?\s*$')
NUMBERED_RE = re.compile(r"^\d+\.\s+")
EMPHASIS_RE = re.compile(r"\*{1,2}(.+?)\*{1,2}")


@dataclass
class ReportBlock:
    """One drawable piece of the report."""

    kind: str  # h1 | h2 | h3 | text | bullet | numbered | dialog | blockquote | stats | topic | quote
    text: str = ""
    author: str = ""
    thinking: str = ""
    items: list[tuple[str, str]] = field(default_factory=list)
    children: list["ReportBlock"] = field(default_factory=list)


def plain(text: str) -> str:
    """Drop **bold** / *em* markers."""
    return EMPHASIS_RE.sub(r"\1", text).strip()


# ---------------------------------------------------------------------------
# Markdown → blocks
# ---------------------------------------------------------------------------


def _parse_lines(text: str) -> list[ReportBlock]:
    blocks = []
    for raw in text.split("\n"):
        line = raw.strip()
        if not line or line == "---":
            continue
        if line.startswith("### "):
            blocks.append(ReportBlock("h3", plain(line[4:])))
        elif line.startswith("## "):
            blocks.append(ReportBlock("h2", plain(line[3:])))
        elif line.startswith("# "):
            blocks.append(ReportBlock("h1", plain(line[2:])))
        elif line.startswith(">"):
            dialog = DIALOG_RE.match(line)
            if dialog:
                blocks.append(ReportBlock("dialog", plain(dialog.group(2)), author=dialog.group(1)))
            else:
                blocks.append(ReportBlock("blockquote", plain(line.lstrip("> "))))
        elif line.startswith("- "):
            blocks.append(ReportBlock("bullet", plain(line[2:])))
        elif NUMBERED_RE.match(line):
            blocks.append(ReportBlock("numbered", plain(line)))
        else:
            blocks.append(ReportBlock("text", plain(line)))
    return blocks


def parse_blocks(markdown: str) -> list[ReportBlock]:
    """Split report markdown into drawable blocks."""
    blocks: list[ReportBlock] = []
    cursor = 0
    for match in TAG_BLOCK_RE.finditer(markdown):
        blocks.extend(_parse_lines(markdown[cursor : match.start()]))
        tag, body = match.group(1), match.group(2)
        if tag == "STATS":
            blocks.append(ReportBlock("stats", items=parse_stats(body)))
        elif tag == "TOPIC":
            blocks.append(ReportBlock("topic", children=_parse_lines(body)))
        else:
            parsed = parse_quote(body)
            if parsed:
                quote, author, thinking = parsed
                blocks.append(ReportBlock("quote", plain(quote), author=author, thinking=plain(thinking)))
            else:
                blocks.append(ReportBlock("quote", plain(body.strip())))
        cursor = match.end()
    blocks.extend(_parse_lines(markdown[cursor:]))
    return blocks


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class ReportImageService:
    """
    Draws report markdown onto a long PNG.

    Usage:
        service = ReportImageService(font_path, bold_font_path)
        service.render(markdown, "reports/2026-01-16/daily-report.png", footer="...")
    """

    def __init__(
        self,
        font_path: Optional[str] = None,
        bold_font_path: Optional[str] = None,
        scale: int = 2,
    ):
        self.font_path = font_path
        self.bold_font_path = bold_font_path or font_path
        self.scale = scale
        self._fonts: dict[tuple[int, bool], ImageFont.ImageFont] = {}

    # ------------------------------------------------------------------
    # Fonts and text
    # ------------------------------------------------------------------

    def font(self, size: float, bold: bool = False) -> ImageFont.ImageFont:
        px = int(size * self.scale)
        key = (px, bold)
        if key not in self._fonts:
            path = self.bold_font_path if bold else self.font_path
            if path and Path(path).is_file():
                self._fonts[key] = ImageFont.truetype(path, px)
            else:
                logger.warning("Font not found (%s) — using Pillow's default font.", path)
                self._fonts[key] = ImageFont.load_default(size=px)
        return self._fonts[key]

    @staticmethod
    def text_width(text: str, font: ImageFont.ImageFont) -> int:
        if not text:
            return 0
        box = font.getbbox(text)
        return box[2] - box[0]

    def wrap(self, text: str, font: ImageFont.ImageFont, max_width: int) -> list[str]:
        """
        Wrap text to max_width pixels.

        CJK characters may break anywhere; runs of ASCII (English words,
        numbers) stay together unless a single run is wider than the line.
        """
        tokens: list[str] = []
        buf = ""
        for ch in text:
            if ord(ch) < 128 and ch != " ":
                buf += ch
                continue
            if buf:
                tokens.append(buf)
                buf = ""
            if ch == " ":
                if tokens:
                    tokens[-1] += " "
                continue
            tokens.append(ch)
        if buf:
            tokens.append(buf)

        lines: list[str] = []
        current = ""
        for token in tokens:
            candidate = current + token
            if self.text_width(candidate.rstrip(), font) <= max_width:
                current = candidate
                continue
            if current:
                lines.append(current.rstrip())
            # a single token wider than the line is split by character
            current = ""
            for ch in token:
                if current and self.text_width(current + ch, font) > max_width:
                    lines.append(current)
                    current = ""
                current += ch
        if current.strip():
            lines.append(current.rstrip())
        return lines or [""]

    def _paragraph(
        self,
        draw: Optional[ImageDraw.ImageDraw],
        text: str,
        x: int,
        y: int,
        width: int,
        size: float,
        fill: str,
        bold: bool = False,
        line_height: float = 1.75,
        align: str = "left",
    ) -> int:
        """Draw (or only measure, when draw is None) wrapped text; return the new y."""
        font = self.font(size, bold)
        step = int(size * line_height * self.scale)
        for line in self.wrap(text, font, width):
            if draw is not None:
                if align == "center":
                    lx = x + (width - self.text_width(line, font)) // 2
                elif align == "right":
                    lx = x + width - self.text_width(line, font)
                else:
                    lx = x
                draw.text((lx, y + (step - int(size * self.scale)) // 2), line, font=font, fill=fill)
            y += step
        return y

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def _block(self, draw: Optional[ImageDraw.ImageDraw], block: ReportBlock, x: int, y: int, width: int) -> int:
        s = self.scale

        if block.kind == "h1":
            y = self._paragraph(draw, block.text, x, y, width, 20, COLORS["accent"], bold=True, line_height=1.5, align="center")
            return y + 20 * s

        if block.kind == "h2":
            y += 24 * s
            pad_y, pad_x = 10 * s, 14 * s
            text_h = self._paragraph(None, block.text, 0, 0, width - 2 * pad_x, 16, COLORS["text"], bold=True, line_height=1.5)
            bottom = y + text_h + 2 * pad_y
            if draw is not None:
                draw.rounded_rectangle((x, y, x + width, bottom), radius=6 * s, fill=COLORS["section"])
                draw.rectangle((x, y, x + 3 * s, bottom), fill=COLORS["accent"])
                self._paragraph(draw, block.text, x + pad_x, y + pad_y, width - 2 * pad_x, 16, COLORS["text"], bold=True, line_height=1.5)
            return bottom + 14 * s

        if block.kind == "h3":
            y += 18 * s
            indent = 10 * s
            bottom = self._paragraph(None, block.text, 0, y, width - indent, 14.5, COLORS["pink"], line_height=1.6)
            if draw is not None:
                draw.rectangle((x, y, x + 2 * s, bottom), fill=COLORS["pink"])
                self._paragraph(draw, block.text, x + indent, y, width - indent, 14.5, COLORS["pink"], line_height=1.6)
            return bottom + 10 * s

        if block.kind in ("bullet", "numbered"):
            y += 8 * s
            indent = 16 * s
            if draw is not None and block.kind == "bullet":
                self._paragraph(draw, "•", x, y, indent, 14, COLORS["accent"])
            return self._paragraph(draw, block.text, x + indent, y, width - indent, 14, COLORS["secondary"])

        if block.kind in ("dialog", "blockquote"):
            y += 10 * s
            pad = 12 * s
            inner = width - 2 * pad
            text_y = y + pad
            if block.author:
                text_y = self._paragraph(None, f"{block.author}:", 0, text_y, inner, 13, COLORS["accent"], line_height=1.6)
            bottom = self._paragraph(None, block.text, 0, text_y, inner, 13, COLORS["secondary"], line_height=1.6) + pad
            if draw is not None:
                draw.rounded_rectangle((x, y, x + width, bottom), radius=6 * s, fill=COLORS["dialog"])
                draw.rectangle((x, y, x + 2 * s, bottom), fill=COLORS["accent"])
                ty = y + pad
                if block.author:
                    ty = self._paragraph(draw, f"{block.author}:", x + pad, ty, inner, 13, COLORS["accent"], line_height=1.6)
                self._paragraph(draw, f"“{block.text}”", x + pad, ty, inner, 13, COLORS["secondary"], line_height=1.6)
            return bottom

        if block.kind == "stats":
            return self._stats(draw, block, x, y, width)

        if block.kind == "topic":
            return self._card(draw, block.children, x, y + 16 * s, width, COLORS["topic"], COLORS["border"]) + 16 * s

        if block.kind == "quote":
            return self._quote(draw, block, x, y + 16 * s, width) + 16 * s

        y += 6 * s
        return self._paragraph(draw, block.text, x, y, width, 15, COLORS["text"])

    def _stats(self, draw: Optional[ImageDraw.ImageDraw], block: ReportBlock, x: int, y: int, width: int) -> int:
        s = self.scale
        gap, pad = 12 * s, 16 * s
        y += 16 * s
        cell_w = (width - gap) // 2
        cell_h = pad * 2 + int(30 * 1.2 * s) + 4 * s + int(11 * 1.5 * s)
        for i, (label, value) in enumerate(block.items):
            row, col = divmod(i, 2)
            cx = x + col * (cell_w + gap)
            cy = y + row * (cell_h + gap)
            if draw is not None:
                draw.rounded_rectangle((cx, cy, cx + cell_w, cy + cell_h), radius=10 * s, fill=COLORS["stat"], outline=COLORS["border"])
                vy = self._paragraph(draw, value, cx, cy + pad, cell_w, 30, COLORS["stat_value"], bold=True, line_height=1.2, align="center")
                self._paragraph(draw, label, cx, vy + 4 * s, cell_w, 11, COLORS["muted"], line_height=1.5, align="center")
        rows = (len(block.items) + 1) // 2
        if rows:
            y += rows * cell_h + (rows - 1) * gap
        return y + 20 * s

    def _card(
        self,
        draw: Optional[ImageDraw.ImageDraw],
        children: list[ReportBlock],
        x: int,
        y: int,
        width: int,
        fill: str,
        outline: str,
    ) -> int:
        s = self.scale
        pad = 18 * s
        inner = width - 2 * pad

        bottom = y + pad
        for child in children:
            bottom = self._block(None, child, x + pad, bottom, inner)
        bottom += pad

        if draw is not None:
            draw.rounded_rectangle((x, y, x + width, bottom), radius=10 * s, fill=fill, outline=outline)
            cy = y + pad
            for child in children:
                cy = self._block(draw, child, x + pad, cy, inner)
        return bottom

    def _quote(self, draw: Optional[ImageDraw.ImageDraw], block: ReportBlock, x: int, y: int, width: int) -> int:
        s = self.scale
        pad = 18 * s
        inner = width - 2 * pad
        quote_text = f"「{block.text}」" if block.author else block.text

        def layout(d: Optional[ImageDraw.ImageDraw]) -> int:
            cy = self._paragraph(d, quote_text, x + pad, y + pad, inner, 16, COLORS["gold"], line_height=1.6)
            if block.author:
                cy = self._paragraph(d, f"—— {block.author}", x + pad, cy + 8 * s, inner, 13, COLORS["pink"], line_height=1.5, align="right")
            if block.thinking:
                t_pad = 12 * s
                cy += 12 * s
                t_bottom = self._paragraph(None, block.thinking, 0, cy + t_pad, inner - 2 * t_pad, 13, COLORS["muted"], line_height=1.6) + t_pad
                if d is not None:
                    d.rounded_rectangle((x + pad, cy, x + pad + inner, t_bottom), radius=6 * s, fill=COLORS["thinking"])
                    self._paragraph(d, block.thinking, x + pad + t_pad, cy + t_pad, inner - 2 * t_pad, 13, COLORS["muted"], line_height=1.6)
                cy = t_bottom
            return cy + pad

        bottom = layout(None)
        if draw is not None:
            draw.rounded_rectangle((x, y, x + width, bottom), radius=10 * s, fill=COLORS["quote"], outline=COLORS["quote_border"])
            layout(draw)
        return bottom

    # ------------------------------------------------------------------
    # Page
    # ------------------------------------------------------------------

    def _page(self, draw: Optional[ImageDraw.ImageDraw], blocks: list[ReportBlock], footer: str) -> int:
        s = self.scale
        margin, pad = 16 * s, 24 * s
        card_x = margin
        card_w = PAGE_WIDTH * s - 2 * margin
        x, width = card_x + pad, card_w - 2 * pad

        y = margin + pad
        for block in blocks:
            y = self._block(draw, block, x, y, width)

        if footer:
            y += 24 * s
            if draw is not None:
                draw.line((x, y, x + width, y), fill=COLORS["border"], width=s)
            y = self._paragraph(draw, footer, x, y + 14 * s, width, 11, COLORS["muted"], line_height=1.5, align="center")
        return y + pad + margin

    def render(self, markdown: str, output_path: Path | str, footer: str = "") -> Path:
        """
        Render report markdown to a PNG file.

        Returns:
            Path of the written image.
        """
        blocks = parse_blocks(markdown)
        height = self._page(None, blocks, footer)

        s = self.scale
        image = Image.new("RGB", (PAGE_WIDTH * s, height), COLORS["page"])
        draw = ImageDraw.Draw(image)
        margin = 16 * s
        draw.rounded_rectangle(
            (margin, margin, PAGE_WIDTH * s - margin, height - margin),
            radius=12 * s,
            fill=COLORS["card"],
        )
        self._page(draw, blocks, footer)

        out_path = Path(output_path)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        image.save(out_path, "PNG", optimize=True)
        logger.info("Report image saved: %s (%dx%d)", out_path, image.width, image.height)
        return out_path
