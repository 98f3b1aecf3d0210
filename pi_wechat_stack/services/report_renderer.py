# -*- coding: utf-8 -*-
"""
Report Renderer
================
Converts the daily report markdown into a standalone dark-theme HTML page.

The markdown is Gemini output following daily_report_prompts, so only
the subset it produces is handled:
  - [STATS] ... [/STATS]  → stat card grid
  - [TOPIC] ... [/TOPIC]  → topic card
  - [QUOTE] ... [/QUOTE]  → gold quote card (quote, author, 💡 thinking)
  - "> **name:** text"    → dialog line; other "> " lines → blockquote
  - #/##/### headings, **bold**, *em*, "- " and "1. " list items
"""

import logging
import re
from string import Template
from typing import Optional

logger = logging.getLogger(__name__)

STATS_BLOCK_RE = re.compile(r"\[STATS\](.*?)\[/STATS\]", re.DOTALL)
TOPIC_BLOCK_RE = re.compile(r"\[TOPIC\](.*?)\[/TOPIC\]", re.DOTALL)
QUOTE_BLOCK_RE = re.compile(r"\[QUOTE\](.*?)\[/QUOTE\]", re.DOTALL)

QUOTE_LINE_RE = re.compile(r"[「\"'](.+?)[」\"']\s*[—-]+\s*(.+?)(?:\n|\Z)")
THINKING_RE = re.compile(r"\*\*💡\s*思考[：:]\*\*\s*(.*)\Z", re.DOTALL)
STAT_UNIT_RE = re.compile(r"[条人个]")
STAT_SEPARATOR_RE = re.compile(r"[:：]")

DIALOG_LINE_RE = re.compile(r'^>\s*\*\*(.+?):\*\*\s*"?(.+?)"?\s*$', re.MULTILINE)
BLOCKQUOTE_RE = re.compile(r"^>\s*(.+)$", re.MULTILINE)

INLINE_RULES = [
    (re.compile(r"^# (.*$)", re.MULTILINE | re.IGNORECASE), r"<h1>\1</h1>"),
    (re.compile(r"^## (.*$)", re.MULTILINE | re.IGNORECASE), r"<h2>\1</h2>"),
    (re.compile(r"^### (.*$)", re.MULTILINE | re.IGNORECASE), r"<h3>\1</h3>"),
    (re.compile(r"\*\*(.*?)\*\*"), r"<strong>\1</strong>"),
    (re.compile(r"\*(.*?)\*"), r"<em>\1</em>"),
    (re.compile(r"^- (.*$)", re.MULTILINE | re.IGNORECASE), r"<li>\1</li>"),
    (re.compile(r"^\d+\.\s+(.*$)", re.MULTILINE | re.IGNORECASE), r'<li class="numbered">\1</li>'),
]


# ---------------------------------------------------------------------------
# Tag blocks
# ---------------------------------------------------------------------------


def parse_stats(block: str) -> list[tuple[str, str]]:
    """
    "label: value" lines of a [STATS] block.

    Units (条/人/个) are dropped from values; lines without a colon are skipped.
    """
    stats = []
    for line in block.strip().split("\n"):
        if not line.strip():
            continue
        parts = STAT_SEPARATOR_RE.split(line, maxsplit=1)
        if len(parts) < 2:
            continue
        label = parts[0].strip()
        value = STAT_UNIT_RE.sub("", parts[1].strip())
        stats.append((label, value))
    return stats


def render_stats(block: str) -> str:
    items = "".join(
        f'<div class="stat-item"><div class="stat-value">{value}</div>'
        f'<div class="stat-label">{label}</div></div>'
        for label, value in parse_stats(block)
    )
    return f'<div class="stats-grid">{items}</div>'


def parse_quote(block: str) -> Optional[tuple[str, str, str]]:
    """(quote, author, thinking) of a [QUOTE] block, or None when unparseable."""
    quote_match = QUOTE_LINE_RE.search(block)
    if not quote_match:
        return None
    think_match = THINKING_RE.search(block)
    return (
        quote_match.group(1).strip(),
        quote_match.group(2).strip(),
        think_match.group(1).strip() if think_match else "",
    )


def render_quote(block: str) -> str:
    parsed = parse_quote(block)
    if parsed is None:
        return f'<div class="quote-card">{block}</div>'

    quote_text, author, thinking = parsed
    thinking_html = f'<div class="quote-thinking">{thinking}</div>' if thinking else ""
    return (
        '<div class="quote-card">\n'
        f'        <div class="quote-text">「{quote_text}」</div>\n'
        f'        <div class="quote-author">—— {author}</div>\n'
        f"        {thinking_html}\n"
        "      </div>"
    )


def markdown_to_html(markdown: str) -> str:
    """Convert report markdown to an HTML fragment (no page wrapper)."""
    html = STATS_BLOCK_RE.sub(lambda m: render_stats(m.group(1)), markdown)
    html = TOPIC_BLOCK_RE.sub(lambda m: f'<div class="topic-card">{m.group(1)}</div>', html)
    html = QUOTE_BLOCK_RE.sub(lambda m: render_quote(m.group(1)), html)

    html = DIALOG_LINE_RE.sub(
        r'<div class="dialog-quote"><span class="dialog-author">\1:</span> "\2"</div>',
        html,
    )
    html = BLOCKQUOTE_RE.sub(r"<blockquote>\1</blockquote>", html)

    for pattern, replacement in INLINE_RULES:
        html = pattern.sub(replacement, html)
    return html.replace("\n", "<br>")


# ---------------------------------------------------------------------------
# Page
# ---------------------------------------------------------------------------


PAGE_TEMPLATE = Template("""<!DOCTYPE html>
<html lang="zh-CN">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>$title</title>
  <style>
    :root {
      --bg-dark: #0f1419;
      --bg-card: #1a1f2e;
      --bg-section: rgba(45, 55, 72, 0.5);
      --bg-topic: rgba(30, 40, 55, 0.8);
      --accent: #4fd1c5;
      --accent-soft: #38b2ac;
      --accent-pink: #f472b6;
      --text-primary: #e2e8f0;
      --text-secondary: #a0aec0;
      --text-muted: #718096;
      --border: rgba(255,255,255,0.06);
      --quote-gold: #fbbf24;
    }
    * { margin: 0; padding: 0; box-sizing: border-box; }
    body {
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Noto Sans SC', sans-serif;
      background: var(--bg-dark);
      min-height: 100vh;
      padding: 16px;
      line-height: 1.75;
      color: var(--text-primary);
      font-size: 15px;
    }
    .container {
      max-width: 640px;
      margin: 0 auto;
      background: var(--bg-card);
      border-radius: 12px;
      padding: 24px;
    }
    h1 {
      color: var(--accent);
      font-size: 1.3em;
      margin-bottom: 20px;
      text-align: center;
      font-weight: 600;
    }
    h2 {
      color: var(--text-primary);
      font-size: 1.05em;
      font-weight: 600;
      margin: 24px 0 14px;
      padding: 10px 14px;
      background: var(--bg-section);
      border-radius: 6px;
      border-left: 3px solid var(--accent);
    }
    h3 {
      color: var(--accent-pink);
      font-size: 0.95em;
      font-weight: 500;
      margin: 18px 0 10px;
      padding-left: 10px;
      border-left: 2px solid var(--accent-pink);
    }
    .stats-grid {
      display: grid;
      grid-template-columns: repeat(2, 1fr);
      gap: 12px;
      margin: 16px 0 20px;
    }
    .stat-item {
      background: rgba(79, 209, 197, 0.08);
      border-radius: 10px;
      padding: 16px;
      text-align: center;
      border: 1px solid var(--border);
    }
    .stat-value { font-size: 2em; font-weight: 700; color: #a78bfa; }
    .stat-label { font-size: 0.75em; color: var(--text-muted); margin-top: 4px; }
    .topic-card {
      background: var(--bg-topic);
      border-radius: 10px;
      padding: 18px;
      margin: 16px 0;
      border: 1px solid var(--border);
    }
    .topic-card h3 {
      color: var(--accent-pink);
      margin: 0 0 12px 0;
      padding: 0;
      border: none;
      font-size: 1em;
    }
    .topic-card li { margin: 6px 0; font-size: 0.9em; }
    .dialog-quote {
      background: rgba(255,255,255,0.04);
      border-left: 2px solid var(--accent);
      padding: 10px 14px;
      margin: 10px 0;
      border-radius: 0 6px 6px 0;
      font-size: 0.88em;
      color: var(--text-secondary);
    }
    .dialog-author { color: var(--accent); font-weight: 500; }
    .quote-card {
      background: rgba(251, 191, 36, 0.06);
      border-radius: 10px;
      padding: 18px;
      margin: 16px 0;
      border: 1px solid rgba(251, 191, 36, 0.15);
    }
    .quote-text {
      color: var(--quote-gold);
      font-size: 1.05em;
      font-weight: 500;
      line-height: 1.6;
      margin-bottom: 8px;
    }
    .quote-author {
      color: var(--accent-pink);
      font-size: 0.85em;
      text-align: right;
      margin-bottom: 12px;
    }
    .quote-thinking {
      background: rgba(0,0,0,0.2);
      border-radius: 6px;
      padding: 12px;
      font-size: 0.85em;
      color: var(--text-muted);
      line-height: 1.6;
    }
    li {
      margin: 8px 0;
      padding-left: 16px;
      list-style: none;
      position: relative;
      color: var(--text-secondary);
      font-size: 0.92em;
    }
    li::before {
      content: "•";
      color: var(--accent);
      position: absolute;
      left: 0;
    }
    li.numbered::before { content: ""; }
    strong { color: var(--accent); font-weight: 500; }
    em { color: var(--text-muted); font-style: normal; }
    blockquote {
      background: rgba(255,255,255,0.03);
      border-left: 2px solid var(--accent);
      padding: 8px 12px;
      margin: 8px 0;
      border-radius: 0 6px 6px 0;
      font-size: 0.88em;
      color: var(--text-secondary);
    }
    .footer {
      text-align: center;
      color: var(--text-muted);
      font-size: 0.7em;
      margin-top: 24px;
      padding-top: 14px;
      border-top: 1px solid var(--border);
    }
    /* the markdown newline → <br> pass leaves doubled breaks */
    br + br { display: none; }
    h2 + br, h3 + br, li + br { display: none; }
    .topic-card br + br { display: none; }
    .quote-card br { display: none; }
    .stats-grid + br { display: none; }
  </style>
</head>
<body>
  <div class="container">
    $body
    <div class="footer">
      $footer
    </div>
  </div>
</body>
</html>""")


def render_report_html(markdown: str, report_date: str, community_name: str) -> str:
    """
    Render the full HTML page for a daily report.

    Args:
        markdown: Report markdown from the Daily Report Agent.
        report_date: "YYYY-MM-DD", used in the page title.
        community_name: Shown in the title and footer.
    """
    body = markdown_to_html(markdown)
    logger.debug("Rendered report body: %d chars", len(body))
    return PAGE_TEMPLATE.substitute(
        title=f"{community_name}精华报告 - {report_date}",
        body=body,
        footer=f"由 AI 自动生成 · {community_name}社群",
    )
