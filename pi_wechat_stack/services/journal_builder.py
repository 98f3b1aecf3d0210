# -*- coding: utf-8 -*-
"""
Journal Builder
================
Collects the daily reports under reports/<YYYY-MM-DD>/daily-report.md
into a browsable journal:
  - journal/<YYYY-MM>-index.md — one-sentence table of contents, gold
    quotes with the AI's reflection, daily action, report links
  - journal/README.md — list of months, newest first
"""

import logging
import re
from pathlib import Path
from typing import Optional

from database.models import GoldQuote, JournalEntry

logger = logging.getLogger(__name__)

DEFAULT_SUMMARY = "社群深度探讨与知识分享"
SUMMARY_MAX_CHARS = 50
MAX_CONNECTORS = 3

DATE_RE = re.compile(r"(\d{4}-\d{2}-\d{2})")
DATE_DIR_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TOPIC_TITLE_RE = re.compile(r"###\s*\d+\.\s*(.+?)(?=\s*\(约)")
QUOTE_BLOCK_RE = re.compile(r"\[QUOTE\](.*?)\[/QUOTE\]", re.DOTALL)
QUOTE_LINE_RE = re.compile(r"「(.+?)」\s*——\s*(.+)$")
THINKING_LINE_RE = re.compile(r"\*\*💡 思考:\*\*\s*(.+)$", re.MULTILINE)
FIRST_TOPIC_RE = re.compile(r"\[TOPIC\].*?###\s*\d+\.\s*(.+?)(?=\n|\[/TOPIC\])", re.DOTALL)
ACTION_SECTION_RE = re.compile(r"##\s*六、每日行动建议.*\Z", re.DOTALL)
ACTION_HEADING_RE = re.compile(r"##\s*六、每日行动建议")
CONNECTORS_SECTION_RE = re.compile(r"###\s*🌟\s*关键连接者.*?(?=###|##|\[|\Z)", re.DOTALL)
BOLD_RE = re.compile(r"\*\*(.+?)\*\*")


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _parse_quotes(content: str) -> list[GoldQuote]:
    quotes = []
    for block in QUOTE_BLOCK_RE.findall(content):
        first_line = block.strip().split("\n")[0]
        quote_match = QUOTE_LINE_RE.search(first_line)
        if not quote_match:
            continue
        thinking_match = THINKING_LINE_RE.search(block)
        quotes.append(
            GoldQuote(
                quote=quote_match.group(1).strip(),
                author=quote_match.group(2).strip(),
                thinking=thinking_match.group(1).strip() if thinking_match else "",
            )
        )
    return quotes


def _one_sentence_summary(content: str, quotes: list[GoldQuote]) -> str:
    """First gold quote, else the first topic title, else a stock phrase."""
    if quotes:
        summary = f"{quotes[0].quote} —— {quotes[0].author}"
        if len(summary) > SUMMARY_MAX_CHARS:
            summary = summary[: SUMMARY_MAX_CHARS - 2] + "..."
        return summary

    topic_match = FIRST_TOPIC_RE.search(content)
    if topic_match and topic_match.group(1).strip():
        return topic_match.group(1).strip()
    return DEFAULT_SUMMARY


def _key_connectors(content: str) -> list[str]:
    section = CONNECTORS_SECTION_RE.search(content)
    if not section:
        return []
    names: list[str] = []
    for name in BOLD_RE.findall(section.group(0)):
        name = name.strip()
        if name not in names:
            names.append(name)
    return names[:MAX_CONNECTORS]


def parse_report_markdown(content: str, date: str) -> JournalEntry:
    """Extract journal key points from daily report markdown."""
    quotes = _parse_quotes(content)

    action_match = ACTION_SECTION_RE.search(content)
    action = ACTION_HEADING_RE.sub("", action_match.group(0), count=1).strip() if action_match else ""

    return JournalEntry(
        date=date,
        one_sentence_summary=_one_sentence_summary(content, quotes),
        topics=[t.strip() for t in TOPIC_TITLE_RE.findall(content)],
        gold_quotes=quotes,
        action_suggestion=action,
        key_connectors=_key_connectors(content),
    )


def parse_daily_report(report_path: Path | str, date: Optional[str] = None) -> Optional[JournalEntry]:
    """
    Parse one daily-report.md.

    Returns:
        JournalEntry, or None when the file does not exist. Without an
        explicit date, the last date in the path is used ("unknown" when
        the path has none).
    """
    path = Path(report_path)
    if not path.is_file():
        return None

    if date is None:
        dates = DATE_RE.findall(str(path))
        date = dates[-1] if dates else "unknown"
    return parse_report_markdown(path.read_text(encoding="utf-8"), date)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def generate_monthly_index(entries: list[JournalEntry], month: str, community_name: str = "复利日知录") -> str:
    """Markdown for journal/<month>-index.md."""
    md = f"# 📔 {community_name}月度刊物 - {month}\n\n"
    md += f"> 记录学习与成长的点滴，享受复利的力量。本月共收录 {len(entries)} 篇。 🎓\n\n"

    md += "## 📑 快速索引 (一句话目录)\n\n"
    md += "| 日期 | 精华摘要 | 核心人物 |\n"
    md += "| :--- | :--- | :--- |\n"
    for entry in entries:
        md += (
            f"| {entry.date[5:]} | [{entry.one_sentence_summary}](#d-{entry.date}) "
            f"| {', '.join(entry.key_connectors)} |\n"
        )
    md += "\n---\n\n"

    for entry in entries:
        md += f'## <a name="d-{entry.date}"></a> 📅 {entry.date}\n\n'
        md += f"**核心话题**: {' | '.join(entry.topics)}\n\n"
        md += (
            f"🔗 **完整报告**: [网页版](../reports/{entry.date}/daily-report.html) "
            f"| [分享图](../reports/{entry.date}/daily-report.png) "
            f"| [原文](../reports/{entry.date}/daily-report.md)\n\n"
        )

        if entry.gold_quotes:
            md += "### ✨ 今日金句\n\n"
            for item in entry.gold_quotes:
                md += f"> 「{item.quote}」 —— **{item.author}**\n"
                if item.thinking:
                    md += f"> *💡 AI 思考: {item.thinking}*\n"
                md += "\n"

        if entry.action_suggestion:
            md += "### 🚀 每日行动建议\n\n"
            md += f"{entry.action_suggestion}\n\n"

        md += "\n---\n\n"

    return md


def generate_master_index(monthly_counts: dict[str, int], community_name: str = "复利日知录") -> str:
    """Markdown for journal/README.md; months listed newest first."""
    md = f"# 📚 {community_name} - 刊物总索引\n\n"
    md += "> 见、感、思、行。记录成长的复利。 📈\n\n"
    md += "## 📅 月度精选\n\n"
    for month in sorted(monthly_counts, reverse=True):
        md += f"- **[{month} 精华月刊]({month}-index.md)** - 共 {monthly_counts[month]} 篇每日精华\n"
    return md


def update_journal(
    reports_dir: Path | str,
    journal_dir: Path | str,
    community_name: str = "复利日知录",
) -> dict[str, list[JournalEntry]]:
    """
    Rebuild every monthly index and the journal README.

    Returns:
        month → entries, in date order.
    """
    reports = Path(reports_dir)
    journal = Path(journal_dir)
    journal.mkdir(parents=True, exist_ok=True)

    date_dirs = sorted(
        d.name for d in reports.iterdir() if d.is_dir() and DATE_DIR_RE.match(d.name)
    ) if reports.is_dir() else []
    logger.info("Found %d daily report directories", len(date_dirs))

    monthly: dict[str, list[JournalEntry]] = {}
    for date_dir in date_dirs:
        entry = parse_daily_report(reports / date_dir / "daily-report.md", date_dir)
        if entry is None:
            continue
        monthly.setdefault(date_dir[:7], []).append(entry)
        logger.info("Parsed %s - %s", date_dir, entry.one_sentence_summary)

    for month, entries in monthly.items():
        index_path = journal / f"{month}-index.md"
        index_path.write_text(generate_monthly_index(entries, month, community_name), encoding="utf-8")
        logger.info("Generated %s", index_path.name)

    readme = generate_master_index(
        {month: len(entries) for month, entries in monthly.items()}, community_name
    )
    (journal / "README.md").write_text(readme, encoding="utf-8")
    return monthly
