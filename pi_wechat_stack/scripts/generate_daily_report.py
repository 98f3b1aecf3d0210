#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Generate Daily Report
======================
Builds the daily highlight report for one day of group chat:
load chat history → preprocess → per-user stats → Gemini → write
reports/<date>/daily-report.md, .html and .png.

Usage:
    python3 scripts/generate_daily_report.py --date 2026-01-16
    python3 scripts/generate_daily_report.py --date 2026-01-16 --input chathistory/x.json --no-image

Output (stdout JSON):
    {
        "success": true,
        "date": "2026-01-16",
        "message_count": 287,
        "active_users": 41,
        "markdown_file": "reports/2026-01-16/daily-report.md",
        "html_file": "reports/2026-01-16/daily-report.html",
        "png_file": "reports/2026-01-16/daily-report.png"
    }
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to Python path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from agents.daily_report_agent import DailyReportAgent
from config.settings import settings
from services.chat_analytics import analyze_users, preprocess_messages
from services.chat_history import load_all_messages, load_messages
from services.message_extractor import available_dates, today_in
from services.report_image_service import ReportImageService
from services.report_renderer import render_report_html

# ---------------------------------------------------------------------------
# Logging: stderr only
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("generate_daily_report")


def render_png(markdown: str, png_path: Path) -> str | None:
    """Draw the share image; failures are logged and the report still succeeds."""
    report_cfg = settings.report
    try:
        service = ReportImageService(report_cfg.font_path, report_cfg.font_bold_path)
        service.render(markdown, png_path, footer=f"由 AI 自动生成 · {report_cfg.community_name}社群")
        return str(png_path)
    except (OSError, ValueError) as exc:
        logger.error("PNG rendering failed: %s", exc)
        return None


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Generate the daily highlight report.")
    parser.add_argument("--date", type=str, help="Report date (YYYY-MM-DD). Default: today.")
    parser.add_argument("--input", type=str, help="Single chat export to read instead of chathistory/.")
    parser.add_argument("--no-image", action="store_true", help="Skip the PNG share image.")
    args = parser.parse_args()

    try:
        target_date = args.date or today_in(settings.echotrace.timezone)
        report_cfg = settings.report

        # ------------------------------------------------------------------
        # Load and clean
        # ------------------------------------------------------------------
        if args.input:
            all_messages = load_messages(args.input)
        else:
            all_messages = load_all_messages(settings.paths.chathistory)

        messages = preprocess_messages(all_messages, target_date, report_cfg.bot_names)
        logger.info("Kept %d of %d messages for %s", len(messages), len(all_messages), target_date)

        if not messages:
            logger.warning("No messages found for date: %s", target_date)
            result = {
                "success": True,
                "date": target_date,
                "message_count": 0,
                "available_dates": available_dates(all_messages),
            }
            print(json.dumps(result, ensure_ascii=False, indent=2))
            return

        # ------------------------------------------------------------------
        # Analyze and write the report
        # ------------------------------------------------------------------
        user_stats = analyze_users(messages)
        agent = DailyReportAgent()
        report = agent.execute(messages=messages, user_stats=user_stats, target_date=target_date)
        markdown = report["markdown"]

        output_dir = settings.paths.reports / target_date
        output_dir.mkdir(parents=True, exist_ok=True)

        md_path = output_dir / "daily-report.md"
        md_path.write_text(markdown, encoding="utf-8")
        html_path = output_dir / "daily-report.html"
        html_path.write_text(
            render_report_html(markdown, target_date, report_cfg.community_name),
            encoding="utf-8",
        )
        logger.info("Report written to %s", output_dir)

        result = {
            "success": True,
            "date": target_date,
            "message_count": report["message_count"],
            "active_users": report["active_users"],
            "markdown_file": str(md_path),
            "html_file": str(html_path),
        }
        if not args.no_image:
            result["png_file"] = render_png(markdown, output_dir / "daily-report.png")

    except Exception as exc:
        logger.exception("Fatal error in generate_daily_report")
        result = {"success": False, "error": str(exc)}

    print(json.dumps(result, ensure_ascii=False, indent=2, default=str))


if __name__ == "__main__":
    main()
