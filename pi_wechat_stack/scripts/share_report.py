#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Share Report
=============
Posts a finished daily report (summary, topics, gold quotes and the PNG
share image) to the team's Mattermost channel.

Usage:
    python3 scripts/share_report.py --date 2026-01-16

Output (stdout JSON):
    {"success": true, "date": "2026-01-16", "image_attached": true}
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
from services.journal_builder import parse_daily_report
from services.mattermost_service import MattermostService
from services.message_extractor import today_in

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("share_report")


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Share a daily report to Mattermost.")
    parser.add_argument("--date", type=str, help="Report date (YYYY-MM-DD). Default: today.")
    args = parser.parse_args()

    try:
        target_date = args.date or today_in(settings.echotrace.timezone)
        report_dir = settings.paths.reports / target_date

        entry = parse_daily_report(report_dir / "daily-report.md")
        if entry is None:
            raise FileNotFoundError(f"No daily report for {target_date} in {report_dir}")

        png_path = report_dir / "daily-report.png"
        has_image = png_path.is_file()
        if not has_image:
            logger.warning("Share image missing, posting text only: %s", png_path)

        sent = MattermostService().share_daily_report(entry, png_path if has_image else None)
        result = {
            "success": sent,
            "date": target_date,
            "image_attached": has_image,
        }
        if not sent:
            result["error"] = "Mattermost post failed (see logs)."

    except Exception as exc:
        logger.exception("Fatal error in share_report")
        result = {"success": False, "error": str(exc)}

    print(json.dumps(result, ensure_ascii=False, indent=2, default=str))


if __name__ == "__main__":
    main()
