#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Generate Ops Report
====================
Reads the whole chat history, builds member profiles and participation
tiers, and asks Gemini for the community operations report
(reports/ops-report.md).

Usage:
    python3 scripts/generate_ops_report.py
    python3 scripts/generate_ops_report.py --today 2026-01-20

Output (stdout JSON):
    {
        "success": true,
        "member_count": 96,
        "days_covered": 18,
        "tiers": {"cocreators": 4, "heavy": 9, ...},
        "output_file": "reports/ops-report.md"
    }
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

# Add project root to Python path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from agents.ops_report_agent import OpsReportAgent
from config.settings import settings
from services.chat_analytics import (
    build_user_profiles,
    calculate_daily_activity,
    categorize_users,
)
from services.chat_history import load_all_messages
from services.message_extractor import today_in

# ---------------------------------------------------------------------------
# Logging: stderr only
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("generate_ops_report")


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Generate the community operations report.")
    parser.add_argument(
        "--today",
        type=str,
        help="Reference date for churn detection (YYYY-MM-DD). Default: today.",
    )
    args = parser.parse_args()

    try:
        today_str = args.today or today_in(settings.echotrace.timezone)
        today = datetime.strptime(today_str, "%Y-%m-%d")

        messages = load_all_messages(settings.paths.chathistory)
        if not messages:
            raise ValueError(f"No chat history found in {settings.paths.chathistory}")

        profiles = build_user_profiles(messages)
        tiers = categorize_users(profiles, today=today)
        daily_activity = calculate_daily_activity(messages)

        agent = OpsReportAgent()
        result = agent.execute(
            profiles=profiles,
            tiers=tiers,
            daily_activity=daily_activity,
            generated_on=today_str,
        )

        output_file = settings.paths.reports / "ops-report.md"
        output_file.write_text(result.pop("markdown"), encoding="utf-8")
        logger.info("Operations report saved to: %s", output_file)

        result["success"] = True
        result["output_file"] = str(output_file)

    except Exception as exc:
        logger.exception("Fatal error in generate_ops_report")
        result = {"success": False, "error": str(exc)}

    print(json.dumps(result, ensure_ascii=False, indent=2, default=str))


if __name__ == "__main__":
    main()
