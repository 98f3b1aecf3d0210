#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Update Journal
===============
Rebuilds journal/<YYYY-MM>-index.md for every month that has daily
reports, plus the journal/README.md month list.

Usage:
    python3 scripts/update_journal.py

Output (stdout JSON):
    {"success": true, "months": {"2026-01": 16}, "journal_dir": "journal"}
"""

import json
import logging
import sys
from pathlib import Path

# Add project root to Python path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config.settings import settings
from services.journal_builder import update_journal

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("update_journal")


def main():
    try:
        monthly = update_journal(
            settings.paths.reports,
            settings.paths.journal,
            settings.report.community_name,
        )
        result = {
            "success": True,
            "months": {month: len(entries) for month, entries in sorted(monthly.items())},
            "journal_dir": str(settings.paths.journal),
        }
    except Exception as exc:
        logger.exception("Fatal error in update_journal")
        result = {"success": False, "error": str(exc)}

    print(json.dumps(result, ensure_ascii=False, indent=2, default=str))


if __name__ == "__main__":
    main()
