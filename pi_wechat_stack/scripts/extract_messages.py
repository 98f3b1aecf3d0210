#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Extract Messages
=================
Pulls one day of group chat out of the EchoTrace database mirror and
saves it as a chat export under chathistory/.

Two modes, one per EchoTrace schema:
  - table: query the group's own Msg_<hash> table (default)
  - scan:  scan every Msg_% table for rows whose talker is the group

Usage:
    python3 scripts/extract_messages.py --date 2026-01-16
    python3 scripts/extract_messages.py --date 2026-01-16 --mode scan

Output (stdout JSON):
    {
        "success": true,
        "date": "2026-01-16",
        "mode": "table",
        "message_count": 312,
        "output_file": "chathistory/..._fresh_2026-01-16.json"
    }
"""

import argparse
import json
import logging
import sys
import time
from pathlib import Path

# Add project root to Python path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config.settings import settings
from database.connection import get_connection
from services.chat_history import export_filename, save_export
from services.identity_resolver import IdentityResolver, load_contacts, load_user_aliases
from services.message_extractor import (
    MessageExtractor,
    available_dates,
    build_export,
    today_in,
)

# ---------------------------------------------------------------------------
# Logging: stderr only
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("extract_messages")


def build_resolver() -> IdentityResolver:
    """Contacts from contact.db (when present) plus the alias file."""
    echotrace = settings.echotrace
    contacts = {}
    if echotrace.contact_db_path.is_file():
        with get_connection(echotrace.contact_db_path) as conn:
            contacts = load_contacts(conn)
    else:
        logger.warning("Contact database not found: %s", echotrace.contact_db_path)

    aliases = load_user_aliases(settings.paths.user_aliases)
    logger.info("Loaded %d contacts and %d aliases", len(contacts), len(aliases))
    return IdentityResolver(contacts, aliases)


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Extract one day of group chat from EchoTrace.")
    parser.add_argument(
        "--date",
        type=str,
        help="Day to extract (YYYY-MM-DD). Default: today.",
    )
    parser.add_argument(
        "--mode",
        choices=["table", "scan"],
        default="table",
        help="table: the group's own Msg table; scan: all Msg_%% tables by talker.",
    )
    args = parser.parse_args()

    try:
        echotrace = settings.echotrace
        target_date = args.date or today_in(echotrace.timezone)
        extractor = MessageExtractor(build_resolver(), echotrace.timezone)
        result = {"date": target_date, "mode": args.mode}

        with get_connection(echotrace.message_db_path) as conn:
            if args.mode == "table":
                messages = extractor.extract_group_table(conn, echotrace.group_table, target_date)
                history = messages
            else:
                messages, history = extractor.extract_by_talker(conn, echotrace.group_id, target_date)

        result["message_count"] = len(messages)

        if not messages:
            logger.warning("No messages found for %s", target_date)
            result["available_dates"] = available_dates(history)
        else:
            filename = export_filename(
                echotrace.group_name,
                target_date=target_date if args.mode == "table" else None,
                stamp_ms=int(time.time() * 1000),
            )
            export = build_export(messages, echotrace.group_id, echotrace.group_name)
            output_file = save_export(export, settings.paths.chathistory / filename)
            result["output_file"] = str(output_file)

        result["success"] = True

    except Exception as exc:
        logger.exception("Fatal error in extract_messages")
        result = {"success": False, "error": str(exc)}

    print(json.dumps(result, ensure_ascii=False, indent=2, default=str))


if __name__ == "__main__":
    main()
