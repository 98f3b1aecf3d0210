# -*- coding: utf-8 -*-
"""
Chat History Store
===================
Reads and writes the chat export JSON files kept in chathistory/.
Files either come from extract_messages.py or from EchoTrace's own
monthly export; both are a {session, messages} document, though older
exports are a bare list of messages.
"""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from database.models import ChatExport, ChatMessage

logger = logging.getLogger(__name__)


def export_filename(group_name: str, target_date: str | None = None, stamp_ms: int | None = None) -> str:
    """
    Name of an export file.

    Group-table extractions are keyed by date ("<group>_fresh_<date>.json");
    table-scan extractions by the time they ran ("<group>_<epoch ms>.json").
    """
    if target_date:
        return f"{group_name}_fresh_{target_date}.json"
    return f"{group_name}_{stamp_ms or 0}.json"


def save_export(export: ChatExport, path: Path | str) -> Path:
    """Write a chat export as pretty-printed UTF-8 JSON."""
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    payload = export.model_dump(by_alias=True, exclude_none=True)
    out_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8"
    )
    logger.info("Saved %d messages to %s", len(export.messages), out_path)
    return out_path


def load_messages(path: Path | str) -> list[ChatMessage]:
    """
    Load messages from one export file.

    Accepts a bare list or a {"messages": [...]} document; anything
    else yields no messages. Records that fail validation are skipped.
    """
    file_path = Path(path)
    logger.info("Loading chat history from: %s", file_path)
    data = json.loads(file_path.read_text(encoding="utf-8"))

    if isinstance(data, list):
        raw_messages = data
    elif isinstance(data, dict) and isinstance(data.get("messages"), list):
        raw_messages = data["messages"]
    else:
        return []

    messages = []
    for raw in raw_messages:
        try:
            messages.append(ChatMessage.model_validate(raw))
        except ValidationError as exc:
            logger.warning("Skipping malformed message in %s: %s", file_path.name, exc)
    return messages


def load_all_messages(directory: Path | str) -> list[ChatMessage]:
    """
    Merge every *.json export in a directory.

    Exports overlap (a daily extraction re-reads messages already in a
    monthly export), so the same (time, sender, content) is kept once.
    Result is sorted by createTime.
    """
    folder = Path(directory)
    files = sorted(folder.glob("*.json"))

    seen: set[tuple[int, str, str]] = set()
    merged: list[ChatMessage] = []
    for file_path in files:
        for msg in load_messages(file_path):
            key = (msg.create_time, msg.sender_username, msg.content)
            if key in seen:
                continue
            seen.add(key)
            merged.append(msg)

    merged.sort(key=lambda m: m.create_time)
    logger.info("Loaded %d messages from %d files", len(merged), len(files))
    return merged
