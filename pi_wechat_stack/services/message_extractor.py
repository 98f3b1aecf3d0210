# -*- coding: utf-8 -*-
"""
Message Extractor
==================
Pulls one day of group messages out of the EchoTrace databases and
normalizes them into ChatMessage records.

EchoTrace has shipped two message schemas, so there are two modes:
  - group table: the known Msg_<hash> table of the group
        (local_id, local_type, create_time [s], message_content,
         origin_source, source)
  - table scan: every Msg_% table, filtered by talker = group id
        (localId, createTime [ms], type, content, isSend, talker)
"""

import logging
import re
import sqlite3
from datetime import datetime, timedelta
from typing import Any, Iterable, Optional
from zoneinfo import ZoneInfo

from database.connection import execute_query, list_message_tables
from database.models import ChatExport, ChatMessage, ChatSession
from services.identity_resolver import IdentityResolver, split_sender

logger = logging.getLogger(__name__)

MESSAGE_TYPES = {
    1: "文本消息",
    3: "图片消息",
    34: "语音",
    42: "名片",
    43: "视频",
    47: "动画表情",
    48: "位置",
    49: "引用消息",
    10000: "系统消息",
    10002: "撤回消息",
}

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


# ---------------------------------------------------------------------------
# Time helpers
# ---------------------------------------------------------------------------


def day_bounds(date_str: str, tz_name: str) -> tuple[int, int]:
    """
    Epoch-second range [start, end) covering one calendar day.

    Args:
        date_str: "YYYY-MM-DD".
        tz_name: IANA timezone the day is counted in.

    Raises:
        ValueError: If date_str is not a valid date.
    """
    if not _ISO_DATE_RE.match(date_str or ""):
        raise ValueError(f"Invalid date '{date_str}' — expected YYYY-MM-DD.")
    start = datetime.strptime(date_str, "%Y-%m-%d").replace(tzinfo=ZoneInfo(tz_name))
    end = start + timedelta(days=1)
    return int(start.timestamp()), int(end.timestamp())


def format_timestamp(ms: int, tz_name: str) -> str:
    """Format epoch milliseconds as "YYYY-MM-DD HH:MM:SS" in the given timezone."""
    moment = datetime.fromtimestamp(ms / 1000, tz=ZoneInfo(tz_name))
    return moment.strftime("%Y-%m-%d %H:%M:%S")


def today_in(tz_name: str) -> str:
    return datetime.now(ZoneInfo(tz_name)).strftime("%Y-%m-%d")


def message_type_label(code: Optional[int]) -> str:
    return MESSAGE_TYPES.get(code, f"未知({code})")


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


class MessageExtractor:
    """
    Reads group messages for a single day and resolves sender names.

    Usage:
        extractor = MessageExtractor(resolver, tz_name="Asia/Shanghai")
        messages = extractor.extract_group_table(conn, "Msg_xxx", "2026-01-16")
    """

    def __init__(self, resolver: IdentityResolver, tz_name: str):
        self.resolver = resolver
        self.tz_name = tz_name

    # ------------------------------------------------------------------
    # Group-table mode
    # ------------------------------------------------------------------

    def extract_group_table(
        self,
        conn: sqlite3.Connection,
        table: str,
        target_date: str,
    ) -> list[ChatMessage]:
        """
        Query the group's own message table for one day.

        Args:
            conn: Read-only connection to message_0.db.
            table: Msg_<hash> table name of the group.
            target_date: "YYYY-MM-DD".

        Returns:
            Messages in ascending time order.
        """
        if not table.startswith("Msg_") or not table.replace("_", "").isalnum():
            raise ValueError(f"Not a message table name: {table}")

        start_ts, end_ts = day_bounds(target_date, self.tz_name)
        rows = execute_query(
            conn,
            f"""
            SELECT * FROM {table}
            WHERE create_time >= ? AND create_time < ?
            ORDER BY create_time ASC
            """,
            (start_ts, end_ts),
        )
        logger.info("Found %d rows in %s for %s", len(rows), table, target_date)
        return [self._from_group_row(row) for row in rows]

    def _from_group_row(self, row: dict) -> ChatMessage:
        sender, content = split_sender(_as_text(row.get("message_content")))
        create_time_ms = int(row.get("create_time") or 0) * 1000
        local_type = row.get("local_type")

        return ChatMessage(
            local_id=row.get("local_id"),
            create_time=create_time_ms,
            formatted_time=format_timestamp(create_time_ms, self.tz_name),
            type=message_type_label(local_type),
            local_type=local_type,
            content=content,
            is_send=1 if row.get("origin_source") == 1 else 0,
            sender_username=sender,
            sender_display_name=self.resolver.display_name(sender),
            source=_as_text(row.get("source")),
            sender_avatar_key=sender,
        )

    # ------------------------------------------------------------------
    # Table-scan mode
    # ------------------------------------------------------------------

    def extract_by_talker(
        self,
        conn: sqlite3.Connection,
        talker: str,
        target_date: str,
    ) -> tuple[list[ChatMessage], list[ChatMessage]]:
        """
        Scan every Msg_% table for the group's messages.

        Tables whose columns do not match the legacy schema are skipped.

        Returns:
            (messages on target_date, all messages of the group) — the
            full list lets callers report which dates do have data.
        """
        start_ts, end_ts = day_bounds(target_date, self.tz_name)
        tables = list_message_tables(conn)
        logger.info("Found %d message tables", len(tables))

        rows: list[dict] = []
        for table in tables:
            try:
                rows.extend(
                    execute_query(
                        conn,
                        f"""
                        SELECT localId, createTime, type, content, isSend, talker, msgSvrId
                        FROM {table}
                        WHERE talker = ?
                        ORDER BY createTime ASC
                        """,
                        (talker,),
                    )
                )
            except sqlite3.Error as exc:
                logger.warning("Skipping %s: %s", table, exc)

        rows.sort(key=lambda r: r.get("createTime") or 0)
        logger.info("Found %d messages for %s across all tables", len(rows), talker)

        all_messages = [self._from_talker_row(row) for row in rows]
        start_ms, end_ms = start_ts * 1000, end_ts * 1000
        day_messages = [m for m in all_messages if start_ms <= m.create_time < end_ms]
        logger.info("Filtered to %d messages on %s", len(day_messages), target_date)
        return day_messages, all_messages

    def _from_talker_row(self, row: dict) -> ChatMessage:
        sender, content = split_sender(_as_text(row.get("content")))
        create_time_ms = int(row.get("createTime") or 0)
        talker = _as_text(row.get("talker"))

        return ChatMessage(
            local_id=row.get("localId"),
            create_time=create_time_ms,
            formatted_time=format_timestamp(create_time_ms, self.tz_name),
            type=message_type_label(row.get("type")),
            local_type=row.get("type"),
            content=content,
            is_send=row.get("isSend"),
            sender_username=sender,
            sender_display_name=self.resolver.display_name(sender),
            source=talker,
            sender_avatar_key=sender or talker,
        )


# ---------------------------------------------------------------------------
# Export helpers
# ---------------------------------------------------------------------------


def build_export(
    messages: list[ChatMessage],
    group_id: str,
    group_name: str,
) -> ChatExport:
    """Wrap messages in the session header used by chat export files."""
    session = ChatSession(
        wxid=group_id,
        nickname=group_name,
        remark=group_name,
        display_name=group_name,
        type="群聊",
        last_timestamp=messages[-1].create_time if messages else 0,
        message_count=len(messages),
    )
    return ChatExport(session=session, messages=messages)


def available_dates(messages: Iterable[ChatMessage], limit: int = 20) -> list[str]:
    """Distinct message dates in first-seen order, keeping the last `limit`."""
    dates: list[str] = []
    for msg in messages:
        day = msg.day
        if day and day not in dates:
            dates.append(day)
    return dates[-limit:] if limit else dates
