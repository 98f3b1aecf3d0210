# -*- coding: utf-8 -*-
"""
Data Models
============
Pydantic models for chat exports, per-user statistics and journal
entries. Used for validation, serialization, and clean data passing
between services, agents, and scripts.

Chat export models serialize with camelCase keys (localId, createTime,
senderDisplayName, ...) — the JSON layout EchoTrace's own exporter uses,
so files from either source can be mixed in chathistory/.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel


# ---------------------------------------------------------------------------
# Chat export models
# ---------------------------------------------------------------------------


class ChatMessage(BaseModel):
    """A single group message after sender parsing and name resolution."""

    local_id: Optional[int] = None
    create_time: int = 0  # epoch milliseconds
    formatted_time: str = ""  # "YYYY-MM-DD HH:MM:SS" in the group's timezone
    type: str = ""  # Chinese label, e.g. "文本消息"
    local_type: Optional[int] = None
    content: str = ""
    is_send: Optional[int] = None
    sender_username: str = ""
    sender_display_name: str = ""
    source: str = ""
    sender_avatar_key: str = ""
    emoji_md5: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @field_validator(
        "formatted_time",
        "type",
        "content",
        "sender_username",
        "sender_display_name",
        "source",
        "sender_avatar_key",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, value):
        # third-party exports use null and numbers freely
        return "" if value is None else str(value)

    @property
    def day(self) -> str:
        """Calendar date part of formatted_time ("" when unknown)."""
        return self.formatted_time.split(" ")[0] if self.formatted_time else ""

    @property
    def hour(self) -> int:
        parts = self.formatted_time.split(" ")
        if len(parts) < 2:
            return 0
        try:
            return int(parts[1].split(":")[0])
        except ValueError:
            return 0


class ChatSession(BaseModel):
    """Header describing the conversation a chat export belongs to."""

    wxid: str
    nickname: str
    remark: str
    display_name: str
    type: str = "群聊"
    last_timestamp: int = 0
    message_count: int = 0

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ChatExport(BaseModel):
    """The JSON document written to chathistory/."""

    session: ChatSession
    messages: list[ChatMessage] = Field(default_factory=list)


class Contact(BaseModel):
    """A row of contact.db's contact table."""

    username: str
    nick_name: Optional[str] = None
    remark: Optional[str] = None


# ---------------------------------------------------------------------------
# Analysis models
# ---------------------------------------------------------------------------


class UserStats(BaseModel):
    """Per-sender counters for a single day's report."""

    username: str
    display_name: str
    message_count: int = 0
    mentioned_count: int = 0  # times @-mentioned by others
    mentions_others: int = 0  # @-mentions written
    replied_to_count: int = 0
    reply_to_others: int = 0  # quote-replies written
    topics: set[str] = Field(default_factory=set)


class UserProfile(BaseModel):
    """Long-term activity profile of one member, built from all history."""

    username: str
    display_name: str
    total_messages: int = 0
    active_days: set[str] = Field(default_factory=set)
    topics: dict[str, int] = Field(default_factory=dict)
    interaction_partners: dict[str, int] = Field(default_factory=dict)
    peak_hours: dict[int, int] = Field(default_factory=dict)
    first_seen: str = ""
    last_seen: str = ""
    sample_messages: list[str] = Field(default_factory=list)

    @property
    def peak_hour(self) -> int:
        if not self.peak_hours:
            return 0
        return max(self.peak_hours.items(), key=lambda item: item[1])[0]

    def top_partners(self, limit: int = 3) -> list[str]:
        ranked = sorted(
            self.interaction_partners.items(), key=lambda item: item[1], reverse=True
        )
        return [name for name, _ in ranked[:limit]]


class UserTiers(BaseModel):
    """Participation tiers (display names) used by the operations report."""

    cocreators: list[str] = Field(default_factory=list)
    heavy: list[str] = Field(default_factory=list)
    medium: list[str] = Field(default_factory=list)
    light: list[str] = Field(default_factory=list)
    silent: list[str] = Field(default_factory=list)
    churned: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Journal models
# ---------------------------------------------------------------------------


class GoldQuote(BaseModel):
    """A highlighted chat excerpt with the AI's reflection on it."""

    quote: str
    author: str
    thinking: str = ""


class JournalEntry(BaseModel):
    """Key points extracted from one daily-report.md."""

    date: str
    one_sentence_summary: str
    topics: list[str] = Field(default_factory=list)
    gold_quotes: list[GoldQuote] = Field(default_factory=list)
    action_suggestion: str = ""
    key_connectors: list[str] = Field(default_factory=list)
