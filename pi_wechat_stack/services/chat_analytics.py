# -*- coding: utf-8 -*-
"""
Chat Analytics
===============
Plain-Python statistics over ChatMessage lists — no AI involved:
  - Cleaning a day's messages before they reach the prompt
  - Per-user daily counters (messages, @-mentions, quote replies)
  - Long-term user profiles and participation tiers
  - Messages-per-day activity curve
"""

import logging
import re
from datetime import datetime, timedelta
from typing import Iterable, Optional

from database.models import ChatMessage, UserProfile, UserStats, UserTiers

logger = logging.getLogger(__name__)

MENTION_RE = re.compile(r"@[\u4e00-\u9fa5a-zA-Z0-9_]+")

SKIPPED_TYPES = ("系统消息", "撤回消息")
STICKER_TYPE = "动画表情"
QUOTE_REPLY_TYPE = "引用消息"

MAX_SAMPLES = 10
SAMPLE_CHARS = 200
MIN_SAMPLE_LENGTH = 20
CHURN_DAYS = 7
CHURN_MIN_MESSAGES = 5


def find_mentions(content: str) -> list[str]:
    """Names @-mentioned in a message, without the leading "@"."""
    return [m[1:] for m in MENTION_RE.findall(content or "")]


# ---------------------------------------------------------------------------
# Daily report
# ---------------------------------------------------------------------------


def preprocess_messages(
    messages: Iterable[ChatMessage],
    target_date: Optional[str] = None,
    bot_names: Iterable[str] = (),
) -> list[ChatMessage]:
    """
    Drop noise before analysis.

    Removed: system and recalled messages, bare stickers (a sticker with a
    "：" in its content carries a caption and is kept), empty messages and
    messages from bots. With target_date, only that day is kept.
    """
    bots = tuple(bot_names)
    kept = []
    for msg in messages:
        if msg.type in SKIPPED_TYPES:
            continue
        if msg.type == STICKER_TYPE and "：" not in msg.content:
            continue
        if not msg.content or not msg.content.strip():
            continue
        if any(bot in msg.sender_display_name for bot in bots):
            continue
        if target_date and not msg.formatted_time.startswith(target_date):
            continue
        kept.append(msg)

    logger.info("Kept %d messages after preprocessing", len(kept))
    return kept


def analyze_users(messages: list[ChatMessage]) -> dict[str, UserStats]:
    """
    Count per-sender activity for one day.

    Senders are registered as they first appear, so an @-mention only
    credits members who have already spoken that day.
    """
    users: dict[str, UserStats] = {}
    for msg in messages:
        user = users.get(msg.sender_username)
        if user is None:
            user = users[msg.sender_username] = UserStats(
                username=msg.sender_username,
                display_name=msg.sender_display_name or msg.sender_username,
            )
        user.message_count += 1

        mentions = find_mentions(msg.content)
        user.mentions_others += len(mentions)
        for name in mentions:
            for other in users.values():
                if name in other.display_name:
                    other.mentioned_count += 1

        if msg.type == QUOTE_REPLY_TYPE:
            user.reply_to_others += 1

    logger.info("Found %d unique users", len(users))
    return users


def top_users(stats: dict[str, UserStats], limit: int = 20) -> list[UserStats]:
    return sorted(stats.values(), key=lambda u: u.message_count, reverse=True)[:limit]


# ---------------------------------------------------------------------------
# Operations report
# ---------------------------------------------------------------------------


def build_user_profiles(messages: Iterable[ChatMessage]) -> dict[str, UserProfile]:
    """Aggregate each member's whole history into a UserProfile."""
    profiles: dict[str, UserProfile] = {}

    for msg in messages:
        if not msg.sender_username or msg.type == "系统消息":
            continue

        profile = profiles.get(msg.sender_username)
        if profile is None:
            profile = UserProfile(
                username=msg.sender_username,
                display_name=msg.sender_display_name or msg.sender_username,
                first_seen=msg.formatted_time,
                last_seen=msg.formatted_time,
            )
            profiles[msg.sender_username] = profile

        profile.total_messages += 1
        profile.last_seen = msg.formatted_time

        if msg.day:
            profile.active_days.add(msg.day)

        profile.peak_hours[msg.hour] = profile.peak_hours.get(msg.hour, 0) + 1

        if len(msg.content) > MIN_SAMPLE_LENGTH and len(profile.sample_messages) < MAX_SAMPLES:
            profile.sample_messages.append(msg.content[:SAMPLE_CHARS])

        for partner in find_mentions(msg.content):
            profile.interaction_partners[partner] = (
                profile.interaction_partners.get(partner, 0) + 1
            )

    logger.info("Built profiles for %d users", len(profiles))
    return profiles


def _parse_seen(value: str) -> Optional[datetime]:
    for fmt in ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d"):
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


def categorize_users(
    profiles: dict[str, UserProfile],
    today: Optional[datetime] = None,
) -> UserTiers:
    """
    Sort members into participation tiers relative to the group average.

    msg ratio = messages / average messages, day ratio = active days /
    average active days:
      cocreator  msg >= 3 and day >= 2
      heavy      msg >= 1.5 or day >= 1.5
      medium     msg >= 0.5 or day >= 0.5
      light      more than 2 messages
      silent     everyone else
    Churned is tracked separately: at least 5 messages, none in the
    7 days before `today`.
    """
    tiers = UserTiers()
    users = list(profiles.values())
    if not users:
        return tiers

    now = today or datetime.now()
    churn_cutoff = now - timedelta(days=CHURN_DAYS)
    avg_messages = sum(u.total_messages for u in users) / len(users)
    avg_days = sum(len(u.active_days) for u in users) / len(users)

    for user in users:
        msg_ratio = user.total_messages / avg_messages if avg_messages else 0
        day_ratio = len(user.active_days) / avg_days if avg_days else 0

        if msg_ratio >= 3 and day_ratio >= 2:
            tiers.cocreators.append(user.display_name)
        elif msg_ratio >= 1.5 or day_ratio >= 1.5:
            tiers.heavy.append(user.display_name)
        elif msg_ratio >= 0.5 or day_ratio >= 0.5:
            tiers.medium.append(user.display_name)
        elif user.total_messages > 2:
            tiers.light.append(user.display_name)
        else:
            tiers.silent.append(user.display_name)

        last_seen = _parse_seen(user.last_seen)
        if (
            user.total_messages >= CHURN_MIN_MESSAGES
            and last_seen is not None
            and last_seen < churn_cutoff
        ):
            tiers.churned.append(user.display_name)

    logger.info(
        "Cocreators: %d, Heavy: %d, Medium: %d, Light: %d, Silent: %d, Churned: %d",
        len(tiers.cocreators),
        len(tiers.heavy),
        len(tiers.medium),
        len(tiers.light),
        len(tiers.silent),
        len(tiers.churned),
    )
    return tiers


def calculate_daily_activity(messages: Iterable[ChatMessage]) -> dict[str, int]:
    """Messages per calendar day, keyed "YYYY-MM-DD"."""
    activity: dict[str, int] = {}
    for msg in messages:
        if msg.day:
            activity[msg.day] = activity.get(msg.day, 0) + 1
    return activity
