# -*- coding: utf-8 -*-
"""
Daily Report Agent
===================
Writes the daily highlight report for one day of group chat.

Input: the day's preprocessed messages and per-user counters.
Output: markdown with [STATS] / [TOPIC] / [QUOTE] blocks, ready for
services.report_renderer and services.journal_builder.
"""

import logging
from typing import Optional

from agents.base_agent import BaseAgent
from config.prompts.daily_report_prompts import (
    DAILY_REPORT_PROMPT,
    DAILY_REPORT_SYSTEM_PROMPT,
)
from config.settings import settings
from database.models import ChatMessage, UserStats
from services.chat_analytics import top_users
from services.gemini_service import GeminiService

logger = logging.getLogger(__name__)


class DailyReportAgent(BaseAgent):
    """
    Daily Report Agent — summarizes a day of chat into a highlight report.

    Usage:
        agent = DailyReportAgent()
        result = agent.execute(messages=msgs, user_stats=stats, target_date="2026-01-16")
    """

    def __init__(
        self,
        gemini: Optional[GeminiService] = None,
        community_name: Optional[str] = None,
        message_limit: Optional[int] = None,
        content_chars: Optional[int] = None,
        user_limit: Optional[int] = None,
    ):
        super().__init__(gemini)
        cfg = settings.report
        self.community_name = community_name or cfg.community_name
        self.message_limit = message_limit or cfg.prompt_message_limit
        self.content_chars = content_chars or cfg.prompt_content_chars
        self.user_limit = user_limit or cfg.top_users

    @property
    def agent_name(self) -> str:
        return "DailyReportAgent"

    def format_messages(self, messages: list[ChatMessage]) -> str:
        """One "[HH:MM:SS] name: text" line per message, capped for the context window."""
        lines = []
        for msg in messages[: self.message_limit]:
            clock = msg.formatted_time.split(" ")[1] if " " in msg.formatted_time else ""
            lines.append(
                f"[{clock}] {msg.sender_display_name}: {msg.content[: self.content_chars]}"
            )
        return "\n".join(lines)

    def format_user_stats(self, user_stats: dict[str, UserStats]) -> str:
        return "\n".join(
            f"{u.display_name}: {u.message_count}条消息, 被@{u.mentioned_count}次"
            for u in top_users(user_stats, self.user_limit)
        )

    def build_prompt(
        self,
        messages: list[ChatMessage],
        user_stats: dict[str, UserStats],
        target_date: str,
    ) -> str:
        return DAILY_REPORT_PROMPT.format(
            community_name=self.community_name,
            target_date=target_date,
            message_summary=self.format_messages(messages),
            top_users=self.format_user_stats(user_stats),
        )

    def execute(
        self,
        messages: list[ChatMessage],
        user_stats: dict[str, UserStats],
        target_date: str,
        **kwargs,
    ) -> dict:
        """
        Generate the daily report markdown.

        Args:
            messages: Preprocessed messages of target_date.
            user_stats: Output of chat_analytics.analyze_users.
            target_date: "YYYY-MM-DD".

        Returns:
            Dict with date, markdown, message_count, active_users.
        """
        logger.info(
            "[%s] Writing report for %s (%d messages, %d users)",
            self.agent_name,
            target_date,
            len(messages),
            len(user_stats),
        )
        prompt = self.build_prompt(messages, user_stats, target_date)
        markdown = self.generate_markdown(prompt, system_prompt=DAILY_REPORT_SYSTEM_PROMPT)

        return {
            "date": target_date,
            "markdown": markdown,
            "message_count": len(messages),
            "active_users": len(user_stats),
        }
