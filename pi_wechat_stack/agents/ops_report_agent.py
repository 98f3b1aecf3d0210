# -*- coding: utf-8 -*-
"""
Ops Report Agent
=================
Writes the community operations report from the full chat history:
participation tiers, member profiles, daily activity, and samples of
what silent members once said (for re-activation ideas).
"""

import logging
from datetime import date
from typing import Optional

from agents.base_agent import BaseAgent
from config.prompts.ops_report_prompts import OPS_REPORT_PROMPT, OPS_REPORT_SYSTEM_PROMPT
from config.settings import settings
from database.models import UserProfile, UserTiers
from services.gemini_service import GeminiService

logger = logging.getLogger(__name__)

TIER_LIST_LIMIT = 20
SILENT_SAMPLE_LIMIT = 10


class OpsReportAgent(BaseAgent):
    """
    Ops Report Agent — turns user profiles and tiers into an operations plan.

    Usage:
        agent = OpsReportAgent()
        result = agent.execute(profiles=profiles, tiers=tiers, daily_activity=activity)
    """

    def __init__(
        self,
        gemini: Optional[GeminiService] = None,
        community_name: Optional[str] = None,
        profile_limit: Optional[int] = None,
    ):
        super().__init__(gemini)
        cfg = settings.report
        self.community_name = community_name or cfg.community_name
        self.profile_limit = profile_limit or cfg.ops_top_users

    @property
    def agent_name(self) -> str:
        return "OpsReportAgent"

    def format_profiles(self, profiles: dict[str, UserProfile]) -> str:
        ranked = sorted(profiles.values(), key=lambda p: p.total_messages, reverse=True)
        lines = []
        for profile in ranked[: self.profile_limit]:
            sample = profile.sample_messages[0][:50] if profile.sample_messages else "无"
            lines.append(
                f"- {profile.display_name}: {profile.total_messages}条消息, "
                f"活跃{len(profile.active_days)}天, "
                f"常互动: {'/'.join(profile.top_partners(3))}, "
                f"活跃时段: {profile.peak_hour}点, "
                f'样本: "{sample}..."'
            )
        return "\n".join(lines)

    @staticmethod
    def format_activity(daily_activity: dict[str, int]) -> str:
        return ", ".join(f"{day}: {count}条" for day, count in sorted(daily_activity.items()))

    @staticmethod
    def format_silent_samples(profiles: dict[str, UserProfile], silent: list[str]) -> str:
        by_name = {}
        for profile in profiles.values():
            by_name.setdefault(profile.display_name, profile)

        lines = []
        for name in silent[:SILENT_SAMPLE_LIMIT]:
            profile = by_name.get(name)
            if profile is None:
                continue
            sample = profile.sample_messages[0][:80] if profile.sample_messages else "无发言记录"
            lines.append(f'- {name}: "{sample}..."')
        return "\n".join(lines)

    def build_prompt(
        self,
        profiles: dict[str, UserProfile],
        tiers: UserTiers,
        daily_activity: dict[str, int],
        generated_on: Optional[str] = None,
    ) -> str:
        return OPS_REPORT_PROMPT.format(
            community_name=self.community_name,
            cocreators=self.join_names(tiers.cocreators),
            heavy=self.join_names(tiers.heavy),
            medium=self.join_names(tiers.medium),
            light=self.join_names(tiers.light, limit=TIER_LIST_LIMIT),
            silent=self.join_names(tiers.silent, limit=TIER_LIST_LIMIT),
            churned=self.join_names(tiers.churned, empty="暂无"),
            user_summaries=self.format_profiles(profiles),
            activity_data=self.format_activity(daily_activity),
            silent_samples=self.format_silent_samples(profiles, tiers.silent),
            generated_on=generated_on or date.today().isoformat(),
        )

    def execute(
        self,
        profiles: dict[str, UserProfile],
        tiers: UserTiers,
        daily_activity: dict[str, int],
        **kwargs,
    ) -> dict:
        """
        Generate the operations report markdown.

        Returns:
            Dict with markdown, member_count, days_covered and tier sizes.
        """
        logger.info(
            "[%s] Writing ops report (%d members, %d days)",
            self.agent_name,
            len(profiles),
            len(daily_activity),
        )
        prompt = self.build_prompt(profiles, tiers, daily_activity, kwargs.get("generated_on"))
        markdown = self.generate_markdown(prompt, system_prompt=OPS_REPORT_SYSTEM_PROMPT)

        return {
            "markdown": markdown,
            "member_count": len(profiles),
            "days_covered": len(daily_activity),
            "tiers": {name: len(members) for name, members in tiers.model_dump().items()},
        }
