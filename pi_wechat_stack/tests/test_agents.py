import unittest
from unittest.mock import Mock

from agents.base_agent import BaseAgent
from agents.daily_report_agent import DailyReportAgent
from agents.ops_report_agent import OpsReportAgent
from database.models import ChatMessage, UserProfile, UserStats, UserTiers


class TestBaseAgentHelpers(unittest.TestCase):
    def test_strip_code_fence(self) -> None:
        self.assertEqual(BaseAgent.strip_code_fence("```markdown\n# 标题\n```"), "# 标题")
        self.assertEqual(BaseAgent.strip_code_fence("```\n正文\n```\n"), "正文")
        self.assertEqual(BaseAgent.strip_code_fence("  # 无包裹  "), "# 无包裹")

    def test_join_names(self) -> None:
        self.assertEqual(BaseAgent.join_names(["a", "b"]), "a, b")
        self.assertEqual(BaseAgent.join_names(["a", "b", "c"], limit=2), "a, b...")
        self.assertEqual(BaseAgent.join_names([], empty="暂无"), "暂无")


class TestDailyReportAgent(unittest.TestCase):
    def setUp(self) -> None:
        self.gemini = Mock()
        self.gemini.generate_text.return_value = "```markdown\n# 📅 报告\n```"
        self.agent = DailyReportAgent(
            gemini=self.gemini,
            community_name="测试社群",
            message_limit=2,
            content_chars=5,
            user_limit=1,
        )
        self.messages = [
            ChatMessage(formatted_time="2026-01-16 08:01:02", content="第一条很长很长的消息", sender_display_name="阿强"),
            ChatMessage(formatted_time="2026-01-16 08:05:00", content="第二条", sender_display_name="小明"),
            ChatMessage(formatted_time="2026-01-16 09:00:00", content="第三条", sender_display_name="小红"),
        ]
        self.stats = {
            "a": UserStats(username="a", display_name="阿强", message_count=5, mentioned_count=2),
            "b": UserStats(username="b", display_name="小明", message_count=1),
        }

    def test_format_messages(self) -> None:
        self.assertEqual(
            self.agent.format_messages(self.messages),
            "[08:01:02] 阿强: 第一条很长\n[08:05:00] 小明: 第二条",
        )

    def test_format_user_stats(self) -> None:
        self.assertEqual(self.agent.format_user_stats(self.stats), "阿强: 5条消息, 被@2次")

    def test_execute(self) -> None:
        result = self.agent.execute(messages=self.messages, user_stats=self.stats, target_date="2026-01-16")

        self.assertEqual(result["markdown"], "# 📅 报告")
        self.assertEqual(result["message_count"], 3)
        self.assertEqual(result["active_users"], 2)

        prompt = self.gemini.generate_text.call_args.args[0]
        self.assertIn('微信群"测试社群"2026-01-16的聊天记录', prompt)
        self.assertIn("[08:01:02] 阿强: 第一条很长", prompt)
        self.assertNotIn("第三条", prompt)
        self.assertIn("system_prompt", self.gemini.generate_text.call_args.kwargs)


class TestOpsReportAgent(unittest.TestCase):
    def setUp(self) -> None:
        self.gemini = Mock()
        self.gemini.generate_text.return_value = "# 运营报告"
        self.agent = OpsReportAgent(gemini=self.gemini, community_name="测试社群", profile_limit=1)
        self.profiles = {
            "a": UserProfile(
                username="a",
                display_name="阿强",
                total_messages=40,
                active_days={"2026-01-10", "2026-01-11"},
                interaction_partners={"小明": 3, "小红": 1},
                peak_hours={21: 5, 8: 1},
                sample_messages=["这是阿强说过的一段很有代表性的话"],
            ),
            "b": UserProfile(username="b", display_name="潜水员", total_messages=1),
        }
        self.tiers = UserTiers(cocreators=["阿强"], silent=["潜水员"])

    def test_format_profiles(self) -> None:
        self.assertEqual(
            self.agent.format_profiles(self.profiles),
            '- 阿强: 40条消息, 活跃2天, 常互动: 小明/小红, 活跃时段: 21点, 样本: "这是阿强说过的一段很有代表性的话..."',
        )

    def test_format_activity_sorted(self) -> None:
        self.assertEqual(
            OpsReportAgent.format_activity({"2026-01-11": 3, "2026-01-10": 7}),
            "2026-01-10: 7条, 2026-01-11: 3条",
        )

    def test_silent_samples(self) -> None:
        self.assertEqual(
            OpsReportAgent.format_silent_samples(self.profiles, ["潜水员", "不存在"]),
            '- 潜水员: "无发言记录..."',
        )

    def test_execute(self) -> None:
        result = self.agent.execute(
            profiles=self.profiles,
            tiers=self.tiers,
            daily_activity={"2026-01-10": 7},
            generated_on="2026-01-20",
        )
        self.assertEqual(result["markdown"], "# 运营报告")
        self.assertEqual(result["member_count"], 2)
        self.assertEqual(result["days_covered"], 1)
        self.assertEqual(result["tiers"]["cocreators"], 1)
        self.assertEqual(result["tiers"]["churned"], 0)

        prompt = self.gemini.generate_text.call_args.args[0]
        self.assertIn("测试社群", prompt)
        self.assertIn("暂无", prompt)
        self.assertIn("2026-01-20", prompt)


if __name__ == "__main__":
    unittest.main()
