import tempfile
import unittest
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import requests

from config.settings import MattermostConfig
from database.models import GoldQuote, JournalEntry
from services.mattermost_service import MattermostService

SETTINGS = SimpleNamespace(
    mattermost=MattermostConfig(url="https://chat.example.com/", bot_token="token", channel_id="chan"),
    report=SimpleNamespace(community_name="复利日知录"),
)

ENTRY = JournalEntry(
    date="2026-01-16",
    one_sentence_summary="复利来自每天的一点点 —— 阿强",
    topics=["读书方法", "时间管理"],
    gold_quotes=[GoldQuote(quote="复利来自每天的一点点", author="阿强")],
    key_connectors=["阿强", "小明"],
)


def _ok(payload=None) -> MagicMock:
    response = MagicMock(status_code=201)
    response.json.return_value = payload or {}
    return response


class TestMattermostService(unittest.TestCase):
    def setUp(self) -> None:
        patcher = patch("services.mattermost_service.settings", SETTINGS)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.service = MattermostService()

        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.png = Path(self.tmp.name) / "daily-report.png"
        self.png.write_bytes(b"\x89PNG fake")

    def test_summary_message(self) -> None:
        message = MattermostService.format_daily_summary(ENTRY, "复利日知录")
        self.assertIn("复利日知录每日精华 — 2026-01-16", message)
        self.assertIn("- 读书方法\n- 时间管理", message)
        self.assertIn("> 「复利来自每天的一点点」 —— **阿强**", message)
        self.assertIn("关键连接者: 阿强, 小明", message)

    @patch("services.mattermost_service.requests.post")
    def test_share_uploads_image_and_posts(self, post) -> None:
        post.side_effect = [_ok({"file_infos": [{"id": "file-1"}]}), _ok()]

        self.assertTrue(self.service.share_daily_report(ENTRY, self.png))

        upload_call, post_call = post.call_args_list
        self.assertEqual(upload_call.args[0], "https://chat.example.com/api/v4/files")
        self.assertEqual(upload_call.kwargs["data"], {"channel_id": "chan"})
        self.assertEqual(post_call.args[0], "https://chat.example.com/api/v4/posts")
        self.assertEqual(post_call.kwargs["json"]["file_ids"], ["file-1"])
        self.assertEqual(post_call.kwargs["headers"]["Authorization"], "Bearer token")

    @patch("services.mattermost_service.requests.post")
    def test_failed_upload_still_posts_text(self, post) -> None:
        post.side_effect = [MagicMock(status_code=500, text="error"), _ok()]

        self.assertTrue(self.service.share_daily_report(ENTRY, self.png))
        payload = post.call_args_list[1].kwargs["json"]
        self.assertNotIn("file_ids", payload)
        self.assertIn("分享图上传失败", payload["message"])

    @patch("services.mattermost_service.requests.post")
    def test_http_errors_return_false(self, post) -> None:
        post.side_effect = requests.exceptions.ConnectionError("down")
        self.assertFalse(self.service.share_daily_report(ENTRY))

    @patch("services.mattermost_service.requests.post")
    def test_rejected_post_returns_false(self, post) -> None:
        post.return_value = MagicMock(status_code=403, text="forbidden")
        self.assertFalse(self.service.share_daily_report(ENTRY))
        self.assertEqual(post.call_count, 1)


if __name__ == "__main__":
    unittest.main()
