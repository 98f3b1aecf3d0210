import json
import tempfile
import unittest
from pathlib import Path

from database.models import ChatExport, ChatMessage, ChatSession
from services.chat_history import export_filename, load_all_messages, load_messages, save_export


def _message(ms: int, sender: str, content: str) -> dict:
    return {
        "localId": ms,
        "createTime": ms,
        "formattedTime": "2026-01-16 08:00:00",
        "type": "文本消息",
        "content": content,
        "senderUsername": sender,
        "senderDisplayName": sender.upper(),
    }


class TestChatHistory(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp.name)

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def write(self, name: str, payload) -> Path:
        path = self.dir / name
        path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
        return path

    def test_export_filename(self) -> None:
        self.assertEqual(export_filename("群", target_date="2026-01-16"), "群_fresh_2026-01-16.json")
        self.assertEqual(export_filename("群", stamp_ms=1768521600000), "群_1768521600000.json")

    def test_save_uses_camel_case_and_keeps_chinese(self) -> None:
        session = ChatSession(wxid="g@chatroom", nickname="群", remark="群", display_name="群")
        export = ChatExport(
            session=session,
            messages=[ChatMessage(create_time=1, content="你好", sender_display_name="小明")],
        )
        path = save_export(export, self.dir / "sub" / "out.json")

        text = path.read_text(encoding="utf-8")
        self.assertIn("你好", text)
        data = json.loads(text)
        self.assertEqual(data["session"]["displayName"], "群")
        self.assertEqual(data["messages"][0]["senderDisplayName"], "小明")
        self.assertNotIn("emojiMd5", data["messages"][0])

    def test_load_bare_list_and_document(self) -> None:
        bare = self.write("a.json", [_message(1, "a", "x")])
        doc = self.write("b.json", {"session": {}, "messages": [_message(2, "b", "y")]})
        self.assertEqual([m.content for m in load_messages(bare)], ["x"])
        self.assertEqual([m.sender_display_name for m in load_messages(doc)], ["B"])

    def test_load_other_shapes_is_empty(self) -> None:
        self.assertEqual(load_messages(self.write("c.json", {"foo": 1})), [])
        self.assertEqual(load_messages(self.write("d.json", "text")), [])

    def test_load_tolerates_nulls(self) -> None:
        raw = _message(3, "c", "z")
        raw["content"] = None
        raw["source"] = 12345
        msg = load_messages(self.write("e.json", [raw]))[0]
        self.assertEqual(msg.content, "")
        self.assertEqual(msg.source, "12345")

    def test_load_all_merges_and_dedupes(self) -> None:
        self.write("monthly.json", {"messages": [_message(3, "a", "late"), _message(1, "a", "early")]})
        self.write("fresh.json", [_message(1, "a", "early"), _message(2, "b", "middle")])
        (self.dir / "notes.txt").write_text("ignored", encoding="utf-8")

        merged = load_all_messages(self.dir)
        self.assertEqual([m.content for m in merged], ["early", "middle", "late"])

    def test_load_all_empty_directory(self) -> None:
        self.assertEqual(load_all_messages(self.dir), [])


if __name__ == "__main__":
    unittest.main()
