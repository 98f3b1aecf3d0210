import json
import sqlite3
import tempfile
import unittest
from pathlib import Path

from database.models import Contact
from services.identity_resolver import (
    FALLBACK_NAME,
    IdentityResolver,
    clean_username,
    is_wxid_format,
    load_contacts,
    load_user_aliases,
    split_sender,
)


class TestWxidDetection(unittest.TestCase):
    def test_wxid_prefixes(self) -> None:
        self.assertTrue(is_wxid_format("wxid_abc123"))
        self.assertTrue(is_wxid_format("Dwxid_abc123"))
        self.assertTrue(is_wxid_format("WXID_abc"))

    def test_long_opaque_ids(self) -> None:
        self.assertTrue(is_wxid_format("abcdefghij12345"))
        self.assertFalse(is_wxid_format("abcdefghij1234"))

    def test_empty_and_nicknames(self) -> None:
        self.assertTrue(is_wxid_format(""))
        self.assertTrue(is_wxid_format(None))
        self.assertFalse(is_wxid_format("小明"))
        self.assertFalse(is_wxid_format("zhangsan"))


class TestSenderParsing(unittest.TestCase):
    def test_split_sender(self) -> None:
        self.assertEqual(split_sender("wxid_abc:\n大家好"), ("wxid_abc", "大家好"))

    def test_split_sender_keeps_multiline_body(self) -> None:
        self.assertEqual(split_sender("bob:\n第一行\n第二行"), ("bob", "第一行\n第二行"))

    def test_split_sender_without_prefix(self) -> None:
        self.assertEqual(split_sender("系统提示"), ("", "系统提示"))
        self.assertEqual(split_sender(None), ("", ""))

    def test_clean_username(self) -> None:
        self.assertEqual(clean_username("\x08\x12wxid_abc123"), "wxid_abc123")
        self.assertEqual(clean_username("\x0a\x05zhang_san"), "zhang_san")
        self.assertEqual(clean_username("小明"), "小明")
        self.assertEqual(clean_username(""), "")


class TestAliasFile(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.path = Path(self.tmp.name) / "user-aliases.json"

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def test_comment_and_non_strings_skipped(self) -> None:
        self.path.write_text(
            json.dumps({"_comment": "manual names", "wxid_a": "阿明", "wxid_b": 3}),
            encoding="utf-8",
        )
        self.assertEqual(load_user_aliases(self.path), {"wxid_a": "阿明"})

    def test_missing_file(self) -> None:
        self.assertEqual(load_user_aliases(self.path), {})

    def test_invalid_json_is_empty(self) -> None:
        self.path.write_text("{not json", encoding="utf-8")
        with self.assertLogs("services.identity_resolver", level="WARNING"):
            self.assertEqual(load_user_aliases(self.path), {})


class TestIdentityResolver(unittest.TestCase):
    def setUp(self) -> None:
        contacts = {
            "wxid_remark": Contact(username="wxid_remark", nick_name="昵称", remark="备注名"),
            "wxid_nick": Contact(username="wxid_nick", nick_name="小红", remark=""),
            "wxid_blank": Contact(username="wxid_blank", nick_name="", remark=None),
        }
        aliases = {"wxid_alias": "老王", "wxid_blank": "空白兄"}
        self.resolver = IdentityResolver(contacts, aliases)

    def test_contact_remark_before_nickname(self) -> None:
        self.assertEqual(self.resolver.display_name("wxid_remark"), "备注名")
        self.assertEqual(self.resolver.display_name("wxid_nick"), "小红")

    def test_contact_lookup_uses_clean_name(self) -> None:
        self.assertEqual(self.resolver.display_name("\x01\x02wxid_nick"), "小红")

    def test_alias_tier(self) -> None:
        self.assertEqual(self.resolver.display_name("wxid_alias"), "老王")
        self.assertEqual(self.resolver.display_name("wxid_blank"), "空白兄")

    def test_username_fallback(self) -> None:
        self.assertEqual(self.resolver.display_name("zhangsan"), "zhangsan")
        self.assertEqual(self.resolver.display_name("wxid_unknown"), FALLBACK_NAME)
        self.assertEqual(self.resolver.display_name(""), FALLBACK_NAME)


class TestLoadContacts(unittest.TestCase):
    def test_reads_contact_table(self) -> None:
        conn = sqlite3.connect(":memory:")
        conn.row_factory = sqlite3.Row
        conn.execute("CREATE TABLE contact (username TEXT, nick_name TEXT, remark TEXT)")
        conn.executemany(
            "INSERT INTO contact VALUES (?, ?, ?)",
            [("wxid_a", "阿A", ""), ("", "nobody", ""), ("wxid_b", None, "B哥")],
        )
        contacts = load_contacts(conn)
        conn.close()

        self.assertEqual(sorted(contacts), ["wxid_a", "wxid_b"])
        self.assertEqual(contacts["wxid_b"].remark, "B哥")


if __name__ == "__main__":
    unittest.main()
