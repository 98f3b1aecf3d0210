import unittest

from services.report_renderer import (
    markdown_to_html,
    parse_quote,
    parse_stats,
    render_quote,
    render_report_html,
    render_stats,
)


class TestStats(unittest.TestCase):
    def test_parse_stats_strips_units(self) -> None:
        block = "\n消息总量: 287条\n活跃人数：41人\n\n话题数量: 3个\n没有冒号的行\n"
        self.assertEqual(
            parse_stats(block),
            [("消息总量", "287"), ("活跃人数", "41"), ("话题数量", "3")],
        )

    def test_render_stats_grid(self) -> None:
        html = render_stats("消息总量: 287条")
        self.assertTrue(html.startswith('<div class="stats-grid">'))
        self.assertIn('<div class="stat-value">287</div>', html)
        self.assertIn('<div class="stat-label">消息总量</div>', html)


class TestQuote(unittest.TestCase):
    def test_parse_quote_with_thinking(self) -> None:
        block = "\n「复利来自每天的一点点」 —— 阿强\n\n**💡 思考:** 小步快跑才是长期主义。\n"
        self.assertEqual(
            parse_quote(block),
            ("复利来自每天的一点点", "阿强", "小步快跑才是长期主义。"),
        )

    def test_parse_quote_ascii_quotes_and_dash(self) -> None:
        self.assertEqual(parse_quote('"Stay hungry" - Bob'), ("Stay hungry", "Bob", ""))

    def test_unparseable_quote(self) -> None:
        self.assertIsNone(parse_quote("没有引号的句子"))
        self.assertEqual(render_quote("没有引号的句子"), '<div class="quote-card">没有引号的句子</div>')

    def test_render_quote_without_thinking(self) -> None:
        html = render_quote("「金句」 —— 小明")
        self.assertIn('<div class="quote-text">「金句」</div>', html)
        self.assertIn('<div class="quote-author">—— 小明</div>', html)
        self.assertNotIn("quote-thinking", html)


class TestMarkdown(unittest.TestCase):
    def test_topic_and_dialog(self) -> None:
        md = '[TOPIC]\n### 1. 读书方法 (约40%占比)\n\n> **阿强:** "先读目录"\n[/TOPIC]'
        html = markdown_to_html(md)
        self.assertIn('<div class="topic-card">', html)
        self.assertIn("<h3>1. 读书方法 (约40%占比)</h3>", html)
        self.assertIn('<div class="dialog-quote"><span class="dialog-author">阿强:</span> "先读目录"</div>', html)

    def test_basic_markdown(self) -> None:
        md = "# 标题\n## 小节\n> 普通引用\n- **关键词:** 复利\n1. 第一步\n*备注*"
        html = markdown_to_html(md)
        self.assertIn("<h1>标题</h1>", html)
        self.assertIn("<h2>小节</h2>", html)
        self.assertIn("<blockquote>普通引用</blockquote>", html)
        self.assertIn("<li><strong>关键词:</strong> 复利</li>", html)
        self.assertIn('<li class="numbered">第一步</li>', html)
        self.assertIn("<em>备注</em>", html)
        self.assertIn("<br>", html)
        self.assertNotIn("\n", html)

    def test_full_page(self) -> None:
        page = render_report_html("# 报告", "2026-01-16", "复利日知录")
        self.assertIn("<title>复利日知录精华报告 - 2026-01-16</title>", page)
        self.assertIn("由 AI 自动生成 · 复利日知录社群", page)
        self.assertIn("<h1>报告</h1>", page)
        self.assertIn("--quote-gold: #fbbf24;", page)


if __name__ == "__main__":
    unittest.main()
