import tempfile
import unittest
from pathlib import Path

from PIL import Image

from services.report_image_service import PAGE_WIDTH, ReportImageService, parse_blocks
from services.subtitle_image_service import SubtitleImageService, SubtitleStyle, caption_lines

REPORT = """# Daily Report

## Overview

[STATS]
Messages: 287条
Members: 41人
Topics: 3个
[/STATS]

[TOPIC]
### 1. Reading (约40%占比)
- **Keywords:** books
> **Alice:** "read the index first"
[/TOPIC]

[QUOTE]
"Small steps compound" -- Bob

**💡 思考:** keep going
[/QUOTE]

1. read ten pages
plain paragraph with *emphasis*
"""


class TestReportBlocks(unittest.TestCase):
    def test_parse_blocks(self) -> None:
        blocks = parse_blocks(REPORT)
        kinds = [b.kind for b in blocks]
        self.assertEqual(kinds, ["h1", "h2", "stats", "topic", "quote", "numbered", "text"])

        stats = blocks[2]
        self.assertEqual(stats.items, [("Messages", "287"), ("Members", "41"), ("Topics", "3")])

        topic = blocks[3]
        self.assertEqual([c.kind for c in topic.children], ["h3", "bullet", "dialog"])
        self.assertEqual(topic.children[1].text, "Keywords: books")
        self.assertEqual(topic.children[2].author, "Alice")

        quote = blocks[4]
        self.assertEqual((quote.text, quote.author, quote.thinking), ("Small steps compound", "Bob", "keep going"))
        self.assertEqual(blocks[6].text, "plain paragraph with emphasis")

    def test_unparseable_quote_kept_as_text(self) -> None:
        blocks = parse_blocks("[QUOTE]\njust words\n[/QUOTE]")
        self.assertEqual((blocks[0].kind, blocks[0].text, blocks[0].author), ("quote", "just words", ""))


class TestReportImage(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.service = ReportImageService(font_path=None)

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def test_wrap_respects_width(self) -> None:
        font = self.service.font(15)
        lines = self.service.wrap("word " * 60, font, 400)
        self.assertGreater(len(lines), 1)
        for line in lines:
            self.assertLessEqual(self.service.text_width(line, font), 400)

    def test_wrap_splits_overlong_token(self) -> None:
        font = self.service.font(15)
        lines = self.service.wrap("x" * 400, font, 200)
        self.assertGreater(len(lines), 1)
        self.assertEqual("".join(lines), "x" * 400)

    def test_render_grows_with_content(self) -> None:
        short_path = self.service.render("# Title", Path(self.tmp.name) / "short.png")
        long_path = self.service.render(REPORT, Path(self.tmp.name) / "out" / "long.png", footer="footer")

        with Image.open(short_path) as short, Image.open(long_path) as full:
            self.assertEqual(full.width, PAGE_WIDTH * 2)
            self.assertEqual(full.format, "PNG")
            self.assertGreater(full.height, short.height)


class TestSubtitleImage(unittest.TestCase):
    def setUp(self) -> None:
        self.base = Image.new("RGB", (200, 150), "red")
        self.base.paste(Image.new("RGB", (200, 75), "blue"), (0, 75))

    def test_caption_lines(self) -> None:
        self.assertEqual(caption_lines("one\n\n  \ntwo\n"), ["one", "two"])

    def test_output_height(self) -> None:
        self.assertEqual(SubtitleImageService.output_height(150, 3, 100), 350)
        self.assertEqual(SubtitleImageService.output_height(150, 3, 300), 450)
        self.assertEqual(SubtitleImageService.output_height(150, 1, 100), 150)

    def test_no_text_returns_base(self) -> None:
        result = SubtitleImageService().compose(self.base, "\n  \n")
        self.assertEqual(result.size, (200, 150))

    def test_stacks_bottom_strips(self) -> None:
        result = SubtitleImageService().compose(self.base, "one\ntwo\nthree")
        self.assertEqual(result.size, (200, 350))
        # each strip repeats rows 50..150 of the base image
        self.assertEqual(result.getpixel((2, 152))[:3], (255, 0, 0))
        self.assertEqual(result.getpixel((2, 245))[:3], (0, 0, 255))
        self.assertEqual(result.getpixel((2, 345))[:3], (0, 0, 255))

    def test_background_box(self) -> None:
        style = SubtitleStyle(background_color="#00ff00", background_opacity=1.0)
        service = SubtitleImageService(style=style)
        result = service.compose(self.base, "hi")

        left, _, right, _ = service._font().getbbox("hi")
        x = 100 - (right - left) // 2 - 10
        self.assertEqual(result.getpixel((x, 100))[:3], (0, 255, 0))

    def test_render_to_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            source = Path(tmp) / "frame.png"
            self.base.save(source)
            out = SubtitleImageService().render(source, "one\ntwo", Path(tmp) / "out.png")
            with Image.open(out) as image:
                self.assertEqual(image.size, (200, 250))

            with self.assertRaises(FileNotFoundError):
                SubtitleImageService().render(Path(tmp) / "missing.png", "x", Path(tmp) / "x.png")


if __name__ == "__main__":
    unittest.main()
