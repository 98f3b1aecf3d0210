import unittest
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from config.settings import GeminiConfig
from services.gemini_service import GeminiService

CONFIG = GeminiConfig(
    api_key="test-key",
    model="gemini-test",
    temperature=0.7,
    max_output_tokens=1024,
    top_p=0.95,
    top_k=40,
)


def _response(text: str, candidates: bool = True) -> SimpleNamespace:
    return SimpleNamespace(text=text, candidates=[object()] if candidates else [], prompt_feedback="blocked")


class TestGeminiService(unittest.TestCase):
    def setUp(self) -> None:
        settings_patch = patch("services.gemini_service.settings", SimpleNamespace(gemini=CONFIG))
        genai_patch = patch("services.gemini_service.genai")
        sleep_patch = patch("services.gemini_service.time.sleep")
        settings_patch.start()
        self.genai = genai_patch.start()
        self.sleep = sleep_patch.start()
        self.addCleanup(patch.stopall)

        self.model = MagicMock()
        self.genai.GenerativeModel.return_value = self.model
        self.service = GeminiService()

    def test_configures_client(self) -> None:
        self.genai.configure.assert_called_once_with(api_key="test-key")
        self.assertEqual(self.service.model_name, "gemini-test")

    def test_generate_text_strips_output(self) -> None:
        self.model.generate_content.return_value = _response("  # 报告 \n")
        self.assertEqual(self.service.generate_text("prompt"), "# 报告")
        self.sleep.assert_not_called()

    def test_system_prompt_builds_dedicated_model(self) -> None:
        self.model.generate_content.return_value = _response("ok")
        self.service.generate_text("prompt", system_prompt="你是分析师")
        self.assertEqual(self.genai.GenerativeModel.call_args.kwargs["system_instruction"], "你是分析师")

    def test_retries_then_succeeds(self) -> None:
        self.model.generate_content.side_effect = [ConnectionError("boom"), _response("ok")]
        self.assertEqual(self.service.generate_text("prompt"), "ok")
        self.sleep.assert_called_once_with(2)

    def test_gives_up_after_max_retries(self) -> None:
        self.model.generate_content.return_value = _response("", candidates=False)
        with self.assertRaises(RuntimeError):
            self.service.generate_text("prompt")
        self.assertEqual(self.model.generate_content.call_count, GeminiService.MAX_RETRIES)
        self.assertEqual([c.args[0] for c in self.sleep.call_args_list], [2, 4])


if __name__ == "__main__":
    unittest.main()
