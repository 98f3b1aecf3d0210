# -*- coding: utf-8 -*-
"""
Gemini Service
===============
The one model client shared by the report agents. A call sends a filled
report prompt and gets report markdown back. The daily and operations
agents each pass their own system instruction, so a per-call model is
built when an instruction or override is given. Failed calls are retried
with exponential backoff and end in RuntimeError.
"""

import logging
import time
from typing import Optional

import google.generativeai as genai

from config.settings import settings

logger = logging.getLogger(__name__)


class GeminiService:
    """
    Turns report prompts into markdown through google-generativeai.

    Usage:
        service = GeminiService()
        markdown = service.generate_text(prompt, system_prompt=DAILY_REPORT_SYSTEM_PROMPT)
    """

    # Retry configuration
    MAX_RETRIES = 3
    BASE_DELAY = 2  # seconds

    def __init__(self):
        """Initialize the Gemini client with API key from settings."""
        cfg = settings.gemini
        genai.configure(api_key=cfg.api_key)

        self.model = genai.GenerativeModel(
            model_name=cfg.model,
            generation_config=self._generation_config(),
        )
        self.model_name = cfg.model
        logger.info("GeminiService initialized with model: %s", cfg.model)

    @staticmethod
    def _generation_config(
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> "genai.GenerationConfig":
        cfg = settings.gemini
        return genai.GenerationConfig(
            temperature=cfg.temperature if temperature is None else temperature,
            max_output_tokens=max_tokens or cfg.max_output_tokens,
            top_p=cfg.top_p,
            top_k=cfg.top_k,
        )

    def _model_for(
        self,
        system_prompt: Optional[str],
        temperature: Optional[float],
        max_tokens: Optional[int],
    ) -> "genai.GenerativeModel":
        if not system_prompt and temperature is None and max_tokens is None:
            return self.model
        return genai.GenerativeModel(
            model_name=self.model_name,
            system_instruction=system_prompt,
            generation_config=self._generation_config(temperature, max_tokens),
        )

    def generate_text(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Generate report text.

        Args:
            prompt: Filled report template.
            system_prompt: Agent instruction for this call.
            temperature: Per-call temperature override.
            max_tokens: Per-call output limit override.

        Raises:
            RuntimeError: When every attempt failed or the reply was blocked.
        """
        model = self._model_for(system_prompt, temperature, max_tokens)

        last_error = None
        for attempt in range(1, self.MAX_RETRIES + 1):
            try:
                response = model.generate_content(prompt)
                if not response.candidates:
                    # safety filters leave no candidates
                    raise RuntimeError(f"Gemini blocked the reply: {response.prompt_feedback}")

                text = response.text.strip()
                logger.info("Gemini returned %d chars (attempt %d)", len(text), attempt)
                return text

            except Exception as exc:
                last_error = exc
                if attempt < self.MAX_RETRIES:
                    delay = self.BASE_DELAY * 2 ** (attempt - 1)
                    logger.warning("Gemini attempt %d/%d failed, retry in %ds: %s",
                                   attempt, self.MAX_RETRIES, delay, str(exc)[:200])
                    time.sleep(delay)

        raise RuntimeError(
            f"Gemini generation failed after {self.MAX_RETRIES} attempts: {last_error}"
        )
