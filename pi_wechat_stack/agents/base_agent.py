# -*- coding: utf-8 -*-
"""
Base Agent
===========
Abstract base class for the report-writing agents.
Provides shared functionality:
  - Gemini service integration
  - Prompt-friendly formatting of name lists
  - Cleanup of the markdown Gemini returns
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Optional

from services.gemini_service import GeminiService

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```(?:markdown|md)?\s*\n(.*?)\n```\s*$", re.DOTALL)


class BaseAgent(ABC):
    """
    Abstract base class for all AI agents.

    Subclasses must implement:
        - execute(**kwargs) -> dict: The core agent logic.
        - agent_name (property): Human-readable agent name.
    """

    def __init__(self, gemini: Optional[GeminiService] = None):
        """Initialize shared services. Pass `gemini` to reuse or stub the client."""
        self.gemini = gemini or GeminiService()

    @property
    @abstractmethod
    def agent_name(self) -> str:
        """Human-readable name for this agent."""
        ...

    @abstractmethod
    def execute(self, **kwargs) -> dict:
        """
        Execute the agent's core task.

        Returns:
            Dict containing the agent's output data.
        """
        ...

    # ------------------------------------------------------------------
    # Shared utilities
    # ------------------------------------------------------------------

    def generate_markdown(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        """Run the prompt and return the markdown body, minus any code fence."""
        logger.info("[%s] Requesting report from Gemini (prompt_len=%d)", self.agent_name, len(prompt))
        text = self.gemini.generate_text(prompt, system_prompt=system_prompt)
        return self.strip_code_fence(text)

    @staticmethod
    def strip_code_fence(text: str) -> str:
        """Gemini occasionally wraps the whole answer in ```markdown ... ```."""
        cleaned = text.strip()
        match = _FENCE_RE.match(cleaned)
        return match.group(1).strip() if match else cleaned

    @staticmethod
    def join_names(names: list[str], limit: Optional[int] = None, empty: str = "") -> str:
        """Comma-join names, marking truncation with '...'."""
        if not names:
            return empty
        shown = names if limit is None else names[:limit]
        text = ", ".join(shown)
        if limit is not None and len(names) > limit:
            text += "..."
        return text
