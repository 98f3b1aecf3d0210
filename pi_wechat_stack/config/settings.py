# -*- coding: utf-8 -*-
"""
Central Configuration Module
=============================
Loads all environment variables and provides typed, validated settings
for every service in the WeChat community journal stack.

All secrets and configuration values are read from the .env file
at the project root. Sensible defaults are provided where possible.
"""

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Resolve project root (two levels up from config/settings.py)
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent
ENV_PATH = PROJECT_ROOT / ".env"

# Load .env file: override=False keeps existing environment values
load_dotenv(dotenv_path=ENV_PATH, override=False)


def _require_env(key: str) -> str:
    """Return an env var or raise a clear error at startup."""
    value = os.getenv(key)
    if not value:
        print(
            f"[CONFIG ERROR] Required environment variable '{key}' is not set. "
            f"Check your .env file at: {ENV_PATH}",
            file=sys.stderr,
        )
        sys.exit(1)
    return value


def _split_env(key: str, default: str) -> tuple[str, ...]:
    raw = os.getenv(key, default)
    return tuple(part.strip() for part in raw.split(",") if part.strip())


# ---------------------------------------------------------------------------
# Data classes: grouped, typed, immutable-ish configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GeminiConfig:
    """Google Gemini API configuration."""

    api_key: str
    model: str
    temperature: float
    max_output_tokens: int
    top_p: float
    top_k: int


@dataclass(frozen=True)
class EchoTraceConfig:
    """Location and layout of the EchoTrace mirror of the WeChat databases."""

    db_dir: Path
    message_db: str
    contact_db: str
    group_id: str  # e.g. "50381382798@chatroom"
    group_table: str  # Msg_<md5 of group id>
    group_name: str
    timezone: str

    @property
    def message_db_path(self) -> Path:
        return self.db_dir / self.message_db

    @property
    def contact_db_path(self) -> Path:
        return self.db_dir / self.contact_db


@dataclass(frozen=True)
class ReportConfig:
    """Report wording, filtering and rendering options."""

    community_name: str
    bot_names: tuple[str, ...]
    prompt_message_limit: int
    prompt_content_chars: int
    top_users: int
    ops_top_users: int
    font_path: str
    font_bold_path: str


@dataclass(frozen=True)
class MattermostConfig:
    """Mattermost bot configuration for sharing finished reports."""

    url: str
    bot_token: str
    channel_id: str


@dataclass(frozen=True)
class PathsConfig:
    """All filesystem paths used by the stack."""

    project_root: Path
    data_root: Path
    chathistory: Path
    reports: Path
    journal: Path
    user_aliases: Path
    logs: Path


# ---------------------------------------------------------------------------
# Build configuration instances from environment
# ---------------------------------------------------------------------------


def _build_gemini() -> GeminiConfig:
    return GeminiConfig(
        api_key=_require_env("GEMINI_API_KEY"),
        model=os.getenv("GEMINI_MODEL", "gemini-2.0-flash"),
        temperature=float(os.getenv("GEMINI_TEMPERATURE", "0.7")),
        max_output_tokens=int(os.getenv("GEMINI_MAX_TOKENS", "8192")),
        top_p=float(os.getenv("GEMINI_TOP_P", "0.95")),
        top_k=int(os.getenv("GEMINI_TOP_K", "40")),
    )


def _build_echotrace(data_root: Path) -> EchoTraceConfig:
    account = os.getenv("ECHOTRACE_ACCOUNT", "wxid_76c1zk9dx9dl12")
    db_dir = os.getenv("ECHOTRACE_DIR")
    return EchoTraceConfig(
        db_dir=Path(db_dir) if db_dir else data_root / "EchoTrace" / account,
        message_db=os.getenv("ECHOTRACE_MESSAGE_DB", "message_0.db"),
        contact_db=os.getenv("ECHOTRACE_CONTACT_DB", "contact.db"),
        group_id=os.getenv("WECHAT_GROUP_ID", "50381382798@chatroom"),
        group_table=os.getenv(
            "WECHAT_GROUP_TABLE", "Msg_f330f51132799c870641cbaf14f1ac21"
        ),
        group_name=os.getenv("WECHAT_GROUP_NAME", "复利日知录第 5 季交流群（2026 ）"),
        timezone=os.getenv("WECHAT_TIMEZONE", "Asia/Shanghai"),
    )


def _build_report() -> ReportConfig:
    return ReportConfig(
        community_name=os.getenv("REPORT_COMMUNITY_NAME", "复利日知录"),
        bot_names=_split_env("REPORT_BOT_NAMES", "小云雀"),
        prompt_message_limit=int(os.getenv("REPORT_PROMPT_MESSAGES", "200")),
        prompt_content_chars=int(os.getenv("REPORT_PROMPT_CHARS", "100")),
        top_users=int(os.getenv("REPORT_TOP_USERS", "20")),
        ops_top_users=int(os.getenv("REPORT_OPS_TOP_USERS", "30")),
        font_path=os.getenv(
            "REPORT_FONT_PATH", "/usr/share/fonts/opentype/noto/NotoSansCJK-Regular.ttc"
        ),
        font_bold_path=os.getenv(
            "REPORT_FONT_BOLD_PATH", "/usr/share/fonts/opentype/noto/NotoSansCJK-Bold.ttc"
        ),
    )


def _build_mattermost() -> MattermostConfig:
    return MattermostConfig(
        url=_require_env("MATTERMOST_URL"),
        bot_token=_require_env("MATTERMOST_BOT_TOKEN"),
        channel_id=_require_env("MATTERMOST_CHANNEL_ID"),
    )


def _build_paths() -> PathsConfig:
    data_root = Path(os.getenv("WECHAT_DATA_ROOT", str(PROJECT_ROOT)))
    aliases = os.getenv("USER_ALIASES_PATH")
    paths = PathsConfig(
        project_root=PROJECT_ROOT,
        data_root=data_root,
        chathistory=data_root / "chathistory",
        reports=data_root / "reports",
        journal=data_root / "journal",
        user_aliases=Path(aliases) if aliases else data_root / "config" / "user-aliases.json",
        logs=data_root / "logs",
    )
    # Ensure all output directories exist
    for p in [paths.chathistory, paths.reports, paths.journal, paths.logs]:
        p.mkdir(parents=True, exist_ok=True)
    return paths


# ---------------------------------------------------------------------------
# Lazy-loaded singleton settings: import and use directly
# ---------------------------------------------------------------------------


class _Settings:
    """Lazy-loading settings container. Configs are built on first access."""

    def __init__(self):
        self._gemini = None
        self._echotrace = None
        self._report = None
        self._mattermost = None
        self._paths = None

    @property
    def gemini(self) -> GeminiConfig:
        if self._gemini is None:
            self._gemini = _build_gemini()
        return self._gemini

    @property
    def echotrace(self) -> EchoTraceConfig:
        if self._echotrace is None:
            self._echotrace = _build_echotrace(self.paths.data_root)
        return self._echotrace

    @property
    def report(self) -> ReportConfig:
        if self._report is None:
            self._report = _build_report()
        return self._report

    @property
    def mattermost(self) -> MattermostConfig:
        if self._mattermost is None:
            self._mattermost = _build_mattermost()
        return self._mattermost

    @property
    def paths(self) -> PathsConfig:
        if self._paths is None:
            self._paths = _build_paths()
        return self._paths


# Global settings instance. Usage: `from config.settings import settings`
settings = _Settings()
