# -*- coding: utf-8 -*-
"""
Mattermost Service
====================
Shares finished daily reports with the community team channel:
  - Uploading the daily-report.png share image
  - Posting the journal summary (one-sentence summary, topics, gold quotes)

Mattermost API Reference:
  - POST /api/v4/posts          — Create a post (up to 16,383 chars)
  - POST /api/v4/files          — Upload files (up to 100 MB)
  - Authorization: Bearer TOKEN — Bot Personal Access Token
"""

import logging
from pathlib import Path
from typing import Optional

import requests

from config.settings import settings
from database.models import JournalEntry

logger = logging.getLogger(__name__)


class MattermostService:
    """
    Mattermost REST API client for report sharing.

    Usage:
        service = MattermostService()
        service.share_daily_report(entry, png_path)
    """

    TIMEOUT = 30  # seconds

    def __init__(self):
        cfg = settings.mattermost
        self.base_url = cfg.url.rstrip("/")
        self.bot_token = cfg.bot_token
        self.channel_id = cfg.channel_id
        self._headers = {
            "Authorization": f"Bearer {self.bot_token}",
            "Content-Type": "application/json",
        }
        logger.info("MattermostService initialized (channel_id=%s)", self.channel_id)

    # ------------------------------------------------------------------
    # Core API helpers
    # ------------------------------------------------------------------

    def _post_message(self, message: str, file_ids: Optional[list] = None) -> bool:
        """
        Create a post in the configured channel.

        Returns:
            True if sent successfully.
        """
        payload = {
            "channel_id": self.channel_id,
            "message": message,
        }
        if file_ids:
            payload["file_ids"] = file_ids

        try:
            response = requests.post(
                f"{self.base_url}/api/v4/posts",
                json=payload,
                headers=self._headers,
                timeout=self.TIMEOUT,
            )

            if response.status_code in (200, 201):
                logger.info("Mattermost message sent successfully.")
                return True
            logger.error(
                "Mattermost post failed: status=%d, body=%s",
                response.status_code,
                response.text[:200],
            )
            return False

        except requests.exceptions.RequestException as exc:
            logger.error("Mattermost post request failed: %s", exc)
            return False

    def _upload_file(self, file_path: Path | str) -> Optional[str]:
        """
        Upload a file to the channel and return its file ID.

        Returns:
            File ID string, or None on failure.
        """
        path = Path(file_path)
        if not path.is_file():
            logger.error("File not found for upload: %s", path)
            return None

        try:
            with open(path, "rb") as f:
                response = requests.post(
                    f"{self.base_url}/api/v4/files",
                    headers={"Authorization": f"Bearer {self.bot_token}"},
                    files={"files": (path.name, f)},
                    data={"channel_id": self.channel_id},
                    timeout=120,
                )

            if response.status_code in (200, 201):
                file_id = response.json()["file_infos"][0]["id"]
                logger.info("File uploaded to Mattermost: %s → %s", path.name, file_id)
                return file_id
            logger.error(
                "Mattermost file upload failed: status=%d, body=%s",
                response.status_code,
                response.text[:200],
            )
            return None

        except requests.exceptions.RequestException as exc:
            logger.error("Mattermost file upload request failed: %s", exc)
            return None
        except (KeyError, IndexError, ValueError) as exc:
            logger.error("Unexpected Mattermost upload response: %s", exc)
            return None

    # ------------------------------------------------------------------
    # Report sharing
    # ------------------------------------------------------------------

    @staticmethod
    def format_daily_summary(entry: JournalEntry, community_name: str) -> str:
        message = f"### :newspaper: {community_name}每日精华 — {entry.date}\n\n"
        message += f"**一句话总结:** {entry.one_sentence_summary}\n\n"
        if entry.topics:
            message += "**核心话题:**\n"
            message += "".join(f"- {topic}\n" for topic in entry.topics)
            message += "\n"
        if entry.gold_quotes:
            message += "**今日金句:**\n"
            for item in entry.gold_quotes:
                message += f"> 「{item.quote}」 —— **{item.author}**\n"
            message += "\n"
        if entry.key_connectors:
            message += f"_关键连接者: {', '.join(entry.key_connectors)}_"
        return message.rstrip() + "\n"

    def share_daily_report(
        self,
        entry: JournalEntry,
        png_path: Optional[Path | str] = None,
        community_name: Optional[str] = None,
    ) -> bool:
        """
        Post a daily report summary, with the share image attached when present.

        A failed image upload still posts the text summary.

        Returns:
            True if the post was created.
        """
        file_ids = []
        if png_path:
            file_id = self._upload_file(png_path)
            if file_id:
                file_ids.append(file_id)

        message = self.format_daily_summary(entry, community_name or settings.report.community_name)
        if png_path and not file_ids:
            message += "\n:warning: 分享图上传失败，请在 reports 目录中查看。"
        return self._post_message(message, file_ids=file_ids)
