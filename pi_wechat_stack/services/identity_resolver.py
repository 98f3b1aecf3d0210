# -*- coding: utf-8 -*-
"""
Identity Resolver
==================
Turns the raw sender prefix of a group message into a name fit for
a report. Resolution order:
  1. contact.db remark, then nick name
  2. user-aliases.json (manual overrides for people not in contacts)
  3. the username itself, unless it is an opaque wxid → "群成员"
"""

import json
import logging
import re
import sqlite3
from pathlib import Path
from typing import Optional

from database.connection import execute_query
from database.models import Contact

logger = logging.getLogger(__name__)

FALLBACK_NAME = "群成员"

_WXID_PREFIX_RE = re.compile(r"^[Dd]?wxid_", re.IGNORECASE)
_OPAQUE_ID_RE = re.compile(r"^[A-Za-z0-9_]{15,}$")
_SENDER_PREFIX_RE = re.compile(r"^([^:\n]+):\n")
_WXID_RE = re.compile(r"([Dd]?wxid_[a-zA-Z0-9]+)")
_TRAILING_USERNAME_RE = re.compile(r"([a-zA-Z][a-zA-Z0-9_]{3,})$")


def is_wxid_format(name: Optional[str]) -> bool:
    """True when a name is empty or looks like an internal id rather than a nickname."""
    if not name:
        return True
    return bool(_WXID_PREFIX_RE.match(name) or _OPAQUE_ID_RE.match(name))


def split_sender(content: Optional[str]) -> tuple[str, str]:
    """
    Split a group message body of the form "sender:\\ncontent".

    Returns:
        (sender, content) — sender is "" when the prefix is absent.
    """
    text = content or ""
    match = _SENDER_PREFIX_RE.match(text)
    if not match:
        return "", text
    return match.group(1), text[match.end():]


def clean_username(raw: str) -> str:
    """
    Strip binary junk that EchoTrace sometimes leaves in front of the sender.

    A wxid anywhere in the value wins; otherwise the trailing run of
    username characters; otherwise the value unchanged.
    """
    if not raw:
        return raw
    match = _WXID_RE.search(raw)
    if match:
        return match.group(1)
    match = _TRAILING_USERNAME_RE.search(raw)
    if match:
        return match.group(1)
    return raw


def load_user_aliases(path: Path | str) -> dict[str, str]:
    """
    Load the username → display name override file.

    Keys named "_comment" and non-string values are ignored. A missing
    file is not an error; a broken one is logged and treated as empty.
    """
    aliases: dict[str, str] = {}
    alias_path = Path(path)
    if not alias_path.is_file():
        return aliases

    try:
        data = json.loads(alias_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Failed to load user aliases from %s: %s", alias_path, exc)
        return aliases

    if not isinstance(data, dict):
        logger.warning("User alias file %s is not a JSON object — ignored.", alias_path)
        return aliases

    for key, value in data.items():
        if key != "_comment" and isinstance(value, str):
            aliases[key] = value

    logger.info("Loaded %d user aliases", len(aliases))
    return aliases


def load_contacts(conn: sqlite3.Connection) -> dict[str, Contact]:
    """Read contact.db's contact table into a username → Contact map."""
    rows = execute_query(conn, "SELECT username, nick_name, remark FROM contact")
    contacts = {
        row["username"]: Contact.model_validate(row)
        for row in rows
        if row.get("username")
    }
    logger.info("Loaded %d contacts", len(contacts))
    return contacts


class IdentityResolver:
    """
    Resolves sender usernames to display names.

    Usage:
        resolver = IdentityResolver(contacts, aliases)
        name = resolver.display_name("wxid_abc123")
    """

    def __init__(
        self,
        contacts: Optional[dict[str, Contact]] = None,
        aliases: Optional[dict[str, str]] = None,
    ):
        self.contacts = contacts or {}
        self.aliases = aliases or {}

    def display_name(self, raw_username: str) -> str:
        clean = clean_username(raw_username)

        contact = self.contacts.get(clean) or self.contacts.get(raw_username)
        if contact:
            name = contact.remark or contact.nick_name
            if name:
                return name

        name = self.aliases.get(clean) or self.aliases.get(raw_username)
        if name:
            return name

        if is_wxid_format(clean):
            return FALLBACK_NAME
        return clean or FALLBACK_NAME
