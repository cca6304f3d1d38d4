"""Neutralize agent-supplied text before it is posted to GitHub."""

from __future__ import annotations

import re
from typing import Callable

Sanitizer = Callable[[str], str]

MAX_BODY_CHARS = 65536
TRUNCATION_NOTICE = "\n\n[Content truncated due to length]"

_ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
# @user or @org/team not preceded by a word character (so e-mail addresses survive)
_MENTION = re.compile(r"(?<![\w`])@([A-Za-z0-9][A-Za-z0-9-]*(?:/[A-Za-z0-9][A-Za-z0-9_.-]*)?)")
_SCRIPT_BLOCK = re.compile(r"<\s*(script|style|iframe)\b[^>]*>.*?<\s*/\s*\1\s*>", re.IGNORECASE | re.DOTALL)


def sanitize_content(text: str, *, max_chars: int = MAX_BODY_CHARS) -> str:
    """Return ``text`` with control characters, active markup and mentions neutralized.

    HTML comments are preserved so expiration markers survive.
    """

    if not text:
        return ""
    cleaned = _ANSI_ESCAPE.sub("", text)
    cleaned = cleaned.replace("\r\n", "\n")
    cleaned = _CONTROL_CHARS.sub("", cleaned)
    cleaned = _SCRIPT_BLOCK.sub("", cleaned)
    cleaned = _MENTION.sub(r"`@\1`", cleaned)
    return truncate_content(cleaned.strip(), max_chars)


def truncate_content(text: str, max_chars: int) -> str:
    """Cut ``text`` to ``max_chars`` characters, ending with a truncation notice."""

    if len(text) <= max_chars:
        return text
    budget = max_chars - len(TRUNCATION_NOTICE)
    if budget <= 0:
        return text[:max_chars]
    return text[:budget].rstrip() + TRUNCATION_NOTICE


__all__ = ["MAX_BODY_CHARS", "Sanitizer", "sanitize_content", "truncate_content"]
