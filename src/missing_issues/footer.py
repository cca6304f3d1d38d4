"""Issue footers carrying an expiration marker for the cleanup job."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

DEFAULT_EXPIRES_HOURS = 24 * 7
EXPIRATION_MARKER_PREFIX = "missing-issue-expires"

_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
_MARKER_PATTERN = re.compile(
    r"<!--\s*" + re.escape(EXPIRATION_MARKER_PREFIX) + r":\s*(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z)\s*-->"
)


def expiration_marker(expires_at: datetime) -> str:
    """Return the HTML comment encoding ``expires_at`` in UTC."""

    stamp = expires_at.astimezone(timezone.utc).strftime(_TIMESTAMP_FORMAT)
    return f"<!-- {EXPIRATION_MARKER_PREFIX}: {stamp} -->"


def build_footer(footer_text: str, expires_hours: float, *, now: datetime | None = None) -> str:
    """Build a quoted footer block followed by an expiration line.

    The expiration is ``now + expires_hours``; ``now`` defaults to the current
    UTC time.
    """

    current = now or datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    expires_at = (current + timedelta(hours=expires_hours)).astimezone(timezone.utc)
    human = expires_at.strftime("%b %d, %Y, %I:%M %p UTC")
    return "\n".join(
        [
            footer_text,
            ">",
            f"> - [x] expires {expiration_marker(expires_at)} on {human}",
        ]
    )


def parse_expiration(body: str) -> datetime | None:
    """Return the expiration encoded in ``body``, or ``None`` when absent."""

    match = _MARKER_PATTERN.search(body or "")
    if not match:
        return None
    return datetime.strptime(match.group(1), _TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


__all__ = [
    "DEFAULT_EXPIRES_HOURS",
    "EXPIRATION_MARKER_PREFIX",
    "build_footer",
    "expiration_marker",
    "parse_expiration",
]
