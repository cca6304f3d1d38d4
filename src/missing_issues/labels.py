"""Label normalization for issue creation."""

from __future__ import annotations

from typing import Iterable


def normalize_labels(labels: str | Iterable[object] | None, *, dedupe: bool = False) -> list[str]:
    """Turn a comma-delimited string or a sequence into a list of trimmed labels.

    Empty entries are dropped and order is preserved. Repeated labels are kept
    unless ``dedupe`` is set, in which case the first occurrence wins.
    """

    if not labels:
        return []
    raw: Iterable[object] = labels.split(",") if isinstance(labels, str) else labels

    normalized: list[str] = []
    for value in raw:
        token = str(value).strip()
        if token:
            normalized.append(token)

    if dedupe:
        return list(dict.fromkeys(normalized))
    return normalized


__all__ = ["normalize_labels"]
