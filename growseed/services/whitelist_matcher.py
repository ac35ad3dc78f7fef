"""
Whitelist matching for the active browsing context.

A host is productive when it contains a whitelist entry or a whitelist entry
contains it (plain case-sensitive substring, both directions). This allows
partial-domain entries such as "example.com" to match "mail.example.com".
Short entries over-match: "a" matches every host with an "a" in it. That is
kept as-is; callers that care should whitelist full hosts.
"""

import re
from collections.abc import Sequence
from urllib.parse import urlsplit

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")
# "about:blank", "mailto:x@y": a scheme with no authority. "host:8080" is not one.
_OPAQUE_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:(?![0-9/]|$)")


def extract_host(active_identifier: str | None) -> str | None:
    """Return the host part of a URL or bare host, or None if unparseable."""
    if not active_identifier or not isinstance(active_identifier, str):
        return None

    candidate = active_identifier.strip()
    if not candidate:
        return None

    if not _SCHEME_RE.match(candidate):
        if _OPAQUE_SCHEME_RE.match(candidate):
            return None
        candidate = f"//{candidate}"

    try:
        host = urlsplit(candidate).hostname
    except ValueError:
        return None

    return host or None


def is_productive(active_identifier: str | None, whitelist: Sequence[str]) -> bool:
    """Check whether the active context matches any whitelist entry."""
    host = extract_host(active_identifier)
    if host is None:
        return False

    for entry in whitelist:
        if not isinstance(entry, str) or not entry:
            continue
        if entry in host or host in entry:
            return True
    return False


def normalize_entry(raw: str) -> str:
    """Strip whitespace, a leading http(s):// and one trailing slash."""
    entry = (raw or "").strip()
    entry = re.sub(r"^https?://", "", entry)
    if entry.endswith("/"):
        entry = entry[:-1]
    return entry


def add_entry(whitelist: Sequence[str], raw: str) -> tuple[list[str], bool]:
    """
    Append a normalized entry.

    Returns:
        (new_whitelist, added) where added is False for empty input or duplicates
    """
    entry = normalize_entry(raw)
    current = list(whitelist)
    if not entry or entry in current:
        return current, False
    current.append(entry)
    return current, True


def remove_entry(whitelist: Sequence[str], entry: str) -> tuple[list[str], bool]:
    """Drop every occurrence of entry. Returns (new_whitelist, removed)."""
    remaining = [item for item in whitelist if item != entry]
    return remaining, len(remaining) != len(whitelist)
