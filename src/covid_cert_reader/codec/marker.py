"""Context identifier handling for HCERT QR payloads."""

from __future__ import annotations

HC1_MARKER = "HC1:"


def strip_marker(text: str, marker: str = HC1_MARKER) -> str:
    """
    Remove a leading `marker` (case-sensitive) if present.

    Some producers omit the prefix, so its absence is not an error: the text
    is returned unchanged.
    """
    if text.startswith(marker):
        return text[len(marker):]
    return text
