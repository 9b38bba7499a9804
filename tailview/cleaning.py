"""Helpers for turning raw container log output into display lines."""

from __future__ import annotations

import re

from tailview.models import LogLine, Severity

_CONTROL = r"[\x00-\x1F\x7F-\x9F]"
_ISO_TS = r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d+Z"
_IPV4 = r"\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}"
_APACHE_DATE = r"\[\d{2}/\w{3}/\d{4}:\d{2}:\d{2}:\d{2}\s+[+-]\d{4}\]"

_ANSI_PATTERNS = (
    re.compile(r"\x1b\[[0-9;]*m"),
    # Leftovers once the escape byte was dropped by a lossy decode.
    re.compile(r"\[[0-9;]*m"),
)

# Applied in order; each strips one kind of leading prefix.
_PREFIX_PATTERNS = (
    # Docker timestamp + access log: 2025-11-13T20:55:49.326Z 172.18.0.1 - - [13/Nov/2025:20:55:49 +0000] "
    re.compile(rf'^{_CONTROL}*{_ISO_TS}\s+{_IPV4}\s+-\s+-\s+{_APACHE_DATE}\s+"?\s*'),
    re.compile(rf"^{_CONTROL}*{_ISO_TS}\s*"),
    re.compile(rf"^{_IPV4}\s+-\s+-\s+"),
    re.compile(rf'^{_APACHE_DATE}\s+"?\s*'),
    re.compile(r"^(INFO|ERROR|WARN|DEBUG|TRACE):\s*"),
    re.compile(rf"^{_IPV4}:\d+\s+-\s+"),
    re.compile(rf"^{_CONTROL}+"),
)

_NON_PRINTABLE = re.compile(r"[^\x20-\x7E]")
_LINE_SPLIT = re.compile(r"\r?\n")


def clean_log_line(line: str) -> str:
    """Strip escapes, access-log prefixes and non-printable bytes from *line*.

    Returns an empty string when nothing displayable is left.
    """
    if not line.strip():
        return ""
    cleaned = line
    for pattern in _ANSI_PATTERNS:
        cleaned = pattern.sub("", cleaned)
    for pattern in _PREFIX_PATTERNS:
        cleaned = pattern.sub("", cleaned, count=1)
    cleaned = _NON_PRINTABLE.sub("", cleaned)
    return cleaned.lstrip()


def classify_severity(text: str) -> Severity:
    """Return the severity tag for a cleaned line."""
    lowered = text.lower()
    if "error" in lowered:
        return Severity.ERROR
    if "warn" in lowered:
        return Severity.WARN
    return Severity.NORMAL


def clean_snapshot(raw: str | None) -> list[LogLine]:
    """Clean every line of a fetched blob, dropping lines left empty."""
    if not raw:
        return []
    lines: list[LogLine] = []
    for raw_line in _LINE_SPLIT.split(raw):
        text = clean_log_line(raw_line)
        if not text.strip():
            continue
        lines.append(LogLine(text=text, severity=classify_severity(text)))
    return lines


def is_near_bottom(
    scroll_height: float, scroll_top: float, client_height: float, threshold: float = 50
) -> bool:
    """Return True if a viewport is scrolled to within *threshold* of the end."""
    return scroll_height - scroll_top - client_height < threshold
