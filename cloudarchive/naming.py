# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Archive naming - resolves ``{{date}}``-style templates into archive names.
"""

import re
from datetime import datetime, UTC
from typing import Callable

# Injectable source of "now"; tests pass a frozen clock.
Clock = Callable[[], datetime]

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M:%S"
DATE_TIME_FORMAT = f"{DATE_FORMAT}_{TIME_FORMAT}"

PLACEHOLDER_OPEN = "{{"
_PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(UTC)


def _as_utc(now: datetime) -> datetime:
    if now.tzinfo is None:
        return now.replace(tzinfo=UTC)
    return now.astimezone(UTC)


def resolve_file_name(template: str, now: datetime) -> str:
    """
    Substitute date/time placeholders in an archive name template.

    Supported placeholders:
    - ``{{date}}``: YYYY-MM-DD
    - ``{{time}}``: HH:MM:SS
    - ``{{dateTime}}``: YYYY-MM-DD_HH:MM:SS

    Unknown placeholders are left as written.

    Args:
        template: Name template, e.g. "archive_{{date}}.tgz"
        now: Moment to format (treated as UTC when naive)

    Returns:
        Concrete archive name
    """
    moment = _as_utc(now)
    values = {
        "date": moment.strftime(DATE_FORMAT),
        "time": moment.strftime(TIME_FORMAT),
        "dateTime": moment.strftime(DATE_TIME_FORMAT),
    }

    def substitute(match: re.Match) -> str:
        return values.get(match.group(1), match.group(0))

    return _PLACEHOLDER.sub(substitute, template)


def file_prefix(template: str | None) -> str:
    """Literal part of a template before its first placeholder."""
    if not template:
        return ""
    return template.split(PLACEHOLDER_OPEN, 1)[0]
