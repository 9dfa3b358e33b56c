# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Pipeline events.

The backup, restore and lifecycle code never talks to a logger directly.
It reports what happened to an ``Observer`` and the default observer
renders those events through structlog.
"""

from typing import Any, Protocol

import structlog

logger = structlog.get_logger("cloudarchive")


class Observer(Protocol):
    """Receives pipeline events."""

    def __call__(self, event: str, level: str = "info", **fields: Any) -> None: ...


def log_event(event: str, level: str = "info", **fields: Any) -> None:
    """Default observer: emit the event as a structlog entry."""
    log = getattr(logger, level, logger.info)
    log(event, **fields)
