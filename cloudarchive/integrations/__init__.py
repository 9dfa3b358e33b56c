# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Framework Integrations - FastAPI admin routes.
"""

from cloudarchive.integrations.fastapi import (
    setup_archive_plugin,
    register_archive_routes,
    verify_api_key,
)

__all__ = [
    "setup_archive_plugin",
    "register_archive_routes",
    "verify_api_key",
]
