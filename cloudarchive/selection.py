# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
File selection - glob patterns evaluated under the data directory.
"""

from pathlib import Path
from typing import Awaitable, Callable, List, Sequence

# Signature every file selector follows
FileSelector = Callable[[Path, Sequence[str]], Awaitable[List[Path]]]


async def select_files(base_dir: Path, patterns: Sequence[str]) -> List[Path]:
    """
    Find regular files under ``base_dir`` matching any of ``patterns``.

    Args:
        base_dir: Directory to search
        patterns: Glob patterns relative to base_dir, e.g. ["**/*", "*.db"]

    Returns:
        Absolute paths, de-duplicated and sorted

    Raises:
        FileNotFoundError: If base_dir does not exist
        ValueError: If a pattern is empty or absolute
    """
    base = Path(base_dir).resolve()
    if not base.is_dir():
        raise FileNotFoundError(f"Directory not found: {base}")

    found = set()
    for pattern in patterns:
        if not pattern or Path(pattern).is_absolute():
            raise ValueError(f"Invalid glob pattern: {pattern!r}")
        for path in base.glob(pattern):
            if path.is_file():
                found.add(path)

    return sorted(found)
