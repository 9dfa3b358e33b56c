# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Archive manifest - the ``info.json`` packaged alongside the backed-up files.

The manifest lists the archived files (relative to the data directory)
and when the archive was created, so a restore can report what it
brought back.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

import aiofiles

MANIFEST_NAME = "info.json"


@dataclass
class ArchiveMetadata:
    """Describes one archive produced by a backup."""

    local_path: Path
    remote_key: str
    created_at: datetime
    files: List[str] = field(default_factory=list)


def manifest_path(data_dir: Path) -> Path:
    return Path(data_dir) / MANIFEST_NAME


def relative_entries(data_dir: Path, files: List[Path]) -> List[str]:
    """Express file paths relative to the data directory, POSIX style."""
    base = Path(data_dir)
    entries: List[str] = []
    for f in files:
        path = Path(f)
        try:
            entries.append(path.relative_to(base).as_posix())
        except ValueError:
            entries.append(path.name)
    return entries


async def write_manifest(
    data_dir: Path,
    files: List[Path],
    created_at: datetime,
) -> Path:
    """
    Write the manifest into the data directory.

    Args:
        data_dir: Directory being archived
        files: Files selected for the archive
        created_at: UTC creation time of the archive

    Returns:
        Path to the manifest file
    """
    path = manifest_path(data_dir)
    payload = {
        "files": relative_entries(data_dir, files),
        "createdOn": created_at.isoformat(),
    }

    async with aiofiles.open(path, "w", encoding="utf-8") as f:
        await f.write(json.dumps(payload))

    return path


def read_manifest(data_dir: Path) -> Dict[str, Any] | None:
    """
    Read the manifest from a restored data directory.

    Returns:
        Parsed manifest, or None if the directory has no manifest
    """
    path = manifest_path(data_dir)
    if not path.exists():
        return None
    return json.loads(path.read_text(encoding="utf-8"))
