# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Archive packaging - gzip tarballs of the data directory.

Members are stored relative to the data directory so an archive unpacks
back into the same layout. Compression and extraction run in a thread
pool so the event loop stays responsive.
"""

import asyncio
import tarfile
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Protocol, Sequence

import structlog

from cloudarchive.exceptions import CorruptArchiveError, PackagingError
from cloudarchive.manifest import MANIFEST_NAME, read_manifest
from cloudarchive.storage.base import DownloadedArchive

logger = structlog.get_logger()

# Thread pool for tar/gzip work
_executor = ThreadPoolExecutor(max_workers=2)


@dataclass
class RestoredFiles:
    """Result of unpacking an archive."""

    path: Path
    files: List[str] = field(default_factory=list)


class Packager(Protocol):
    """Creates and extracts archives."""

    async def pack(self, base_dir: Path, files: Sequence[Path], archive_name: str) -> Path: ...

    async def unpack(self, target_dir: Path, archive: DownloadedArchive) -> RestoredFiles: ...


def local_archive_name(archive_name: str) -> str:
    """Flatten an object key into a single local file name."""
    return archive_name.replace("/", "_").replace("\\", "_")


def _arcname(base_dir: Path, path: Path) -> str:
    try:
        return path.relative_to(base_dir).as_posix()
    except ValueError:
        return path.name


def _escapes(root: Path, relative: str) -> bool:
    return not (root / relative).resolve().is_relative_to(root)


def _is_unsafe_member(member: tarfile.TarInfo, root: Path) -> bool:
    """Absolute names, ``..`` segments, and links pointing outside ``root``."""
    name = member.name
    if name.startswith("/") or ".." in Path(name).parts or _escapes(root, name):
        return True
    if member.issym():
        return _escapes(root, str(Path(name).parent / member.linkname))
    if member.islnk():
        return _escapes(root, member.linkname)
    return False


def _pack_sync(tarball_path: Path, base_dir: Path, files: Sequence[Path]) -> None:
    with tarfile.open(tarball_path, "w:gz", dereference=True) as tar:
        for f in files:
            path = Path(f)
            tar.add(path, arcname=_arcname(base_dir, path), recursive=False)


def _unpack_sync(tarball_path: Path, target: Path) -> List[str]:
    """Extract after checking every member; returns the regular file names."""
    root = target.resolve()
    with tarfile.open(tarball_path, "r:*") as tar:
        members = tar.getmembers()
        # Security: Check for path traversal
        for member in members:
            if _is_unsafe_member(member, root):
                raise CorruptArchiveError(
                    f"Unsafe path in tarball: {member.name}",
                    details={"tarball_path": str(tarball_path)},
                )
        try:
            tar.extractall(target, filter="data")
        except tarfile.FilterError as e:
            raise CorruptArchiveError(
                f"Unsafe path in tarball: {e}",
                details={"tarball_path": str(tarball_path)},
            ) from e

    return [m.name for m in members if m.isfile()]


class TarPackager:
    """
    Gzip tarball packager.

    Args:
        work_dir: Directory archives are written to before upload
    """

    def __init__(self, work_dir: Path | None = None):
        self.work_dir = Path(work_dir) if work_dir else Path.cwd()

    async def pack(self, base_dir: Path, files: Sequence[Path], archive_name: str) -> Path:
        """
        Create a gzip tarball of ``files``.

        Args:
            base_dir: Directory member names are relative to
            files: Absolute paths of the files to archive
            archive_name: Name of the archive (object key)

        Returns:
            Path to the created tarball
        """
        base = Path(base_dir).resolve()
        self.work_dir.mkdir(parents=True, exist_ok=True)
        tarball_path = self.work_dir / local_archive_name(archive_name)

        loop = asyncio.get_event_loop()
        try:
            await loop.run_in_executor(_executor, _pack_sync, tarball_path, base, list(files))
        except Exception as e:
            tarball_path.unlink(missing_ok=True)
            logger.error(
                "tarball_creation_failed",
                tarball_path=str(tarball_path),
                files=len(files),
                error=str(e),
            )
            raise PackagingError(
                f"Failed to create tarball: {e}",
                details={"archive": archive_name},
            ) from e

        logger.info(
            "tarball_created",
            tarball_path=str(tarball_path),
            files=len(files),
        )

        return tarball_path

    async def unpack(self, target_dir: Path, archive: DownloadedArchive) -> RestoredFiles:
        """
        Extract a downloaded tarball into ``target_dir``.

        Args:
            target_dir: Data directory to restore into
            archive: Downloaded archive

        Returns:
            RestoredFiles listing what the archive's manifest describes
            (every regular member when there is no manifest)
        """
        target = Path(target_dir)

        loop = asyncio.get_event_loop()
        try:
            target.mkdir(parents=True, exist_ok=True)
            members = await loop.run_in_executor(_executor, _unpack_sync, archive.file, target)
            # Only a manifest shipped in this archive describes it
            manifest = read_manifest(target) if MANIFEST_NAME in members else None
        except CorruptArchiveError:
            raise
        except Exception as e:
            raise CorruptArchiveError(
                f"Unpacking tarball failed with error: {e}",
                details={"tarball_path": str(archive.file)},
            ) from e

        files = list(manifest.get("files", [])) if manifest is not None else members

        logger.info("tarball_unpacked", target_dir=str(target), files=len(files))

        return RestoredFiles(path=target, files=files)
