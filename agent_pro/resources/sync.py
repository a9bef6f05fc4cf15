"""Wipe-and-replace synchronization of the bundle into per-user storage."""

import asyncio
import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from agent_pro.errors import ResourceSyncError

logger = logging.getLogger(__name__)


def needs_sync(
    installed_version: Optional[str], current_version: str, target_root: Path
) -> bool:
    """True iff the stored version differs or the target tree is absent."""
    return installed_version != current_version or not Path(target_root).exists()


@dataclass
class SyncResult:
    """Counts from one completed synchronization."""

    files_copied: int = 0
    directories_created: int = 0


class ResourceSynchronizer:
    """Copies the bundle tree into storage, replacing whatever was there.

    Nothing is merged: the target is removed first so no file from an older
    bundle survives a version bump.
    """

    async def sync(self, bundle_root: Path, target_root: Path) -> SyncResult:
        bundle_root = Path(bundle_root)
        target_root = Path(target_root)
        return await asyncio.to_thread(self._sync, bundle_root, target_root)

    def _sync(self, bundle_root: Path, target_root: Path) -> SyncResult:
        if not bundle_root.is_dir():
            raise ResourceSyncError(f"Extension resources not found at: {bundle_root}")

        if target_root.exists():
            try:
                shutil.rmtree(target_root)
            except OSError as e:
                raise ResourceSyncError(f"Failed to clear old resources: {e}") from e
            logger.info(f"Cleared old resources at {target_root}")

        result = SyncResult()
        try:
            self._copy_tree(bundle_root, target_root, result)
        except OSError as e:
            raise ResourceSyncError(f"Failed to copy resources: {e}") from e

        logger.info(
            f"Copied {result.files_copied} files ({result.directories_created} directories) "
            f"from {bundle_root} to {target_root}"
        )
        return result

    def _copy_tree(self, src: Path, dest: Path, result: SyncResult) -> None:
        dest.mkdir(parents=True, exist_ok=True)
        result.directories_created += 1

        with os.scandir(src) as it:
            entries = sorted(it, key=lambda e: e.name)
        logger.debug(f"Copying {len(entries)} items from {src}")

        for entry in entries:
            dest_path = dest / entry.name
            if entry.is_dir(follow_symlinks=True):
                self._copy_tree(Path(entry.path), dest_path, result)
            else:
                shutil.copy2(entry.path, dest_path)
                result.files_copied += 1
