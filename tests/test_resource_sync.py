"""Tests for bundle synchronization into per-user storage."""

import shutil
from pathlib import Path
from unittest.mock import patch

import pytest

from agent_pro.errors import ResourceSyncError
from agent_pro.resources.sync import ResourceSynchronizer, needs_sync


def _tree(root: Path) -> dict:
    return {
        str(p.relative_to(root)): p.read_text()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


class TestNeedsSync:
    @pytest.mark.parametrize(
        "installed,current,target_exists,expected",
        [
            (None, "1", False, True),
            (None, "1", True, True),
            ("1", "1", True, False),
            ("1", "1", False, True),
            ("1", "2", True, True),
            ("2", "1", True, True),
        ],
    )
    def test_truth_table(self, tmp_path, installed, current, target_exists, expected):
        target = tmp_path / "resources"
        if target_exists:
            target.mkdir()
        assert needs_sync(installed, current, target) is expected


class TestResourceSynchronizer:
    async def test_copies_whole_tree(self, bundle_dir, tmp_path):
        target = tmp_path / "storage" / "resources"
        result = await ResourceSynchronizer().sync(bundle_dir, target)

        assert _tree(target) == _tree(bundle_dir)
        assert result.files_copied == 6
        assert result.directories_created == 7

    async def test_replaces_stale_files(self, bundle_dir, tmp_path):
        target = tmp_path / "resources"
        (target / "agents").mkdir(parents=True)
        (target / "agents" / "retired.agent.md").write_text("old")
        (target / "obsolete.txt").write_text("old")

        await ResourceSynchronizer().sync(bundle_dir, target)

        assert not (target / "agents" / "retired.agent.md").exists()
        assert not (target / "obsolete.txt").exists()
        assert _tree(target) == _tree(bundle_dir)

    async def test_missing_bundle_raises_and_keeps_target(self, tmp_path):
        target = tmp_path / "resources"
        target.mkdir()
        (target / "keep.md").write_text("installed")

        with pytest.raises(ResourceSyncError, match="Extension resources not found"):
            await ResourceSynchronizer().sync(tmp_path / "missing", target)

        assert (target / "keep.md").read_text() == "installed"

    async def test_resource_sync_error_is_ioerror(self, tmp_path):
        with pytest.raises(IOError):
            await ResourceSynchronizer().sync(tmp_path / "missing", tmp_path / "out")

    async def test_copy_failure_is_wrapped(self, bundle_dir, tmp_path):
        with patch(
            "agent_pro.resources.sync.shutil.copy2",
            side_effect=PermissionError("denied"),
        ):
            with pytest.raises(ResourceSyncError, match="Failed to copy resources"):
                await ResourceSynchronizer().sync(bundle_dir, tmp_path / "out")

    async def test_clear_failure_is_wrapped(self, bundle_dir, tmp_path):
        target = tmp_path / "out"
        target.mkdir()
        with patch.object(shutil, "rmtree", side_effect=OSError("busy")):
            with pytest.raises(ResourceSyncError, match="Failed to clear old resources"):
                await ResourceSynchronizer().sync(bundle_dir, target)
