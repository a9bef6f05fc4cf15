"""Bundle provisioning: synchronization into storage and discovery."""

from agent_pro.resources.catalog import (
    ResourceCategory,
    ResourceEntry,
    count_by_category,
    discover_resources,
    parse_frontmatter,
)
from agent_pro.resources.sync import ResourceSynchronizer, SyncResult, needs_sync

__all__ = [
    "ResourceCategory",
    "ResourceEntry",
    "ResourceSynchronizer",
    "SyncResult",
    "count_by_category",
    "discover_resources",
    "needs_sync",
    "parse_frontmatter",
]
