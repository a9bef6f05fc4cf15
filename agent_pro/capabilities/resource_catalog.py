"""Lists the agents, prompts and skills installed in per-user storage."""

from typing import List

from agent_pro.capabilities.base import (
    Capability,
    CapabilityName,
    CapabilityOutput,
    InvocationContext,
    InvocationOptions,
)
from agent_pro.errors import MissingContextError
from agent_pro.resources.catalog import ResourceCategory, ResourceEntry, discover_resources

NO_RESOURCES_MESSAGE = "No installed resources found"


def _matches(entry: ResourceEntry, query: str) -> bool:
    query = query.lower()
    return query in entry.name.lower() or query in entry.description.lower()


class ResourceCatalog(Capability):
    name = CapabilityName.RESOURCE_CATALOG
    display_name = "Resource Catalog"
    description = "Lists installed agents, prompts, skills, instructions and templates"
    error_prefix = "Error listing resources"

    async def run(
        self, options: InvocationOptions, context: InvocationContext
    ) -> CapabilityOutput:
        root = context.resources_root
        if not root.is_dir():
            raise MissingContextError("no_resources", NO_RESOURCES_MESSAGE)

        category_filter = options.input.get("category")
        if category_filter:
            try:
                categories = [ResourceCategory(str(category_filter).lower())]
            except ValueError:
                valid = ", ".join(c.value for c in ResourceCategory)
                return CapabilityOutput(
                    text=f"Unknown category '{category_filter}'. Valid categories: {valid}",
                    metadata={"category": str(category_filter), "matches": 0},
                )
        else:
            categories = list(ResourceCategory)

        query = str(options.input.get("query") or "").strip()
        entries = [
            entry
            for entry in discover_resources(root)
            if entry.category in categories and (not query or _matches(entry, query))
        ]

        if not entries:
            return CapabilityOutput(
                text="No matching resources found" if query else NO_RESOURCES_MESSAGE,
                metadata={"query": query, "matches": 0},
            )

        lines: List[str] = [f"Installed Resources ({len(entries)}):"]
        for category in categories:
            in_category = [e for e in entries if e.category is category]
            if not in_category:
                continue
            lines.append("")
            lines.append(f"{category.value.capitalize()}:")
            for entry in in_category:
                suffix = f" - {entry.description}" if entry.description else ""
                lines.append(f"- {entry.name}{suffix}")

        return CapabilityOutput(
            text="\n".join(lines),
            metadata={"query": query, "matches": len(entries)},
        )
