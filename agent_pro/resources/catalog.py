"""Resource discovery - scans an installed bundle for its documents.

Layout of a bundle (shipped or synchronized)::

    agents/<name>.agent.md
    prompts/<name>.prompt.md
    instructions/<name>.instructions.md
    templates/<name>.md
    skills/<name>/SKILL.md
"""

import logging
import re
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

# Regex pattern to match YAML frontmatter between --- delimiters
FRONTMATTER_PATTERN = re.compile(r"^---\s*\n(.*?)\n---\s*(?:\n|$)", re.DOTALL)

# Simple key-value pairs and list items from YAML-like frontmatter
KEY_VALUE_PATTERN = re.compile(r"^([a-zA-Z_][a-zA-Z0-9_-]*):\s*(.*)$")
LIST_PATTERN = re.compile(r"^\s+-\s+(.+)$")

SKILL_FILENAME = "SKILL.md"


class ResourceCategory(str, Enum):
    """Top-level directories of a bundle."""

    AGENTS = "agents"
    PROMPTS = "prompts"
    SKILLS = "skills"
    INSTRUCTIONS = "instructions"
    TEMPLATES = "templates"


@dataclass
class ResourceEntry:
    """One document discovered in a bundle."""

    category: ResourceCategory
    name: str
    path: Path
    description: str = ""


def _unquote(value: str) -> str:
    """Remove quotes from a YAML string value if present."""
    value = value.strip()
    if (value.startswith('"') and value.endswith('"')) or (
        value.startswith("'") and value.endswith("'")
    ):
        return value[1:-1]
    return value


def parse_frontmatter(content: str) -> dict:
    """Extract YAML-like frontmatter from markdown content.

    Only flat ``key: value`` pairs and simple ``- item`` lists are understood.
    Returns an empty dict if there is no frontmatter.
    """
    match = FRONTMATTER_PATTERN.match(content)
    if not match:
        return {}

    result: dict = {}
    current_key: Optional[str] = None

    for line in match.group(1).split("\n"):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        list_match = LIST_PATTERN.match(line)
        if list_match and current_key:
            result[current_key].append(_unquote(list_match.group(1)))
            continue

        kv_match = KEY_VALUE_PATTERN.match(line)
        if kv_match:
            key, value = kv_match.group(1), kv_match.group(2).strip()
            if not value:
                # Might be the start of a list
                current_key = key
                result[key] = []
            else:
                result[key] = _unquote(value)
                current_key = None

    return result


def _resource_name(path: Path) -> str:
    """``code-reviewer.agent.md`` -> ``code-reviewer``."""
    return path.name.split(".", 1)[0]


def _read_entry(category: ResourceCategory, doc_path: Path, default_name: str) -> ResourceEntry:
    try:
        frontmatter = parse_frontmatter(doc_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read resource {doc_path}: {e}")
        frontmatter = {}

    name = frontmatter.get("name")
    description = frontmatter.get("description")
    return ResourceEntry(
        category=category,
        name=name if isinstance(name, str) and name else default_name,
        path=doc_path,
        description=description if isinstance(description, str) else "",
    )


def discover_resources(root: Path) -> List[ResourceEntry]:
    """Scan a bundle root for documents in every known category.

    Hidden files and directories are skipped. Missing categories are fine.
    """
    root = Path(root)
    entries: List[ResourceEntry] = []

    for category in ResourceCategory:
        category_dir = root / category.value
        if not category_dir.is_dir():
            logger.debug(f"Resource category missing: {category_dir}")
            continue

        for item in sorted(category_dir.iterdir()):
            if item.name.startswith("."):
                continue

            if category is ResourceCategory.SKILLS:
                skill_md = item / SKILL_FILENAME
                if item.is_dir() and skill_md.is_file():
                    entries.append(_read_entry(category, skill_md, item.name))
                else:
                    logger.debug(f"Found skill directory without {SKILL_FILENAME}: {item}")
            elif item.is_file() and item.suffix == ".md":
                entries.append(_read_entry(category, item, _resource_name(item)))

    logger.debug(f"Discovered {len(entries)} resources under {root}")
    return entries


def count_by_category(entries: Iterable[ResourceEntry]) -> Dict[ResourceCategory, int]:
    counts = Counter(entry.category for entry in entries)
    return {category: counts.get(category, 0) for category in ResourceCategory}
