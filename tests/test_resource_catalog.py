"""Tests for bundle resource discovery and frontmatter parsing."""

from agent_pro.resources.catalog import (
    ResourceCategory,
    count_by_category,
    discover_resources,
    parse_frontmatter,
)
from agent_pro.settings import DEFAULT_BUNDLE_ROOT


class TestParseFrontmatter:
    def test_key_values_and_lists(self):
        content = (
            "---\n"
            "name: reviewer\n"
            'description: "Reviews code"\n'
            "tools:\n"
            "  - codeAnalyzer\n"
            "  - testGenerator\n"
            "# a comment\n"
            "applyTo: '**/*.py'\n"
            "---\n"
            "# Body\n"
        )
        assert parse_frontmatter(content) == {
            "name": "reviewer",
            "description": "Reviews code",
            "tools": ["codeAnalyzer", "testGenerator"],
            "applyTo": "**/*.py",
        }

    def test_no_frontmatter(self):
        assert parse_frontmatter("# Just markdown\n") == {}

    def test_frontmatter_at_end_of_file(self):
        assert parse_frontmatter("---\nname: x\n---") == {"name": "x"}


class TestDiscoverResources:
    def test_discovers_every_category(self, bundle_dir):
        entries = discover_resources(bundle_dir)
        by_name = {(e.category, e.name): e for e in entries}

        assert (ResourceCategory.AGENTS, "reviewer") in by_name
        assert by_name[(ResourceCategory.AGENTS, "reviewer")].description == "Reviews code"
        # Name falls back to the file name
        assert (ResourceCategory.AGENTS, "architect") in by_name
        assert (ResourceCategory.PROMPTS, "explain") in by_name
        assert (ResourceCategory.SKILLS, "refactoring") in by_name
        assert (ResourceCategory.INSTRUCTIONS, "python") in by_name
        assert (ResourceCategory.TEMPLATES, "adr") in by_name

    def test_skips_hidden_and_invalid_entries(self, bundle_dir):
        (bundle_dir / "agents" / ".draft.agent.md").write_text("hidden")
        (bundle_dir / "agents" / "notes.txt").write_text("not markdown")
        (bundle_dir / "skills" / "empty-skill").mkdir()

        names = {e.name for e in discover_resources(bundle_dir)}
        assert ".draft" not in names
        assert "notes" not in names
        assert "empty-skill" not in names

    def test_missing_root_is_empty(self, tmp_path):
        assert discover_resources(tmp_path / "nope") == []

    def test_count_by_category(self, bundle_dir):
        counts = count_by_category(discover_resources(bundle_dir))
        assert counts[ResourceCategory.AGENTS] == 2
        assert counts[ResourceCategory.SKILLS] == 1
        assert sum(counts.values()) == 6

    def test_shipped_bundle_is_discoverable(self):
        counts = count_by_category(discover_resources(DEFAULT_BUNDLE_ROOT))
        assert all(count > 0 for count in counts.values())
