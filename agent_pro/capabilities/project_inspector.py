"""Summarizes the project manifests found at the workspace root."""

import json
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from agent_pro.capabilities.base import (
    Capability,
    CapabilityName,
    CapabilityOutput,
    InvocationContext,
    InvocationOptions,
)
from agent_pro.errors import MalformedInputError

PACKAGE_JSON = "package.json"
PYPROJECT_TOML = "pyproject.toml"


@dataclass
class ManifestSummary:
    kind: str
    path: Path
    name: Optional[str]
    version: Optional[str]
    dependencies: int
    dev_dependencies: int

    def render(self) -> str:
        return (
            f"{self.kind} ({self.path.name}):\n"
            f"- Name: {self.name or 'unnamed'}\n"
            f"- Version: {self.version or 'unversioned'}\n"
            f"- Dependencies: {self.dependencies}\n"
            f"- Dev/optional dependencies: {self.dev_dependencies}"
        )


def _require_mapping(data: Any, path: Path, key: str = "top-level value") -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise MalformedInputError(path, f"{key} is not an object")
    return data


def read_package_json(path: Path) -> ManifestSummary:
    try:
        data = _require_mapping(json.loads(path.read_text(encoding="utf-8")), path)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedInputError(path, str(e)) from e

    return ManifestSummary(
        kind="Node package",
        path=path,
        name=data.get("name"),
        version=data.get("version"),
        dependencies=len(_require_mapping(data.get("dependencies") or {}, path, "dependencies")),
        dev_dependencies=len(
            _require_mapping(data.get("devDependencies") or {}, path, "devDependencies")
        ),
    )


def read_pyproject(path: Path) -> ManifestSummary:
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        raise MalformedInputError(path, str(e)) from e

    project = _require_mapping(data.get("project") or {}, path, "[project]")
    tool = _require_mapping(data.get("tool") or {}, path, "[tool]")
    poetry = _require_mapping(tool.get("poetry") or {}, path, "[tool.poetry]")
    if project:
        dependencies = len(project.get("dependencies") or [])
        optional = _require_mapping(
            project.get("optional-dependencies") or {}, path, "[project.optional-dependencies]"
        )
        dev_dependencies = sum(len(group) for group in optional.values())
        name, version = project.get("name"), project.get("version")
    else:
        # Poetry lists python itself among dependencies
        deps = _require_mapping(poetry.get("dependencies") or {}, path, "[tool.poetry.dependencies]")
        dependencies = len([k for k in deps if k != "python"])
        groups = _require_mapping(poetry.get("group") or {}, path, "[tool.poetry.group]")
        dev_dependencies = sum(
            len(_require_mapping(group, path, f"[tool.poetry.group.{key}]").get("dependencies") or {})
            for key, group in groups.items()
        )
        name, version = poetry.get("name"), poetry.get("version")

    return ManifestSummary(
        kind="Python project",
        path=path,
        name=name,
        version=version,
        dependencies=dependencies,
        dev_dependencies=dev_dependencies,
    )


MANIFEST_READERS = {
    PACKAGE_JSON: read_package_json,
    PYPROJECT_TOML: read_pyproject,
}


class ProjectInspector(Capability):
    name = CapabilityName.PROJECT_INSPECTOR
    display_name = "Project Inspector"
    description = "Summarizes package manifests (package.json, pyproject.toml) in the workspace"
    error_prefix = "Error inspecting project"

    async def run(
        self, options: InvocationOptions, context: InvocationContext
    ) -> CapabilityOutput:
        root = context.require_workspace()

        summaries: List[ManifestSummary] = []
        for filename, reader in MANIFEST_READERS.items():
            path = root / filename
            if path.is_file():
                summaries.append(reader(path))

        if not summaries:
            return CapabilityOutput(
                text=f"No project manifest found in {root}",
                metadata={"manifests": 0},
            )

        body = "\n\n".join(summary.render() for summary in summaries)
        return CapabilityOutput(
            text=f"Project Overview for {root.name}:\n\n{body}",
            metadata={
                "manifests": len(summaries),
                "kinds": [summary.kind for summary in summaries],
            },
        )
