"""Persistent key/value state that survives across activations.

Two keys are owned by agent_pro:

- ``INSTALLED_VERSION_KEY``: bundle version currently materialized in storage
- ``TOOL_STATS_KEY``: per-tool usage statistics table

Both are opaque to the host. Every ``get``/``update`` is an await point, so
read-modify-write sequences built on top of a store are not atomic.
"""

import asyncio
import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from agent_pro.errors import StateStoreError

logger = logging.getLogger(__name__)

INSTALLED_VERSION_KEY = "agentPro.installedVersion"
TOOL_STATS_KEY = "agentPro.toolStats"


@runtime_checkable
class StateStore(Protocol):
    """Host-provided persistent store (the IDE's global state)."""

    async def get(self, key: str, default: Any = None) -> Any: ...

    async def update(self, key: str, value: Any) -> None: ...

    def keys(self) -> List[str]: ...


class MemoryStateStore:
    """Process-local store. Values are deep-copied in and out."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = copy.deepcopy(initial) if initial else {}

    async def get(self, key: str, default: Any = None) -> Any:
        await asyncio.sleep(0)
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    async def update(self, key: str, value: Any) -> None:
        await asyncio.sleep(0)
        if value is None:
            self._data.pop(key, None)
        else:
            self._data[key] = copy.deepcopy(value)

    def keys(self) -> List[str]:
        return list(self._data)


class JsonFileStateStore:
    """Store backed by a single JSON object on disk.

    Writes go to a temp file in the same directory and are moved into place
    with ``os.replace``, so readers never observe a half-written file.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise StateStoreError(f"Failed to read state file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StateStoreError(f"State file {self.path} does not hold a JSON object")
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            prefix=".state-", suffix=".json", dir=str(self.path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except OSError as e:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise StateStoreError(f"Failed to write state file {self.path}: {e}") from e

    def _update_sync(self, key: str, value: Any) -> None:
        data = self._read()
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value
        self._write(data)
        logger.debug(f"State key '{key}' written to {self.path}")

    async def get(self, key: str, default: Any = None) -> Any:
        data = await asyncio.to_thread(self._read)
        return data.get(key, default)

    async def update(self, key: str, value: Any) -> None:
        await asyncio.to_thread(self._update_sync, key, value)

    def keys(self) -> List[str]:
        return list(self._read())
