"""Form state and the get/set utilities handed to user callbacks.

Option computations and ``after_state_updated`` hooks receive a ``Get`` and a
``Set`` bound to the current :class:`FormState`. Writes through ``Set`` are the
one sanctioned side effect of serialization: callers must always send the
state back to the client after resolving a schema.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any, Iterator

logger = logging.getLogger(__name__)

_MISSING = object()


def _split(path: str) -> list[str]:
    return [part for part in str(path).split(".") if part != ""]


class FormState:
    """Mutable mapping of field names to values with dotted-path access."""

    def __init__(self, data: Mapping[str, Any] | None = None):
        self._data: dict[str, Any] = copy.deepcopy(dict(data)) if data else {}
        self._writes: list[str] = []

    @classmethod
    def coerce(cls, raw: Any) -> "FormState":
        """Build a state from untrusted input, falling back to an empty state."""
        if raw is None:
            return cls()
        if not isinstance(raw, Mapping):
            logger.warning(f"Malformed form state of type {type(raw).__name__}, using empty state")
            return cls()
        return cls(raw)

    def get(self, path: str, default: Any = None) -> Any:
        node: Any = self._data
        for part in _split(path):
            if isinstance(node, Mapping):
                node = node.get(part, _MISSING)
            elif isinstance(node, list) and part.isdigit() and int(part) < len(node):
                node = node[int(part)]
            else:
                return default
            if node is _MISSING:
                return default
        return node

    def has(self, path: str) -> bool:
        return self.get(path, _MISSING) is not _MISSING

    def set(self, path: str, value: Any) -> None:
        """Write ``value`` at ``path``.

        Missing mappings along the way are created. Numeric parts step into
        lists, and an index equal to the list length appends. Any other
        list step cannot be written and is logged.
        """
        parts = _split(path)
        if not parts:
            return

        node: Any = self._data
        for depth, part in enumerate(parts):
            last = depth == len(parts) - 1
            if isinstance(node, list):
                index = int(part) if part.isdigit() else -1
                if not 0 <= index <= len(node):
                    logger.warning(f"Cannot write '{path}': '{part}' is not an index of a list")
                    return
                if index == len(node):
                    node.append({})
                if last:
                    node[index] = value
                else:
                    if not isinstance(node[index], (dict, list)):
                        node[index] = {}
                    node = node[index]
                continue

            if last:
                node[part] = value
            else:
                child = node.get(part)
                if not isinstance(child, (dict, list)):
                    child = {}
                    node[part] = child
                node = child

        self._writes.append(".".join(parts))

    @property
    def writes(self) -> list[str]:
        """Paths written through :meth:`set`, in order, without duplicates."""
        return list(dict.fromkeys(self._writes))

    @property
    def is_dirty(self) -> bool:
        return bool(self._writes)

    def fork(self) -> "FormState":
        """Copy of this state whose writes can be merged back with :meth:`merge`."""
        return FormState(self._data)

    def merge(self, other: "FormState") -> None:
        for path in other.writes:
            self.set(path, copy.deepcopy(other.get(path)))

    def getter(self) -> "Get":
        return Get(self)

    def setter(self) -> "Set":
        return Set(self)

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)

    def __contains__(self, path: str) -> bool:
        return self.has(path)

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __repr__(self) -> str:
        return f"FormState({self._data!r})"


class Get:
    """Read-only accessor: ``get("country")``."""

    def __init__(self, state: FormState):
        self._state = state

    def __call__(self, path: str, default: Any = None) -> Any:
        return self._state.get(path, default)


class Set:
    """Write accessor: ``set("state", None)``."""

    def __init__(self, state: FormState):
        self._state = state

    def __call__(self, path: str, value: Any) -> None:
        self._state.set(path, value)
