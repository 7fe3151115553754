"""Named schema builders.

A builder is called on every request and returns a fresh :class:`Schema`
(or the plain-data definition of one). Schemas never live across requests.
"""

import copy
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import tomlkit

from .errors import ConfigException, SchemaNotFound
from .functions import FunctionRegistry, invoke
from .schema import Schema
from .state import FormState

logger = logging.getLogger(__name__)

SchemaBuilder = Callable[..., Union[Schema, Mapping]]


class SchemaRegistry:
    def __init__(self, functions: Optional[FunctionRegistry] = None):
        self.functions = functions if functions is not None else FunctionRegistry()
        self._builders: Dict[str, SchemaBuilder] = {}

    def register(self, schema_id: Optional[str] = None):
        """Decorator registering a builder ``(state) -> Schema``."""

        def decorator(builder):
            self.add(schema_id or builder.__name__, builder)
            return builder

        return decorator

    def add(self, schema_id: str, builder: SchemaBuilder) -> None:
        if schema_id in self._builders:
            logger.warning(f"Schema '{schema_id}' is already registered, replacing it")
        self._builders[schema_id] = builder

    def add_definition(self, definition: Mapping) -> str:
        """Register a plain-data schema definition under its ``id``."""
        schema_id = definition.get("id")
        if not schema_id:
            raise ConfigException("Schema definition has no 'id'")

        frozen = copy.deepcopy(dict(definition))
        self.add(schema_id, lambda: copy.deepcopy(frozen))
        return schema_id

    def build(self, schema_id: str, state: Optional[FormState] = None) -> Schema:
        builder = self._builders.get(schema_id)
        if builder is None:
            raise SchemaNotFound(schema_id)

        built: Any = invoke(builder, state if state is not None else FormState())
        if isinstance(built, Mapping):
            built = Schema.from_dict({"id": schema_id, **built})
        if not isinstance(built, Schema):
            raise ConfigException(
                f"Builder of schema '{schema_id}' returned {type(built).__name__}, expected Schema"
            )
        return built.check(self.functions)

    def ids(self) -> List[str]:
        return sorted(self._builders)

    def __contains__(self, schema_id: str) -> bool:
        return schema_id in self._builders

    def __len__(self) -> int:
        return len(self._builders)

    def load_file(self, path: Union[str, Path]) -> str:
        path = Path(path)
        try:
            data = tomlkit.loads(path.read_text(encoding="utf-8")).unwrap()
        except Exception as e:
            raise ConfigException(f"Failed to load schema file {path}: {e}") from e

        data.setdefault("id", path.stem)
        schema_id = self.add_definition(data)
        logger.info(f"Loaded schema '{schema_id}' from {path}")
        return schema_id

    def load_directory(self, directory: Union[str, Path]) -> List[str]:
        """Register every ``*.toml`` schema definition found in ``directory``."""
        directory = Path(directory)
        if not directory.is_dir():
            raise ConfigException(f"Schema directory not found: {directory}")
        return [self.load_file(path) for path in sorted(directory.glob("*.toml"))]
