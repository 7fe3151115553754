"""Entity registry: the query collaborator behind relationship options.

Relationship option sources name an entity (``"country"``) instead of holding
a model class, so schemas stay plain data. The registry maps those names to
peewee models and hides every peewee call from the option resolver.
"""

import logging
import operator
from functools import reduce
from typing import Any, Dict, Iterable, List, Optional, Type

from peewee import Model, ModelSelect

logger = logging.getLogger(__name__)


class EntityRegistry:
    def __init__(self, models: Optional[Dict[str, Type[Model]]] = None):
        self._models: Dict[str, Type[Model]] = dict(models or {})

    def register(self, name: Optional[str] = None, model: Optional[Type[Model]] = None):
        """Register a model directly or use as a class decorator."""
        if model is not None:
            self._models[name or model._meta.table_name] = model
            return model

        def decorator(cls):
            self._models[name or cls._meta.table_name] = cls
            return cls

        return decorator

    def get(self, name: str) -> Optional[Type[Model]]:
        return self._models.get(name)

    def names(self) -> List[str]:
        return sorted(self._models)

    def models(self) -> List[Type[Model]]:
        return list(self._models.values())

    def __contains__(self, name: str) -> bool:
        return name in self._models

    def __len__(self) -> int:
        return len(self._models)

    def query(self, name: str) -> Optional[ModelSelect]:
        model = self.get(name)
        if model is None:
            return None
        return model.select()

    def fetch(self, query: ModelSelect, limit: Optional[int] = None) -> List[Model]:
        if limit is not None:
            query = query.limit(limit)
        return list(query)

    def find_many(self, name: str, keys: Iterable[Any]) -> List[Model]:
        model = self.get(name)
        keys = list(keys)
        if model is None or not keys:
            return []
        primary_key = model._meta.primary_key
        return list(model.select().where(primary_key.in_(keys)))

    def search(
        self, query: ModelSelect, name: str, columns: List[str], term: str
    ) -> ModelSelect:
        """Narrow ``query`` to rows where any of ``columns`` contains ``term``."""
        model = self.get(name)
        if model is None or not term:
            return query

        conditions = []
        for column in columns:
            model_field = getattr(model, column, None)
            if model_field is None:
                logger.warning(f"Entity '{name}' has no searchable column '{column}'")
                continue
            conditions.append(model_field.contains(term))

        if not conditions:
            return query
        return query.where(reduce(operator.or_, conditions))

    @staticmethod
    def key(record: Model) -> str:
        return str(record.get_id())
