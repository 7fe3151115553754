"""Reactive updates: re-render a schema after one field changed on the client.

Each call rebuilds the schema from the registry; nothing is kept between
requests. The request token is echoed back so that the client can drop
responses that arrive out of order.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from pydantic_core import to_jsonable_python

from .enums import Renderer
from .fields import Field
from .functions import invoke
from .registry import SchemaRegistry
from .resolver import OptionResolver
from .serializers import Serializer
from .state import FormState

logger = logging.getLogger(__name__)


@dataclass
class ReactiveUpdate:
    schema: List[Dict[str, Any]]
    data: Dict[str, Any]
    affected: List[str] = field(default_factory=list)
    request_token: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema": self.schema,
            "data": self.data,
            "affected": self.affected,
            "requestToken": self.request_token,
        }


class ReactiveHandler:
    def __init__(self, schemas: SchemaRegistry, resolver: OptionResolver):
        self.schemas = schemas
        self.resolver = resolver

    def handle(
        self,
        schema_id: str,
        form_state: Any,
        changed_field: Optional[str] = None,
        request_token: Optional[str] = None,
        renderer: Union[Renderer, str] = Renderer.LARAVILT,
        search_url: Optional[str] = None,
    ) -> ReactiveUpdate:
        """Apply a field change and return the re-rendered schema.

        Raises:
            SchemaNotFound: ``schema_id`` is not registered
            ConfigException: the schema definition is invalid
        """
        state = FormState.coerce(form_state)
        schema = self.schemas.build(schema_id, state)
        functions = self.schemas.functions

        affected: List[str] = []
        if changed_field:
            changed = schema.find(changed_field)
            if changed is None:
                logger.warning(f"Changed field '{changed_field}' is not part of schema '{schema_id}'")
            else:
                self._after_state_updated(changed, state)
            affected = schema.dependents_of(changed_field, functions)

        serializer = Serializer(self.resolver, functions, renderer, search_url=search_url)
        nodes = serializer.serialize_schema(schema, state, changed_field=changed_field)

        logger.debug(
            f"Reactive update of '{schema_id}' for '{changed_field}': "
            f"affected={affected}, writes={state.writes}"
        )
        return ReactiveUpdate(
            schema=nodes,
            data=to_jsonable_python(state.to_dict(), fallback=str),
            affected=affected,
            request_token=request_token,
        )

    def _after_state_updated(self, changed: Field, state: FormState) -> None:
        if changed.after_state_updated is None:
            return

        fork = state.fork()
        try:
            hook = self.schemas.functions.resolve(changed.after_state_updated)
            invoke(hook, fork.getter(), fork.setter())
        except Exception as e:
            logger.warning(
                f"after_state_updated hook of field '{changed.name}' failed: {e}", exc_info=True
            )
            return
        state.merge(fork)
