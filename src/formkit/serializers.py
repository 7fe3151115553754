"""Turn schema trees into JSON-safe property maps.

Three output shapes are supported:

* ``laravilt``: flat props per node, children under ``schema``
* ``inertia``: ``{"component": <Vue component>, "props": {...}}`` per node
* ``flutter``: ``{"widget": <widget>, "props": {...}}`` with ``validators``,
  ``initialValue`` and ``enabled`` in place of ``validation``, ``value`` and
  ``disabled``

Serialization never mutates nodes. The form state may be written to by
computed option sources; callers return ``state.to_dict()`` to the client.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from pydantic_core import to_jsonable_python

from .context import RenderContext
from .enums import Renderer
from .fields import Component
from .functions import FunctionRegistry
from .resolver import OptionResolver
from .schema import Schema
from .state import FormState

logger = logging.getLogger(__name__)

_FLUTTER_RENAMES = {
    "validation": "validators",
    "value": "initialValue",
}


class Serializer:
    def __init__(
        self,
        resolver: OptionResolver,
        functions: Optional[FunctionRegistry] = None,
        renderer: Union[Renderer, str] = Renderer.LARAVILT,
        search_url: Optional[str] = None,
    ):
        self.resolver = resolver
        self.functions = functions if functions is not None else resolver.functions
        self.renderer = Renderer(renderer)
        self.search_url = search_url

    def context(self, state: FormState, changed_field: Optional[str] = None) -> RenderContext:
        return RenderContext(
            state=state,
            resolver=self.resolver,
            functions=self.functions,
            renderer=self.renderer,
            changed_field=changed_field,
            search_url=self.search_url,
            render_child=self._render,
        )

    def serialize(
        self,
        node: Component,
        state: Optional[FormState] = None,
        changed_field: Optional[str] = None,
    ) -> Dict[str, Any]:
        ctx = self.context(state if state is not None else FormState(), changed_field)
        return to_jsonable_python(self._render(node, ctx), fallback=str)

    def serialize_schema(
        self,
        schema: Schema,
        state: Optional[FormState] = None,
        changed_field: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        ctx = self.context(state if state is not None else FormState(), changed_field)
        return to_jsonable_python([self._render(node, ctx) for node in schema.components], fallback=str)

    def _render(self, node: Component, ctx: RenderContext) -> Dict[str, Any]:
        props = node.to_props(ctx)

        if ctx.renderer == Renderer.INERTIA:
            return {"component": node.vue_component, "props": props}

        if ctx.renderer == Renderer.FLUTTER:
            return {"widget": node.flutter_widget, "props": flutter_props(props)}

        return props


def flutter_props(props: Dict[str, Any]) -> Dict[str, Any]:
    converted = {}
    for key, value in props.items():
        if key == "disabled":
            converted["enabled"] = not value
        else:
            converted[_FLUTTER_RENAMES.get(key, key)] = value
    return converted
