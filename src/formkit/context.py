"""Per-request rendering context shared by every node during serialization."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Callable, Optional

from .enums import Renderer
from .functions import FunctionRegistry, invoke
from .state import FormState

if TYPE_CHECKING:
    from .fields import Component
    from .resolver import OptionResolver

logger = logging.getLogger(__name__)


@dataclass
class RenderContext:
    """Everything a node needs to turn itself into a property map.

    ``template`` is set while rendering the item schema of a repeater or
    builder block: values then come from defaults, not from the state.
    """

    state: FormState
    resolver: "OptionResolver"
    functions: FunctionRegistry
    renderer: Renderer = Renderer.LARAVILT
    changed_field: Optional[str] = None
    template: bool = False
    search_url: Optional[str] = None
    render_child: Optional[Callable[["Component", "RenderContext"], dict]] = None

    def evaluate(self, value: Any) -> Any:
        """Evaluate a static value or predicate against the current state.

        Strings name registered functions; callables are called with
        ``(get, set)`` trimmed to their arity.
        """
        if isinstance(value, bool) or value is None:
            return value
        if isinstance(value, str):
            value = self.functions.resolve(value)
        if callable(value):
            return invoke(value, self.state.getter(), self.state.setter())
        return value

    def predicate(self, value: Any, fallback: bool = False) -> bool:
        try:
            return bool(self.evaluate(value))
        except Exception as e:
            logger.warning(f"Predicate {value!r} failed, using {fallback}: {e}", exc_info=True)
            return fallback

    def value_of(self, name: str, default: Any = None) -> Any:
        if self.template:
            return default
        value = self.state.get(name)
        return default if value is None else value

    def render(self, node: "Component") -> dict:
        return self.render_child(node, self)

    def as_template(self) -> "RenderContext":
        return replace(self, template=True)
