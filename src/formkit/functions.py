"""Registry of named functions used by option sources, predicates and hooks."""

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from .errors import UnknownFunction
from .utils import unique

logger = logging.getLogger(__name__)

FunctionRef = Union[str, Callable[..., Any]]


@dataclass
class RegisteredFunction:
    name: str
    func: Callable[..., Any]
    depends_on: Optional[List[str]] = None
    description: str = ""

    def __call__(self, *args, **kwargs):
        return self.func(*args, **kwargs)


@dataclass
class FunctionRegistry:
    """Named, importable computations.

    Schemas refer to computations by name so that a schema definition can be
    loaded from a file and rebuilt on every request without carrying closures.

    Example:
        >>> functions = FunctionRegistry()
        >>> @functions.register("states_for_country", depends_on=["country"])
        ... def states_for_country(get):
        ...     return {"ca": "California"} if get("country") == "us" else {}
    """

    _functions: Dict[str, RegisteredFunction] = field(default_factory=dict)

    def register(
        self,
        name: Optional[str] = None,
        depends_on: Optional[List[str]] = None,
    ):
        def decorator(func):
            self.add(name or func.__name__, func, depends_on=depends_on)
            return func

        return decorator

    def add(
        self,
        name: str,
        func: Callable[..., Any],
        depends_on: Optional[List[str]] = None,
    ) -> RegisteredFunction:
        if name in self._functions:
            logger.warning(f"Function '{name}' is already registered, replacing it")

        entry = RegisteredFunction(
            name=name,
            func=func,
            depends_on=unique(depends_on) if depends_on is not None else None,
            description=inspect.getdoc(func) or "",
        )
        self._functions[name] = entry
        return entry

    def get(self, name: str) -> RegisteredFunction:
        try:
            return self._functions[name]
        except KeyError:
            raise UnknownFunction(f"Function not registered: {name}")

    def resolve(self, ref: FunctionRef) -> Callable[..., Any]:
        if callable(ref):
            return ref
        return self.get(ref).func

    def declared_dependencies(self, ref: FunctionRef) -> Optional[List[str]]:
        if isinstance(ref, str) and ref in self._functions:
            return self._functions[ref].depends_on
        return None

    def names(self) -> List[str]:
        return sorted(self._functions)

    def __contains__(self, name: str) -> bool:
        return name in self._functions

    def __len__(self) -> int:
        return len(self._functions)


def invoke(func: Callable[..., Any], *args):
    """Call ``func`` with as many leading positional ``args`` as it accepts.

    ``lambda: ...`` receives nothing, ``lambda get: ...`` receives the first
    argument, and so on. Functions taking ``*args`` receive everything.
    """
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return func(*args)

    count = 0
    for parameter in signature.parameters.values():
        if parameter.kind == inspect.Parameter.VAR_POSITIONAL:
            return func(*args)
        if parameter.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            count += 1

    return func(*args[:count])
