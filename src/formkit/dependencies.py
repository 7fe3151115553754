"""Dependency sets for computed option sources.

A computed source is re-resolved whenever one of the fields it reads changes.
Dependencies are declared either on the source itself (``depends_on``), on
the field, or on the registered function. Inference from source text is a
fallback that must be switched on per source: it only recognises calls of
the exact shape ``get("name")`` with a plain string literal, and for lambdas
it sees the whole line the lambda was written on.
"""

import inspect
import logging
import re
from typing import Any, Callable, List, Optional, Union

from .consts import GET_CALL_PATTERN
from .errors import ConfigException
from .functions import FunctionRegistry
from .options import ComputedOptions
from .utils import unique

logger = logging.getLogger(__name__)

_GET_CALL = re.compile(GET_CALL_PATTERN)


def extract_dependencies(computation: Union[str, Callable[..., Any]]) -> List[str]:
    """Field names read through ``get("...")`` in a computation's source.

    Accepts a callable or raw source text. Returns distinct names in
    first-occurrence order; an unreadable source yields an empty list.
    """
    if isinstance(computation, str):
        source = computation
    else:
        try:
            source = inspect.getsource(computation)
        except (OSError, TypeError) as e:
            logger.warning(f"Could not read source of {computation!r} to infer dependencies: {e}")
            return []

    return unique(_GET_CALL.findall(source))


def declared_dependencies(
    source: ComputedOptions,
    functions: Optional[FunctionRegistry] = None,
    field_depends_on: Optional[List[str]] = None,
) -> Optional[List[str]]:
    if source.depends_on is not None:
        return unique(source.depends_on)
    if field_depends_on is not None:
        return unique(field_depends_on)
    if functions is not None:
        registered = functions.declared_dependencies(source.function)
        if registered is not None:
            return list(registered)
    return None


def dependencies_for(
    source: ComputedOptions,
    functions: Optional[FunctionRegistry] = None,
    field_depends_on: Optional[List[str]] = None,
) -> List[str]:
    """Resolve the dependency set of a computed source.

    Declarations always win. Inference runs only when the source opted in.
    """
    declared = declared_dependencies(source, functions, field_depends_on)
    if declared is not None:
        return declared

    if source.infer_dependencies:
        computation = source.function
        if isinstance(computation, str) and functions is not None and computation in functions:
            computation = functions.get(computation).func
        return extract_dependencies(computation)

    return []


def require_declared(
    field_name: str,
    source: ComputedOptions,
    functions: Optional[FunctionRegistry] = None,
    field_depends_on: Optional[List[str]] = None,
) -> None:
    if source.infer_dependencies:
        return
    if declared_dependencies(source, functions, field_depends_on) is None:
        raise ConfigException(
            f"Computed options of field '{field_name}' must declare depends_on "
            "(on the field, the option source or the registered function)"
        )
