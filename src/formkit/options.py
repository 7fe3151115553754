"""Option sources and option list normalization."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Annotated, Any, Callable, Iterable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .consts import DEFAULT_TITLE_ATTRIBUTE
from .enums import OptionSourceType

logger = logging.getLogger(__name__)


class Option(BaseModel):
    value: str
    label: str
    group: Optional[str] = None
    disabled: bool = False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"value": self.value, "label": self.label}
        if self.group is not None:
            data["group"] = self.group
        if self.disabled:
            data["disabled"] = True
        return data


class StaticOptions(BaseModel):
    type: Literal["static"] = "static"
    items: Any = Field(default_factory=list)


class RelationshipOptions(BaseModel):
    """Options loaded from rows of a registered entity.

    ``modify_query`` receives the base query and returns a narrowed one;
    ``label_using`` receives a row and returns its label. Both accept a
    callable or the name of a registered function.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    type: Literal["relationship"] = "relationship"
    entity: str
    title_attribute: str = DEFAULT_TITLE_ATTRIBUTE
    modify_query: Optional[Union[str, Callable[..., Any]]] = None
    label_using: Optional[Union[str, Callable[..., Any]]] = None


class ComputedOptions(BaseModel):
    """Options produced by a function of the current form state.

    The function is called as ``fn(get, set)`` (or with fewer arguments if it
    takes fewer). ``depends_on`` lists the fields it reads; leave it unset only
    when the function is registered with its own declaration, or opt in to
    source inference with ``infer_dependencies=True``.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    type: Literal["computed"] = "computed"
    function: Union[str, Callable[..., Any]]
    depends_on: Optional[list[str]] = None
    infer_dependencies: bool = False


OptionSource = Annotated[
    Union[StaticOptions, RelationshipOptions, ComputedOptions],
    Field(discriminator="type"),
]


def coerce_option_source(value: Any) -> Any:
    """Accept shorthand option declarations.

    A plain mapping or list becomes :class:`StaticOptions`, a callable becomes
    :class:`ComputedOptions`. Mappings carrying a ``type`` tag are left for
    pydantic to validate against the tagged union.
    """
    if value is None:
        return StaticOptions()
    if isinstance(value, (StaticOptions, RelationshipOptions, ComputedOptions)):
        return value
    if callable(value):
        return ComputedOptions(function=value)
    if isinstance(value, Mapping) and value.get("type") in {t.value for t in OptionSourceType}:
        return value
    if isinstance(value, (Mapping, list, tuple)):
        return StaticOptions(items=value)
    return value


def _label(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _from_mapping_item(item: Mapping, group: Optional[str] = None) -> Option:
    item_group = item.get("group", group)
    return Option(
        value=str(item["value"]),
        label=_label(item["label"]),
        group=str(item_group) if item_group is not None else None,
        disabled=bool(item.get("disabled", False)),
    )


def _is_option_mapping(value: Any) -> bool:
    return isinstance(value, Mapping) and "value" in value and "label" in value


def normalize_options(raw: Any) -> list[Option]:
    """Flatten any supported option shape into a list of :class:`Option`.

    * ``{"us": "United States"}`` -> one option per key, value is ``str(key)``
    * ``{"Europe": {"fr": "France"}}`` -> grouped options tagged ``group``
    * ``["red", "blue"]`` -> value and label are the item itself
    * ``[{"value": ..., "label": ...}]`` and ``[(value, label)]`` are kept

    Anything that is not a mapping or a list yields an empty list.
    """
    if isinstance(raw, Mapping):
        options = []
        for key, value in raw.items():
            if isinstance(value, Option):
                options.append(value)
            elif _is_option_mapping(value):
                options.append(_from_mapping_item(value))
            elif isinstance(value, Mapping):
                for sub_key, sub_value in value.items():
                    if _is_option_mapping(sub_value):
                        options.append(_from_mapping_item(sub_value, group=str(key)))
                    else:
                        options.append(
                            Option(value=str(sub_key), label=_label(sub_value), group=str(key))
                        )
            else:
                options.append(Option(value=str(key), label=_label(value)))
        return options

    if isinstance(raw, (list, tuple)):
        options = []
        for item in raw:
            if isinstance(item, Option):
                options.append(item)
            elif _is_option_mapping(item):
                options.append(_from_mapping_item(item))
            elif isinstance(item, tuple) and len(item) == 2:
                options.append(Option(value=str(item[0]), label=_label(item[1])))
            else:
                options.append(Option(value=str(item), label=_label(item)))
        return options

    return []


def limit_options(
    options: list[Option], limit: int, selected: Iterable[str] = ()
) -> tuple[list[Option], bool]:
    """Truncate ``options`` to ``limit`` entries, keeping selected values.

    Selected values that exist in the full list but fall outside the window
    are appended after the first ``limit`` entries. Returns the limited list
    and whether truncation happened.
    """
    if len(options) <= limit:
        return options, False

    limited = list(options[:limit])
    present = {option.value for option in limited}
    by_value = {}
    for option in options[limit:]:
        by_value.setdefault(option.value, option)

    for value in selected:
        if value not in present and value in by_value:
            limited.append(by_value[value])
            present.add(value)

    return limited, True


def are_grouped(options: Iterable[Option]) -> bool:
    return any(option.group is not None for option in options)
