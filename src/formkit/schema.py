"""Schema trees and the kind registry used to build them from plain data."""

import logging
from collections.abc import Mapping
from typing import Any, Dict, Iterator, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field as PydanticField, model_validator

from .dependencies import require_declared
from .errors import ConfigException, DuplicateFieldName, FieldNotFound
from .fields import (
    Block,
    Builder,
    Checkbox,
    CheckboxList,
    CodeEditor,
    ColorPicker,
    Component,
    DatePicker,
    DateRangePicker,
    DateTimePicker,
    Field,
    FileUpload,
    Hidden,
    IconPicker,
    KeyValue,
    MarkdownEditor,
    NumberField,
    OptionsField,
    PinInput,
    Radio,
    RateInput,
    Repeater,
    RichEditor,
    Select,
    Slider,
    TagsInput,
    Textarea,
    TextInput,
    TimePicker,
    Toggle,
    ToggleButtons,
)
from .functions import FunctionRegistry
from .layout import Grid, Section, Tab, Tabs
from .options import ComputedOptions
from .state import FormState

logger = logging.getLogger(__name__)

KINDS: Dict[str, Type[Component]] = {
    cls.kind: cls
    for cls in (
        TextInput,
        Textarea,
        NumberField,
        Toggle,
        Checkbox,
        CheckboxList,
        Radio,
        ToggleButtons,
        Select,
        TagsInput,
        KeyValue,
        DatePicker,
        DateTimePicker,
        TimePicker,
        DateRangePicker,
        ColorPicker,
        CodeEditor,
        IconPicker,
        MarkdownEditor,
        RichEditor,
        PinInput,
        RateInput,
        Slider,
        Hidden,
        FileUpload,
        Repeater,
        Builder,
        Block,
        Section,
        Grid,
        Tabs,
        Tab,
    )
}

KIND_ALIASES = {
    "text": "text-input",
    "number": "number-field",
}

# keys holding child nodes, with the kind assumed when a child omits it
_CHILD_KEYS = {
    "schema": None,
    "components": None,
    "create_option_form": None,
    "edit_option_form": None,
    "tabs": "tab",
    "blocks": "block",
}


def build_component(data: Any, default_kind: Optional[str] = None) -> Component:
    """Build a node from a mapping such as ``{"kind": "select", "name": "country"}``."""
    if isinstance(data, Component):
        return data
    if not isinstance(data, Mapping):
        raise ConfigException(f"Schema node must be a mapping, got {type(data).__name__}")

    values = dict(data)
    kind = values.pop("kind", None) or default_kind
    kind = KIND_ALIASES.get(kind, kind)
    cls = KINDS.get(kind)
    if cls is None:
        raise ConfigException(f"Unknown field kind: {kind!r}")

    for key, child_kind in _CHILD_KEYS.items():
        if isinstance(values.get(key), list):
            values[key] = [build_component(child, child_kind) for child in values[key]]

    return cls.model_validate(values)


def iter_leaves(nodes: List[Component]) -> Iterator[Field]:
    """Fields reachable through layout containers.

    Repeaters and builders are leaves: their item fields are bound per item.
    """
    for node in nodes:
        if isinstance(node, Field):
            yield node
        else:
            yield from iter_leaves(node.child_nodes())


def iter_nodes(nodes: List[Component]) -> Iterator[Component]:
    for node in nodes:
        yield node
        yield from iter_nodes(node.child_nodes())
        if isinstance(node, Select):
            yield from iter_nodes(node.create_option_form)
            yield from iter_nodes(node.edit_option_form)


def _check_unique(nodes: List[Component], scope: str) -> None:
    seen = set()
    for leaf in iter_leaves(nodes):
        if leaf.name in seen:
            raise DuplicateFieldName(f"Duplicate field name '{leaf.name}' in {scope}")
        seen.add(leaf.name)

        if isinstance(leaf, Repeater):
            _check_unique(leaf.components, f"repeater '{leaf.name}'")
        elif isinstance(leaf, Builder):
            for block in leaf.blocks:
                _check_unique(block.components, f"block '{block.name}' of '{leaf.name}'")


class Schema(BaseModel):
    """A named, ordered forest of nodes.

    Leaf names are unique across the flattened tree; a duplicate raises
    :class:`~formkit.errors.DuplicateFieldName` at construction.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid", populate_by_name=True)

    id: str
    title: Optional[str] = None
    description: Optional[str] = None
    components: List[Component] = PydanticField(default_factory=list, alias="schema")

    @model_validator(mode="after")
    def leaf_names_are_unique(self) -> "Schema":
        _check_unique(self.components, f"schema '{self.id}'")
        return self

    @classmethod
    def from_dict(cls, data: Mapping) -> "Schema":
        values = dict(data)
        nodes = values.pop("schema", None)
        if nodes is None:
            nodes = values.pop("components", [])
        if not isinstance(nodes, list):
            raise ConfigException(f"Schema '{values.get('id')}' must hold a list of nodes")
        values["components"] = [build_component(node) for node in nodes]
        return cls.model_validate(values)

    def leaf_fields(self) -> List[Field]:
        return list(iter_leaves(self.components))

    def walk(self) -> Iterator[Component]:
        return iter_nodes(self.components)

    def find(self, name: str) -> Optional[Field]:
        for leaf in iter_leaves(self.components):
            if leaf.name == name:
                return leaf
        return None

    def field(self, name: str) -> Field:
        found = self.find(name)
        if found is None:
            raise FieldNotFound(name)
        return found

    def dependents_of(self, name: str, functions: Optional[FunctionRegistry] = None) -> List[str]:
        """Leaf fields whose dependency set contains ``name``."""
        return [
            leaf.name
            for leaf in iter_leaves(self.components)
            if name in leaf.dependencies(functions)
        ]

    def check(self, functions: Optional[FunctionRegistry] = None) -> "Schema":
        """Reject computed option sources that declare no dependencies."""
        for node in self.walk():
            if isinstance(node, OptionsField) and isinstance(node.options, ComputedOptions):
                require_declared(node.name, node.options, functions, node.depends_on)
        return self

    def default_state(self) -> FormState:
        state = FormState()
        for leaf in iter_leaves(self.components):
            state.set(leaf.name, leaf.default_value())
        return FormState(state.to_dict())
