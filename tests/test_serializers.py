"""Field serialization tests"""

import json
from datetime import date

import pytest

from formkit.enums import Renderer
from formkit.fields import (
    Block,
    Builder,
    CodeEditor,
    ColorPicker,
    DatePicker,
    IconPicker,
    PinInput,
    RateInput,
    Repeater,
    Select,
    Slider,
    TextInput,
    Toggle,
    ToggleButtons,
)
from formkit.layout import Section, Tab, Tabs
from formkit.options import ComputedOptions
from formkit.serializers import Serializer
from formkit.state import FormState


@pytest.fixture
def serializer(resolver):
    return Serializer(resolver)


# ========== Field capabilities ==========


def test_label_is_generated_from_name():
    assert TextInput(name="postal_code").get_label() == "Postal code"
    assert TextInput(name="postal_code", label="ZIP").get_label() == "ZIP"


def test_required_adds_required_rule():
    field = TextInput(name="code", required=True, rules=["max:5"])

    assert field.validation_rules() == ["required", "max:5"]


def test_searchable_select_is_not_native():
    assert Select(name="a", searchable=True).native is False
    assert Select(name="a", searchable=True, native=True).native is True
    assert Select(name="a").native is True


def test_boolean_select_preset():
    field = Select.boolean("active")

    assert field.options.items == {1: "Yes", 0: "No"}
    assert field.placeholder == "Select an option"


# ========== laravilt ==========


def test_text_input_props(serializer):
    field = TextInput(name="email", input_type="email", required=True, live=True)

    props = serializer.serialize(field, FormState({"email": "a@b.co"}))

    assert props["component"] == "text-input"
    assert props["name"] == "email"
    assert props["label"] == "Email"
    assert props["inputType"] == "email"
    assert props["required"] is True
    assert props["reactive"] is True
    assert props["value"] == "a@b.co"
    assert props["validation"] == ["required"]


def test_select_props_include_resolved_options(serializer):
    field = Select(
        name="city",
        options=ComputedOptions(function=lambda get: ["Paris", "Lyon"], depends_on=["country"]),
    )

    props = serializer.serialize(field, FormState())

    assert props["options"] == [
        {"value": "Paris", "label": "Paris"},
        {"value": "Lyon", "label": "Lyon"},
    ]
    assert props["hasMoreOptions"] is False
    assert props["optionsAreGrouped"] is False
    assert props["dependsOn"] == ["country"]
    assert props["hasDynamicOptions"] is True


def test_predicates_are_evaluated_against_state(serializer):
    field = TextInput(name="vat", hidden=lambda get: get("type") != "company")

    assert serializer.serialize(field, FormState({"type": "person"}))["hidden"] is True
    assert serializer.serialize(field, FormState({"type": "company"}))["hidden"] is False


def test_failing_predicate_uses_fallback(serializer):
    field = TextInput(name="a", visible=lambda: 1 / 0, disabled=lambda: 1 / 0)

    props = serializer.serialize(field, FormState())

    assert props["hidden"] is False
    assert props["disabled"] is False


def test_toggle_defaults_to_off_value(serializer):
    props = serializer.serialize(Toggle(name="active"), FormState())

    assert props["value"] is False
    assert props["isOn"] is False


def test_containers_serialize_children_in_order(serializer):
    section = Section(id="main", components=[TextInput(name="a"), TextInput(name="b")])

    props = serializer.serialize(section, FormState())

    assert props["heading"] == "Main"
    assert [child["name"] for child in props["schema"]] == ["a", "b"]


def test_tabs_serialize_each_tab(serializer):
    tabs = Tabs(tabs=[Tab(label="One", components=[TextInput(name="a")]), Tab(label="Two")])

    props = serializer.serialize(tabs, FormState())

    assert [tab["label"] for tab in props["schema"]] == ["One", "Two"]
    assert props["schema"][0]["schema"][0]["name"] == "a"


def test_repeater_item_schema_uses_defaults(serializer):
    repeater = Repeater(name="items", components=[TextInput(name="title", default="untitled")])

    props = serializer.serialize(repeater, FormState({"title": "top level", "items": [{"title": "x"}]}))

    assert props["value"] == [{"title": "x"}]
    assert props["schema"][0]["value"] == "untitled"


def test_builder_blocks(serializer):
    builder = Builder(
        name="content",
        blocks=[Block(name="heading", components=[TextInput(name="text")])],
    )

    props = serializer.serialize(builder, FormState())

    assert props["value"] == []
    assert props["blocks"][0]["name"] == "heading"
    assert props["blocks"][0]["label"] == "Heading"
    assert props["blocks"][0]["schema"][0]["name"] == "text"
    assert props["schema"] == props["blocks"]


def test_slider_defaults_to_min_and_stringifies_marks(serializer):
    field = Slider(name="volume", min=10, max=50, step=5, marks={10: "Low", 50.0: "High"})

    props = serializer.serialize(field, FormState())

    assert props["component"] == "slider"
    assert props["value"] == 10
    assert props["marks"] == {"10": "Low", "50": "High"}
    assert props["step"] == 5


def test_input_kinds_rename_clashing_props(serializer):
    pin = serializer.serialize(PinInput(name="code", pin_type="alphanumeric", length=6), FormState())
    rate = serializer.serialize(RateInput(name="stars", max_rating=10, allow_half=True), FormState())
    code = serializer.serialize(CodeEditor(name="snippet", language="python", readonly=True), FormState())

    assert pin["type"] == "pin-input"
    assert pin["pinType"] == "alphanumeric"
    assert pin["length"] == 6
    assert rate["max"] == 10
    assert rate["allowHalf"] is True
    assert code["language"] == "python"
    assert code["readOnly"] is True


def test_picker_props(serializer):
    color = serializer.serialize(ColorPicker(name="palette", multiple=True, format="hsl"), FormState())
    icon = serializer.serialize(IconPicker(name="icon", icons=["star"]), FormState())

    assert color["value"] == []
    assert color["format"] == "hsl"
    assert icon["icons"] == ["star"]
    assert icon["placeholder"] == "Select an icon..."


def test_toggle_buttons_resolve_options(serializer):
    field = ToggleButtons(name="size", options={"s": "Small", "m": "Medium"}, multiple=True)

    props = serializer.serialize(field, FormState({"size": ["m"]}))

    assert props["value"] == ["m"]
    assert props["options"] == [
        {"value": "s", "label": "Small"},
        {"value": "m", "label": "Medium"},
    ]


def test_output_is_json_safe(serializer):
    field = DatePicker(name="starts_on", default=date(2024, 1, 2))

    props = serializer.serialize(field, FormState())

    assert props["value"] == "2024-01-02"
    json.dumps(props)


def test_serialization_is_idempotent(serializer):
    section = Section(components=[Select(name="c", options={"a": "A"}), TextInput(name="t")])
    state = FormState({"c": "a"})

    assert serializer.serialize(section, state) == serializer.serialize(section, state)
    assert not state.is_dirty


# ========== inertia / flutter ==========


def test_inertia_wraps_every_node(resolver):
    serializer = Serializer(resolver, renderer=Renderer.INERTIA)
    section = Section(components=[TextInput(name="a")])

    node = serializer.serialize(section, FormState())

    assert node["component"] == "Section"
    assert node["props"]["schema"][0]["component"] == "TextInput"
    assert node["props"]["schema"][0]["props"]["name"] == "a"


def test_flutter_renames_value_validation_and_disabled(resolver):
    serializer = Serializer(resolver, renderer="flutter")
    field = TextInput(name="a", required=True, default="x")

    node = serializer.serialize(field, FormState())

    assert node["widget"] == "LaraviltTextInput"
    props = node["props"]
    assert props["validators"] == ["required"]
    assert props["initialValue"] == "x"
    assert props["enabled"] is True
    assert "value" not in props
    assert "disabled" not in props
