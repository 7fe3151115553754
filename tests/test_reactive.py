"""Reactive update handler tests"""

import pytest

from formkit.errors import SchemaNotFound
from formkit.fields import Select, TextInput
from formkit.functions import FunctionRegistry
from formkit.options import ComputedOptions
from formkit.reactive import ReactiveHandler
from formkit.registry import SchemaRegistry
from formkit.resolver import OptionResolver
from formkit.schema import Schema

CITIES = {"fr": ["Paris", "Lyon"], "de": ["Berlin"]}


@pytest.fixture
def handler():
    functions = FunctionRegistry()

    @functions.register("cities", depends_on=["country"])
    def cities(get):
        return CITIES.get(get("country"), [])

    @functions.register("clear_city")
    def clear_city(get, set):
        set("city", None)

    @functions.register("broken_hook")
    def broken_hook(get, set):
        set("city", "should not stick")
        raise RuntimeError("boom")

    schemas = SchemaRegistry(functions)

    @schemas.register("address")
    def address(state):
        return Schema(
            id="address",
            components=[
                Select(name="country", options={"fr": "France", "de": "Germany"}, after_state_updated="clear_city"),
                Select(name="city", options=ComputedOptions(function="cities")),
                TextInput(name="note", after_state_updated="broken_hook"),
            ],
        )

    resolver = OptionResolver(functions=functions, timeout=2.0)
    yield ReactiveHandler(schemas, resolver)
    resolver.close()


def test_changed_field_runs_hook_and_reresolves(handler):
    update = handler.handle(
        "address", {"country": "de", "city": "Paris"}, changed_field="country", request_token="t-1"
    )

    assert update.data == {"country": "de", "city": None}
    assert update.affected == ["city"]
    assert update.request_token == "t-1"

    city = update.schema[1]
    assert city["name"] == "city"
    assert [o["value"] for o in city["options"]] == ["Berlin"]


def test_failing_hook_discards_its_writes(handler):
    update = handler.handle("address", {"city": "Paris", "note": "x"}, changed_field="note")

    assert update.data == {"city": "Paris", "note": "x"}
    assert update.affected == []


def test_malformed_state_is_treated_as_empty(handler):
    update = handler.handle("address", ["not", "an", "object"])

    assert update.data == {}
    assert update.schema[1]["options"] == []


def test_unknown_changed_field_is_ignored(handler):
    update = handler.handle("address", {"country": "fr"}, changed_field="planet")

    assert update.affected == []
    assert update.data == {"country": "fr"}


def test_unknown_schema(handler):
    with pytest.raises(SchemaNotFound):
        handler.handle("missing", {})


def test_to_dict_uses_camel_case_token(handler):
    payload = handler.handle("address", {}, request_token="42").to_dict()

    assert set(payload) == {"schema", "data", "affected", "requestToken"}
    assert payload["requestToken"] == "42"
