"""Option resolver tests"""

import threading
import time

import pytest

from formkit.demo import Country, create_functions
from formkit.fields import CheckboxList, Select
from formkit.options import ComputedOptions, RelationshipOptions
from formkit.resolver import OptionResolver
from formkit.state import FormState


@pytest.fixture
def db_resolver(demo_db, entities):
    resolver = OptionResolver(functions=create_functions(), entities=entities, timeout=2.0)
    yield resolver
    resolver.close()


# ========== Static ==========


def test_static_options_are_never_truncated(resolver):
    field = Select(name="color", options=[f"c{i}" for i in range(80)])

    resolved = resolver.resolve(field, FormState())

    assert len(resolved.options) == 80
    assert not resolved.has_more
    assert not resolved.failed


def test_grouped_static_options(resolver):
    field = Select(name="city", options={"France": {"paris": "Paris"}, "Germany": {"berlin": "Berlin"}})

    resolved = resolver.resolve(field, FormState())

    assert resolved.grouped
    assert resolved.to_list()[1] == {"value": "berlin", "label": "Berlin", "group": "Germany"}


def test_disable_option_when_marks_options(resolver):
    field = Select(name="size", options=["s", "m", "l"], disable_option_when=lambda value: value == "m")

    resolved = resolver.resolve(field, FormState())

    assert [o.disabled for o in resolved.options] == [False, True, False]


# ========== Computed ==========


def test_computed_options_receive_get(resolver, functions):
    @functions.register("cities", depends_on=["country"])
    def cities(get):
        return {"fr": ["Paris", "Lyon"]}.get(get("country"), [])

    field = Select(name="city", options=ComputedOptions(function="cities"))

    resolved = resolver.resolve(field, FormState({"country": "fr"}))

    assert resolved.values == ["Paris", "Lyon"]


def test_computed_options_are_limited_but_keep_selected_value(resolver):
    field = Select(
        name="item",
        options=ComputedOptions(
            function=lambda: {str(i): f"Item {i}" for i in range(100)}, depends_on=[]
        ),
    )

    resolved = resolver.resolve(field, FormState({"item": "75"}))

    assert resolved.has_more
    assert len(resolved.options) == 51
    assert resolved.options[-1].value == "75"


def test_field_options_limit_overrides_default(resolver):
    field = Select(
        name="item",
        options_limit=10,
        options=ComputedOptions(function=lambda: list(range(30)), depends_on=[]),
    )

    resolved = resolver.resolve(field, FormState())

    assert len(resolved.options) == 10
    assert resolved.has_more


def test_computed_result_of_wrong_type_becomes_empty(resolver):
    field = Select(name="x", options=ComputedOptions(function=lambda: "nope", depends_on=[]))

    resolved = resolver.resolve(field, FormState())

    assert resolved.options == []
    assert not resolved.failed


def test_failing_computation_degrades_and_discards_writes(resolver):
    def broken(get, set):
        set("touched", True)
        raise RuntimeError("boom")

    field = Select(name="x", options=ComputedOptions(function=broken, depends_on=[]))
    state = FormState()

    resolved = resolver.resolve(field, state)

    assert resolved.failed
    assert resolved.options == []
    assert "touched" not in state


def test_successful_computation_writes_are_merged(resolver):
    def compute(get, set):
        set("touched", True)
        return ["a"]

    field = Select(name="x", options=ComputedOptions(function=compute, depends_on=[]))
    state = FormState()

    resolver.resolve(field, state)

    assert state.get("touched") is True
    assert state.writes == ["touched"]


def test_timed_out_computation_is_dropped(functions):
    resolver = OptionResolver(functions=functions, timeout=0.1)

    def slow(get, set):
        time.sleep(0.5)
        set("late", True)
        return ["x"]

    field = Select(name="x", options=ComputedOptions(function=slow, depends_on=[]))
    state = FormState()

    try:
        resolved = resolver.resolve(field, state)
    finally:
        resolver.close()

    assert resolved.failed
    assert resolved.options == []
    time.sleep(0.6)
    assert "late" not in state


def test_fast_resolution_after_timeouts_filled_the_pool(functions):
    resolver = OptionResolver(functions=functions, timeout=0.2, max_workers=1)
    release = threading.Event()

    def stuck(get):
        release.wait(5)
        return ["late"]

    slow = Select(name="slow", options=ComputedOptions(function=stuck, depends_on=[]))
    fast = Select(name="fast", options=ComputedOptions(function=lambda: {"b": "B"}, depends_on=[]))

    try:
        assert resolver.resolve(slow, FormState()).failed
        resolved = resolver.resolve(fast, FormState())
    finally:
        release.set()
        resolver.close()

    assert not resolved.failed
    assert resolved.to_list() == [{"value": "b", "label": "B"}]


def test_timeouts_below_pool_size_keep_the_pool(functions):
    resolver = OptionResolver(functions=functions, timeout=0.2, max_workers=2)
    release = threading.Event()
    pool = resolver._executor

    slow = Select(
        name="slow",
        options=ComputedOptions(function=lambda: release.wait(5) and [], depends_on=[]),
    )
    fast = Select(name="fast", options=ComputedOptions(function=lambda: ["a"], depends_on=[]))

    try:
        assert resolver.resolve(slow, FormState()).failed
        assert resolver.resolve(fast, FormState()).values == ["a"]
        assert resolver._executor is pool
    finally:
        release.set()
        resolver.close()


def test_unknown_function_degrades(resolver):
    field = Select(name="x", options=ComputedOptions(function="missing", depends_on=[]))

    resolved = resolver.resolve(field, FormState())

    assert resolved.failed
    assert resolved.options == []


# ========== Relationship ==========


def test_relationship_options_use_title_attribute(db_resolver):
    field = Select(name="country", options=RelationshipOptions(entity="country"))

    resolved = db_resolver.resolve(field, FormState())

    assert sorted(o.to_dict()["value"] for o in resolved.options) == ["de", "fr", "us"]
    assert {o.value: o.label for o in resolved.options}["fr"] == "France"


def test_relationship_modify_query_reads_state(db_resolver):
    field = Select(
        name="region",
        options=RelationshipOptions(entity="region", modify_query="regions_of_country"),
    )

    resolved = db_resolver.resolve(field, FormState({"country": "fr"}))

    assert [o.label for o in resolved.options] == ["Brittany", "Normandy", "Occitania"]


def test_relationship_label_using(db_resolver):
    field = CheckboxList(
        name="countries",
        options=RelationshipOptions(
            entity="country", label_using=lambda record: f"{record.name} ({record.code})"
        ),
    )

    resolved = db_resolver.resolve(field, FormState())

    assert "France (fr)" in [o.label for o in resolved.options]


def test_searchable_relationship_loads_limit_plus_selected(demo_db, entities):
    resolver = OptionResolver(entities=entities, relationship_limit=2)
    field = Select(
        name="country",
        searchable=True,
        options=RelationshipOptions(
            entity="country", modify_query=lambda query: query.order_by(Country.name)
        ),
    )

    try:
        resolved = resolver.resolve(field, FormState({"country": "us"}))
    finally:
        resolver.close()

    assert resolved.values == ["fr", "de", "us"]
    assert resolved.has_more


def test_unknown_entity_yields_empty_options(db_resolver):
    field = Select(name="planet", options=RelationshipOptions(entity="planet"))

    resolved = db_resolver.resolve(field, FormState())

    assert resolved.options == []


def test_relationship_without_entity_registry(functions):
    resolver = OptionResolver(functions=functions)
    field = Select(name="country", options=RelationshipOptions(entity="country"))

    try:
        assert resolver.resolve(field, FormState()).options == []
    finally:
        resolver.close()


# ========== Search and labels ==========


COUNTRY_OPTIONS = {"us": "United States", "uk": "United Kingdom", "de": "Germany"}


def test_search_filters_static_options(resolver):
    field = Select(name="country", searchable=True, options=COUNTRY_OPTIONS)

    resolved = resolver.search(field, "united", FormState())

    assert resolved.values == ["us", "uk"]


def test_search_is_limited(resolver):
    field = Select(name="n", options_limit=5, options=[str(i) for i in range(100)])

    resolved = resolver.search(field, "", FormState())

    assert len(resolved.options) == 5
    assert resolved.has_more


def test_search_uses_custom_results_function(resolver):
    field = Select(
        name="tag",
        searchable=True,
        get_search_results_using=lambda term: {term: term.upper()},
    )

    resolved = resolver.search(field, "abc", FormState())

    assert resolved.to_list() == [{"value": "abc", "label": "ABC"}]


def test_search_relationship_by_title(db_resolver):
    field = Select(name="country", searchable=True, options=RelationshipOptions(entity="country"))

    resolved = db_resolver.search(field, "ger", FormState())

    assert resolved.to_list() == [{"value": "de", "label": "Germany"}]


def test_option_labels_for_static_and_relationship(db_resolver):
    static = Select(name="country", options=COUNTRY_OPTIONS)
    related = Select(name="country", options=RelationshipOptions(entity="country"))
    custom = Select(name="country", get_option_label_using=lambda value: f"#{value}")

    assert db_resolver.option_labels(static, ["uk", "zz"], FormState()) == {"uk": "United Kingdom"}
    assert db_resolver.option_labels(related, ["fr"], FormState()) == {"fr": "France"}
    assert db_resolver.option_labels(custom, ["7"], FormState()) == {"7": "#7"}
    assert db_resolver.option_labels(static, [], FormState()) == {}


def test_slow_option_label_function_times_out(functions):
    resolver = OptionResolver(functions=functions, timeout=0.1)
    release = threading.Event()

    def label(value):
        release.wait(5)
        return value

    field = Select(name="country", get_option_label_using=label)

    try:
        started = time.monotonic()
        labels = resolver.option_labels(field, ["fr"], FormState())
        elapsed = time.monotonic() - started
    finally:
        release.set()
        resolver.close()

    assert labels == {}
    assert elapsed < 2
