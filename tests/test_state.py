"""Form state unit tests"""

from formkit.state import FormState


def test_get_supports_dotted_paths_and_list_indexes():
    state = FormState({"address": {"city": "Paris"}, "items": [{"qty": 2}]})

    assert state.get("address.city") == "Paris"
    assert state.get("items.0.qty") == 2
    assert state.get("items.5.qty", "n/a") == "n/a"
    assert state.get("missing") is None
    assert "address.city" in state
    assert "address.zip" not in state


def test_set_creates_nested_mappings_and_records_writes():
    state = FormState()

    state.set("address.city", "Lyon")
    state.set("country", "fr")
    state.set("country", "de")

    assert state.to_dict() == {"address": {"city": "Lyon"}, "country": "de"}
    assert state.writes == ["address.city", "country"]
    assert state.is_dirty


def test_state_does_not_share_input_data():
    data = {"tags": ["a"]}
    state = FormState(data)

    state.get("tags").append("b")

    assert data == {"tags": ["a"]}


def test_coerce_replaces_malformed_state(caplog):
    assert FormState.coerce(["not", "a", "mapping"]).to_dict() == {}
    assert FormState.coerce(None).to_dict() == {}
    assert FormState.coerce({"a": 1}).to_dict() == {"a": 1}
    assert "Malformed form state" in caplog.text


def test_fork_is_isolated_until_merged():
    state = FormState({"a": 1, "b": 2})
    fork = state.fork()

    fork.set("b", 3)
    assert state.get("b") == 2
    assert not state.is_dirty

    state.merge(fork)
    assert state.to_dict() == {"a": 1, "b": 3}
    assert state.writes == ["b"]


def test_get_and_set_accessors():
    state = FormState()
    get, set_ = state.getter(), state.setter()

    set_("country", "us")

    assert get("country") == "us"
    assert get("region", "none") == "none"


def test_set_writes_into_list_items():
    state = FormState({"items": [{"qty": 1}, {"qty": 2}]})

    state.set("items.0.qty", 5)
    state.set("items.1", {"qty": 7})

    assert state.to_dict() == {"items": [{"qty": 5}, {"qty": 7}]}
    assert state.writes == ["items.0.qty", "items.1"]


def test_set_appends_at_list_length():
    state = FormState({"items": [{"qty": 1}]})

    state.set("items.1.qty", 3)

    assert state.get("items") == [{"qty": 1}, {"qty": 3}]


def test_set_rejects_non_index_list_steps(caplog):
    state = FormState({"items": [{"qty": 1}]})

    state.set("items.5.qty", 3)
    state.set("items.first", 3)

    assert state.to_dict() == {"items": [{"qty": 1}]}
    assert state.writes == []
    assert "Cannot write 'items.5.qty'" in caplog.text


def test_merge_keeps_repeater_lists():
    state = FormState({"items": [{"qty": 1}, {"qty": 2}], "total": 3})
    fork = state.fork()

    fork.set("items.1.qty", 4)
    fork.set("total", 5)
    state.merge(fork)

    assert state.to_dict() == {"items": [{"qty": 1}, {"qty": 4}], "total": 5}
