"""Utility and function registry tests"""

import pytest

from formkit.errors import UnknownFunction
from formkit.functions import FunctionRegistry, invoke
from formkit.utils import is_blank, label_from_name, selected_values, unique


@pytest.mark.parametrize(
    "name,expected",
    [
        ("country_id", "Country id"),
        ("address.postalCode", "Postal code"),
        ("first-name", "First name"),
        ("", ""),
    ],
)
def test_label_from_name(name, expected):
    assert label_from_name(name) == expected


def test_unique_keeps_first_occurrence():
    assert unique(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]


def test_is_blank():
    assert is_blank(None)
    assert is_blank("  ")
    assert is_blank([])
    assert not is_blank(0)
    assert not is_blank(False)


def test_selected_values():
    assert selected_values(None) == []
    assert selected_values("") == []
    assert selected_values(3) == ["3"]
    assert selected_values(["a", None, 2]) == ["a", "2"]


def test_invoke_trims_arguments_to_arity():
    assert invoke(lambda: "none", 1, 2) == "none"
    assert invoke(lambda a: a, 1, 2) == 1
    assert invoke(lambda a, b: (a, b), 1, 2) == (1, 2)
    assert invoke(lambda *args: args, 1, 2) == (1, 2)


def test_function_registry():
    functions = FunctionRegistry()

    @functions.register(depends_on=["country", "country"])
    def states(get):
        """States of the selected country."""
        return []

    entry = functions.get("states")
    assert entry.depends_on == ["country"]
    assert entry.description == "States of the selected country."
    assert functions.resolve("states") is states
    assert functions.declared_dependencies("states") == ["country"]
    assert functions.declared_dependencies(states) is None
    assert "states" in functions
    assert len(functions) == 1

    with pytest.raises(UnknownFunction):
        functions.resolve("missing")
