import pytest

from formkit.entities import EntityRegistry
from formkit.functions import FunctionRegistry
from formkit.resolver import OptionResolver


@pytest.fixture
def functions():
    return FunctionRegistry()


@pytest.fixture
def demo_db(tmp_path):
    """Seeded country/region tables in a temporary SQLite file."""
    from formkit.db import close_db, create_tables, init_db
    from formkit.demo import Country, Region, seed

    init_db(str(tmp_path / "formkit.db"))
    create_tables([Country, Region])
    seed()
    yield
    close_db()


@pytest.fixture
def entities():
    from formkit.demo import create_entities

    return create_entities()


@pytest.fixture
def resolver(functions):
    resolver = OptionResolver(functions=functions, entities=EntityRegistry(), timeout=2.0)
    yield resolver
    resolver.close()

