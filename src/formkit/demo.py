"""Demo schemas backed by a small country/region database.

Used by ``formkit --demo`` and by ``uvicorn --factory formkit.demo:create_demo_app``
to serve a working form without any application code.
"""

import logging

from peewee import CharField, ForeignKeyField

from .entities import EntityRegistry
from .fields import Checkbox, Select, TextInput
from .functions import FunctionRegistry
from .layout import Grid, Section
from .models import BaseModel
from .options import ComputedOptions, RelationshipOptions
from .registry import SchemaRegistry
from .schema import Schema

logger = logging.getLogger(__name__)


class Country(BaseModel):
    code = CharField(primary_key=True, max_length=2)
    name = CharField()

    class Meta:
        table_name = "country"


class Region(BaseModel):
    country = ForeignKeyField(Country, backref="regions", column_name="country_code")
    name = CharField()

    class Meta:
        table_name = "region"


COUNTRIES = {
    "de": ("Germany", ["Bavaria", "Berlin", "Hamburg"]),
    "fr": ("France", ["Brittany", "Normandy", "Occitania"]),
    "us": ("United States", ["California", "New York", "Texas"]),
}

CITIES = {
    "de": ["Berlin", "Hamburg", "Munich", "Cologne"],
    "fr": ["Paris", "Lyon", "Marseille", "Toulouse"],
    "us": ["New York", "Los Angeles", "Chicago", "Houston"],
}


def create_functions() -> FunctionRegistry:
    functions = FunctionRegistry()

    @functions.register("cities_for_country", depends_on=["country"])
    def cities_for_country(get):
        """Cities of the selected country."""
        return CITIES.get(get("country"), [])

    @functions.register("regions_of_country")
    def regions_of_country(query, get):
        return query.where(Region.country == get("country")).order_by(Region.name)

    @functions.register("reset_location")
    def reset_location(get, set):
        set("region", None)
        set("city", None)

    @functions.register("has_country")
    def has_country(get):
        return bool(get("country"))

    return functions


def create_entities() -> EntityRegistry:
    entities = EntityRegistry()
    entities.register("country", Country)
    entities.register("region", Region)
    return entities


def build_address_schema(state) -> Schema:
    return Schema(
        id="address",
        title="Shipping address",
        components=[
            Section(
                id="location",
                heading="Location",
                components=[
                    Grid(
                        columns=3,
                        components=[
                            Select(
                                name="country",
                                options=RelationshipOptions(entity="country"),
                                searchable=True,
                                preload=True,
                                live=True,
                                required=True,
                                after_state_updated="reset_location",
                            ),
                            Select(
                                name="region",
                                options=RelationshipOptions(
                                    entity="region", modify_query="regions_of_country"
                                ),
                                depends_on=["country"],
                                visible="has_country",
                                required="has_country",
                            ),
                            Select(
                                name="city",
                                options=ComputedOptions(function="cities_for_country"),
                                searchable=True,
                                visible="has_country",
                            ),
                        ],
                    ),
                    TextInput(name="street", required=True, max_length=120),
                    TextInput(name="postal_code", pattern=r"^[0-9A-Za-z \-]{3,10}$"),
                ],
            ),
            Section(
                id="contact",
                components=[
                    TextInput(name="email", input_type="email", required=True),
                    Select.boolean("newsletter", label="Subscribe to the newsletter"),
                    Checkbox(name="terms", label="I accept the terms", required=True),
                ],
            ),
        ],
    )


FEEDBACK_DEFINITION = {
    "id": "feedback",
    "title": "Feedback",
    "schema": [
        {"kind": "text", "name": "name", "required": True},
        {
            "kind": "radio",
            "name": "rating",
            "options": {"1": "Poor", "2": "Fair", "3": "Good", "4": "Great"},
            "inline": True,
            "required": True,
        },
        {"kind": "tags-input", "name": "topics", "suggestions": ["ui", "speed", "docs"]},
        {
            "kind": "repeater",
            "name": "issues",
            "max_items": 5,
            "schema": [
                {"kind": "text", "name": "title", "required": True},
                {"kind": "textarea", "name": "details"},
            ],
        },
    ],
}


def create_registry() -> SchemaRegistry:
    schemas = SchemaRegistry(create_functions())
    schemas.add("address", build_address_schema)
    schemas.add_definition(FEEDBACK_DEFINITION)
    return schemas


def seed():
    """Insert the demo countries and regions when the tables are empty."""
    if Country.select().exists():
        return

    for code, (name, regions) in COUNTRIES.items():
        country = Country.create(code=code, name=name)
        for region in regions:
            Region.create(country=country, name=region)
    logger.info(f"Seeded {len(COUNTRIES)} demo countries")


def create_demo_app(config_obj=None):
    from .api import create_app

    app = create_app(config_obj, schemas=create_registry(), entities=create_entities())
    seed()
    return app
