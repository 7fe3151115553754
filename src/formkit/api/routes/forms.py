import logging
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ...enums import Renderer
from ...errors import ConfigException, SchemaNotFound
from ...fields import OptionsField
from ...reactive import ReactiveHandler
from ...registry import SchemaRegistry
from ...resolver import OptionResolver
from ...serializers import Serializer
from ...state import FormState
from ...validation import FormValidator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/forms", tags=["forms"])


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SchemaListResponse(BaseModel):
    schemas: list[str]


class ReactiveRequest(CamelModel):
    schema_id: str
    form_state: Any = None
    changed_field: str | None = None
    request_token: str | None = None
    renderer: Renderer = Renderer.LARAVILT


class SearchRequest(CamelModel):
    field: str
    search: str = ""
    form_state: Any = None


class LabelsRequest(CamelModel):
    field: str
    values: list[Any] = []
    form_state: Any = None


class ValidateRequest(CamelModel):
    data: Any = None


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def config_error_response(e: ConfigException) -> JSONResponse:
    if isinstance(e, SchemaNotFound):
        return error_response(404, str(e))
    return error_response(400, str(e))


def search_url(request: Request, schema_id: str) -> str:
    return str(request.app.url_path_for("search_options", schema_id=schema_id))


def get_schemas(request: Request) -> SchemaRegistry:
    return request.app.state.schemas


def get_resolver(request: Request) -> OptionResolver:
    return request.app.state.resolver


def options_field(schema, name: str) -> OptionsField:
    found = schema.field(name)
    if not isinstance(found, OptionsField):
        raise ConfigException(f"Field '{name}' has no options")
    return found


@router.get("", response_model=SchemaListResponse)
def list_schemas(request: Request):
    return SchemaListResponse(schemas=get_schemas(request).ids())


@router.post("/reactive")
def reactive_update(request: Request, body: ReactiveRequest):
    handler = ReactiveHandler(get_schemas(request), get_resolver(request))
    try:
        update = handler.handle(
            body.schema_id,
            body.form_state,
            changed_field=body.changed_field,
            request_token=body.request_token,
            renderer=body.renderer,
            search_url=search_url(request, body.schema_id),
        )
    except ConfigException as e:
        return config_error_response(e)
    except Exception as e:
        logger.error(f"Reactive update of '{body.schema_id}' failed: {e}", exc_info=True)
        return error_response(500, "Failed to build schema")

    return update.to_dict()


@router.get("/{schema_id}")
def render_schema(request: Request, schema_id: str, renderer: Renderer = Renderer.LARAVILT):
    schemas = get_schemas(request)
    try:
        schema = schemas.build(schema_id, FormState())
        state = schema.default_state()
        serializer = Serializer(
            get_resolver(request),
            schemas.functions,
            renderer,
            search_url=search_url(request, schema_id),
        )
        nodes = serializer.serialize_schema(schema, state)
    except ConfigException as e:
        return config_error_response(e)
    except Exception as e:
        logger.error(f"Rendering schema '{schema_id}' failed: {e}", exc_info=True)
        return error_response(500, "Failed to build schema")

    return {
        "id": schema.id,
        "title": schema.title,
        "description": schema.description,
        "renderer": serializer.renderer.value,
        "schema": nodes,
        "data": state.to_dict(),
    }


@router.post("/{schema_id}/search")
def search_options(request: Request, schema_id: str, body: SearchRequest):
    state = FormState.coerce(body.form_state)
    try:
        schema = get_schemas(request).build(schema_id, state)
        field = options_field(schema, body.field)
    except ConfigException as e:
        return config_error_response(e)

    resolved = get_resolver(request).search(field, body.search, state)
    return {
        "options": resolved.to_list(),
        "hasMore": resolved.has_more,
        "optionsAreGrouped": resolved.grouped,
    }


@router.post("/{schema_id}/labels")
def option_labels(request: Request, schema_id: str, body: LabelsRequest):
    state = FormState.coerce(body.form_state)
    try:
        schema = get_schemas(request).build(schema_id, state)
        field = options_field(schema, body.field)
    except ConfigException as e:
        return config_error_response(e)

    return {"labels": get_resolver(request).option_labels(field, body.values, state)}


@router.post("/{schema_id}/validate")
def validate_form(request: Request, schema_id: str, body: ValidateRequest):
    schemas = get_schemas(request)
    state = FormState.coerce(body.data)
    try:
        schema = schemas.build(schema_id, state)
    except ConfigException as e:
        return config_error_response(e)

    validator = FormValidator(schemas.functions)
    errors = validator.validate(schema, state.to_dict())
    if errors:
        return JSONResponse(status_code=422, content={"valid": False, "errors": errors})
    return {"valid": True, "errors": {}}
