"""CLI main entry point."""

import json
import logging
from pathlib import Path

import click

from .config import Config
from .db import close_db, create_tables, init_db
from .entities import EntityRegistry
from .enums import Renderer
from .errors import FormkitException
from .log import setup as setup_log
from .registry import SchemaRegistry
from .resolver import OptionResolver
from .serializers import Serializer
from .state import FormState

logger = logging.getLogger(__name__)


def load_config(config_path: str) -> Config:
    if Path(config_path).exists():
        return Config.load_from_file(config_path)
    logger.info(f"Configuration file {config_path} not found, using defaults")
    return Config()


def build_registries(cfg: Config, demo: bool) -> tuple[SchemaRegistry, EntityRegistry]:
    """Schema and entity registries for the configured schemas (plus the demo ones)."""
    if demo:
        from .demo import create_entities, create_registry

        schemas, entities = create_registry(), create_entities()
    else:
        schemas, entities = SchemaRegistry(), EntityRegistry()

    if cfg.schemas_dir:
        schemas.load_directory(cfg.schemas_dir)
    return schemas, entities


@click.group()
@click.option("--config", "-c", default="config.toml", help="Configuration file path")
@click.option("--demo", is_flag=True, default=False, help="Register the demo schemas")
@click.pass_context
def cli(ctx, config: str, demo: bool):
    """Formkit - server-side form definitions for admin frontends."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["demo"] = demo

    try:
        cfg = load_config(config)
    except FormkitException as e:
        raise click.ClickException(str(e))

    ctx.obj["config"] = cfg
    setup_log(cfg.log_file, cfg.log_level)


@cli.command(name="schemas")
@click.pass_context
def list_schemas(ctx):
    """List registered schema ids."""
    try:
        schemas, _ = build_registries(ctx.obj["config"], ctx.obj["demo"])
    except FormkitException as e:
        raise click.ClickException(str(e))

    for schema_id in schemas.ids():
        click.echo(schema_id)


@cli.command(name="render")
@click.argument("schema_id")
@click.option(
    "--renderer",
    "-r",
    type=click.Choice([r.value for r in Renderer]),
    default=Renderer.LARAVILT.value,
    help="Output shape",
)
@click.option("--state", "-s", default=None, help="Form state as a JSON object")
@click.pass_context
def render(ctx, schema_id: str, renderer: str, state: str | None):
    """Print the serialized schema as JSON."""
    cfg = ctx.obj["config"]
    resolver = None
    try:
        schemas, entities = build_registries(cfg, ctx.obj["demo"])
        if len(entities):
            init_db(cfg.database.path)
            create_tables(entities.models())
            if ctx.obj["demo"]:
                from .demo import seed

                seed()

        form_state = FormState.coerce(json.loads(state)) if state else None
        schema = schemas.build(schema_id, form_state or FormState())
        if form_state is None:
            form_state = schema.default_state()

        resolver = OptionResolver.from_config(cfg.resolver, schemas.functions, entities)
        nodes = Serializer(resolver, schemas.functions, renderer).serialize_schema(schema, form_state)
        click.echo(
            json.dumps(
                {"id": schema.id, "schema": nodes, "data": form_state.to_dict()},
                indent=2,
                ensure_ascii=False,
                default=str,
            )
        )
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid --state JSON: {e}")
    except FormkitException as e:
        raise click.ClickException(str(e))
    finally:
        if resolver is not None:
            resolver.close()
        close_db()


@cli.command(name="serve")
@click.option("--host", "-h", default=None, help="Override host from config")
@click.option("--port", "-p", default=None, type=int, help="Override port from config")
@click.option(
    "--debug/--no-debug",
    default=None,
    help="Enable/disable debug logging",
)
@click.pass_context
def serve(ctx, host, port, debug):
    """Start the forms API server."""
    cfg = ctx.obj["config"]

    if not cfg.web.enabled:
        raise click.ClickException("Web service is disabled in configuration ([web] enabled)")

    host = host or cfg.web.host
    port = port or cfg.web.port
    if debug is None:
        debug = cfg.web.debug

    try:
        import uvicorn

        from .api import create_app

        schemas, entities = build_registries(cfg, ctx.obj["demo"])
        app = create_app(cfg, schemas=schemas, entities=entities)
        if ctx.obj["demo"]:
            from .demo import seed

            seed()

        logger.info(f"Starting forms API on http://{host}:{port}")
        logger.info(f"Debug mode: {'enabled' if debug else 'disabled'}")
        uvicorn.run(app, host=host, port=port, log_level="debug" if debug else "info")
    except FormkitException as e:
        logger.error(f"Application error: {e}", exc_info=True)
        raise click.ClickException(str(e))


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
