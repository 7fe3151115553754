import os
from pathlib import Path

from fastapi import APIRouter, FastAPI

from .routes import forms


def create_app(config_obj=None, schemas=None, entities=None) -> FastAPI:
    from ..config import Config
    from ..db import close_db, create_tables, init_db
    from ..entities import EntityRegistry
    from ..registry import SchemaRegistry
    from ..resolver import OptionResolver

    if config_obj is None:
        config_file = os.environ.get("FORMKIT_CONFIG_FILE", "config.toml")
        config_obj = Config.load_from_file(config_file) if Path(config_file).exists() else Config()

    if schemas is None:
        schemas = SchemaRegistry()
        if config_obj.schemas_dir:
            schemas.load_directory(config_obj.schemas_dir)

    if entities is None:
        entities = EntityRegistry()

    app = FastAPI(title="Formkit API")

    app.state.config = config_obj
    app.state.schemas = schemas
    app.state.entities = entities
    app.state.resolver = OptionResolver.from_config(
        config_obj.resolver, functions=schemas.functions, entities=entities
    )

    if len(entities):
        init_db(config_obj.database.path)
        create_tables(entities.models())

    api_router = APIRouter(prefix="/api/v1")
    api_router.include_router(forms.router)
    app.include_router(api_router)

    @app.on_event("shutdown")
    def shutdown():
        app.state.resolver.close()
        close_db()

    return app
