from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from glossary_page.config import HostConfig

from api.dependencies import get_config
from api.routes.glossary import router as glossary_router
from api.routes.theme import router as theme_router

logger = logging.getLogger(__name__)


def create_app(config: Optional[HostConfig] = None) -> FastAPI:
    """
    Build the host API. A given `config` replaces the environment-derived one
    for every route of this app.
    """
    app = FastAPI(title="Glossary Page Host API", version="0.1.0")
    if config is None:
        config = get_config()
    else:
        app.dependency_overrides[get_config] = lambda: config

    origins = config.cors_origins
    # Credentials only for an explicit origin list.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["GET", "PUT", "DELETE"],
        allow_headers=["*"],
    )
    app.include_router(glossary_router)
    app.include_router(theme_router)

    @app.get("/healthz")
    def health(current: HostConfig = Depends(get_config)) -> dict:
        return {"status": "ok", "glossaryFileFound": Path(current.glossary_html_path).is_file()}

    logger.debug("Host API created for %s", config.glossary_html_path)
    return app


app = create_app()
