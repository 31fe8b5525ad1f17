"""
FastAPI entrypoint for the typed hash service.

Exposes hash computation (single and composite) and decoding of
existing identifiers. The service holds no state beyond the hash
provider built at startup.
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError, version
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from typedhash.app.api.routes import router as hash_router
from typedhash.app.config import HashSettings, get_settings
from typedhash.app.hashing import HashProvider, build_standard_registry

logger = logging.getLogger("typedhash.main")


def get_app_version() -> str:
    """
    Resolve the installed distribution version.

    Falls back to the source version when running from a checkout.
    """
    try:
        return version("typedhash")
    except PackageNotFoundError:
        return "0.1.0"


def create_app(settings: Optional[HashSettings] = None) -> FastAPI:
    """
    Application factory for the typed hash service.

    ``settings`` overrides the environment, mainly for tests.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Load configuration and build the hash provider (FAIL FAST).
        """
        try:
            resolved = settings if settings is not None else get_settings()
        except Exception:
            logger.exception("invalid_typedhash_configuration")
            raise

        logging.getLogger("typedhash").setLevel(resolved.log_level)

        app.state.settings = resolved
        app.state.hash_provider = HashProvider(
            build_standard_registry(resolved.default_hash_type_id)
        )

        logger.info(
            "typedhash_startup_complete",
            extra={
                "version": get_app_version(),
                "default_hash_type_id": resolved.default_hash_type_id,
            },
        )

        try:
            yield
        finally:
            logger.info("typedhash_shutdown")

    app = FastAPI(
        title="Typed Hash Service",
        description="Self-describing content hash identifiers",
        version=get_app_version(),
        docs_url="/docs",
        redoc_url=None,
        lifespan=lifespan,
    )

    app.include_router(hash_router)

    @app.get(
        "/healthz",
        tags=["Monitoring"],
        summary="Liveness and readiness probe",
    )
    async def health_check():
        provider: HashProvider = app.state.hash_provider
        return JSONResponse(
            content={
                "status": "ok",
                "service": "typedhash",
                "version": app.version,
                "runtime": f"python {sys.version.split()[0]}",
                "hash_type_ids": list(provider.registry.type_ids),
                "default_hash_type_id": provider.registry.default_type_id,
            }
        )

    return app


app = create_app()
