"""
FastAPI entry point (`uvicorn zipradius.api.app:app`).

Only JSON endpoints are served; a map frontend runs separately and calls them, which is
why CORS is configurable:

- `ZIPRADIUS_CORS_ORIGINS`: comma-separated allowed origins.
- `ZIPRADIUS_CORS_ALLOW_LOCAL`: with no explicit origins, any localhost port is allowed
  unless this is `0`/`false`.
"""

from __future__ import annotations

import os

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from zipradius.core.logging import configure_logging

from .routes import router

LOCALHOST_ORIGIN_REGEX = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$"


def _cors_options() -> dict | None:
    origins = [o.strip() for o in os.getenv("ZIPRADIUS_CORS_ORIGINS", "").split(",") if o.strip()]
    if origins:
        return {"allow_origins": origins}
    if os.getenv("ZIPRADIUS_CORS_ALLOW_LOCAL", "1").strip().lower() in {"0", "false", "no", "n"}:
        return None
    return {"allow_origin_regex": LOCALHOST_ORIGIN_REGEX}


def create_app() -> FastAPI:
    configure_logging()
    application = FastAPI(title="ZipRadius API", version="0.1.0")
    cors = _cors_options()
    if cors is not None:
        application.add_middleware(
            CORSMiddleware,
            allow_credentials=False,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
            **cors,
        )
    application.include_router(router)
    return application


app = create_app()
