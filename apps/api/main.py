"""ReviewHub FastAPI application.

Run with:
    uvicorn apps.api.main:app --reload

Production-friendly entrypoint (uses PORT env fallback):
    python -m apps.api.main
"""

from __future__ import annotations

import logging
import os
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .core.errors import register_exception_handlers
from .routers import admin, auth, categories, comments, me, reviews, votes

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="ReviewHub API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth.router)
app.include_router(reviews.router)
app.include_router(votes.router)
app.include_router(comments.router)
app.include_router(categories.router)
app.include_router(me.router)
app.include_router(admin.router)


@app.on_event("startup")
async def startup_event():
    logger.info(f"CORS origins: {settings.CORS_ORIGINS}")


@app.get("/")
def health_check():
    return {"status": "ok", "service": "ReviewHub API"}


def _get_cli_arg(argv: list[str], flag: str) -> str | None:
    for i, arg in enumerate(argv):
        if arg == flag and i + 1 < len(argv):
            return argv[i + 1]
        if arg.startswith(f"{flag}="):
            return arg.split("=", 1)[1]
    return None


def _resolve_port(argv: list[str]) -> int:
    cli_port = _get_cli_arg(argv, "--port")
    if cli_port is not None:
        return int(cli_port)

    env_port = os.getenv("PORT")
    if env_port:
        return int(env_port)

    return 8000


def _resolve_host(argv: list[str]) -> str:
    cli_host = _get_cli_arg(argv, "--host")
    if cli_host is not None:
        return cli_host
    return os.getenv("HOST", "0.0.0.0")


if __name__ == "__main__":
    import uvicorn

    args = sys.argv[1:]
    uvicorn.run(
        "apps.api.main:app",
        host=_resolve_host(args),
        port=_resolve_port(args),
        reload="--reload" in args,
    )
