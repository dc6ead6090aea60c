# -*- coding: utf-8 -*-
"""
Glyco API

Onboarding questionnaire, glycemia log, recipes and community feed for a
diabetes-friendly nutrition app.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .account.api import router as account_router
from .app_db import init_app_db
from .auth.api import router as auth_router
from .auth.security import get_current_user_from_request
from .community.api import router as community_router
from .config import settings
from .glycemia.api import router as glycemia_router
from .onboarding.api import router as onboarding_router
from .onboarding.sessions import get_registry
from .recipes.api import router as recipes_router
from .uploads.api import PUBLIC_PREFIX
from .uploads.api import router as uploads_router

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Glyco",
    description="Onboarding questionnaire, glycemia tracking and recipes",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Ensure the app DB exists even when lifespan events are not triggered (e.g. some test clients).
init_app_db(settings.app_db_path)


_AUTH_EXEMPT_PREFIXES = (
    "/api/auth/login",
    "/api/auth/register",
    "/api/auth/logout",
    "/api/docs",
    "/api/redoc",
    "/api/openapi.json",
)


@app.middleware("http")
async def _auth_gate(request: Request, call_next):
    path = request.url.path
    if path.startswith("/api") and path != "/api/health" and not any(path.startswith(p) for p in _AUTH_EXEMPT_PREFIXES):
        try:
            user = get_current_user_from_request(request)
            request.state.user = user
        except HTTPException as exc:
            return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
    return await call_next(request)


app.include_router(auth_router)
app.include_router(onboarding_router)
app.include_router(glycemia_router)
app.include_router(recipes_router)
app.include_router(community_router)
app.include_router(account_router)
app.include_router(uploads_router)

settings.upload_dir.mkdir(parents=True, exist_ok=True)
app.mount(f"{PUBLIC_PREFIX}/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")


@app.on_event("shutdown")
def _flush_onboarding_writes() -> None:
    get_registry().persistence.flush()


@app.get("/api/health")
async def health():
    return {"status": "ok"}


@app.get("/")
async def root():
    return {"message": "Glyco API", "docs": "/api/docs"}


def run() -> None:
    """Console entry point (used by pyproject [project.scripts])."""
    import uvicorn

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting Glyco API on %s:%s", settings.host, settings.port)
    uvicorn.run("glyco.api:app", host=settings.host, port=settings.port, reload=False)
