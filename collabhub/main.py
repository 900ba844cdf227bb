import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.openapi.utils import get_openapi

from collabhub.shared.config import settings
from collabhub.shared.db import Base, engine
from collabhub.shared.errors import AppError
from collabhub.shared.http import app_error_handler, err_body, request_validation_handler
from collabhub.shared.logging_config import setup_logging

# import models so they register with Base.metadata
from collabhub.auth import models as auth_models  # noqa: F401
from collabhub.projects import models as projects_models  # noqa: F401
from collabhub.files import models as files_models  # noqa: F401
from collabhub.sharing import models as sharing_models  # noqa: F401

# Routers Import
from collabhub.auth.api import router as auth_router
from collabhub.projects.api import router as projects_router
from collabhub.files.api import router as files_router
from collabhub.sharing.api import router as sharing_router

logger = logging.getLogger(__name__)

TAGS_METADATA = [
    {"name": "Auth", "description": "Register, log in, inspect the current principal"},
    {"name": "Projects", "description": "Group files; deleting a project deletes its files"},
    {"name": "Files", "description": "Upload targets, listing, download URLs, deletion"},
    {"name": "Sharing", "description": "Grant read access to other users"},
    {"name": "Health", "description": "Service health"},
]

app = FastAPI(
    title="CollabHub",
    version="0.1.0",
    description="Project files with sharing and access control.",
    openapi_tags=TAGS_METADATA,
)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)

# ---- DEV-ONLY error handler (surface real errors in Swagger) ----
if settings.ENV == "dev":
    @app.exception_handler(Exception)
    async def _dev_ex_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=err_body(str(exc), "internal_error"))


@app.on_event("startup")
def _startup():
    setup_logging()
    Base.metadata.create_all(bind=engine)
    logger.info("CollabHub started (env=%s, access_policy=%s)", settings.ENV, settings.ACCESS_POLICY)

@app.get("/healthz", tags=["Health"])
def healthz():
    return {"ok": True}

# Routers
app.include_router(auth_router)
app.include_router(projects_router)
app.include_router(files_router)
app.include_router(sharing_router)

# --- Custom OpenAPI: bearerAuth as the default for everything but auth + health ---
def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )
    schema.setdefault("components", {}).setdefault("securitySchemes", {})
    schema["components"]["securitySchemes"]["bearerAuth"] = {
        "type": "http",
        "scheme": "bearer",
        "bearerFormat": "JWT",
    }
    for path, ops in schema.get("paths", {}).items():
        if path in ["/auth/token", "/auth/register", "/healthz"]:
            continue
        for op in ops.values():
            op.setdefault("security", [{"bearerAuth": []}])
    app.openapi_schema = schema
    return app.openapi_schema

app.openapi = custom_openapi
