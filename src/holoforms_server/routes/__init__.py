"""Route registration — mounts all routers under ``/api/v1``."""

from fastapi import FastAPI

from holoforms_server.routes.forms import router as forms_router
from holoforms_server.routes.public import router as public_router
from holoforms_server.routes.responses import router as responses_router

API_PREFIX = "/api/v1"


def register_routes(app: FastAPI) -> None:
    """Include all sub-routers under the versioned API prefix."""
    app.include_router(public_router, prefix=API_PREFIX)
    app.include_router(forms_router, prefix=API_PREFIX)
    app.include_router(responses_router, prefix=API_PREFIX)
