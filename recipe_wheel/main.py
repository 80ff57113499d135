from __future__ import annotations

import contextlib
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from recipe_wheel.clients.recipes import recipes_api
from recipe_wheel.clients.recipes_api import RecipesApiClient
from recipe_wheel.core import config
from recipe_wheel.core.errors import NotFoundError, RecipeApiError, ValidationFailure
from recipe_wheel.core.logging import setup_logging
from recipe_wheel.core.middleware import RequestLoggingMiddleware
from recipe_wheel.html.views import ErrorPage
from recipe_wheel.routers import health, recipes, spin
from recipe_wheel.services.cache import QueryCache
from recipe_wheel.services.catalog import CatalogService
from recipe_wheel.services.spin import SpinOrchestrator, SpinSessions

log = logging.getLogger("recipe_wheel.app")


def _status_for(exc: RecipeApiError) -> int:
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, ValidationFailure):
        return 400
    # transport failures and unexpected answers from the recipes API
    return 502


async def recipe_api_error(request: Request, exc: RecipeApiError):
    status_code = _status_for(exc)
    if status_code == 502:
        log.error("recipes api failure", extra={"path": request.url.path, "error": exc.message})

    if request.url.path.startswith("/api/"):
        return JSONResponse({"error": exc.message}, status_code=status_code)

    if status_code == 404:
        page = ErrorPage("Recipe not found.")
    elif status_code == 400:
        page = ErrorPage(exc.message)
    else:
        # same action again is the only remedy on offer
        page = ErrorPage("Something went wrong talking to the recipe service.", retry_url=str(request.url))
    return HTMLResponse(page.render(), status_code=status_code)


def create_app(client: Optional[RecipesApiClient] = None) -> FastAPI:
    client = client if client is not None else recipes_api
    catalog = CatalogService(client, QueryCache())
    sessions = SpinSessions(lambda: SpinOrchestrator(catalog))

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        sessions.close_all()

    app = FastAPI(title="Recipe Wheel", lifespan=lifespan)
    app.state.client = client
    app.state.catalog = catalog
    app.state.spin_sessions = sessions

    app.include_router(recipes.router)
    app.include_router(spin.router)
    app.include_router(health.router)
    app.mount("/static", StaticFiles(directory=str(config.STATIC_DIR)), name="static")

    app.add_exception_handler(RecipeApiError, recipe_api_error)

    setup_logging()

    app.add_middleware(RequestLoggingMiddleware)

    return app

app = create_app()
