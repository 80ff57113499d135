# recipe_wheel/routers/deps.py
from __future__ import annotations

import uuid

from fastapi import Request

from recipe_wheel.clients.recipes_api import RecipesApiClient
from recipe_wheel.core import config
from recipe_wheel.services.catalog import CatalogService
from recipe_wheel.services.spin import SpinSessions


def get_client(request: Request) -> RecipesApiClient:
    return request.app.state.client


def get_catalog(request: Request) -> CatalogService:
    return request.app.state.catalog


def get_sessions(request: Request) -> SpinSessions:
    return request.app.state.spin_sessions


def session_id(request: Request) -> str:
    return request.cookies.get(config.SESSION_COOKIE) or uuid.uuid4().hex
