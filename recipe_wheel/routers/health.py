# recipe_wheel/routers/health.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from recipe_wheel.clients.recipes_api import RecipesApiClient
from recipe_wheel.routers.deps import get_client
from recipe_wheel.services.health import check_api, version_payload

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    # Liveness only: if the process is serving requests, it's up
    return {"status": "ok", **version_payload()}


@router.get("/health/ready")
async def ready(response: Response, client: RecipesApiClient = Depends(get_client)):
    api = await check_api(client)

    overall = "ok"
    http_status = status.HTTP_200_OK

    # every page needs the recipes API
    if api["status"] != "ok":
        overall = "fail"
        http_status = status.HTTP_503_SERVICE_UNAVAILABLE

    response.status_code = http_status
    return {
        "status": overall,
        "checks": {"recipes_api": api},
        **version_payload(),
    }


@router.get("/version")
def version():
    return version_payload()
