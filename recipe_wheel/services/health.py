# recipe_wheel/services/health.py
from __future__ import annotations

import time
from typing import Any, Dict, Optional

from recipe_wheel.clients.recipes_api import RecipesApiClient
from recipe_wheel.core import config
from recipe_wheel.core.errors import RecipeApiError


def _ms_since(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _check_result(status: str, latency_ms: int, error: Optional[str] = None) -> Dict[str, Any]:
    out: Dict[str, Any] = {"status": status, "latency_ms": latency_ms}
    if error:
        out["error"] = error
    return out


async def check_api(client: RecipesApiClient) -> Dict[str, Any]:
    start = time.perf_counter()
    try:
        # one-row listing is the cheapest call that touches the API's database
        await client.list(page=1, per_page=1)
        return _check_result("ok", _ms_since(start))
    except RecipeApiError as e:
        return _check_result("fail", _ms_since(start), e.message)


def version_payload() -> Dict[str, Any]:
    return {
        "version": config.APP_VERSION,
        "git_sha": config.GIT_SHA,
        "build_date": config.BUILD_DATE,
    }
