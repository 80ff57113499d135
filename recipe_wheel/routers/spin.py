# recipe_wheel/routers/spin.py
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import ValidationError

from recipe_wheel.core import config
from recipe_wheel.core.errors import ValidationFailure
from recipe_wheel.html.views import SpinPage
from recipe_wheel.models.recipe import RecipeFilters
from recipe_wheel.routers.deps import get_sessions, session_id
from recipe_wheel.services.spin import SpinOrchestrator, SpinSessions

router = APIRouter(tags=["spin"])

FILTER_FIELDS = ("search", "skill_level", "variant_id", "category_id", "max_cooking_time")


def _remember(response: Response, sid: str) -> None:
    response.set_cookie(config.SESSION_COOKIE, sid, httponly=True, samesite="lax")


def _current(sid: str, sessions: SpinSessions) -> SpinOrchestrator:
    # polls never open a session; without one the browser sees an idle, empty wheel
    orchestrator = sessions.get(sid)
    return orchestrator if orchestrator is not None else sessions.factory()


def _status(orchestrator: SpinOrchestrator, **extra: Any) -> Dict[str, Any]:
    return {**orchestrator.status().model_dump(mode="json"), **extra}


@router.get("/spin", response_class=HTMLResponse)
async def spin_page(
    request: Request,
    sid: str = Depends(session_id),
    sessions: SpinSessions = Depends(get_sessions),
) -> HTMLResponse:
    orchestrator = sessions.get_or_create(sid)

    raw = {k: v for k, v in request.query_params.items() if k in FILTER_FIELDS}
    if raw:
        try:
            filters = RecipeFilters.model_validate(raw)
        except ValidationError as e:
            raise ValidationFailure(f"invalid filters: {e.error_count()} error(s)") from e
        # while a spin is in flight the old filters stay in effect
        orchestrator.set_filters(filters)

    await orchestrator.load_wheel()

    response = HTMLResponse(SpinPage(orchestrator.status()).render())
    _remember(response, sid)
    return response


@router.get("/api/spin")
async def spin_status(sid: str = Depends(session_id), sessions: SpinSessions = Depends(get_sessions)):
    return _status(_current(sid, sessions))


@router.post("/api/spin")
async def spin_start(
    response: Response,
    sid: str = Depends(session_id),
    sessions: SpinSessions = Depends(get_sessions),
):
    orchestrator = sessions.get_or_create(sid)
    _remember(response, sid)

    if not orchestrator.items and not orchestrator.busy:
        await orchestrator.load_wheel()

    started = await orchestrator.spin()
    return _status(orchestrator, started=started)


@router.post("/api/spin/complete")
async def spin_complete(sid: str = Depends(session_id), sessions: SpinSessions = Depends(get_sessions)):
    orchestrator = _current(sid, sessions)
    orchestrator.notify_finished()
    return _status(orchestrator)


@router.post("/api/spin/dismiss")
async def spin_dismiss(sid: str = Depends(session_id), sessions: SpinSessions = Depends(get_sessions)):
    orchestrator = _current(sid, sessions)
    dismissed = orchestrator.dismiss()
    return _status(orchestrator, dismissed=dismissed)


@router.put("/api/spin/filters")
async def spin_filters(
    filters: RecipeFilters,
    sid: str = Depends(session_id),
    sessions: SpinSessions = Depends(get_sessions),
):
    orchestrator = sessions.get_or_create(sid)
    if not orchestrator.set_filters(filters):
        return JSONResponse(
            {"error": "filters cannot change while the wheel is spinning", **_status(orchestrator)},
            status_code=status.HTTP_409_CONFLICT,
        )
    await orchestrator.load_wheel()
    return _status(orchestrator)


@router.delete("/api/spin", status_code=status.HTTP_204_NO_CONTENT)
async def spin_close(sid: str = Depends(session_id), sessions: SpinSessions = Depends(get_sessions)):
    sessions.drop(sid)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
