# recipe_wheel/routers/recipes.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError

from recipe_wheel.core import config
from recipe_wheel.core.errors import ValidationFailure
from recipe_wheel.html.views import DashboardPage, RecipeDetailPage, RecipeFormPage, RecipeListPage
from recipe_wheel.models.recipe import RecipeFilters, RecipeInput, clamp_page
from recipe_wheel.routers.deps import get_catalog
from recipe_wheel.services.catalog import CatalogService

router = APIRouter(tags=["recipes"])

DASHBOARD_PER_PAGE = 6


def _form_errors(e: ValidationError) -> List[str]:
    return [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]


async def _form_values(request: Request) -> Dict[str, Any]:
    async with request.form() as form:
        return {k: v for k, v in form.items() if isinstance(v, str)}


@router.get("/", response_class=HTMLResponse)
async def dashboard(catalog: CatalogService = Depends(get_catalog)) -> HTMLResponse:
    result = await catalog.list_recipes(RecipeFilters(), page=1, per_page=DASHBOARD_PER_PAGE)
    return HTMLResponse(DashboardPage(result).render())


@router.get("/recipes", response_class=HTMLResponse)
async def recipe_list(
    search: Optional[str] = None,
    skill_level: Optional[str] = None,
    page: int = 1,
    catalog: CatalogService = Depends(get_catalog),
) -> HTMLResponse:
    try:
        filters = RecipeFilters(search=search, skill_level=skill_level)
    except ValidationError as e:
        raise ValidationFailure("; ".join(_form_errors(e))) from e

    per_page = config.LIST_PER_PAGE
    pages = catalog.known_total_pages(filters, per_page)
    page = clamp_page(page, pages) if pages is not None else max(page, 1)

    result = await catalog.list_recipes(filters, page=page, per_page=per_page)
    return HTMLResponse(RecipeListPage(result, filters, page).render())


@router.get("/recipes/new", response_class=HTMLResponse)
async def recipe_new() -> HTMLResponse:
    defaults = {name: f.default for name, f in RecipeInput.model_fields.items() if not f.is_required()}
    return HTMLResponse(RecipeFormPage(defaults).render())


@router.post("/recipes", response_class=HTMLResponse)
async def recipe_create(request: Request, catalog: CatalogService = Depends(get_catalog)):
    values = await _form_values(request)
    try:
        data = RecipeInput.model_validate(values)
    except ValidationError as e:
        page = RecipeFormPage(values, errors=_form_errors(e))
        return HTMLResponse(page.render(), status_code=status.HTTP_400_BAD_REQUEST)

    try:
        await catalog.create_recipe(data)
    except ValidationFailure as e:
        page = RecipeFormPage(values, errors=[e.message])
        return HTMLResponse(page.render(), status_code=status.HTTP_400_BAD_REQUEST)

    return RedirectResponse("/recipes", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/recipes/{recipe_id}", response_class=HTMLResponse)
async def recipe_detail(recipe_id: int, catalog: CatalogService = Depends(get_catalog)) -> HTMLResponse:
    recipe = await catalog.get_recipe(recipe_id)
    return HTMLResponse(RecipeDetailPage(recipe).render())


@router.get("/recipes/{recipe_id}/edit", response_class=HTMLResponse)
async def recipe_edit(recipe_id: int, catalog: CatalogService = Depends(get_catalog)) -> HTMLResponse:
    recipe = await catalog.get_recipe(recipe_id)
    values = RecipeInput.from_recipe(recipe).model_dump(mode="json")
    return HTMLResponse(RecipeFormPage(values, recipe_id=recipe_id).render())


@router.post("/recipes/{recipe_id}/edit", response_class=HTMLResponse)
async def recipe_update(recipe_id: int, request: Request, catalog: CatalogService = Depends(get_catalog)):
    values = await _form_values(request)
    try:
        data = RecipeInput.model_validate(values)
    except ValidationError as e:
        page = RecipeFormPage(values, recipe_id=recipe_id, errors=_form_errors(e))
        return HTMLResponse(page.render(), status_code=status.HTTP_400_BAD_REQUEST)

    try:
        await catalog.update_recipe(recipe_id, data)
    except ValidationFailure as e:
        page = RecipeFormPage(values, recipe_id=recipe_id, errors=[e.message])
        return HTMLResponse(page.render(), status_code=status.HTTP_400_BAD_REQUEST)

    return RedirectResponse(f"/recipes/{recipe_id}", status_code=status.HTTP_303_SEE_OTHER)


@router.post("/recipes/{recipe_id}/delete")
async def recipe_delete(recipe_id: int, catalog: CatalogService = Depends(get_catalog)) -> RedirectResponse:
    await catalog.delete_recipe(recipe_id)
    return RedirectResponse("/recipes", status_code=status.HTTP_303_SEE_OTHER)
