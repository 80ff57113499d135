# recipe_wheel/html/views.py
from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from jinja2 import Environment, FileSystemLoader, select_autoescape

from recipe_wheel.core import config
from recipe_wheel.core.text import split_ingredients, split_instructions
from recipe_wheel.models.recipe import (
    CATEGORIES,
    VARIANTS,
    Recipe,
    RecipeFilters,
    RecipePage,
    SkillLevel,
)
from recipe_wheel.models.spin import SpinStatus

environment = Environment(
    loader=FileSystemLoader(str(config.TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
)

OPTIONS: Dict[str, Any] = {
    "skill_levels": [level.value for level in SkillLevel],
    "categories": CATEGORIES,
    "variants": VARIANTS,
}


class Page:
    template_name = ""

    def __init__(self, *, env: Environment = environment) -> None:
        self.env = env

    def context(self) -> Dict[str, Any]:
        return {}

    def render(self) -> str:
        return self.env.get_template(self.template_name).render(page=self, options=OPTIONS, **self.context())


class DashboardPage(Page):
    """Landing page: how many recipes there are and the newest few."""

    template_name = "dashboard.html"
    recent_count = 3

    def __init__(self, result: RecipePage, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.result = result

    @property
    def total(self) -> int:
        return self.result.meta.total

    @property
    def recent(self) -> List[Recipe]:
        return list(self.result.data[: self.recent_count])


class RecipeListPage(Page):
    template_name = "recipe_list.html"

    def __init__(self, result: RecipePage, filters: RecipeFilters, page: int, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.result = result
        self.filters = filters
        self.page = page

    @property
    def total_pages(self) -> int:
        return self.result.meta.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    def page_url(self, page: int) -> str:
        return "/recipes?" + urlencode({**self.filters.to_params(), "page": page})


class RecipeDetailPage(Page):
    template_name = "recipe_detail.html"

    def __init__(self, recipe: Recipe, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.recipe = recipe

    @property
    def title(self) -> str:
        return self.recipe.title

    @property
    def ingredients(self) -> List[str]:
        return split_ingredients(self.recipe.ingredients)

    @property
    def steps(self) -> List[str]:
        return split_instructions(self.recipe.instructions)


class RecipeFormPage(Page):
    template_name = "recipe_form.html"

    def __init__(
        self,
        values: Dict[str, Any],
        recipe_id: Optional[int] = None,
        errors: Optional[List[str]] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.values = values
        self.recipe_id = recipe_id
        self.errors = errors or []

    @property
    def is_edit(self) -> bool:
        return self.recipe_id is not None

    @property
    def action(self) -> str:
        return f"/recipes/{self.recipe_id}/edit" if self.is_edit else "/recipes"


class SpinPage(Page):
    template_name = "spin.html"

    def __init__(self, status: SpinStatus, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.status = status

    @property
    def max_cooking_time(self) -> int:
        # slider shows 180 when unbounded
        return self.status.filters.max_cooking_time or 180


class ErrorPage(Page):
    template_name = "error.html"

    def __init__(self, message: str, retry_url: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.message = message
        self.retry_url = retry_url
