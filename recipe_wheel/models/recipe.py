# recipe_wheel/models/recipe.py
from __future__ import annotations

import math
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class SkillLevel(str, Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"


# id -> display name, as offered by the filter and form selects
CATEGORIES: Dict[int, str] = {
    1: "Indonesian",
    2: "Western",
    3: "Asian",
    4: "Dessert",
    5: "Appetizer",
}

VARIANTS: Dict[int, str] = {
    1: "Regular",
    2: "Vegetarian",
    3: "Vegan",
    4: "Halal",
    5: "Gluten-Free",
}


class Recipe(BaseModel):
    id: int
    title: str
    description: str = ""
    ingredients: str = ""
    instructions: str = ""
    cooking_time: int
    skill_level: SkillLevel
    category_id: int
    category_name: str = ""
    variant_id: int
    variant_name: str = ""
    servings: int
    image_url: Optional[str] = None

    model_config = {"frozen": True}


class RecipeInput(BaseModel):
    """Editable fields. The API assigns the id and resolves category/variant names."""

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    ingredients: str = Field(min_length=1)
    instructions: str = Field(min_length=1)
    cooking_time: int = Field(default=30, ge=1)
    skill_level: SkillLevel = SkillLevel.beginner
    category_id: int = 1
    variant_id: int = 1
    servings: int = Field(default=2, ge=1)
    image_url: Optional[str] = None

    @field_validator("title", "description", "ingredients", "instructions", mode="before")
    @classmethod
    def _strip(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("image_url", mode="before")
    @classmethod
    def _blank_url(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @classmethod
    def from_recipe(cls, recipe: Recipe) -> "RecipeInput":
        return cls(**recipe.model_dump(include=set(cls.model_fields)))


class RecipeFilters(BaseModel):
    search: Optional[str] = None
    skill_level: Optional[SkillLevel] = None
    variant_id: Optional[int] = None
    category_id: Optional[int] = None
    max_cooking_time: Optional[int] = None

    @field_validator("search", "skill_level", "variant_id", "category_id", "max_cooking_time", mode="before")
    @classmethod
    def _empty_is_absent(cls, v: Any) -> Any:
        # "" and 0 come from untouched form controls: no constraint
        if v is None:
            return None
        if isinstance(v, str):
            v = v.strip()
            return v or None
        if v == 0:
            return None
        return v

    def to_params(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class PaginationMeta(BaseModel):
    total: int = 0
    page: int = 1
    per_page: int = 10
    total_pages: int = 0


class RecipePage(BaseModel):
    data: List[Recipe] = Field(default_factory=list)
    meta: PaginationMeta = Field(default_factory=PaginationMeta)


def total_pages(total: int, per_page: int) -> int:
    if per_page < 1:
        raise ValueError("per_page must be >= 1")
    return math.ceil(max(total, 0) / per_page)


def clamp_page(page: int, pages: int) -> int:
    # an empty result set still has one (empty) page to show
    return min(max(page, 1), max(pages, 1))
