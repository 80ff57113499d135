# recipe_wheel/core/text.py
from __future__ import annotations

from typing import List


def split_ingredients(text: str) -> List[str]:
    # ingredients are stored as one comma-separated string
    return [part.strip() for part in (text or "").split(",") if part.strip()]


def split_instructions(text: str) -> List[str]:
    # one step per line, blank lines dropped
    return [line.strip() for line in (text or "").splitlines() if line.strip()]
