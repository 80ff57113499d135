# recipe_wheel/core/errors.py
from __future__ import annotations

from typing import Optional


class RecipeApiError(Exception):
    """Base class for every failure talking to the recipes API."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TransportError(RecipeApiError):
    """Connection refused, DNS failure, timeout... the request never got an answer."""


class RemoteApiError(RecipeApiError):
    """The API answered, but with an unexpected status or an unreadable body."""


class NotFoundError(RecipeApiError):
    pass


class EmptyResultError(NotFoundError):
    """A spin found no recipe matching the filters."""


class ValidationFailure(RecipeApiError):
    pass
