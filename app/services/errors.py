"""Exceptions raised by the item search pipeline."""
from __future__ import annotations

SAFE_SEARCH_FAILURE_MESSAGE = "Failed to search items. Please try again."


class SearchError(Exception):
    """Base class for search pipeline failures."""


class DataAccessFailure(SearchError):
    """Item or store snapshot could not be loaded (unreachable, permission, malformed data).

    The message is always the generic, display-safe one; the real cause is chained.
    """

    def __init__(self, source: str = "catalog") -> None:
        super().__init__(SAFE_SEARCH_FAILURE_MESSAGE)
        self.source = source


__all__ = ["SearchError", "DataAccessFailure", "SAFE_SEARCH_FAILURE_MESSAGE"]
