"""Errors raised by the layout engine."""

from __future__ import annotations

from typing import Any


class LayoutError(Exception):
    """Base class for layout failures."""


class InvalidSize(LayoutError, ValueError):
    """Raised when a requested rectangle has a non-positive width or height."""

    def __init__(self, size: Any) -> None:
        self.size = size
        super().__init__(f"Rectangle width and height must be greater than 0, got {size}")


class SearchExhausted(LayoutError):
    """Raised when the bounded spiral search finds no free position."""

    def __init__(self, size: Any, directions: int) -> None:
        self.size = size
        self.directions = directions
        super().__init__(f"Cannot place {size}: no free position after {directions} directions")
