"""Declarative per-tab layouts."""

from .models import SKIP, ListTableRegion, TabLayout, LayoutConfigError
from .registry import DEFAULT_LAYOUTS, TabLayoutRegistry

__all__ = [
    "SKIP",
    "ListTableRegion",
    "TabLayout",
    "LayoutConfigError",
    "DEFAULT_LAYOUTS",
    "TabLayoutRegistry",
]
