"""Service layer for activity classification, language strings and rendering."""

from . import assess_type, rendering, strings

__all__ = [
    "assess_type",
    "rendering",
    "strings",
]
