"""Database repository helpers for the assess type store."""

from .assess_type_repo import AssessTypeRepository

__all__ = [
    "AssessTypeRepository",
]
