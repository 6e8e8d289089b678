"""Action routing and shape-name normalisation."""

from __future__ import annotations

from enum import Enum


class ActionType(str, Enum):
    """Operation being performed on a business object."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


def normalize_title_case(value: str | None) -> str | None:
    """Upper-case the first character and lower-case the rest ('CATEGORY' -> 'Category')."""
    if not value:
        return value
    return value[0].upper() + value[1:].lower()


def is_matching_action(action_type: str | None, expected: ActionType) -> bool:
    """Case-insensitive comparison of a raw action string against an ActionType."""
    if action_type is None or not action_type.strip():
        return False
    return action_type.upper() == expected.value
