"""
Common utility functions for schematize.
"""

import math
from typing import Any

from jsoncomparison import NO_DIFF, Compare

JSON_SCHEMA_DRAFT = "http://json-schema.org/draft-07/schema#"
DEFINITIONS_PREFIX = "#/definitions/"


def definition_ref(name: str) -> str:
    """Build the ``$ref`` URI pointing at a named definition."""
    return f"{DEFINITIONS_PREFIX}{name}"


def is_same_json(first: Any, second: Any) -> bool:
    """
    Check whether two JSON values are structurally identical.

    Plain ``==`` treats ``1``, ``1.0`` and ``True`` as equal, and the JSON
    comparison ignores list order and rounds floats, so both must agree.

    Args:
        first: The first JSON value.
        second: The second JSON value.

    Returns:
        bool: True if no difference is found, False otherwise.
    """
    return first == second and Compare().check(first, second) == NO_DIFF


def is_json_literal(value: Any) -> bool:
    """
    Check whether a value can be written as a JSON ``const``.

    Only ``None``, booleans, integers, finite floats and strings qualify.
    NaN and the infinities have no JSON representation.
    """
    if value is None or isinstance(value, (bool, int, str)):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    return False
