"""
Validation refinements that can be attached to a schema's pipe.

A refinement narrows the values its base schema accepts, for example a
minimum string length or a regular expression. Refinements that have a JSON
Schema equivalent are merged into the converted fragment; the others
(``custom`` above all) cannot be expressed in JSON Schema.
"""

import math
import re
from collections.abc import Sized
from typing import Any, Callable, Optional, Pattern, Union

EMAIL_PATTERN = re.compile(r'^[\w+\-.]+@[A-Za-z\d\-]+(\.[A-Za-z\d\-]+)*\.[A-Za-z]{2,}$')
UUID_PATTERN = re.compile(
    r'^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$'
)
URL_PATTERN = re.compile(r'^[A-Za-z][A-Za-z\d+\-.]*://\S+$')


class Validation:
    """
    A single refinement in a schema pipe.

    Attributes:
        kind: The refinement discriminator, e.g. ``min_length``
        requirement: The refinement argument (a length, a pattern, a value)
        message: Text used by the instance validator when the check fails
    """

    def __init__(self, kind: str, requirement: Any = None, message: Optional[str] = None) -> None:
        self.kind = kind
        self.requirement = requirement
        self.message = message or f"Invalid {kind.replace('_', ' ')}"

    def check(self, value: Any) -> bool:
        """Return True if the value passes this refinement."""
        return True

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind!r}, {self.requirement!r})"


class _LengthValidation(Validation):

    def check(self, value: Any) -> bool:
        if not isinstance(value, Sized):
            return False
        size = len(value)
        if self.kind == 'min_length':
            return size >= self.requirement
        if self.kind == 'max_length':
            return size <= self.requirement
        return size == self.requirement


class _PatternValidation(Validation):

    def check(self, value: Any) -> bool:
        return isinstance(value, str) and self.requirement.search(value) is not None


class _ValueValidation(Validation):

    def check(self, value: Any) -> bool:
        if self.kind == 'value':
            if isinstance(value, bool) or isinstance(self.requirement, bool):
                return type(value) is type(self.requirement) and value == self.requirement
            return value == self.requirement
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        if self.kind == 'min_value':
            return value >= self.requirement
        if self.kind == 'max_value':
            return value <= self.requirement
        if self.kind == 'integer':
            return isinstance(value, int) or (math.isfinite(value) and value.is_integer())
        return math.isclose(math.remainder(value, self.requirement), 0.0, abs_tol=1e-9)


class _CustomValidation(Validation):

    def check(self, value: Any) -> bool:
        return bool(self.requirement(value))


def min_length(requirement: int, message: Optional[str] = None) -> Validation:
    return _LengthValidation('min_length', requirement, message)


def max_length(requirement: int, message: Optional[str] = None) -> Validation:
    return _LengthValidation('max_length', requirement, message)


def length(requirement: int, message: Optional[str] = None) -> Validation:
    return _LengthValidation('length', requirement, message)


def regex(requirement: Union[str, Pattern[str]], message: Optional[str] = None) -> Validation:
    """Match strings against a regular expression (searched, not anchored)."""
    if isinstance(requirement, str):
        requirement = re.compile(requirement)
    return _PatternValidation('regex', requirement, message)


def email(message: Optional[str] = None) -> Validation:
    return _PatternValidation('email', EMAIL_PATTERN, message)


def uuid(message: Optional[str] = None) -> Validation:
    return _PatternValidation('uuid', UUID_PATTERN, message)


def url(message: Optional[str] = None) -> Validation:
    return _PatternValidation('url', URL_PATTERN, message)


def min_value(requirement: Union[int, float], message: Optional[str] = None) -> Validation:
    return _ValueValidation('min_value', requirement, message)


def max_value(requirement: Union[int, float], message: Optional[str] = None) -> Validation:
    return _ValueValidation('max_value', requirement, message)


def integer(message: Optional[str] = None) -> Validation:
    return _ValueValidation('integer', None, message)


def multiple_of(requirement: Union[int, float], message: Optional[str] = None) -> Validation:
    return _ValueValidation('multiple_of', requirement, message)


def value(requirement: Any, message: Optional[str] = None) -> Validation:
    return _ValueValidation('value', requirement, message)


def description(text: str) -> Validation:
    """Attach a human-readable description. Never fails."""
    return Validation('description', text)


def custom(predicate: Callable[[Any], bool], message: Optional[str] = None) -> Validation:
    """Arbitrary predicate. Has no JSON Schema equivalent."""
    return _CustomValidation('custom', predicate, message)
