"""Validates Python values against schema graphs.

This is the runtime counterpart of the JSON Schema converter: it checks a
value directly against the schema nodes, so tests can verify that a schema
and its generated JSON Schema accept and reject the same values. The
converter itself never calls it.
"""

import math
from datetime import date
from typing import Any, List

from schematize.schema import (UNDEFINED, AnnotatedSchema, ArraySchema, InstanceSchema, LiteralSchema,
                               ObjectSchema, OptionsSchema, RecordSchema, RecursiveSchema, SchemaNode,
                               TupleSchema, WrappedSchema, is_optional)


class SchemaValidationError(Exception):
    """Exception raised when a value doesn't match a schema."""

    def __init__(self, message: str, path: str = "#"):
        self.message = message
        self.path = path
        super().__init__(f"{message} at {path}")


def _same_value(first: Any, second: Any) -> bool:
    """Equality that keeps booleans apart from numbers."""
    if isinstance(first, bool) or isinstance(second, bool):
        return type(first) is type(second) and first == second
    return first == second


def _is_number(instance: Any) -> bool:
    return isinstance(instance, (int, float)) and not isinstance(instance, bool)


class SchemaValidator:
    """Validates values against a schema node graph."""

    def __init__(self, schema: SchemaNode):
        """Initialize the validator with a schema.

        Args:
            schema: The root schema node to validate against
        """
        self.schema = schema

    def validate(self, instance: Any) -> None:
        """Validates a value against the schema.

        Args:
            instance: The value to validate

        Raises:
            SchemaValidationError: If the value doesn't match the schema
        """
        self._validate(instance, self.schema, "#")

    def is_valid(self, instance: Any) -> bool:
        try:
            self.validate(instance)
            return True
        except SchemaValidationError:
            return False

    def _validate(self, instance: Any, schema: SchemaNode, path: str) -> None:
        """Internal validation method: base check first, then the pipe."""
        kind = schema.kind
        handler = getattr(self, f"_validate_{kind}", None)
        if handler is None:
            raise SchemaValidationError(f"Unknown schema kind: {kind}", path)
        handler(instance, schema, path)

        for validation in schema.pipe:
            if not validation.check(instance):
                raise SchemaValidationError(validation.message, path)

    def _validate_any(self, instance: Any, schema: SchemaNode, path: str) -> None:
        pass

    def _validate_null(self, instance: Any, schema: SchemaNode, path: str) -> None:
        if instance is not None:
            raise SchemaValidationError(f"Expected null, got {type(instance).__name__}", path)

    def _validate_undefined(self, instance: Any, schema: SchemaNode, path: str) -> None:
        if instance is not UNDEFINED:
            raise SchemaValidationError(f"Expected undefined, got {type(instance).__name__}", path)

    def _validate_literal(self, instance: Any, schema: LiteralSchema, path: str) -> None:
        if not _same_value(instance, schema.literal):
            raise SchemaValidationError(f"Expected {schema.literal!r}, got {instance!r}", path)

    def _validate_number(self, instance: Any, schema: SchemaNode, path: str) -> None:
        if not _is_number(instance) or (isinstance(instance, float) and math.isnan(instance)):
            raise SchemaValidationError(f"Expected number, got {type(instance).__name__}", path)

    def _validate_nan(self, instance: Any, schema: SchemaNode, path: str) -> None:
        if not (isinstance(instance, float) and math.isnan(instance)):
            raise SchemaValidationError(f"Expected NaN, got {instance!r}", path)

    def _validate_string(self, instance: Any, schema: SchemaNode, path: str) -> None:
        if not isinstance(instance, str):
            raise SchemaValidationError(f"Expected string, got {type(instance).__name__}", path)

    def _validate_boolean(self, instance: Any, schema: SchemaNode, path: str) -> None:
        if not isinstance(instance, bool):
            raise SchemaValidationError(f"Expected boolean, got {type(instance).__name__}", path)

    def _validate_bigint(self, instance: Any, schema: SchemaNode, path: str) -> None:
        if not isinstance(instance, int) or isinstance(instance, bool):
            raise SchemaValidationError(f"Expected bigint, got {type(instance).__name__}", path)

    def _validate_date(self, instance: Any, schema: SchemaNode, path: str) -> None:
        if not isinstance(instance, date):
            raise SchemaValidationError(f"Expected date, got {type(instance).__name__}", path)

    def _validate_never(self, instance: Any, schema: SchemaNode, path: str) -> None:
        raise SchemaValidationError("No value is allowed", path)

    def _validate_instance(self, instance: Any, schema: InstanceSchema, path: str) -> None:
        if not isinstance(instance, schema.class_):
            raise SchemaValidationError(
                f"Expected instance of {schema.class_.__name__}, got {type(instance).__name__}", path)

    def _validate_nullable(self, instance: Any, schema: WrappedSchema, path: str) -> None:
        if instance is not None:
            self._validate(instance, schema.wrapped, path)

    def _validate_optional(self, instance: Any, schema: WrappedSchema, path: str) -> None:
        if instance is not UNDEFINED:
            self._validate(instance, schema.wrapped, path)

    def _validate_nullish(self, instance: Any, schema: WrappedSchema, path: str) -> None:
        if instance is not None and instance is not UNDEFINED:
            self._validate(instance, schema.wrapped, path)

    def _validate_annotated(self, instance: Any, schema: AnnotatedSchema, path: str) -> None:
        self._validate(instance, schema.wrapped, path)

    def _validate_recursive(self, instance: Any, schema: RecursiveSchema, path: str) -> None:
        self._validate(instance, schema.getter(), path)

    def _validate_object(self, instance: Any, schema: ObjectSchema, path: str) -> None:
        """Validates an object: declared entries, then undeclared keys.

        Args:
            instance: The value to validate
            schema: The object schema
            path: JSON pointer path for error messages
        """
        if not isinstance(instance, dict):
            raise SchemaValidationError(f"Expected object, got {type(instance).__name__}", path)

        for key, entry in schema.entries.items():
            if key not in instance and not is_optional(entry):
                raise SchemaValidationError(f"Missing required key '{key}'", path)
            self._validate(instance.get(key, UNDEFINED), entry, f"{path}/{key}")

        extra_keys = [key for key in instance if key not in schema.entries]
        if schema.rest is not None:
            for key in extra_keys:
                self._validate(instance[key], schema.rest, f"{path}/{key}")
        elif schema.strict and extra_keys:
            raise SchemaValidationError(f"Unknown keys: {', '.join(map(str, extra_keys))}", path)

    def _validate_record(self, instance: Any, schema: RecordSchema, path: str) -> None:
        if not isinstance(instance, dict):
            raise SchemaValidationError(f"Expected object for record, got {type(instance).__name__}", path)
        for key, item in instance.items():
            item_path = f"{path}/{key}"
            if schema.key is not None:
                self._validate(key, schema.key, item_path)
            self._validate(item, schema.value, item_path)

    def _validate_array(self, instance: Any, schema: ArraySchema, path: str) -> None:
        if not isinstance(instance, list):
            raise SchemaValidationError(f"Expected array, got {type(instance).__name__}", path)
        for i, item in enumerate(instance):
            self._validate(item, schema.item, f"{path}/{i}")

    def _validate_tuple(self, instance: Any, schema: TupleSchema, path: str) -> None:
        """Validates a tuple: positional items, then the rest (if any)."""
        if not isinstance(instance, list):
            raise SchemaValidationError(f"Expected array, got {type(instance).__name__}", path)
        fixed = len(schema.items)
        if len(instance) < fixed or (schema.rest is None and len(instance) != fixed):
            raise SchemaValidationError(f"Expected {fixed} items, got {len(instance)}", path)
        for i, item in enumerate(instance):
            item_schema = schema.items[i] if i < fixed else schema.rest
            self._validate(item, item_schema, f"{path}/{i}")

    def _validate_picklist(self, instance: Any, schema: OptionsSchema, path: str) -> None:
        if not any(_same_value(instance, option) for option in schema.options):
            raise SchemaValidationError(f"{instance!r} is not one of {schema.options}", path)

    _validate_enum = _validate_picklist

    def _validate_union(self, instance: Any, schema: OptionsSchema, path: str) -> None:
        for option in schema.options:
            try:
                self._validate(instance, option, path)
                return
            except SchemaValidationError:
                continue
        raise SchemaValidationError("Value matches no union option", path)

    def _validate_intersect(self, instance: Any, schema: OptionsSchema, path: str) -> None:
        for option in schema.options:
            self._validate(instance, option, path)


def validate_instance(instance: Any, schema: SchemaNode) -> List[str]:
    """Validates a value against a schema.

    Args:
        instance: The value to validate
        schema: The schema node

    Returns:
        List of validation error messages (empty if valid)
    """
    validator = SchemaValidator(schema)
    try:
        validator.validate(instance)
        return []
    except SchemaValidationError as e:
        return [str(e)]


def is_valid(instance: Any, schema: SchemaNode) -> bool:
    return not validate_instance(instance, schema)
