"""
Exceptions raised while converting schema graphs to JSON Schema.
"""

from typing import Any, Optional


class SchemaConversionError(Exception):
    """
    Base exception for schema to JSON Schema conversion failures.

    Attributes:
        message: Human-readable error description
        context: Optional context about where the error occurred
    """

    def __init__(self, message: str, context: Optional[str] = None) -> None:
        self.message = message
        self.context = context
        full_message = message
        if context:
            full_message = f"{message} (context: {context})"
        super().__init__(full_message)


class ConfigurationError(SchemaConversionError):
    """Raised when the conversion options are missing or invalid."""


class UnsupportedSchemaKindError(SchemaConversionError):
    """
    Raised when a schema node kind has no JSON Schema converter.

    Attributes:
        kind: The schema kind that could not be converted
    """

    def __init__(self, kind: str, context: Optional[str] = None) -> None:
        self.kind = kind
        super().__init__(f"Unsupported schema: {kind}", context)


class UnsupportedLiteralValueError(SchemaConversionError):
    """
    Raised when a literal value has no JSON representation.

    Attributes:
        value: The offending literal value
    """

    def __init__(self, value: Any, context: Optional[str] = None) -> None:
        self.value = value
        super().__init__(f"Unsupported literal value type: {value!r}", context)


class UnsupportedValidationError(SchemaConversionError):
    """
    Raised when a validation refinement has no JSON Schema equivalent.

    Attributes:
        validation: The refinement kind
        kind: The kind of the schema carrying the refinement
    """

    def __init__(self, validation: str, kind: str, context: Optional[str] = None) -> None:
        self.validation = validation
        self.kind = kind
        super().__init__(f"Unsupported validation: {validation} on {kind} schema", context)


class MissingDefinitionError(SchemaConversionError):
    """Raised when the target of a recursive schema is not a named definition."""

    def __init__(self, context: Optional[str] = None) -> None:
        super().__init__("Type inside recursive schema must be provided in the definitions", context)
