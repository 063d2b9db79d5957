"""
Attach extra JSON Schema keywords to a schema node.
"""

from typing import Any, Dict, Optional

from schematize.schema import AnnotatedSchema, SchemaNode


def with_json_schema_features(schema: SchemaNode, features: Dict[str, Any]) -> AnnotatedSchema:
    """
    Wrap a schema so that its converted JSON Schema carries extra keywords.

    The wrapper validates exactly like the wrapped schema. During conversion
    the wrapped schema is converted first and ``features`` is shallow-merged
    over the result, so a feature key replaces a keyword of the same name.

    Args:
        schema: The schema to annotate
        features: JSON Schema keywords, e.g. ``{'minItems': 2}``

    Returns:
        A new schema node wrapping ``schema``
    """
    if not isinstance(features, dict):
        raise TypeError(f"JSON Schema features must be a dict, got {type(features).__name__}")
    return AnnotatedSchema(schema, dict(features))


def get_json_schema_features(schema: SchemaNode) -> Optional[Dict[str, Any]]:
    """Return the keywords attached to an annotated schema, or None."""
    if isinstance(schema, AnnotatedSchema):
        return schema.features
    return None
