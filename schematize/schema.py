"""
Composable schema nodes describing how values should be validated.

Each node carries a ``kind`` discriminator, its variant-specific children and
an optional pipe of validation refinements. Nodes keep Python's default
identity-based equality and hashing, so the same node object can be used as a
key when naming definitions; two structurally identical nodes stay distinct.

The graph may be cyclic: a ``recursive`` node holds a zero-argument getter
that yields its target node instead of embedding it.
"""

import copy
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Type

from schematize.validations import Validation


class _Undefined:
    """Marker for an absent value, e.g. a missing object key."""

    def __repr__(self) -> str:
        return 'UNDEFINED'

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()


class SchemaNode:
    """
    Base class of all schema nodes.

    Attributes:
        kind: The variant discriminator used for converter dispatch
        pipe: Validation refinements applied after the base check
    """

    kind = 'unknown'

    def __init__(self, pipe: Optional[Sequence[Validation]] = None) -> None:
        self.pipe: List[Validation] = list(pipe or [])

    def __repr__(self) -> str:
        return f"<{type(self).__name__} kind={self.kind!r} at {id(self):#x}>"


class AnySchema(SchemaNode):
    kind = 'any'


class NullSchema(SchemaNode):
    kind = 'null'


class UndefinedSchema(SchemaNode):
    kind = 'undefined'


class NumberSchema(SchemaNode):
    kind = 'number'


class StringSchema(SchemaNode):
    kind = 'string'


class BooleanSchema(SchemaNode):
    kind = 'boolean'


class BigIntSchema(SchemaNode):
    kind = 'bigint'


class DateSchema(SchemaNode):
    kind = 'date'


class NanSchema(SchemaNode):
    kind = 'nan'


class NeverSchema(SchemaNode):
    kind = 'never'


class LiteralSchema(SchemaNode):
    kind = 'literal'

    def __init__(self, literal: Any, pipe: Optional[Sequence[Validation]] = None) -> None:
        super().__init__(pipe)
        self.literal = literal


class InstanceSchema(SchemaNode):
    kind = 'instance'

    def __init__(self, class_: type, pipe: Optional[Sequence[Validation]] = None) -> None:
        super().__init__(pipe)
        self.class_ = class_


class WrappedSchema(SchemaNode):
    """Base for nodes that decorate a single inner schema."""

    def __init__(self, wrapped: SchemaNode, pipe: Optional[Sequence[Validation]] = None) -> None:
        super().__init__(pipe)
        self.wrapped = wrapped


class NullableSchema(WrappedSchema):
    kind = 'nullable'


class OptionalSchema(WrappedSchema):
    kind = 'optional'


class NullishSchema(WrappedSchema):
    kind = 'nullish'


class AnnotatedSchema(WrappedSchema):
    """Transparent wrapper carrying extra JSON Schema keywords."""

    kind = 'annotated'

    def __init__(self, wrapped: SchemaNode, features: Dict[str, Any]) -> None:
        super().__init__(wrapped)
        self.features = features


class ObjectSchema(SchemaNode):
    kind = 'object'

    def __init__(self, entries: Dict[str, SchemaNode], rest: Optional[SchemaNode] = None,
                 pipe: Optional[Sequence[Validation]] = None, strict: bool = False) -> None:
        super().__init__(pipe)
        self.entries = dict(entries)
        self.rest = rest
        self.strict = strict


class RecordSchema(SchemaNode):
    kind = 'record'

    def __init__(self, key: Optional[SchemaNode], value: SchemaNode,
                 pipe: Optional[Sequence[Validation]] = None) -> None:
        super().__init__(pipe)
        self.key = key
        self.value = value


class ArraySchema(SchemaNode):
    kind = 'array'

    def __init__(self, item: SchemaNode, pipe: Optional[Sequence[Validation]] = None) -> None:
        super().__init__(pipe)
        self.item = item


class TupleSchema(SchemaNode):
    kind = 'tuple'

    def __init__(self, items: Sequence[SchemaNode], rest: Optional[SchemaNode] = None,
                 pipe: Optional[Sequence[Validation]] = None) -> None:
        super().__init__(pipe)
        self.items = list(items)
        self.rest = rest


class OptionsSchema(SchemaNode):
    """Base for nodes holding an ordered list of options."""

    def __init__(self, options: Sequence[Any], pipe: Optional[Sequence[Validation]] = None) -> None:
        super().__init__(pipe)
        self.options = list(options)


class PicklistSchema(OptionsSchema):
    kind = 'picklist'


class EnumSchema(OptionsSchema):
    kind = 'enum'

    def __init__(self, enum: Type[Enum], pipe: Optional[Sequence[Validation]] = None) -> None:
        super().__init__([member.value for member in enum], pipe)
        self.enum = enum


class UnionSchema(OptionsSchema):
    kind = 'union'


class IntersectSchema(OptionsSchema):
    kind = 'intersect'


class RecursiveSchema(SchemaNode):
    kind = 'recursive'

    def __init__(self, getter: Callable[[], SchemaNode]) -> None:
        super().__init__()
        self.getter = getter


def any_(pipe: Optional[Sequence[Validation]] = None) -> AnySchema:
    return AnySchema(pipe)


def null() -> NullSchema:
    return NullSchema()


def undefined() -> UndefinedSchema:
    return UndefinedSchema()


def number(pipe: Optional[Sequence[Validation]] = None) -> NumberSchema:
    return NumberSchema(pipe)


def string(pipe: Optional[Sequence[Validation]] = None) -> StringSchema:
    return StringSchema(pipe)


def boolean() -> BooleanSchema:
    return BooleanSchema()


def bigint(pipe: Optional[Sequence[Validation]] = None) -> BigIntSchema:
    return BigIntSchema(pipe)


def date(pipe: Optional[Sequence[Validation]] = None) -> DateSchema:
    return DateSchema(pipe)


def nan() -> NanSchema:
    return NanSchema()


def never() -> NeverSchema:
    return NeverSchema()


def literal(literal_value: Any) -> LiteralSchema:
    return LiteralSchema(literal_value)


def instance(class_: type) -> InstanceSchema:
    return InstanceSchema(class_)


def nullable(wrapped: SchemaNode) -> NullableSchema:
    return NullableSchema(wrapped)


def optional(wrapped: SchemaNode) -> OptionalSchema:
    return OptionalSchema(wrapped)


def nullish(wrapped: SchemaNode) -> NullishSchema:
    return NullishSchema(wrapped)


def object_(entries: Dict[str, SchemaNode], rest: Optional[SchemaNode] = None,
            pipe: Optional[Sequence[Validation]] = None) -> ObjectSchema:
    """
    Build an object schema. Entry order is kept and drives the order of
    ``properties`` and ``required`` in the converted output.
    """
    return ObjectSchema(entries, rest, pipe)


def strict(schema: ObjectSchema) -> ObjectSchema:
    """Return a copy of an object schema that rejects undeclared keys."""
    if not isinstance(schema, ObjectSchema):
        raise TypeError(f"strict() expects an object schema, got {schema.kind}")
    strict_schema = copy.copy(schema)
    strict_schema.entries = dict(schema.entries)
    strict_schema.pipe = list(schema.pipe)
    strict_schema.strict = True
    return strict_schema


def record(key_or_value: SchemaNode, value: Optional[SchemaNode] = None,
           pipe: Optional[Sequence[Validation]] = None) -> RecordSchema:
    """``record(value)`` or ``record(key, value)``."""
    if value is None:
        return RecordSchema(None, key_or_value, pipe)
    return RecordSchema(key_or_value, value, pipe)


def array(item: SchemaNode, pipe: Optional[Sequence[Validation]] = None) -> ArraySchema:
    return ArraySchema(item, pipe)


def tuple_(items: Sequence[SchemaNode], rest: Optional[SchemaNode] = None,
           pipe: Optional[Sequence[Validation]] = None) -> TupleSchema:
    return TupleSchema(items, rest, pipe)


def picklist(options: Sequence[Any]) -> PicklistSchema:
    return PicklistSchema(options)


def enum_(enum: Type[Enum]) -> EnumSchema:
    return EnumSchema(enum)


def union(options: Sequence[SchemaNode]) -> UnionSchema:
    return UnionSchema(options)


def intersect(options: Sequence[SchemaNode]) -> IntersectSchema:
    return IntersectSchema(options)


def recursive(getter: Callable[[], SchemaNode]) -> RecursiveSchema:
    """
    Defer to another schema through a getter, which allows self-referential
    graphs. The getter is only called when the target is needed.
    """
    return RecursiveSchema(getter)


lazy = recursive


def is_optional(schema: SchemaNode) -> bool:
    """Check whether an object entry may be absent, seeing through annotations."""
    while isinstance(schema, AnnotatedSchema):
        schema = schema.wrapped
    return isinstance(schema, (OptionalSchema, NullishSchema))
