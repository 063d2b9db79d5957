"""
Convert schema graphs to JSON Schema (draft-07) documents.

The converter walks a graph of schema nodes and produces the equivalent JSON
Schema. Named schemas are supplied through ``definitions``; every reachable
occurrence of a named node is written as a ``$ref`` into the document's
``definitions`` section. Recursive nodes can only be converted when their
target is one of those named definitions, which is what keeps the traversal
of a cyclic graph finite.
"""

import copy
import json
import logging
import os
import re
from typing import Any, Callable, Dict, Optional, Tuple

from schematize.common import JSON_SCHEMA_DRAFT, definition_ref, is_json_literal, is_same_json
from schematize.errors import (ConfigurationError, MissingDefinitionError, UnsupportedLiteralValueError,
                               UnsupportedSchemaKindError, UnsupportedValidationError)
from schematize.schema import (AnnotatedSchema, ArraySchema, LiteralSchema, ObjectSchema, OptionsSchema,
                               RecordSchema, RecursiveSchema, SchemaNode, StringSchema, TupleSchema,
                               WrappedSchema, is_optional)
from schematize.validations import Validation

# Configure module logger
logger = logging.getLogger(__name__)

DATE_STRATEGIES = ('string', 'integer')
BIGINT_STRATEGIES = ('string', 'integer')
UNDEFINED_STRATEGIES = ('any',)

JsonSchema = Dict[str, Any]
KeywordBuilder = Callable[[Validation], JsonSchema]


def _has_json_equivalent(validation: Validation) -> bool:
    """Regex flags other than re.UNICODE cannot be written into a JSON Schema pattern."""
    if validation.kind == 'regex':
        return not validation.requirement.flags & ~re.UNICODE
    return True


def _length_keywords(min_keyword: str, max_keyword: str) -> Dict[str, KeywordBuilder]:
    return {
        'min_length': lambda v: {min_keyword: v.requirement},
        'max_length': lambda v: {max_keyword: v.requirement},
        'length': lambda v: {min_keyword: v.requirement, max_keyword: v.requirement},
    }


# Validation refinements with a JSON Schema equivalent, per schema kind
VALIDATION_KEYWORDS: Dict[str, Dict[str, KeywordBuilder]] = {
    'string': {
        **_length_keywords('minLength', 'maxLength'),
        'regex': lambda v: {'pattern': v.requirement.pattern},
        'email': lambda v: {'format': 'email'},
        'uuid': lambda v: {'format': 'uuid'},
        'url': lambda v: {'format': 'uri'},
        'value': lambda v: {'const': v.requirement},
    },
    'array': _length_keywords('minItems', 'maxItems'),
    'tuple': _length_keywords('minItems', 'maxItems'),
    'number': {
        'min_value': lambda v: {'minimum': v.requirement},
        'max_value': lambda v: {'maximum': v.requirement},
        'integer': lambda v: {'type': 'integer'},
        'multiple_of': lambda v: {'multipleOf': v.requirement},
        'value': lambda v: {'const': v.requirement},
    },
}


class ConversionOptions:
    """
    Resolved, read-only options of a conversion.

    Args:
        strict_object_types: Add ``additionalProperties: false`` to every object.
        date_strategy: ``'string'`` (date-time string) or ``'integer'`` (unix time).
        undefined_strategy: ``'any'`` converts undefined schemas to ``{}``.
        bigint_strategy: ``'string'`` or ``'integer'`` (int64).
        ignore_unknown_validation: Drop refinements that have no JSON Schema
            equivalent instead of failing.
    """

    def __init__(self, strict_object_types: bool = False, date_strategy: Optional[str] = None,
                 undefined_strategy: Optional[str] = None, bigint_strategy: Optional[str] = None,
                 ignore_unknown_validation: bool = False) -> None:
        self.strict_object_types = bool(strict_object_types)
        self.date_strategy = self._check_strategy('date_strategy', date_strategy, DATE_STRATEGIES)
        self.undefined_strategy = self._check_strategy('undefined_strategy', undefined_strategy, UNDEFINED_STRATEGIES)
        self.bigint_strategy = self._check_strategy('bigint_strategy', bigint_strategy, BIGINT_STRATEGIES)
        self.ignore_unknown_validation = bool(ignore_unknown_validation)

    @staticmethod
    def _check_strategy(option: str, strategy: Optional[str], allowed: Tuple[str, ...]) -> Optional[str]:
        if strategy is not None and strategy not in allowed:
            raise ConfigurationError(f"Invalid {option} '{strategy}', expected one of: {', '.join(allowed)}")
        return strategy


class ConversionContext:
    """
    State shared by every converter call of one top-level conversion.

    Attributes:
        options: The resolved conversion options
        def_name_map: Maps schema nodes (by identity) to their definition name
    """

    def __init__(self, options: ConversionOptions,
                 definitions: Optional[Dict[str, SchemaNode]] = None) -> None:
        self.options = options
        self.def_name_map: Dict[SchemaNode, str] = {}
        for name, schema in (definitions or {}).items():
            self.register_definition(name, schema)

    def register_definition(self, name: str, schema: SchemaNode) -> str:
        """Assign a name to a schema node; a node keeps the first name it gets."""
        if schema not in self.def_name_map:
            logger.debug("Registering definition %s for %r", name, schema)
            self.def_name_map[schema] = name
        return self.def_name_map[schema]

    def get_definition_name(self, schema: SchemaNode) -> Optional[str]:
        if not isinstance(schema, SchemaNode):
            return None
        return self.def_name_map.get(schema)


class SchemaToJsonSchemaConverter:
    """
    Converts schema nodes to JSON Schema fragments.

    One converter instance owns one ``ConversionContext`` and collects the
    converted named definitions in ``definitions``.
    """

    def __init__(self, context: ConversionContext) -> None:
        self.context = context
        self.definitions: Dict[str, JsonSchema] = {}
        self._in_progress: set = set()
        self.converters: Dict[str, Callable[[Any], JsonSchema]] = {
            'any': self.convert_any,
            'null': self.convert_null,
            'literal': self.convert_literal,
            'number': self.convert_number,
            'string': self.convert_string,
            'boolean': self.convert_boolean,
            'date': self.convert_date,
            'bigint': self.convert_bigint,
            'undefined': self.convert_undefined,
            'nullable': self.convert_nullable,
            'nullish': self.convert_nullable,
            'optional': self.convert_optional,
            'annotated': self.convert_annotated,
            'object': self.convert_object,
            'record': self.convert_record,
            'array': self.convert_array,
            'tuple': self.convert_tuple,
            'picklist': self.convert_enum,
            'enum': self.convert_enum,
            'union': self.convert_union,
            'intersect': self.convert_intersect,
            'recursive': self.convert_recursive,
        }

    def convert_definitions(self, definitions: Dict[str, SchemaNode]) -> Dict[str, JsonSchema]:
        """
        Convert all named definitions, in the order they were supplied.
        """
        for name, schema in definitions.items():
            self.convert_definition(name, schema)
        return self.definitions

    def convert_definition(self, name: str, schema: SchemaNode) -> JsonSchema:
        """
        Convert the body of a named definition once and store it under its name.
        """
        if name not in self.definitions:
            logger.debug("Converting definition %s", name)
            self.definitions[name] = self.convert_inline(schema)
        return self.definitions[name]

    def convert_schema(self, schema: SchemaNode) -> JsonSchema:
        """
        Convert a schema node; a named definition becomes a ``$ref``.
        """
        name = self.context.get_definition_name(schema)
        if name is not None:
            return {'$ref': definition_ref(name)}
        return self.convert_inline(schema)

    def convert_inline(self, schema: SchemaNode) -> JsonSchema:
        """
        Convert a schema node through its kind converter, merging its pipe.
        """
        if not isinstance(schema, SchemaNode):
            raise UnsupportedSchemaKindError(type(schema).__name__)
        converter = self.converters.get(schema.kind)
        if converter is None:
            raise UnsupportedSchemaKindError(schema.kind)

        key = id(schema)
        if key in self._in_progress:
            # cycle that does not go through a named definition
            raise MissingDefinitionError(context=schema.kind)
        self._in_progress.add(key)
        try:
            json_schema = converter(schema)
        finally:
            self._in_progress.discard(key)

        if schema.pipe:
            self.merge_validations(schema, json_schema)
        return json_schema

    def merge_validations(self, schema: SchemaNode, json_schema: JsonSchema) -> None:
        """
        Merge the JSON Schema keywords of the schema's refinements into its fragment.
        """
        keywords = VALIDATION_KEYWORDS.get(schema.kind, {})
        for validation in schema.pipe:
            if validation.kind == 'description':
                json_schema['description'] = validation.requirement
                continue
            builder = keywords.get(validation.kind)
            if builder is None or not _has_json_equivalent(validation):
                if self.context.options.ignore_unknown_validation:
                    logger.warning("Dropping %s validation on %s schema: no JSON Schema equivalent",
                                   validation.kind, schema.kind)
                    continue
                raise UnsupportedValidationError(validation.kind, schema.kind)
            json_schema.update(builder(validation))

    def convert_any(self, schema: SchemaNode) -> JsonSchema:
        return {}

    def convert_null(self, schema: SchemaNode) -> JsonSchema:
        return {'const': None}

    def convert_literal(self, schema: LiteralSchema) -> JsonSchema:
        if not is_json_literal(schema.literal):
            raise UnsupportedLiteralValueError(schema.literal)
        return {'const': schema.literal}

    def convert_number(self, schema: SchemaNode) -> JsonSchema:
        return {'type': 'number'}

    def convert_string(self, schema: SchemaNode) -> JsonSchema:
        return {'type': 'string'}

    def convert_boolean(self, schema: SchemaNode) -> JsonSchema:
        return {'type': 'boolean'}

    def convert_date(self, schema: SchemaNode) -> JsonSchema:
        strategy = self.context.options.date_strategy
        if strategy == 'string':
            return {'type': 'string', 'format': 'date-time'}
        if strategy == 'integer':
            return {'type': 'integer', 'format': 'unix-time'}
        raise ConfigurationError('The "date_strategy" option must be set to handle date schemas')

    def convert_bigint(self, schema: SchemaNode) -> JsonSchema:
        strategy = self.context.options.bigint_strategy
        if strategy == 'string':
            return {'type': 'string'}
        if strategy == 'integer':
            return {'type': 'integer', 'format': 'int64'}
        raise ConfigurationError('The "bigint_strategy" option must be set to handle bigint schemas')

    def convert_undefined(self, schema: SchemaNode) -> JsonSchema:
        if self.context.options.undefined_strategy == 'any':
            return {}
        raise ConfigurationError('The "undefined_strategy" option must be set to handle undefined schemas')

    def convert_nullable(self, schema: WrappedSchema) -> JsonSchema:
        return {'anyOf': [{'const': None}, self.convert_schema(schema.wrapped)]}

    def convert_optional(self, schema: WrappedSchema) -> JsonSchema:
        # optionality only shows in the enclosing object's required list
        return self.convert_schema(schema.wrapped)

    def convert_annotated(self, schema: AnnotatedSchema) -> JsonSchema:
        json_schema = self.convert_schema(schema.wrapped)
        json_schema.update(copy.deepcopy(schema.features))
        return json_schema

    def convert_object(self, schema: ObjectSchema) -> JsonSchema:
        properties: JsonSchema = {}
        required = []
        for key, entry in schema.entries.items():
            properties[key] = self.convert_schema(entry)
            if not is_optional(entry):
                required.append(key)

        json_schema: JsonSchema = {'type': 'object', 'properties': properties}
        if required:
            json_schema['required'] = required
        if schema.rest is not None:
            json_schema['additionalProperties'] = self.convert_schema(schema.rest)
        elif schema.strict or self.context.options.strict_object_types:
            json_schema['additionalProperties'] = False
        return json_schema

    def convert_record(self, schema: RecordSchema) -> JsonSchema:
        json_schema: JsonSchema = {'type': 'object', 'additionalProperties': self.convert_schema(schema.value)}
        if schema.key is not None and not (isinstance(schema.key, StringSchema) and not schema.key.pipe):
            json_schema['propertyNames'] = self.convert_schema(schema.key)
        return json_schema

    def convert_array(self, schema: ArraySchema) -> JsonSchema:
        return {'type': 'array', 'items': self.convert_schema(schema.item)}

    def convert_tuple(self, schema: TupleSchema) -> JsonSchema:
        """
        Convert a tuple. Fixed items are positional; a rest schema applies to
        every following element. When all fixed items convert to the same
        schema as the rest, the tuple is a homogeneous array with a minimum size.
        """
        items = [self.convert_schema(item) for item in schema.items]
        if schema.rest is None:
            return {'type': 'array', 'items': items, 'minItems': len(items), 'maxItems': len(items)}

        rest = self.convert_schema(schema.rest)
        if items and all(is_same_json(item, rest) for item in items):
            return {'type': 'array', 'items': rest, 'minItems': len(items)}
        return {'type': 'array', 'items': items, 'additionalItems': rest, 'minItems': len(items)}

    def convert_enum(self, schema: OptionsSchema) -> JsonSchema:
        for option in schema.options:
            if not is_json_literal(option):
                raise UnsupportedLiteralValueError(option)
        return {'enum': list(schema.options)}

    def convert_union(self, schema: OptionsSchema) -> JsonSchema:
        return {'anyOf': [self.convert_schema(option) for option in schema.options]}

    def convert_intersect(self, schema: OptionsSchema) -> JsonSchema:
        return {'allOf': [self.convert_schema(option) for option in schema.options]}

    def convert_recursive(self, schema: RecursiveSchema) -> JsonSchema:
        """
        Resolve a recursive schema to a ``$ref``. The getter is only called to
        learn the identity of the target, never to convert it.
        """
        target = schema.getter()
        name = self.context.get_definition_name(target)
        if name is None:
            raise MissingDefinitionError()
        return {'$ref': definition_ref(name)}


def to_json_schema(schema: Optional[SchemaNode] = None, definitions: Optional[Dict[str, SchemaNode]] = None,
                   strict_object_types: bool = False, date_strategy: Optional[str] = None,
                   undefined_strategy: Optional[str] = None, bigint_strategy: Optional[str] = None,
                   ignore_unknown_validation: bool = False) -> JsonSchema:
    """
    Convert a schema and/or named definitions to a JSON Schema document.

    Args:
        schema: The main schema, referenced at the root of the document.
        definitions: Named schemas, written to the document's ``definitions``.
        strict_object_types: Make every object type strict (``additionalProperties: false``).
        date_strategy: How date schemas are written, ``'string'`` or ``'integer'``.
        undefined_strategy: How undefined schemas are written, ``'any'``.
        bigint_strategy: How bigint schemas are written, ``'string'`` or ``'integer'``.
        ignore_unknown_validation: Drop refinements with no JSON Schema equivalent.

    Returns:
        The JSON Schema document as a dict.
    """
    if schema is None and not definitions:
        raise ConfigurationError("No main schema or definitions provided.")

    definitions = dict(definitions or {})
    options = ConversionOptions(strict_object_types, date_strategy, undefined_strategy,
                                bigint_strategy, ignore_unknown_validation)
    context = ConversionContext(options, definitions)
    converter = SchemaToJsonSchemaConverter(context)
    converted_definitions = converter.convert_definitions(definitions)

    json_schema: JsonSchema = {'$schema': JSON_SCHEMA_DRAFT}
    if schema is not None:
        root_name = context.get_definition_name(schema)
        if root_name is not None:
            json_schema['$ref'] = definition_ref(root_name)
        else:
            json_schema.update(converter.convert_schema(schema))
    if converted_definitions:
        json_schema['definitions'] = converted_definitions
    return json_schema


def convert_schema_to_json_schema_string(schema: Optional[SchemaNode] = None,
                                         definitions: Optional[Dict[str, SchemaNode]] = None,
                                         indent: Optional[int] = 4, **options: Any) -> str:
    """
    Convert a schema and/or named definitions to a JSON Schema string.
    """
    return json.dumps(to_json_schema(schema, definitions, **options), indent=indent)


def convert_schema_to_json_schema(json_schema_file: str, schema: Optional[SchemaNode] = None,
                                  definitions: Optional[Dict[str, SchemaNode]] = None,
                                  **options: Any) -> JsonSchema:
    """
    Convert a schema and/or named definitions and write the JSON Schema to a file.

    :param json_schema_file: The path to the output JSON schema file.
    :param schema: The main schema.
    :param definitions: Named schemas for the ``definitions`` section.
    :return: The JSON Schema document.
    """
    json_schema = to_json_schema(schema, definitions, **options)
    os.makedirs(os.path.dirname(json_schema_file) or '.', exist_ok=True)
    with open(json_schema_file, 'w', encoding='utf-8') as file:
        json.dump(json_schema, file, indent=4)
    return json_schema
