"""

Command line utility to convert the schemas defined in a Python module to JSON Schema.

"""


import argparse
import importlib
import importlib.util
import json
import os
import sys
from types import ModuleType
from typing import Dict, List

from schematize import _version
from schematize.schema import SchemaNode
from schematize.schematojsons import (BIGINT_STRATEGIES, DATE_STRATEGIES, UNDEFINED_STRATEGIES,
                                      convert_schema_to_json_schema, to_json_schema)


def load_module(module_ref: str) -> ModuleType:
    """Load a module from a .py file path or a dotted module name."""
    if module_ref.endswith('.py') or os.path.sep in module_ref:
        module_path = os.path.abspath(module_ref)
        module_name = os.path.splitext(os.path.basename(module_path))[0]
        spec = importlib.util.spec_from_file_location(module_name, module_path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot load module from {module_ref}")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module
    return importlib.import_module(module_ref)


def get_schema(module: ModuleType, name: str) -> SchemaNode:
    """Get a schema attribute from a module."""
    schema = getattr(module, name, None)
    if not isinstance(schema, SchemaNode):
        raise ValueError(f"{module.__name__}.{name} is not a schema")
    return schema


def collect_schemas(module: ModuleType, names: List[str]) -> Dict[str, SchemaNode]:
    """Collect the named schemas, or every module-level schema when no names are given."""
    if names:
        return {name: get_schema(module, name) for name in names}
    return {name: value for name, value in vars(module).items()
            if not name.startswith('_') and isinstance(value, SchemaNode)}


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(description='Convert the schemas of a Python module to JSON Schema.')
    parser.add_argument('--version', action='store_true', help='Print the version of schematize.')
    parser.add_argument('module', nargs='?', help='Path to a .py file or dotted module name defining the schemas.')
    parser.add_argument('--out', help='Output JSON Schema file. Prints to stdout when omitted.')
    parser.add_argument('--type', dest='type_name', help='Name of the main schema in the module.')
    parser.add_argument('--definitions', nargs='*', default=[], help='Names of the schemas to put in definitions.')
    parser.add_argument('--strict-object-types', action='store_true', help='Make all object types strict.')
    parser.add_argument('--date-strategy', choices=DATE_STRATEGIES, help='How date schemas are converted.')
    parser.add_argument('--bigint-strategy', choices=BIGINT_STRATEGIES, help='How bigint schemas are converted.')
    parser.add_argument('--undefined-strategy', choices=UNDEFINED_STRATEGIES, help='How undefined schemas are converted.')
    parser.add_argument('--ignore-unknown-validation', action='store_true',
                        help='Drop validations that cannot be expressed in JSON Schema.')
    return parser


def main():
    """Main function for the command line utility."""
    parser = create_parser()
    args = parser.parse_args()

    if getattr(args, 'version', False):
        print(f'schematize {_version.version}')
        return

    if not getattr(args, 'module', None):
        parser.print_help()
        return

    try:
        module = load_module(args.module)
        type_name = getattr(args, 'type_name', None)
        definition_names = getattr(args, 'definitions', None) or []
        schema = get_schema(module, type_name) if type_name else None
        if schema is not None and not definition_names:
            definitions = {}
        else:
            definitions = collect_schemas(module, definition_names)

        options = {
            'strict_object_types': getattr(args, 'strict_object_types', False),
            'date_strategy': getattr(args, 'date_strategy', None),
            'bigint_strategy': getattr(args, 'bigint_strategy', None),
            'undefined_strategy': getattr(args, 'undefined_strategy', None),
            'ignore_unknown_validation': getattr(args, 'ignore_unknown_validation', False),
        }
        output_file_path = getattr(args, 'out', None)
        if output_file_path:
            print(f'Converting schemas of {args.module} to {output_file_path}')
            convert_schema_to_json_schema(output_file_path, schema, definitions, **options)
        else:
            sys.stdout.write(json.dumps(to_json_schema(schema, definitions, **options), indent=4))
            sys.stdout.write('\n')

    except Exception as e:
        print("Error: ", str(e))
        sys.exit(1)

if __name__ == "__main__":
    main()
