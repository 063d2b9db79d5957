import importlib

mod = "schematize"
class LazyLoader:
    """
    Lazy loader for the schematize functions to speed up startup time.
    """
    def __init__(self, mappings):
        self._modules = {}
        self._mappings = mappings

    def _load_module(self, module_name):
        if module_name not in self._modules:
            self._modules[module_name] = importlib.import_module(module_name)
        return self._modules[module_name]

    def __getattr__(self, item):
        if item in self._mappings:
            module_name, func_name = self._mappings[item]
            module = self._load_module(module_name)
            return getattr(module, func_name)
        else:
            return self._load_module(f"{mod}.{item}")

# Define the functions and their corresponding module paths
_mappings = {
    "to_json_schema": (f"{mod}.schematojsons", "to_json_schema"),
    "convert_schema_to_json_schema": (f"{mod}.schematojsons", "convert_schema_to_json_schema"),
    "convert_schema_to_json_schema_string": (f"{mod}.schematojsons", "convert_schema_to_json_schema_string"),
    "with_json_schema_features": (f"{mod}.extension", "with_json_schema_features"),
    "get_json_schema_features": (f"{mod}.extension", "get_json_schema_features"),
    "validate_instance": (f"{mod}.schemavalidator", "validate_instance"),
    "is_valid": (f"{mod}.schemavalidator", "is_valid"),
}

_lazy_loader = LazyLoader(_mappings)

def __getattr__(name):
    return getattr(_lazy_loader, name)
