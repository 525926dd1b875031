import importlib

mod = "kstructize"
class LazyLoader:
    """
    Lazy loader for the kstructize functions to speed up startup time.
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
    "infer_kstruct_schema": (f"{mod}.schema_inference", "infer_kstruct_schema"),
    "KStructSchemaInferrer": (f"{mod}.schema_inference", "KStructSchemaInferrer"),
    "SchemaInferenceError": (f"{mod}.schema_inference", "SchemaInferenceError"),
    "InconsistentArrayTypeError": (f"{mod}.schema_inference", "InconsistentArrayTypeError"),
    "UnrecognizedArrayMemberError": (f"{mod}.schema_inference", "UnrecognizedArrayMemberError"),
    "MaxDepthExceededError": (f"{mod}.schema_inference", "MaxDepthExceededError"),
    "KStructSchema": (f"{mod}.kstruct", "KStructSchema"),
    "KStructType": (f"{mod}.kstruct", "KStructType"),
    "convert_json_to_kstruct": (f"{mod}.jsontokstruct", "convert_json_to_kstruct"),
    "convert_kafka_struct_to_avro_schema": (f"{mod}.kstructtoavro", "convert_kafka_struct_to_avro_schema"),
}

_lazy_loader = LazyLoader(_mappings)

def __getattr__(name):
    return getattr(_lazy_loader, name)
