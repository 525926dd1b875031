"""

Convert a Kafka Connect struct schema to an Avro schema.

"""

import json
import logging
from typing import Any, Dict, Optional, Tuple

from fastavro.schema import parse_schema

from kstructize.common import avro_name, avro_namespace

logger = logging.getLogger(__name__)

kafka_to_avro_types = {
    'int8': 'int',
    'int16': 'int',
    'int32': 'int',
    'int64': 'long',
    'float32': 'float',
    'float': 'float',
    'float64': 'double',
    'double': 'double',
    'string': 'string',
    'boolean': 'boolean',
    'bytes': 'bytes',
}


def record_name_and_namespace(type_path: str, namespace: str) -> Tuple[str, str]:
    """Splits a dotted type path into an Avro record name and namespace.

    Nested records live in a namespace derived from their parent path, so
    that two structs in different places of the tree never clash.
    """
    name = avro_name(type_path.rsplit('.', 1)[-1])
    path_namespace = type_path.rsplit('.', 1)[0] + 'Types' if '.' in type_path else ''
    if namespace and path_namespace:
        return name, avro_namespace(namespace + '.' + path_namespace)
    return name, avro_namespace(namespace or path_namespace)


def make_nullable(avro_type: Any, optional: bool) -> Any:
    """Wraps an Avro type into a union with null if optional."""
    if optional:
        return ['null', avro_type]
    return avro_type


def kafka_type_to_avro_type(kafka_schema: Dict[str, Any], type_path: str, namespace: str) -> Any:
    """Convert a Kafka schema type to an Avro type, ignoring optionality."""
    kafka_type = kafka_schema.get('type')
    if kafka_type in kafka_to_avro_types:
        return kafka_to_avro_types[kafka_type]
    if kafka_type == 'struct':
        return convert_struct(kafka_schema, type_path, namespace)
    if kafka_type == 'array':
        items = kafka_schema.get('items')
        if not isinstance(items, dict):
            raise ValueError(f"Array schema of '{type_path}' has no items")
        item_type = kafka_type_to_avro_type(items, type_path, namespace)
        return {'type': 'array', 'items': make_nullable(item_type, items.get('optional', False))}
    if kafka_type == 'map':
        keys = kafka_schema.get('keys', {})
        values = kafka_schema.get('values')
        if keys.get('type') != 'string':
            raise ValueError(f"Map schema of '{type_path}' must have string keys, found {keys.get('type')}")
        if not isinstance(values, dict):
            raise ValueError(f"Map schema of '{type_path}' has no values")
        value_type = kafka_type_to_avro_type(values, type_path, namespace)
        return {'type': 'map', 'values': make_nullable(value_type, values.get('optional', False))}
    raise ValueError(f"Unsupported Kafka type: {kafka_type}")


def convert_field(field: Dict[str, Any], type_path: str, namespace: str, name: Optional[str] = None) -> Dict[str, Any]:
    """Convert a Kafka field to an Avro field."""
    original_name = field['field']
    name = name or avro_name(original_name)
    optional = field.get('optional', False)
    avro_field: Dict[str, Any] = {
        'name': name,
        'type': make_nullable(kafka_type_to_avro_type(field, f'{type_path}.{name}', namespace), optional)
    }
    if optional:
        avro_field['default'] = None
    if name != original_name:
        avro_field['altnames'] = {'kafka': original_name}
    return avro_field


def convert_struct(kafka_schema: Dict[str, Any], type_path: str, namespace: str) -> Dict[str, Any]:
    """Convert a Kafka struct schema to an Avro record."""
    name, record_namespace = record_name_and_namespace(type_path, namespace)
    avro_schema: Dict[str, Any] = {
        'type': 'record',
        'name': name,
    }
    if record_namespace:
        avro_schema['namespace'] = record_namespace
    fields = []
    used_names = set()
    for field in kafka_schema.get('fields', []):
        # sanitised names can collide, e.g. 'a-b' and 'a_b'
        field_name = avro_name(field['field'])
        unique_name = field_name
        suffix = 1
        while unique_name in used_names:
            unique_name = f"{field_name}_{suffix}"
            suffix += 1
        if unique_name != field_name:
            logger.warning("Renaming field %s of %s to %s", field['field'], type_path, unique_name)
        used_names.add(unique_name)
        fields.append(convert_field(field, type_path, namespace, unique_name))
    avro_schema['fields'] = fields
    return avro_schema


def convert_schema(kafka_schema: Dict[str, Any], record_name: Optional[str] = None, namespace: str = '') -> Dict[str, Any]:
    """Convert a Kafka struct schema to an Avro schema.

    Args:
        kafka_schema: Kafka Connect schema in its JSON form
        record_name: Name of the root record; defaults to the schema's name
            or 'Document'
        namespace: Avro namespace; a dotted root name contributes its prefix
            when no namespace is given

    Returns:
        The Avro record schema
    """
    if kafka_schema.get('type') != 'struct':
        raise ValueError(f"Root of a Kafka schema must be a struct, found {kafka_schema.get('type')}")
    root_name = record_name or kafka_schema.get('name') or 'Document'
    if '.' in root_name:
        root_namespace, root_name = root_name.rsplit('.', 1)
        namespace = namespace or root_namespace
    return convert_struct(kafka_schema, avro_name(root_name), namespace)


def convert_kafka_struct_to_avro_schema(kafka_schema_file_path, avro_file_path, record_name=None, namespace=''):
    """Read a Kafka schema from a file, convert it to an Avro schema, and save it to another file."""

    if not kafka_schema_file_path:
        raise ValueError("Kafka schema file path is required.")

    # Open and read the Kafka schema file
    with open(kafka_schema_file_path, 'r', encoding='utf-8') as kafka_schema_file:
        kafka_schema_data = json.load(kafka_schema_file)

    # Messages written by the JSON converter carry the schema next to the payload
    if isinstance(kafka_schema_data, dict) and 'schema' in kafka_schema_data:
        kafka_schema = kafka_schema_data['schema']
    else:
        kafka_schema = kafka_schema_data
    avro_schema = convert_schema(kafka_schema, record_name, namespace or '')

    parse_schema(avro_schema)
    logger.info("Converted %s to Avro record %s", kafka_schema_file_path, avro_schema['name'])

    # Write the converted Avro schema to a file
    with open(avro_file_path, 'w', encoding='utf-8') as avro_file:
        json.dump(avro_schema, avro_file, indent=4)
