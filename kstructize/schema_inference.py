"""Schema inference from JSON documents.

This module derives a Kafka Connect struct schema from a single parsed JSON
document:
- scalars map to optional primitive schemas, with integers sized to int32,
  int64 or double by magnitude
- objects map to optional structs whose fields keep document order
- arrays must be homogeneous; arrays of objects fold the fields of all
  elements into one union struct

Fields that carry no usable type information (null, empty arrays, arrays of
nulls) are dropped rather than reported.
"""

import logging
from collections.abc import Mapping
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from kstructize.common import field_path, node_text
from kstructize.kstruct import (
    OPTIONAL_BOOLEAN_SCHEMA,
    OPTIONAL_FLOAT64_SCHEMA,
    OPTIONAL_INT32_SCHEMA,
    OPTIONAL_INT64_SCHEMA,
    OPTIONAL_STRING_SCHEMA,
    KStructSchema,
    StructBuilder,
    optional_array,
)

logger = logging.getLogger(__name__)

JsonNode = Dict[str, 'JsonNode'] | List['JsonNode'] | str | bool | int | float | None

INT32_MIN = -(1 << 31)
INT32_MAX = (1 << 31) - 1
INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1


class JsonNodeType(Enum):
    """Tags of JSON values."""
    NULL = 'null'
    BOOLEAN = 'boolean'
    NUMBER = 'number'
    STRING = 'string'
    ARRAY = 'array'
    OBJECT = 'object'
    UNKNOWN = 'unknown'


def json_node_type(value: Any) -> JsonNodeType:
    """Returns the JSON tag of a parsed value."""
    if value is None:
        return JsonNodeType.NULL
    # bool is a subclass of int
    if isinstance(value, bool):
        return JsonNodeType.BOOLEAN
    if isinstance(value, (int, float, Decimal)):
        return JsonNodeType.NUMBER
    if isinstance(value, str):
        return JsonNodeType.STRING
    if isinstance(value, (list, tuple)):
        return JsonNodeType.ARRAY
    if isinstance(value, Mapping):
        return JsonNodeType.OBJECT
    return JsonNodeType.UNKNOWN


class SchemaInferenceError(ValueError):
    """
    Exception raised when no schema can be inferred for a document.

    Attributes:
        message: Human-readable error description
        context: Dotted path of the field being inferred, if known
    """

    def __init__(self, message: str, context: Optional[str] = None) -> None:
        self.message = message
        self.context = context
        full_message = message
        if context:
            full_message = f"{message} (field: {context})"
        super().__init__(full_message)


class InconsistentArrayTypeError(SchemaInferenceError):
    """
    Exception raised when the non-null elements of an array disagree on
    their JSON type, or on their numeric width.

    Attributes:
        reference_type: Type of the first non-null element
        element_type: Type of the conflicting element
    """

    def __init__(self, message: str, reference_type: Any, element_type: Any,
                 context: Optional[str] = None) -> None:
        self.reference_type = reference_type
        self.element_type = element_type
        super().__init__(message, context)


class UnrecognizedArrayMemberError(SchemaInferenceError):
    """Raised when the elements of an array map to no known schema."""


class MaxDepthExceededError(SchemaInferenceError):
    """Raised when a document nests deeper than the configured limit."""


def scalar_to_schema(value: Any) -> Optional[KStructSchema]:
    """Maps a scalar JSON value to an optional primitive schema.

    Args:
        value: A parsed JSON value

    Returns:
        The primitive schema, or None for null, arrays, objects and values
        of unknown type
    """
    node_type = json_node_type(value)
    if node_type == JsonNodeType.STRING:
        return OPTIONAL_STRING_SCHEMA
    if node_type == JsonNodeType.BOOLEAN:
        return OPTIONAL_BOOLEAN_SCHEMA
    if node_type == JsonNodeType.NUMBER:
        if isinstance(value, int):
            if INT32_MIN <= value <= INT32_MAX:
                return OPTIONAL_INT32_SCHEMA
            if INT64_MIN <= value <= INT64_MAX:
                return OPTIONAL_INT64_SCHEMA
        return OPTIONAL_FLOAT64_SCHEMA
    return None


def first_array_element(array: List[Any], context: Optional[str] = None) -> Any:
    """Returns the first non-null element of an array after checking that
    all non-null elements share its type.

    Args:
        array: The array to check
        context: Field path used in error messages

    Returns:
        The first non-null element, or None if there is none

    Raises:
        InconsistentArrayTypeError: If two non-null elements have different
            JSON types, or are numbers of different width
    """
    reference = None
    reference_type = JsonNodeType.NULL
    reference_schema = None
    for element in array:
        element_type = json_node_type(element)
        if element_type == JsonNodeType.NULL:
            continue

        if reference_type == JsonNodeType.NULL:
            reference = element
            reference_type = element_type
            if reference_type == JsonNodeType.NUMBER:
                reference_schema = scalar_to_schema(reference)
            continue

        if element_type != reference_type:
            raise InconsistentArrayTypeError(
                f"Field is not a homogeneous array ({node_text(reference)} x {element_type.name})",
                reference_type, element_type, context)

        if reference_type == JsonNodeType.NUMBER:
            element_schema = scalar_to_schema(element)
            if element_schema != reference_schema:
                raise InconsistentArrayTypeError(
                    f"Field is not a homogeneous array ({node_text(reference)} x {node_text(element)}), "
                    f"different number types ({reference_schema} x {element_schema})",
                    reference_schema.type, element_schema.type, context)

    return reference


class KStructSchemaInferrer:
    """Infers Kafka Connect struct schemas from JSON documents.

    The inferrer only holds configuration; it is safe to share between
    threads as long as each call gets its own document.
    """

    def __init__(self, max_depth: Optional[int] = None):
        """Initialize the schema inferrer.

        Args:
            max_depth: Maximum nesting depth of objects and arrays, counting
                the root object as 1. None means no limit.
        """
        if max_depth is not None and max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {max_depth}")
        self.max_depth = max_depth

    def infer(self, document: JsonNode, name: Optional[str] = None) -> KStructSchema:
        """Infers the schema of a document.

        Args:
            document: A parsed JSON object, or None
            name: Optional Connect schema name of the root struct

        Returns:
            An optional struct schema; empty if the document is None, empty
            or not an object
        """
        if document is not None and not isinstance(document, Mapping):
            logger.warning("Document root is %s, not an object; inferring an empty struct",
                           json_node_type(document).value)
            return StructBuilder(name=name).build()
        return self.build_struct(document, name=name)

    def build_struct(self, document: Optional[Mapping], path: str = '', depth: int = 0,
                     name: Optional[str] = None) -> KStructSchema:
        """Builds the struct schema of an object, in field order."""
        builder = StructBuilder(name=name)
        if document is not None:
            depth = self._descend(path, depth)
            self._add_fields(builder, document, path, depth)
        return builder.build()

    def _add_fields(self, builder: StructBuilder, document: Mapping, path: str, depth: int) -> None:
        for name, value in document.items():
            name = str(name)
            schema = self.value_to_schema(value, field_path(path, name), depth)
            if schema is None:
                logger.debug("Dropping field %s, no schema for %s",
                             field_path(path, name), node_text(value))
            elif not builder.add_field(name, schema):
                logger.debug("Ignoring later definition of field %s", field_path(path, name))

    def value_to_schema(self, value: Any, path: str = '', depth: int = 0) -> Optional[KStructSchema]:
        """Maps any JSON value to a schema.

        Returns:
            The schema, or None when the value carries no type information
            (null, an empty array, an array of nulls, or an unknown type)
        """
        node_type = json_node_type(value)
        if node_type == JsonNodeType.OBJECT:
            return self.build_struct(value, path, depth)
        if node_type == JsonNodeType.ARRAY:
            if len(value) == 0:
                return None
            items = self.find_array_member_schema(value, path, self._descend(path, depth))
            if items is None:
                return None
            return optional_array(items)
        return scalar_to_schema(value)

    def find_array_member_schema(self, array: List[Any], path: str = '', depth: int = 0) -> Optional[KStructSchema]:
        """Determines the schema shared by the elements of an array.

        Args:
            array: A non-empty array
            path: Field path of the array
            depth: Nesting depth of the array

        Returns:
            The element schema, or None if all elements are null

        Raises:
            InconsistentArrayTypeError: If the array is not homogeneous
            UnrecognizedArrayMemberError: If the elements are neither
                objects nor scalars (e.g. nested arrays)
        """
        sample = first_array_element(array, path)
        sample_type = json_node_type(sample)
        if sample_type == JsonNodeType.NULL:
            return None
        if sample_type == JsonNodeType.OBJECT:
            return self.build_union(array, path, depth)

        schema = scalar_to_schema(sample)
        if schema is None:
            raise UnrecognizedArrayMemberError(
                f"Array '{node_text(array)}' has unrecognized member schema", path)
        return schema

    def build_union(self, array: List[Any], path: str = '', depth: int = 0) -> KStructSchema:
        """Folds the fields of all objects in an array into one struct.

        Fields are kept in the order they are first seen across the array,
        and the first definition of a field name wins.
        """
        builder = StructBuilder()
        item_path = f'{path}[]'
        item_depth = None
        for element in array:
            if not isinstance(element, Mapping):
                continue
            if item_depth is None:
                item_depth = self._descend(item_path, depth)
            self._add_fields(builder, element, item_path, item_depth)
        logger.debug("Folded %d objects of %s into %d fields", len(array), path or '<root>', len(builder))
        return builder.build()

    def _descend(self, path: str, depth: int) -> int:
        depth += 1
        if self.max_depth is not None and depth > self.max_depth:
            logger.warning("Maximum nesting depth exceeded at %s", path or '<root>')
            raise MaxDepthExceededError(
                f"Maximum nesting depth ({self.max_depth}) exceeded", path or None)
        return depth


def infer_kstruct_schema(document: JsonNode, max_depth: Optional[int] = None,
                         name: Optional[str] = None) -> KStructSchema:
    """Infers a Kafka Connect struct schema from a parsed JSON document.

    Args:
        document: A parsed JSON object, or None
        max_depth: Maximum nesting depth (None = unlimited)
        name: Optional Connect schema name of the root struct

    Returns:
        The inferred optional struct schema
    """
    inferrer = KStructSchemaInferrer(max_depth=max_depth)
    return inferrer.infer(document, name=name)
