"""Kafka Connect struct schema model.

Schema values are immutable once built. Structs are assembled with the
mutable StructBuilder, which keeps field names unique (the first definition
of a name wins) and preserves the order in which fields were first seen.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class KStructType(Enum):
    """Kafka Connect schema types, valued by their Connect JSON names."""
    STRING = 'string'
    BOOLEAN = 'boolean'
    INT32 = 'int32'
    INT64 = 'int64'
    FLOAT64 = 'double'
    ARRAY = 'array'
    STRUCT = 'struct'

    @property
    def is_primitive(self) -> bool:
        return self not in (KStructType.ARRAY, KStructType.STRUCT)


@dataclass(frozen=True)
class KStructField:
    """A named field of a struct schema."""
    name: str
    schema: 'KStructSchema'


@dataclass(frozen=True)
class KStructSchema:
    """An inferred Kafka Connect schema."""
    type: KStructType
    optional: bool = True
    fields: Tuple[KStructField, ...] = ()
    items: Optional['KStructSchema'] = None
    name: Optional[str] = None

    def field(self, name: str) -> Optional[KStructField]:
        """Returns the field with the given name, or None."""
        return next((f for f in self.fields if f.name == name), None)

    def field_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def to_dict(self) -> Dict[str, Any]:
        """Renders the schema in the Kafka Connect JSON schema form.

        Returns:
            A dict such as ``{"type": "struct", "fields": [...], "optional": true}``
        """
        result: Dict[str, Any] = {'type': self.type.value}
        if self.type == KStructType.STRUCT:
            fields = []
            for f in self.fields:
                rendered = f.schema.to_dict()
                rendered['field'] = f.name
                fields.append(rendered)
            result['fields'] = fields
        elif self.type == KStructType.ARRAY and self.items is not None:
            result['items'] = self.items.to_dict()
        result['optional'] = self.optional
        if self.name:
            result['name'] = self.name
        return result

    def __str__(self) -> str:
        if self.type.is_primitive:
            return self.type.name
        if self.type == KStructType.ARRAY:
            return f'Array{{{self.items}}}'
        inner = ', '.join(f'{f.name}: {f.schema}' for f in self.fields)
        return f'Struct{{{inner}}}'


OPTIONAL_STRING_SCHEMA = KStructSchema(KStructType.STRING)
OPTIONAL_BOOLEAN_SCHEMA = KStructSchema(KStructType.BOOLEAN)
OPTIONAL_INT32_SCHEMA = KStructSchema(KStructType.INT32)
OPTIONAL_INT64_SCHEMA = KStructSchema(KStructType.INT64)
OPTIONAL_FLOAT64_SCHEMA = KStructSchema(KStructType.FLOAT64)


def optional_array(items: KStructSchema) -> KStructSchema:
    return KStructSchema(KStructType.ARRAY, items=items)


@dataclass
class StructBuilder:
    """Collects the fields of one struct schema.

    Used both for a single object and for the union of all objects in an
    array. Field names are unique: adding a name that is already present is
    a no-op, so the first definition always wins.
    """
    name: Optional[str] = None
    _fields: Dict[str, KStructSchema] = field(default_factory=dict)

    def has_field(self, name: str) -> bool:
        return name in self._fields

    def add_field(self, name: str, schema: KStructSchema) -> bool:
        """Adds a field unless one with the same name exists.

        Args:
            name: Field name
            schema: Field schema

        Returns:
            True if the field was added, False if the name was already taken
        """
        if name in self._fields:
            return False
        self._fields[name] = schema
        return True

    def __len__(self) -> int:
        return len(self._fields)

    def build(self) -> KStructSchema:
        fields = tuple(KStructField(n, s) for n, s in self._fields.items())
        return KStructSchema(KStructType.STRUCT, fields=fields, name=self.name)
