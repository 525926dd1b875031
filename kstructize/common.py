"""
Common utility functions for kstructize.
"""

import json
import re
from typing import Any


def avro_name(name):
    """Convert a name into an Avro name."""
    if isinstance(name, int):
        name = '_'+str(name)
    val = re.sub(r'[^a-zA-Z0-9_]', '_', name)
    if re.match(r'^[0-9]', val):
        val = '_' + val
    return val


def avro_namespace(name):
    """Convert a dotted name into an Avro namespace."""
    val = re.sub(r'[^a-zA-Z0-9_\.]', '_', name)
    if re.match(r'^[0-9]', val):
        val = '_' + val
    return val


def node_text(value: Any, max_length: int = 40) -> str:
    """Renders a JSON value for use in error messages.

    Scalars are rendered as their JSON text, containers are abbreviated
    once they grow past max_length characters.
    """
    try:
        text = json.dumps(value, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        text = repr(value)
    if len(text) > max_length:
        text = text[:max_length - 3] + '...'
    return text


def field_path(parent: str, name: str) -> str:
    """Joins a field name onto a dotted path."""
    return f'{parent}.{name}' if parent else name
