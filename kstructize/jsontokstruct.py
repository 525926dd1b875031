"""Infers a Kafka Connect struct schema from a JSON document file.

This module provides:
- j2k: Infer a Kafka Connect JSON schema from a JSON file
"""

import json
import logging
import os
from typing import Any, Optional

from kstructize.schema_inference import infer_kstruct_schema

logger = logging.getLogger(__name__)


def convert_json_to_kstruct(
    input_file: str,
    kstruct_schema_file: str,
    indent: int = 2,
    max_depth: Optional[int] = None,
    schema_name: Optional[str] = None
) -> None:
    """Infers a Kafka Connect struct schema from a JSON file.

    Reads one JSON document, derives its schema and writes the schema in
    the Kafka Connect JSON schema form.

    Args:
        input_file: Path of the JSON document
        kstruct_schema_file: Output path for the Kafka Connect schema
        indent: Indentation of the written JSON
        max_depth: Maximum nesting depth of the document (None = unlimited)
        schema_name: Connect schema name of the root struct
    """
    if not input_file:
        raise ValueError("An input file is required")

    document = _load_json_document(input_file)
    schema = infer_kstruct_schema(document, max_depth=max_depth, name=schema_name)
    logger.info("Inferred %d top-level fields from %s", len(schema.fields), input_file)

    # Ensure output directory exists
    output_dir = os.path.dirname(kstruct_schema_file)
    if output_dir and not os.path.exists(output_dir):
        os.makedirs(output_dir)

    with open(kstruct_schema_file, 'w', encoding='utf-8') as f:
        json.dump(schema.to_dict(), f, indent=indent)


def _load_json_document(input_file: str) -> Any:
    """Loads the JSON object held in a file.

    Raises:
        ValueError: If the file is empty, is not valid JSON, or does not
            hold an object at the root
    """
    with open(input_file, 'r', encoding='utf-8') as f:
        content = f.read().strip()

    if not content:
        raise ValueError(f"No JSON data found in {input_file}")

    try:
        document = json.loads(content)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {input_file}: {e}") from e

    if not isinstance(document, dict):
        raise ValueError(
            f"The root of {input_file} must be a JSON object, found {type(document).__name__}")
    return document
