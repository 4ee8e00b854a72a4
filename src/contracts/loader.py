"""Schema loading utilities for API payload contracts."""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

import jsonschema

_REPO_ROOT = Path(__file__).resolve().parents[2]
_CONTRACT_ROOT = _REPO_ROOT / "PuzzleContracts"
_CATALOG_PATH = _CONTRACT_ROOT / "catalog.json"


@dataclass(frozen=True)
class SchemaDescriptor:
    """Descriptor describing a schema entry from the catalog."""

    payload_type: str
    version: str
    schema_id: str
    schema_path: str


_catalog_cache: Dict[str, SchemaDescriptor] | None = None
_schema_cache: Dict[str, Dict[str, Any]] = {}
_compiled_cache: Dict[str, Any] = {}


def load_catalog() -> Dict[str, SchemaDescriptor]:
    """Load and cache the schema catalog."""

    global _catalog_cache
    if _catalog_cache is not None:
        return _catalog_cache

    raw_catalog = json.loads(_CATALOG_PATH.read_text("utf-8"))
    catalog: Dict[str, SchemaDescriptor] = {}
    for payload_type, payload in raw_catalog.items():
        catalog[payload_type] = SchemaDescriptor(
            payload_type=payload_type,
            version=payload["version"],
            schema_id=payload["schema_id"],
            schema_path=payload["schema_path"],
        )
    _catalog_cache = catalog
    return catalog


def get_descriptor(payload_type: str) -> SchemaDescriptor:
    """Return the :class:`SchemaDescriptor` for *payload_type*."""

    catalog = load_catalog()
    if payload_type not in catalog:
        raise KeyError(f"Unknown payload type: {payload_type}")
    return catalog[payload_type]


def load_schema(descriptor: SchemaDescriptor) -> Dict[str, Any]:
    """Load the JSON schema referenced by *descriptor*."""

    if "://" in descriptor.schema_path:
        raise ValueError("Remote schema paths are not permitted")

    resolved = (_CONTRACT_ROOT / descriptor.schema_path).resolve()
    if not str(resolved).startswith(str(_CONTRACT_ROOT)):
        raise ValueError("Schema path escapes the contracts directory")

    cache_key = descriptor.schema_id
    if cache_key in _schema_cache:
        return copy.deepcopy(_schema_cache[cache_key])

    schema = json.loads(resolved.read_text("utf-8"))
    if "$id" in schema and schema["$id"] != descriptor.schema_id:
        raise ValueError(
            f"Schema id mismatch: catalog has {descriptor.schema_id!r}, schema has {schema['$id']!r}"
        )

    _schema_cache[cache_key] = schema
    return copy.deepcopy(schema)


def compiled_validator(payload_type: str) -> jsonschema.protocols.Validator:
    """Return a cached validator instance for *payload_type*."""

    if payload_type in _compiled_cache:
        return _compiled_cache[payload_type]

    schema = load_schema(get_descriptor(payload_type))
    validator_cls = jsonschema.validators.validator_for(schema)
    validator_cls.check_schema(schema)
    validator = validator_cls(schema)
    _compiled_cache[payload_type] = validator
    return validator


__all__ = [
    "SchemaDescriptor",
    "compiled_validator",
    "get_descriptor",
    "load_catalog",
    "load_schema",
]
