# core/validators.py
from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict

from pydantic import ValidationError

from .errors import FieldTypeMismatch, InvalidSchema, ModelResponseNotJson
from .models import FIELD_TYPES, FieldType, Schema

logger = logging.getLogger(__name__)

FENCE_PATTERN = re.compile(r"^```[a-zA-Z]*\s*\n(?P<body>.*?)\n?```$", re.DOTALL)


# =============================================================================
# Schema do usuário
# =============================================================================
def _invalid(reason: str) -> InvalidSchema:
    return InvalidSchema(f"Invalid JSON structure: {reason}")


def validate_schema(raw: Any) -> Schema:
    """
    Regras (todas obrigatórias):
      1) objeto com type == "object"
      2) "properties" é um objeto
      3) toda propriedade tem "type"
      4) "type" pertence a string|number|boolean|array|object
    Descritores aninhados não são validados além do próprio "type".
    """
    if not isinstance(raw, dict):
        raise _invalid("Invalid schema: must be an object")
    if raw.get("type") != "object":
        raise _invalid('Schema type must be "object"')

    properties = raw.get("properties")
    if not isinstance(properties, dict):
        raise _invalid('Schema must contain "properties" object')

    for key, value in properties.items():
        if not isinstance(value, dict) or not value.get("type"):
            raise _invalid(f'Property "{key}" must specify a type')
        if value["type"] not in FIELD_TYPES:
            raise _invalid(f'Property "{key}" has invalid type: {value["type"]}')

    payload = dict(raw)
    required = payload.get("required")
    if required is not None and not (
        isinstance(required, list) and all(isinstance(r, str) for r in required)
    ):
        logger.warning("ignorando 'required' fora do formato lista de strings: %r", required)
        payload.pop("required")

    try:
        return Schema.model_validate(payload)
    except ValidationError as e:
        # regras acima já cobrem os casos conhecidos
        raise _invalid(str(e)) from e


# =============================================================================
# Resposta do modelo
# =============================================================================
def _strip_fence(text: str) -> str:
    s = text.strip()
    m = FENCE_PATTERN.match(s)
    return m.group("body") if m else s


def json_type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def matches_type(value: Any, field_type: FieldType) -> bool:
    if field_type is FieldType.ARRAY:
        return isinstance(value, list)
    # bool é subclasse de int em Python: não conta como number
    return json_type_name(value) == field_type.value


def reconcile_response(raw: str, schema: Schema) -> Dict[str, Any]:
    """
    1) parse JSON (falha -> ModelResponseNotJson)
    2) campo ausente -> default do tipo; presente com tipo errado -> FieldTypeMismatch
    3) chaves extras do modelo são mantidas, depois das do schema
    """
    try:
        parsed = json.loads(_strip_fence(raw or "") or "{}")
    except (TypeError, ValueError) as e:
        raise ModelResponseNotJson(f"Error processing model response: {e}") from e
    if not isinstance(parsed, dict):
        raise ModelResponseNotJson(
            f"Error processing model response: expected a JSON object, got {json_type_name(parsed)}"
        )

    out: Dict[str, Any] = {}
    for name, descriptor in schema.properties.items():
        if name not in parsed:
            out[name] = descriptor.default_value()
            continue
        value = parsed[name]
        if not matches_type(value, descriptor.type):
            raise FieldTypeMismatch(name, descriptor.type.value, json_type_name(value))
        out[name] = value

    for name, value in parsed.items():
        if name not in out:
            out[name] = value
    return out
