# core/schema_builder.py
from __future__ import annotations

import json
from typing import List, Optional

from .errors import EmptyHeadingList, InvalidMode, MalformedJson, MissingModeInput
from .models import Schema, string_schema
from .validators import validate_schema

MODES = ("headings", "json")


def parse_headings(headings: str) -> List[str]:
    """Separa por vírgula, apara, descarta vazios e repetidos (mantém a 1ª)."""
    out: List[str] = []
    for tok in (headings or "").split(","):
        name = tok.strip()
        if name and name not in out:
            out.append(name)
    return out


def schema_from_headings(headings: str) -> Schema:
    names = parse_headings(headings)
    if not names:
        raise EmptyHeadingList()
    return string_schema(names)


def schema_from_json(structure: str) -> Schema:
    try:
        raw = json.loads(structure)
    except json.JSONDecodeError as e:
        # lineno/colno vêm do offset calculado pelo próprio parser
        raise MalformedJson(
            f"Invalid JSON structure: {e.msg} at line {e.lineno}, column {e.colno}",
            line=e.lineno,
            column=e.colno,
        ) from e
    return validate_schema(raw)


def build_schema(mode: Optional[str], mode_input: Optional[str]) -> Schema:
    if mode == "headings":
        if not (mode_input or "").strip():
            raise EmptyHeadingList()
        return schema_from_headings(mode_input)
    if mode == "json":
        if not (mode_input or "").strip():
            raise MissingModeInput("JSON structure is required in JSON mode")
        return schema_from_json(mode_input)
    raise InvalidMode()
