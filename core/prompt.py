# core/prompt.py
"""Template do prompt de extração."""
from __future__ import annotations

import json

from .models import Schema

PROMPT_TEMPLATE = """
Analyze the following document and extract information according to the specified structure.
Return the information in the EXACT format specified, maintaining the exact same property names.

Required information:
{instructions}

Schema structure for reference:
{schema_json}

Document text:
{text}

Important:
1. Ensure the output matches the schema structure EXACTLY
2. Return ONLY valid JSON
3. Use the EXACT same property names as provided
4. Match the expected data types for each field
5. For non-obvious or uncertain values, make best estimates based on context
6. If a value is not found, use a reasonable default for the type
"""


def field_instructions(schema: Schema) -> str:
    lines = []
    for name, descriptor in schema.properties.items():
        kind = descriptor.type.value
        description = descriptor.description
        if description is None or description == "":
            description = f"Extract the most relevant {kind} value"
        lines.append(f"- {name} ({kind}): {description}")
    return "\n".join(lines)


def build_prompt(schema: Schema, text: str) -> str:
    return PROMPT_TEMPLATE.format(
        instructions=field_instructions(schema),
        schema_json=json.dumps(schema.as_json(), indent=2, ensure_ascii=False),
        text=text,
    )
