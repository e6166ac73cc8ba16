# core/models.py
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# --------------------------------------------------------------------
# Tipos aceitos em cada propriedade do schema
# --------------------------------------------------------------------
class FieldType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


FIELD_TYPES = tuple(t.value for t in FieldType)


# --------------------------------------------------------------------
# Descritor de campo: chaves extras (items, properties aninhadas...) são
# preservadas para o prompt, mas não validadas
# --------------------------------------------------------------------
class FieldDescriptor(BaseModel):
    model_config = ConfigDict(extra="allow", use_enum_values=False)

    type: FieldType
    # qualquer valor JSON; vira texto só na hora do prompt
    description: Optional[Any] = None

    def default_value(self) -> Any:
        return default_for(self.type)


class Schema(BaseModel):
    """Contrato de saída: sempre ``type: object`` com propriedades ordenadas."""

    model_config = ConfigDict(extra="allow")

    type: str = "object"
    properties: Dict[str, FieldDescriptor] = Field(default_factory=dict)
    required: Optional[List[str]] = None

    def field_names(self) -> List[str]:
        return list(self.properties.keys())

    def as_json(self) -> Dict[str, Any]:
        """
        Dict JSON-serializável, na ordem de inserção. Só saem as chaves que
        o usuário escreveu (inclusive as ``null``); ``type`` sempre sai.
        """
        return {"type": self.type, **self.model_dump(mode="json", exclude_unset=True)}


# --------------------------------------------------------------------
# Defaults por tipo (campo ausente na resposta do modelo)
# --------------------------------------------------------------------
def default_for(field_type: FieldType) -> Any:
    if field_type is FieldType.ARRAY:
        return []
    if field_type is FieldType.OBJECT:
        return {}
    if field_type is FieldType.NUMBER:
        return 0
    if field_type is FieldType.BOOLEAN:
        return False
    return ""


def string_schema(names: List[str]) -> Schema:
    """Schema do modo headings: tudo string e obrigatório."""
    return Schema(
        properties={n: FieldDescriptor(type=FieldType.STRING) for n in names},
        required=list(names),
    )
