# core/schemas.py
from __future__ import annotations
from pydantic import BaseModel, Field, ConfigDict
from typing import Dict, Any, Literal, Optional

Mode = Literal["headings", "json"]


class ExtractRequest(BaseModel):
    """Uma requisição: texto colado OU arquivo (bytes + media type) + modo."""
    text: Optional[str] = None
    file: Optional[bytes] = None
    media_type: Optional[str] = None
    mode: Optional[str] = None
    mode_input: Optional[str] = None
    model_config = ConfigDict(extra="ignore")

    @property
    def has_file(self) -> bool:
        # arquivo tem precedência sobre o texto colado
        return self.file is not None


class ExtractionResult(BaseModel):
    success: bool
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    error_kind: Optional[str] = Field(default=None, exclude=True)
    state: Optional[str] = Field(default=None, exclude=True)

    @classmethod
    def ok(cls, data: Dict[str, Any], state: str | None = None) -> "ExtractionResult":
        return cls(success=True, data=data, state=state)

    @classmethod
    def failure(cls, message: str, kind: str, state: str | None = None) -> "ExtractionResult":
        return cls(success=False, error=message, error_kind=kind, state=state)

    def body(self) -> Dict[str, Any]:
        """Corpo de resposta: ``{success, data}`` ou ``{success, error}``."""
        if self.success:
            return {"success": True, "data": self.data}
        return {"success": False, "error": self.error}
