# core/errors.py
"""Erros do pipeline de extração.

Cada erro carrega um ``kind`` estável (usado em log) e o ``status_code`` que a
borda HTTP devolve. A mensagem (``reason``) é a que vai para o cliente.
"""
from __future__ import annotations


class ExtractionError(Exception):
    """Base de todos os erros do pipeline."""

    kind: str = "ExtractionError"
    status_code: int = 500

    def __init__(self, reason: str = "An unexpected error occurred"):
        super().__init__(reason)
        self.reason = reason

    def __str__(self) -> str:
        return self.reason

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(kind={self.kind!r}, reason={self.reason!r})"


# ---------------- entrada do usuário ----------------
class UnsupportedFormat(ExtractionError):
    kind = "UnsupportedFormat"
    status_code = 400

    def __init__(self, media_type: str):
        super().__init__(f"Unsupported file type: {media_type}")
        self.media_type = media_type


class UploadTooLarge(ExtractionError):
    kind = "UploadTooLarge"
    status_code = 413

    def __init__(self, limit: int):
        super().__init__(f"File exceeds the upload limit of {limit} bytes")
        self.limit = limit


class EmptyDocumentContent(ExtractionError):
    kind = "EmptyDocumentContent"
    status_code = 400

    def __init__(self, reason: str = "Document content is required"):
        super().__init__(reason)


class InvalidMode(ExtractionError):
    kind = "InvalidMode"
    status_code = 400

    def __init__(self, reason: str = "Invalid mode specified"):
        super().__init__(reason)


class MissingModeInput(ExtractionError):
    kind = "MissingModeInput"
    status_code = 400


class EmptyHeadingList(ExtractionError):
    kind = "EmptyHeadingList"
    status_code = 400

    def __init__(self, reason: str = "Headings are required in headings mode"):
        super().__init__(reason)


class MalformedJson(ExtractionError):
    """JSON do schema com erro de sintaxe; guarda linha/coluna do parser."""

    kind = "MalformedJson"
    status_code = 400

    def __init__(self, reason: str, line: int, column: int):
        super().__init__(reason)
        self.line = line
        self.column = column


class InvalidSchema(ExtractionError):
    kind = "InvalidSchema"
    status_code = 400


# ---------------- leitura do documento ----------------
class ExtractionFailure(ExtractionError):
    kind = "ExtractionFailure"
    status_code = 422


# ---------------- modelo ----------------
class ModelCallFailed(ExtractionError):
    kind = "ModelCallFailed"
    status_code = 502


class ModelResponseNotJson(ExtractionError):
    kind = "ModelResponseNotJson"
    status_code = 502


class FieldTypeMismatch(ExtractionError):
    kind = "FieldTypeMismatch"
    status_code = 502

    def __init__(self, field: str, expected: str, actual: str):
        if expected == "array":
            msg = f"Field {field} should be an array"
        else:
            msg = f"Field {field} should be of type {expected}"
        super().__init__(f"Error processing model response: {msg} (got {actual})")
        self.field = field
        self.expected = expected
        self.actual = actual


STATUS_BY_KIND = {
    cls.kind: cls.status_code
    for cls in (
        UnsupportedFormat, UploadTooLarge, EmptyDocumentContent, InvalidMode,
        MissingModeInput, EmptyHeadingList, MalformedJson, InvalidSchema,
        ExtractionFailure, ModelCallFailed, ModelResponseNotJson, FieldTypeMismatch,
    )
}


def status_for(kind: str | None) -> int:
    return STATUS_BY_KIND.get(kind or "", 500)
