# core/orchestrator.py
from __future__ import annotations

import logging
import os
from enum import Enum
from typing import Any, Dict, Optional, Protocol

from .document_reader import DocumentReader, extract_with, reader_for
from .errors import EmptyDocumentContent, ExtractionError, ExtractionFailure, ModelCallFailed
from .llm_client import LLMClient
from .models import Schema
from .prompt import build_prompt
from .schema_builder import build_schema
from .schemas import ExtractRequest, ExtractionResult
from .validators import reconcile_response

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Config
# -----------------------------------------------------------------------------
VERBOSE = os.getenv("ORCH_VERBOSE", "0") == "1"


class ModelBackend(Protocol):
    def complete(self, prompt: str, schema: Schema) -> str: ...


class State(str, Enum):
    IDLE = "idle"
    ROUTED = "routed"
    TEXT_EXTRACTED = "text_extracted"
    SCHEMA_READY = "schema_ready"
    PROMPT_BUILT = "prompt_built"
    AWAITING_MODEL = "awaiting_model"
    RECONCILED = "reconciled"
    DONE = "done"
    FAILED = "failed"


# -----------------------------------------------------------------------------
# Utils internos
# -----------------------------------------------------------------------------
def _vprint(msg: str, *args: Any) -> None:
    if VERBOSE:
        logger.info("[orchestrator] " + msg, *args)


class _Run:
    """Estado de uma única requisição; nada é compartilhado entre execuções."""

    def __init__(self) -> None:
        self.state = State.IDLE

    def advance(self, state: State) -> None:
        _vprint("%s -> %s", self.state.value, state.value)
        self.state = state


def _call_model(client: Optional[ModelBackend], prompt: str, schema: Schema) -> str:
    try:
        backend = client or LLMClient()
        return backend.complete(prompt, schema)
    except Exception as e:
        logger.error("chamada ao modelo falhou: %s", e, exc_info=True)
        raise ModelCallFailed(f"Error calling the language model: {e}") from e


# -----------------------------------------------------------------------------
# Orquestrador
# -----------------------------------------------------------------------------
def run_extract(req: ExtractRequest, llm_client: Optional[ModelBackend] = None) -> ExtractionResult:
    """
    IDLE -> ROUTED -> TEXT_EXTRACTED -> SCHEMA_READY -> PROMPT_BUILT
         -> AWAITING_MODEL -> RECONCILED -> DONE
    Qualquer falha vai direto para FAILED e interrompe as etapas seguintes.
    """
    run = _Run()
    try:
        data = _run_steps(run, req, llm_client)
    except ExtractionError as e:
        failed_at = run.state
        run.advance(State.FAILED)
        logger.warning("extração falhou em %s: %s (%s)", failed_at.value, e.reason, e.kind)
        return ExtractionResult.failure(e.reason, e.kind, state=failed_at.value)

    run.advance(State.DONE)
    return ExtractionResult.ok(data, state=State.DONE.value)


def _run_steps(run: _Run, req: ExtractRequest, llm_client: Optional[ModelBackend]) -> Dict[str, Any]:
    # ------------------- leitura do documento -------------------
    if req.has_file:
        if not req.media_type:
            raise ExtractionFailure("File type not recognized")
        reader: DocumentReader = reader_for(req.media_type)
        run.advance(State.ROUTED)
        text = extract_with(reader, req.file or b"")
    else:
        text = req.text or ""
    if not text.strip():
        raise EmptyDocumentContent()
    run.advance(State.TEXT_EXTRACTED)
    _vprint("texto extraído: %d caracteres", len(text))

    # ------------------- schema -------------------
    schema = build_schema(req.mode, req.mode_input)
    run.advance(State.SCHEMA_READY)
    _vprint("schema keys=%s", schema.field_names())

    # ------------------- prompt + modelo -------------------
    prompt = build_prompt(schema, text)
    run.advance(State.PROMPT_BUILT)

    run.advance(State.AWAITING_MODEL)
    raw = _call_model(llm_client, prompt, schema)

    # ------------------- reconciliação -------------------
    data = reconcile_response(raw, schema)
    run.advance(State.RECONCILED)
    return data
