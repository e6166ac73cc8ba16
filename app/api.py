# app/api.py
from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.datastructures import FormData, UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

load_dotenv()  # carrega variáveis de ambiente do .env

from core.document_reader import supported_media_types
from core.errors import ExtractionError, status_for
from core.llm_client import llm_meta
from core.orchestrator import ModelBackend, run_extract
from core.schemas import ExtractRequest, ExtractionResult

from . import uploads
from .uploads import spooled_upload

# ---------------- Config ----------------
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Document Extractor API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ALLOW_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# o formulário é lido à mão (limite por campo = teto de upload), então a
# documentação do corpo multipart vai aqui
EXTRACT_FORM_DOC: Dict[str, Any] = {
    "requestBody": {
        "required": True,
        "content": {
            "multipart/form-data": {
                "schema": {
                    "type": "object",
                    "properties": {
                        "file": {
                            "type": "string",
                            "format": "binary",
                            "description": "Documento (PDF, Word, planilha, imagem ou texto)",
                        },
                        "text": {"type": "string", "description": "Texto colado; ignorado quando há arquivo"},
                        "mode": {"type": "string", "enum": ["headings", "json"]},
                        "headings": {"type": "string", "description": "Lista separada por vírgulas (modo headings)"},
                        "jsonStructure": {"type": "string", "description": "Schema JSON (modo json)"},
                    },
                }
            }
        },
    }
}


def get_llm_client() -> Optional[ModelBackend]:
    """``None`` = o orquestrador cria o ``LLMClient`` padrão (via .env)."""
    return None


def _respond(result: ExtractionResult) -> JSONResponse:
    status = 200 if result.success else status_for(result.error_kind)
    return JSONResponse(status_code=status, content=result.body())


def _form_text(form: FormData, name: str) -> Optional[str]:
    value = form.get(name)
    return value if isinstance(value, str) else None


# ---------------- Erros fora do pipeline ----------------
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # ex.: campo de formulário acima do limite, rota/método inexistente
    logger.info("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    msg = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}" for err in exc.errors()
    )
    return JSONResponse(status_code=422, content={"success": False, "error": msg or "Invalid request"})


# ---------------- Endpoints ----------------
@app.get("/", include_in_schema=False)
async def root():
    return RedirectResponse(url="/docs")


@app.get("/health", tags=["health"])
async def health():
    return {
        "ok": True,
        "status": "healthy",
        "llm": llm_meta(),
        "max_upload_bytes": uploads.MAX_UPLOAD_BYTES,
        "media_types": supported_media_types(),
    }


@app.post("/extract", tags=["extract"], openapi_extra=EXTRACT_FORM_DOC)
async def extract_endpoint(request: Request, llm_client: Optional[ModelBackend] = Depends(get_llm_client)):
    """
    Fluxo:
      1) upload -> arquivo temporário desta requisição (limite de tamanho)
      2) roteia pelo media type e extrai o texto (ou usa o texto colado)
      3) monta o schema (headings ou JSON) e valida
      4) prompt -> modelo -> reconcilia a resposta com o schema
    O temporário é sempre removido, inclusive em falhas.
    """
    # campos de texto podem ir até o teto de upload (o padrão do Starlette é 1 MB)
    form = await request.form(max_part_size=uploads.MAX_UPLOAD_BYTES)
    try:
        text = _form_text(form, "text") or ""
        mode = _form_text(form, "mode")
        field = "headings" if mode == "headings" else "jsonStructure" if mode == "json" else None
        mode_input = _form_text(form, field) if field else None

        file = form.get("file")
        if not isinstance(file, UploadFile) or not file.filename:
            req = ExtractRequest(text=text, mode=mode, mode_input=mode_input)
            result = await run_in_threadpool(run_extract, req, llm_client)
            return _respond(result)

        suffix = os.path.splitext(file.filename)[1]
        try:
            with spooled_upload(file.file, suffix=suffix) as tmp_path:
                with open(tmp_path, "rb") as fh:
                    data = fh.read()
                req = ExtractRequest(
                    file=data,
                    media_type=file.content_type,
                    mode=mode,
                    mode_input=mode_input,
                )
                result = await run_in_threadpool(run_extract, req, llm_client)
        except ExtractionError as e:
            logger.warning("upload rejeitado (%s): %s", e.kind, e.reason)
            result = ExtractionResult.failure(e.reason, e.kind)

        if not result.success:
            logger.info("falha em '%s' [%s]: %s", file.filename, result.error_kind, result.error)
        return _respond(result)
    finally:
        await form.close()
