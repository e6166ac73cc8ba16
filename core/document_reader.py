# core/document_reader.py
"""Leitores de documento: bytes -> texto, um por família de formato.

O roteamento é um mapa fixo media type -> leitor (comparação exata, sem
curingas). Para suportar um formato novo basta um leitor + entradas no mapa.
"""
from __future__ import annotations

import io
import logging
import os
from typing import Dict, List, Tuple

import fitz
import mammoth
import pandas as pd
import pytesseract
from PIL import Image
from pypdf import PdfReader

from .errors import ExtractionError, ExtractionFailure, UnsupportedFormat

logger = logging.getLogger(__name__)

OCR_LANG = os.getenv("OCR_LANG", "eng")


class DocumentReader:
    """Capacidade única: ``process(bytes) -> str``."""

    name: str = "base"
    media_types: Tuple[str, ...] = ()

    def process(self, data: bytes) -> str:
        raise NotImplementedError


# ---------------- PDF ----------------
class PdfDocumentReader(DocumentReader):
    name = "pdf"
    media_types = ("application/pdf",)

    def process(self, data: bytes) -> str:
        # 1) tenta PyMuPDF
        try:
            with fitz.open(stream=data, filetype="pdf") as doc:
                if doc.page_count == 0:
                    raise ValueError("PDF sem páginas")
                return "\n".join(page.get_text("text") for page in doc)
        except Exception as e:
            logger.debug("PyMuPDF falhou (%s); tentando pypdf", e)

        # 2) fallback: pypdf
        reader = PdfReader(io.BytesIO(data))
        return "\n".join((page.extract_text() or "") for page in reader.pages)


# ---------------- Word ----------------
class WordDocumentReader(DocumentReader):
    name = "word"
    media_types = (
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/msword",
    )

    def process(self, data: bytes) -> str:
        # texto cru dos parágrafos, sem estilos
        result = mammoth.extract_raw_text(io.BytesIO(data))
        for message in result.messages:
            logger.debug("mammoth: %s", message)
        return result.value


# ---------------- Planilha ----------------
class SpreadsheetDocumentReader(DocumentReader):
    name = "spreadsheet"
    media_types = (
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )

    def process(self, data: bytes) -> str:
        # somente a primeira aba, linha a linha, em CSV
        df = pd.read_excel(io.BytesIO(data), sheet_name=0, header=None, dtype=object)
        return df.to_csv(index=False, header=False, na_rep="", lineterminator="\n").rstrip("\n")


# ---------------- Imagem (OCR) ----------------
def to_png(data: bytes) -> bytes:
    """Normaliza qualquer imagem suportada pelo Pillow para PNG RGB."""
    with Image.open(io.BytesIO(data)) as img:
        out = io.BytesIO()
        img.convert("RGB").save(out, format="PNG")
        return out.getvalue()


class ImageDocumentReader(DocumentReader):
    name = "image"
    media_types = ("image/jpeg", "image/png", "image/tiff")

    def process(self, data: bytes) -> str:
        png = to_png(data)
        with Image.open(io.BytesIO(png)) as img:
            text = pytesseract.image_to_string(img, lang=OCR_LANG)
        if not text.strip():
            # OCR vazio não é erro; só degrada a extração
            logger.warning("OCR não reconheceu texto na imagem (%d bytes)", len(data))
        return text


# ---------------- Texto ----------------
class TextDocumentReader(DocumentReader):
    name = "text"
    media_types = ("text/plain", "text/markdown", "text/csv", "application/json", "text/rtf")

    def process(self, data: bytes) -> str:
        # sem interpretar CSV/JSON aqui: a estrutura fica para o modelo
        return data.decode("utf-8-sig", errors="replace")


READERS: Tuple[DocumentReader, ...] = (
    PdfDocumentReader(),
    WordDocumentReader(),
    ImageDocumentReader(),
    SpreadsheetDocumentReader(),
    TextDocumentReader(),
)

MEDIA_TYPES: Dict[str, DocumentReader] = {
    media_type: reader for reader in READERS for media_type in reader.media_types
}


def supported_media_types() -> List[str]:
    return list(MEDIA_TYPES.keys())


def reader_for(media_type: str) -> DocumentReader:
    reader = MEDIA_TYPES.get(media_type)
    if reader is None:
        raise UnsupportedFormat(media_type)
    return reader


def read_document(data: bytes, media_type: str) -> str:
    """Roteia pelo media type e extrai o texto."""
    return extract_with(reader_for(media_type), data)


def extract_with(reader: DocumentReader, data: bytes) -> str:
    """Roda o leitor; qualquer exceção vira ``ExtractionFailure``."""
    try:
        return reader.process(data)
    except ExtractionError:
        raise
    except Exception as e:
        logger.error("leitor %s falhou: %s", reader.name, e, exc_info=True)
        raise ExtractionFailure(f"Error processing file: {e}") from e
