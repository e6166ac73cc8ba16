# app/uploads.py
from __future__ import annotations

import logging
import os
import tempfile
from contextlib import contextmanager
from typing import BinaryIO, Iterator

from core.errors import UploadTooLarge

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(25 * 1024 * 1024)))
CHUNK_SIZE = 1024 * 1024


@contextmanager
def spooled_upload(source: BinaryIO, suffix: str = "", limit: int | None = None) -> Iterator[str]:
    """
    Copia o upload para um arquivo temporário desta requisição e devolve o
    caminho. O arquivo é removido na saída, com sucesso ou com erro.
    """
    limit = MAX_UPLOAD_BYTES if limit is None else limit
    fd, tmp_path = tempfile.mkstemp(suffix=suffix, prefix="upload-")
    try:
        size = 0
        with os.fdopen(fd, "wb") as tmp:
            for chunk in iter(lambda: source.read(CHUNK_SIZE), b""):
                size += len(chunk)
                if size > limit:
                    raise UploadTooLarge(limit)
                tmp.write(chunk)
        logger.debug("upload salvo em %s (%d bytes)", tmp_path, size)
        yield tmp_path
    finally:
        try:
            os.unlink(tmp_path)
        except FileNotFoundError:
            pass
