"""Test configuration for the document extractor."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Generator

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from core.models import Schema  # noqa: E402


class FakeLLM:
    """Model backend with a FIFO queue of canned replies."""

    def __init__(self) -> None:
        self._queue: list[str | Exception] = []
        self.prompts: list[str] = []
        self.schemas: list[Schema] = []

    def enqueue(self, response: str | dict | Exception) -> None:
        if isinstance(response, dict):
            response = json.dumps(response)
        self._queue.append(response)

    def complete(self, prompt: str, schema: Schema) -> str:
        self.prompts.append(prompt)
        self.schemas.append(schema)
        if not self._queue:
            raise RuntimeError("FakeLLM was called without a queued response")
        item = self._queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture()
def client(fake_llm: FakeLLM) -> Generator[TestClient, None, None]:
    """Return a test client whose model backend is ``fake_llm``."""

    from app.api import app, get_llm_client

    app.dependency_overrides[get_llm_client] = lambda: fake_llm
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def isolated_tmpdir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Point ``tempfile`` at an empty directory so leftovers are visible."""

    import tempfile

    uploads = tmp_path / "uploads"
    uploads.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(uploads))
    return uploads


@pytest.fixture
def pdf_bytes() -> bytes:
    import fitz

    doc = fitz.open()
    for line in ("Quarterly report", "Revenue grew 10%."):
        page = doc.new_page()
        page.insert_text((72, 72), line)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def docx_bytes() -> bytes:
    from io import BytesIO

    from docx import Document

    document = Document()
    document.add_heading("Summary", level=1)
    document.add_paragraph("Revenue grew 10%.")
    buf = BytesIO()
    document.save(buf)
    return buf.getvalue()


@pytest.fixture
def xlsx_bytes() -> bytes:
    from io import BytesIO

    import pandas as pd

    buf = BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        pd.DataFrame([["item", "qty"], ["bolt", 10], ["nut", None]]).to_excel(
            writer, sheet_name="Parts", index=False, header=False
        )
        pd.DataFrame([["hidden", "sheet"]]).to_excel(
            writer, sheet_name="Other", index=False, header=False
        )
    return buf.getvalue()


@pytest.fixture
def jpeg_bytes() -> bytes:
    from io import BytesIO

    from PIL import Image

    buf = BytesIO()
    Image.new("L", (32, 16), color=255).save(buf, format="JPEG")
    return buf.getvalue()


@pytest.fixture
def xls_bytes() -> bytes:
    """Legacy BIFF workbook, read back through xlrd."""
    from io import BytesIO

    import xlwt

    book = xlwt.Workbook()
    sheet = book.add_sheet("Parts")
    for r, row in enumerate([["item", "qty"], ["bolt", 10], ["nut", None]]):
        for c, value in enumerate(row):
            if value is not None:
                sheet.write(r, c, value)
    book.add_sheet("Other").write(0, 0, "hidden")
    buf = BytesIO()
    book.save(buf)
    return buf.getvalue()


@pytest.fixture(params=[("PNG", "RGBA"), ("TIFF", "L"), ("JPEG", "RGB")], ids=["png", "tiff", "jpeg"])
def image_sample(request) -> tuple[bytes, str]:
    """Image bytes in each accepted raster format plus its media type."""
    from io import BytesIO

    from PIL import Image

    fmt, mode = request.param
    buf = BytesIO()
    Image.new(mode, (32, 16)).save(buf, format=fmt)
    return buf.getvalue(), f"image/{fmt.lower()}"
