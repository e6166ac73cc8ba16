"""Command-line runs over local files."""
from __future__ import annotations

import json

import pytest

from app import cli
from core import orchestrator


@pytest.fixture
def patched_llm(monkeypatch, fake_llm):
    monkeypatch.setattr(orchestrator, "LLMClient", lambda: fake_llm)
    return fake_llm


def test_media_type_guessing() -> None:
    assert cli.guess_media_type("a.md") == "text/markdown"
    assert cli.guess_media_type("a.docx") == (
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    )
    assert cli.guess_media_type("scan.TIFF") == "image/tiff"


def test_single_file_prints_json(tmp_path, capsys, patched_llm) -> None:
    doc = tmp_path / "memo.txt"
    doc.write_text("Subject: budget", encoding="utf-8")
    patched_llm.enqueue({"Subject": "budget"})

    code = cli.main([str(doc), "--headings=Subject"])

    assert code == 0
    out = json.loads(capsys.readouterr().out)
    assert out == {"success": True, "data": {"Subject": "budget"}}


def test_directory_to_consolidated_json(tmp_path, patched_llm) -> None:
    docs = tmp_path / "docs"
    docs.mkdir()
    (docs / "a.txt").write_text("alpha", encoding="utf-8")
    (docs / "b.md").write_text("beta", encoding="utf-8")
    (docs / "skip.zip").write_bytes(b"PK")
    schema = tmp_path / "schema.json"
    schema.write_text('{"type": "object", "properties": {"word": {"type": "string"}}}', encoding="utf-8")
    patched_llm.enqueue({"word": "alpha"})
    patched_llm.enqueue({"word": "beta"})
    out = tmp_path / "out.json"

    code = cli.main([str(docs), str(out), f"--schema={schema}"])

    assert code == 0
    results = json.loads(out.read_text(encoding="utf-8"))
    assert [r["path"] for r in results] == ["a.txt", "b.md"]
    assert [r["data"]["word"] for r in results] == ["alpha", "beta"]


def test_failures_set_exit_code(tmp_path, patched_llm) -> None:
    doc = tmp_path / "memo.txt"
    doc.write_text("text", encoding="utf-8")
    patched_llm.enqueue("not json")
    outdir = tmp_path / "outputs"

    code = cli.main([str(doc), str(outdir), "--headings=A"])

    assert code == 2
    written = json.loads((outdir / "memo.txt.json").read_text(encoding="utf-8"))
    assert written["success"] is False


def test_requires_exactly_one_mode(tmp_path) -> None:
    doc = tmp_path / "memo.txt"
    doc.write_text("text", encoding="utf-8")
    with pytest.raises(SystemExit):
        cli.main([str(doc)])


def test_missing_schema_file_shows_usage(tmp_path, capsys) -> None:
    doc = tmp_path / "memo.txt"
    doc.write_text("text", encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        cli.main([str(doc), f"--schema={tmp_path / 'missing.json'}"])
    assert exc.value.code == 1
    err = capsys.readouterr().err
    assert "missing.json" in err
    assert "Uso:" in err


def test_same_stem_documents_get_separate_outputs(tmp_path, patched_llm) -> None:
    docs = tmp_path / "docs"
    docs.mkdir()
    (docs / "a.md").write_text("markdown body", encoding="utf-8")
    (docs / "a.txt").write_text("plain body", encoding="utf-8")
    patched_llm.enqueue({"A": "from md"})
    patched_llm.enqueue({"A": "from txt"})
    outdir = tmp_path / "outputs"

    assert cli.main([str(docs), str(outdir), "--headings=A"]) == 0

    assert sorted(p.name for p in outdir.iterdir()) == ["a.md.json", "a.txt.json"]
    assert json.loads((outdir / "a.md.json").read_text(encoding="utf-8"))["data"] == {"A": "from md"}
    assert json.loads((outdir / "a.txt.json").read_text(encoding="utf-8"))["data"] == {"A": "from txt"}
