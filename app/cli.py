#!/usr/bin/env python3
# app/cli.py
from __future__ import annotations

import json
import mimetypes
import os
import sys
import pathlib
from typing import Dict, List, Any, Optional

from dotenv import load_dotenv
load_dotenv()  # carrega .env da raiz

from concurrent.futures import ThreadPoolExecutor

from core.document_reader import MEDIA_TYPES
from core.orchestrator import run_extract
from core.schemas import ExtractRequest

# extensões que o mimetypes nem sempre conhece
for _ext, _mt in (
    (".md", "text/markdown"),
    (".rtf", "text/rtf"),
    (".csv", "text/csv"),
    (".json", "application/json"),
    (".doc", "application/msword"),
    (".docx", "application/vnd.openxmlformats-officedocument.wordprocessingml.document"),
    (".xls", "application/vnd.ms-excel"),
    (".xlsx", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"),
    (".tif", "image/tiff"),
    (".tiff", "image/tiff"),
):
    mimetypes.add_type(_mt, _ext)


# ---------------- utils ----------------
def usage_and_exit() -> None:
    print(
        "Uso:\n"
        "  python -m app.cli <arquivo|diretório> [saida_dir|consolidado.json] "
        "(--headings=\"A,B,C\" | --schema=schema.json) [--jobs=N]\n"
        "Obs.: arquivo único sem saída imprime o JSON no stdout.\n"
        "      Se a saída terminar em .json, gera um consolidado único.",
        file=sys.stderr
    )
    sys.exit(1)


def parse_flag(argv: List[str], name: str) -> Optional[str]:
    prefix = f"--{name}="
    for a in argv:
        if a.startswith(prefix):
            return a.split("=", 1)[1]
    return None


def parse_jobs(argv: List[str]) -> int:
    raw = parse_flag(argv, "jobs") or os.getenv("CLI_JOBS", "1")
    try:
        return max(1, int(raw))
    except ValueError:
        print(f"[WARN] --jobs inválido '{raw}', usando 1", file=sys.stderr)
        return 1


def parse_mode(argv: List[str]) -> tuple[str, str]:
    """(mode, mode_input) a partir de --headings ou --schema."""
    headings = parse_flag(argv, "headings")
    schema_path = parse_flag(argv, "schema")
    if headings is not None and schema_path is None:
        return "headings", headings
    if schema_path is not None and headings is None:
        try:
            return "json", pathlib.Path(schema_path).read_text(encoding="utf-8")
        except OSError as e:
            print(f"[ERRO] não foi possível ler o schema '{schema_path}': {e}", file=sys.stderr)
            usage_and_exit()
    usage_and_exit()
    raise SystemExit(1)


def guess_media_type(path: str) -> Optional[str]:
    media_type, _ = mimetypes.guess_type(path)
    return media_type


def write_json_atomic(path: str, data: Any) -> None:
    out_dir = os.path.dirname(path) or "."
    os.makedirs(out_dir, exist_ok=True)
    tmp = f"{path}.tmp"
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
        f.write("\n")
    os.replace(tmp, path)


# ---------------- tarefas ----------------
def load_paths(target: str) -> List[str]:
    if os.path.isfile(target):
        return [target]
    items: List[str] = []
    for fn in sorted(os.listdir(target)):
        path = os.path.join(target, fn)
        if fn.startswith(".") or not os.path.isfile(path):
            continue
        if guess_media_type(path) in MEDIA_TYPES:
            items.append(path)
    if not items:
        print(f"[WARN] Nenhum documento suportado em: {target}", file=sys.stderr)
    return items


def process_file(path: str, mode: str, mode_input: str) -> Dict[str, Any]:
    with open(path, "rb") as f:
        data = f.read()
    req = ExtractRequest(file=data, media_type=guess_media_type(path), mode=mode, mode_input=mode_input)
    result = run_extract(req)
    if not result.success:
        print(f"[ERRO] {path}: {result.error} ({result.error_kind})", file=sys.stderr)
    return result.body()


# ---------------- main ----------------
def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    args = [a for a in argv if not a.startswith("--")]
    if not args or not os.path.exists(args[0]):
        usage_and_exit()

    mode, mode_input = parse_mode(argv)
    jobs = parse_jobs(argv)
    target = args[0]
    out_arg = args[1] if len(args) > 1 else None

    paths = load_paths(target)
    with ThreadPoolExecutor(max_workers=jobs) as pool:
        bodies = list(pool.map(lambda p: process_file(p, mode, mode_input), paths))

    failures = sum(1 for b in bodies if not b["success"])

    # arquivo único sem destino -> stdout
    if out_arg is None and os.path.isfile(target):
        print(json.dumps(bodies[0], ensure_ascii=False, indent=2))
        return 0 if failures == 0 else 2

    out_arg = out_arg or os.path.join(os.getcwd(), "outputs")
    if out_arg.lower().endswith(".json"):
        results = [{"path": os.path.basename(p), **b} for p, b in zip(paths, bodies)]
        write_json_atomic(out_arg, results)
        print(f"[OK] Consolidado {len(results)} arquivos -> {out_arg}")
    else:
        os.makedirs(out_arg, exist_ok=True)
        for p, b in zip(paths, bodies):
            # mantém a extensão: a.pdf e a.docx não podem cair no mesmo a.json
            out_path = os.path.join(out_arg, pathlib.Path(p).name + ".json")
            write_json_atomic(out_path, b)
            print(f"[OK] {p} -> {out_path}")
    print(f"[OK] Processados: {len(paths)} | Falhas: {failures}")
    return 0 if failures == 0 else 2


if __name__ == "__main__":
    sys.exit(main())
