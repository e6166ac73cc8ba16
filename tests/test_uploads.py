"""Per-request temporary upload storage."""
from __future__ import annotations

import io
import os

import pytest

from app.uploads import spooled_upload
from core.errors import UploadTooLarge


def test_file_exists_inside_scope_and_is_removed(isolated_tmpdir) -> None:
    with spooled_upload(io.BytesIO(b"hello"), suffix=".txt") as path:
        assert path.endswith(".txt")
        with open(path, "rb") as fh:
            assert fh.read() == b"hello"
    assert not os.path.exists(path)
    assert os.listdir(isolated_tmpdir) == []


def test_removed_when_body_raises(isolated_tmpdir) -> None:
    with pytest.raises(RuntimeError):
        with spooled_upload(io.BytesIO(b"data")) as path:
            raise RuntimeError("extractor crashed")
    assert not os.path.exists(path)


def test_limit_is_enforced_while_copying(isolated_tmpdir) -> None:
    with pytest.raises(UploadTooLarge) as exc:
        with spooled_upload(io.BytesIO(b"x" * 11), limit=10):
            pytest.fail("body must not run for oversized uploads")
    assert exc.value.limit == 10
    assert os.listdir(isolated_tmpdir) == []


def test_limit_is_inclusive(isolated_tmpdir) -> None:
    with spooled_upload(io.BytesIO(b"x" * 10), limit=10) as path:
        assert os.path.getsize(path) == 10
