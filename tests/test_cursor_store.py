"""Tests for the lastid cursor file."""

from __future__ import annotations

import pytest

from adapters.cursor_store import FileCursorStore
from core.domain.errors import CursorNotFoundError


def test_missing_file_has_no_cursor(tmp_path):
    store = FileCursorStore(tmp_path / "lastid")

    assert store.read_cursor() is None
    assert store.history() == []


def test_write_prepends_and_keeps_history(tmp_path):
    path = tmp_path / "lastid"
    store = FileCursorStore(path)

    store.write_cursor("po_001")
    store.write_cursor("po_002")

    assert path.read_text(encoding="utf-8") == "po_002\npo_001\n"
    assert store.read_cursor() == "po_002"
    assert store.history() == ["po_002", "po_001"]


def test_blank_lines_are_ignored(tmp_path):
    path = tmp_path / "lastid"
    path.write_text("\n  po_009  \n\npo_001\n", encoding="utf-8")

    assert FileCursorStore(path).read_cursor() == "po_009"


def test_require_cursor_without_file_raises(tmp_path):
    store = FileCursorStore(tmp_path / "lastid")

    with pytest.raises(CursorNotFoundError, match="no lastid file exists"):
        store.require_cursor()
