"""Tests for common.local_io module."""

import json
from unittest.mock import patch

import pytest

from common.local_io import read_json, write_json_atomic


class TestWriteJsonAtomic:
    def test_writes_document_and_creates_parent(self, tmp_path) -> None:
        target = tmp_path / "nested" / "out.json"
        result = write_json_atomic({"count": 1}, target)
        assert result == target
        assert json.loads(target.read_text(encoding="utf-8")) == {"count": 1}

    def test_replaces_existing_file(self, tmp_path) -> None:
        target = tmp_path / "out.json"
        write_json_atomic({"version": 1}, target)
        write_json_atomic({"version": 2}, target)
        assert read_json(target) == {"version": 2}

    def test_failed_write_leaves_previous_file_and_no_temp(self, tmp_path) -> None:
        target = tmp_path / "out.json"
        write_json_atomic({"version": 1}, target)

        with patch("common.local_io.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                write_json_atomic({"version": 2}, target)

        assert read_json(target) == {"version": 1}
        assert [p.name for p in tmp_path.iterdir()] == ["out.json"]
