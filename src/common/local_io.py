"""Local file I/O utilities."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def write_json_atomic(data: Any, path: str | Path) -> Path:
    """
    Write a JSON document so readers never observe a partial file.

    The document is written to a temporary file in the target directory and
    then moved into place with `os.replace`.

    Args:
        data: JSON-serializable object
        path: Destination file path

    Returns:
        Path to the written file
    """
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2, default=str)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, target)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise

    logger.debug("Wrote %s", target)
    return target


def read_json(path: str | Path) -> Any:
    """Read a JSON document from disk."""
    with Path(path).open("r", encoding="utf-8") as f:
        return json.load(f)
