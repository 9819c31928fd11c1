"""Common CLI helper utilities."""

from __future__ import annotations

import logging


def setup_logging(level: int = logging.INFO) -> None:
    """Configure standard logging format for CLI tools."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def parse_csv_list(value: str | None) -> list[str]:
    """Split a comma-separated argument into a list of non-empty items."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def env_flag(value: str | None, default: bool = False) -> bool:
    """Interpret an environment variable as a boolean flag."""
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}
