"""Pipeline configuration loaded from YAML files in configs/."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path(__file__).resolve().parents[2] / "configs"


@dataclass
class PacingConfig:
    source_interval_seconds: float = 0.4
    classify_interval_seconds: float = 0.1


@dataclass
class FeedConfig:
    request_timeout: float = 15.0
    user_agent: str = "bias-news-ingest/1.0 (RSS reader)"


@dataclass
class ClassifierConfig:
    enabled: bool = False
    model: str = "gpt-4o-mini"
    request_timeout: float = 20.0
    min_title_length: int = 10
    max_tokens: int = 500


@dataclass
class StorageConfig:
    backend: str = "local"  # "local" or "s3"
    local_path: str = "output/articles.json"
    s3_key: str = "data/articles.json"


@dataclass
class CacheConfig:
    ttl_seconds: int = 300


@dataclass
class PersonalizationConfig:
    backend: str = "memory"  # "memory" or "file"
    local_path: str = "output/users"
    max_write_attempts: int = 3


@dataclass
class Config:
    pacing: PacingConfig = field(default_factory=PacingConfig)
    feeds: FeedConfig = field(default_factory=FeedConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    personalization: PersonalizationConfig = field(default_factory=PersonalizationConfig)
    sources: list[dict] = field(default_factory=list)


def find_config_path(
    config_name: str | None,
    config_dir: Path | None = None,
    default_name: str = "prod",
    env_var: str = "CONFIG_ENV",
) -> Path:
    """Find config file path, checking env var and defaults.

    Args:
        config_name: Name of config (without .yaml) or None for default
        config_dir: Directory containing config files (CONFIG_DIR env var or
            the repository's configs/ directory when omitted)
        default_name: Default config name if config_name is None
        env_var: Environment variable to check for config name

    Returns:
        Path to the config file

    Raises:
        FileNotFoundError: If config file doesn't exist
    """
    if config_name is None:
        config_name = os.environ.get(env_var, default_name)
    if config_dir is None:
        config_dir = Path(os.environ.get("CONFIG_DIR", DEFAULT_CONFIG_DIR))

    config_path = config_dir / f"{config_name}.yaml"
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    return config_path


def load_yaml(path: Path) -> dict:
    """Load YAML file and return dict."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_config(config_name: str | None = None, config_dir: Path | None = None) -> Config:
    """Load configuration from a YAML file."""
    path = find_config_path(config_name, config_dir)
    logger.info("Loading config from %s", path)
    return parse_config(load_yaml(path))


def parse_config(data: dict) -> Config:
    """Parse config dictionary into Config object."""
    pacing = data.get("pacing", {})
    feeds = data.get("feeds", {})
    classifier = data.get("classifier", {})
    storage = data.get("storage", {})
    cache = data.get("cache", {})
    personalization = data.get("personalization", {})

    return Config(
        pacing=PacingConfig(
            source_interval_seconds=float(pacing.get("source_interval_seconds", 0.4)),
            classify_interval_seconds=float(pacing.get("classify_interval_seconds", 0.1)),
        ),
        feeds=FeedConfig(
            request_timeout=float(feeds.get("request_timeout", 15.0)),
            user_agent=feeds.get("user_agent", FeedConfig.user_agent),
        ),
        classifier=ClassifierConfig(
            enabled=bool(classifier.get("enabled", False)),
            model=classifier.get("model", ClassifierConfig.model),
            request_timeout=float(classifier.get("request_timeout", 20.0)),
            min_title_length=int(classifier.get("min_title_length", 10)),
            max_tokens=int(classifier.get("max_tokens", 500)),
        ),
        storage=StorageConfig(
            backend=storage.get("backend", "local"),
            local_path=storage.get("local_path", StorageConfig.local_path),
            s3_key=storage.get("s3_key", StorageConfig.s3_key),
        ),
        cache=CacheConfig(ttl_seconds=int(cache.get("ttl_seconds", 300))),
        personalization=PersonalizationConfig(
            backend=personalization.get("backend", "memory"),
            local_path=personalization.get("local_path", PersonalizationConfig.local_path),
            max_write_attempts=int(personalization.get("max_write_attempts", 3)),
        ),
        sources=list(data.get("sources", []) or []),
    )
