"""Build a PersonalizationStore from configuration."""

from common.config import PersonalizationConfig
from personalization.repository import InMemoryProfileRepository, JsonFileProfileRepository
from personalization.store import PersonalizationStore


def build_repository(config: PersonalizationConfig):
    if config.backend == "file":
        return JsonFileProfileRepository(config.local_path)
    if config.backend == "memory":
        return InMemoryProfileRepository()
    raise ValueError(f"Unknown personalization backend: {config.backend}")


def build_personalization_store(config: PersonalizationConfig) -> PersonalizationStore:
    return PersonalizationStore(
        build_repository(config),
        max_write_attempts=config.max_write_attempts,
    )
