import os
from dataclasses import dataclass

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="WORDCOUNT_")

    MAX_THREADS: int = Field(default_factory=lambda: os.cpu_count() or 1)
    BATCH_SIZE: int = 1000
    NUM_SHARDS: int = 64
    LOG_LEVEL: str = "WARNING"


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class JobConfig:
    """Parameters for one counting run. Invalid values fail at construction."""

    files: tuple[str, ...]
    max_threads: int
    batch_size: int
    num_shards: int = 64
    timeout: float | None = None

    def __post_init__(self) -> None:
        if self.max_threads <= 0:
            raise ConfigError(f"max_threads must be positive, got {self.max_threads}")
        if self.batch_size <= 0:
            raise ConfigError(f"batch_size must be positive, got {self.batch_size}")
        if self.num_shards <= 0:
            raise ConfigError(f"num_shards must be positive, got {self.num_shards}")
        if self.timeout is not None and self.timeout < 0:
            raise ConfigError(f"timeout must not be negative, got {self.timeout}")

        # Accept any sequence of paths but store an immutable one.
        object.__setattr__(self, "files", tuple(self.files))
