"""Pydantic models used across Subsidy Navigator configuration."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator


class StoreBackend(str, Enum):
    """Document store backends."""

    MONGODB = "mongodb"
    SQLITE = "sqlite"


class ScheduleType(str, Enum):
    """Scheduler modes for periodic pipeline runs."""

    CRON = "cron"
    INTERVAL = "interval"
    ONCE = "once"


class StoreConfig(BaseModel):
    """Where subsidy records live.

    ``use_emulator`` switches the MongoDB backend to ``emulator_uri``; the
    choice is made here rather than by sniffing the runtime environment.
    """

    backend: StoreBackend = StoreBackend.SQLITE
    uri: str = "mongodb://localhost:27017"
    emulator_uri: str = "mongodb://localhost:27018"
    use_emulator: bool = False
    database: str = "subsidy_navigator"
    collection: str = "subsidies"
    sqlite_path: Path = Field(default=Path("data/store/subsidies.db"))

    @field_validator("sqlite_path", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Path:
        return Path(value)

    @field_validator("collection")
    @classmethod
    def _non_empty_collection(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("collection cannot be empty")
        return value

    def resolved_uri(self) -> str:
        return self.emulator_uri if self.use_emulator else self.uri

    def resolved_sqlite_path(self, base_dir: Path) -> Path:
        if not self.sqlite_path.is_absolute():
            return (base_dir / self.sqlite_path).resolve()
        return self.sqlite_path


class SummaryTaskConfig(BaseModel):
    """Sampling temperature and input truncation for one summarization call."""

    temperature: float = 0.1
    max_content_chars: int = 8000

    @model_validator(mode="after")
    def _validate_ranges(self) -> "SummaryTaskConfig":
        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError("temperature must be within [0, 2]")
        if self.max_content_chars < 1:
            raise ValueError("max_content_chars must be >= 1")
        return self


class AIConfig(BaseModel):
    """OpenAI-compatible chat completion settings."""

    model: str = "gpt-4o-mini"
    base_url: str | None = None
    api_key_env: str = "OPENAI_API_KEY"
    timeout_seconds: float = 120.0
    client_summary: SummaryTaskConfig = Field(
        default_factory=lambda: SummaryTaskConfig(temperature=0.3, max_content_chars=8000)
    )
    accountant_summary: SummaryTaskConfig = Field(
        default_factory=lambda: SummaryTaskConfig(temperature=0.1, max_content_chars=12000)
    )
    tagging: SummaryTaskConfig = Field(
        default_factory=lambda: SummaryTaskConfig(temperature=0.1, max_content_chars=5000)
    )

    @field_validator("timeout_seconds")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout_seconds must be > 0")
        return value


class SourceSettings(BaseModel):
    """Where candidate items come from."""

    type: Literal["mock", "file"] = "mock"
    path: Path | None = None

    @model_validator(mode="after")
    def _validate_path(self) -> "SourceSettings":
        if self.type == "file" and self.path is None:
            raise ValueError("file source requires a path")
        return self


class PipelineSettings(BaseModel):
    """Behaviour of one pipeline run."""

    fail_fast: bool = False


class ScheduleConfig(BaseModel):
    """When the pipeline should run on its own."""

    enabled: bool = False
    type: ScheduleType = Field(default=ScheduleType.CRON)
    value: Any = Field(
        default="0 6 * * *",
        description="Cron expression, interval seconds or ISO datetime, depending on type.",
    )

    @model_validator(mode="after")
    def _validate_value(self) -> "ScheduleConfig":
        if self.type is ScheduleType.CRON and not isinstance(self.value, str):
            raise ValueError("Cron schedule requires string expression")
        if self.type is ScheduleType.INTERVAL and not isinstance(self.value, (int, float, dict)):
            raise ValueError("Interval schedule requires seconds (int/float) or kwargs dict")
        if (
            self.type is ScheduleType.ONCE
            and self.value is not None
            and not isinstance(self.value, str)
        ):
            raise ValueError("Once schedule expects ISO datetime string or null")
        return self


class ServerConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = 3000


class AppConfig(BaseModel):
    """Top-level application configuration."""

    store: StoreConfig = Field(default_factory=StoreConfig)
    ai: AIConfig = Field(default_factory=AIConfig)
    source: SourceSettings = Field(default_factory=SourceSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    thread_pool_workers: int = 4

    @field_validator("thread_pool_workers")
    @classmethod
    def _positive_workers(cls, value: int) -> int:
        if value < 1:
            raise ValueError("thread_pool_workers must be >= 1")
        return value


__all__ = [
    "AIConfig",
    "AppConfig",
    "PipelineSettings",
    "ScheduleConfig",
    "ScheduleType",
    "ServerConfig",
    "SourceSettings",
    "StoreBackend",
    "StoreConfig",
    "SummaryTaskConfig",
]
