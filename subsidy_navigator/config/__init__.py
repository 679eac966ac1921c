"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository, read_data_file
from .models import (
    AIConfig,
    AppConfig,
    PipelineSettings,
    ScheduleConfig,
    ScheduleType,
    ServerConfig,
    SourceSettings,
    StoreBackend,
    StoreConfig,
    SummaryTaskConfig,
)

__all__ = [
    "AIConfig",
    "AppConfig",
    "ConfigLocator",
    "ConfigRepository",
    "PipelineSettings",
    "ScheduleConfig",
    "ScheduleType",
    "ServerConfig",
    "SourceSettings",
    "StoreBackend",
    "StoreConfig",
    "SummaryTaskConfig",
    "read_data_file",
]
