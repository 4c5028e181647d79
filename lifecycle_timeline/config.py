"""
Timeline engine configuration.

Loads configuration from environment variables (and an optional .env file)
using pydantic-settings for type safety and defaults.
"""

import sys

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TimelineConfig(BaseSettings):
    """
    Settings shared by the command builder, output sources and CLI.
    """

    LOG_LEVEL: str = Field(default="INFO", description="Log level")
    LOG_CONFIG_PATH: str = Field(
        default="config/logging.yml", description="YAML logging configuration file path"
    )

    # ===== Event Emission =====
    TIMELINE_SHELL: str = Field(default="sh", description="Shell used to run emitted commands")
    TIMELINE_CLOCK_SOURCE: str = Field(
        default="/proc/uptime", description="File whose first field is seconds since boot"
    )
    TIMELINE_HOOK_OUTPUT: str = Field(
        default="/proc/1/fd/1",
        description="Where hook commands append event lines (main process stdout)",
    )

    # ===== Docker Output Source =====
    DOCKER_TIMEOUT: int = Field(default=30, description="Docker API timeout in seconds")
    DOCKER_WAIT_TIMEOUT: int = Field(
        default=120, description="Seconds to wait for a container to stop before reading logs"
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )


try:
    config = TimelineConfig()
except Exception as e:
    sys.stderr.write(f"Failed to load configuration: {e}\n")
    raise
