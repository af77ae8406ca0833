"""Server configuration for httpbox.

Defines configuration models for logging and the example server. Settings
come from an optional JSON file, then CLI flags override individual fields.

Example usage:
    # Load from config file
    config = ServerConfig.load_from_file(Path("httpbox.json"))

    # Override from the command line
    config = config.model_copy(update={"port": 9000})

File format:
    {
        "host": "0.0.0.0",
        "port": 8080,
        "logging": {"level": "INFO", "format": "json", "access_level": "ACCESS"}
    }
"""

from __future__ import annotations

__all__ = [
    "LogFormat",
    "LogLevelName",
    "LoggingConfig",
    "ServerConfig",
    "load_validated_json",
]

import json
from pathlib import Path
from typing import Literal, TypeVar

from pydantic import BaseModel, Field, ValidationError

from httpbox.constants import DEFAULT_HOST, DEFAULT_PORT, LOG_LEVELS

T = TypeVar("T", bound=BaseModel)

LogLevelName = Literal["DEBUG", "INFO", "ACCESS", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


def load_validated_json(file_path: Path, model_class: type[T], file_type: str = "file") -> T:
    """Load JSON file and validate against Pydantic model.

    Args:
        file_path: Path to JSON file.
        model_class: Pydantic model class to validate against.
        file_type: Description for error messages (e.g., "config").

    Returns:
        Validated Pydantic model instance.

    Raises:
        ValueError: If the file is unreadable, the JSON is invalid, or
            validation fails.
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {file_type} file {file_path}: {e}") from e
    except OSError as e:
        raise ValueError(f"Could not read {file_type} file {file_path}: {e}") from e

    try:
        return model_class.model_validate(data)
    except ValidationError as e:
        errors = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"]) or "<root>"
            errors.append(f"  - {loc}: {error['msg']}")
        raise ValueError(f"Invalid {file_type} file {file_path}:\n" + "\n".join(errors)) from e


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging configuration settings.

    Attributes:
        level: Threshold for the "httpbox" logger tree.
        format: "json" for JSON lines, "console" for human-readable lines.
        access_level: Level access records are emitted at.
    """

    level: LogLevelName = "INFO"
    format: LogFormat = "json"
    access_level: LogLevelName = "ACCESS"

    @property
    def level_number(self) -> int:
        return LOG_LEVELS[self.level]

    @property
    def access_level_number(self) -> int:
        return LOG_LEVELS[self.access_level]


# =============================================================================
# Server Configuration
# =============================================================================


class ServerConfig(BaseModel):
    """Settings for the example server.

    Attributes:
        host: Interface to bind.
        port: TCP port to bind (1-65535).
        logging: Logging settings.
    """

    host: str = Field(default=DEFAULT_HOST, min_length=1)
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load_from_file(cls, config_path: Path) -> ServerConfig:
        """Load configuration from JSON file.

        Args:
            config_path: Path to the config JSON file.

        Returns:
            ServerConfig instance with loaded configuration.

        Raises:
            ValueError: If the file is missing, unreadable or invalid.
        """
        return load_validated_json(config_path, cls, file_type="config")
