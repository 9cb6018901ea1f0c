"""
dirmirror configuration management.

Provides centralized configuration with validation using Pydantic.
"""

from __future__ import annotations

import hashlib
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

DEFAULT_CONFIG_PATH = Path.home() / ".dirmirror" / "config.json"


class LoggingConfig(BaseModel):
    """Configuration for structured logging."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    file_enabled: bool = True
    console_enabled: bool = True
    json_format: bool = False
    log_directory: Path = Field(default_factory=lambda: Path.home() / ".dirmirror" / "logs")
    log_file: Path | None = None

    @field_validator("log_directory", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        return Path(v).expanduser().resolve()

    @field_validator("log_file", mode="before")
    @classmethod
    def expand_log_file(cls, v: str | Path | None) -> Path | None:
        if v is None:
            return None
        if not str(v).strip():
            raise ValueError("log file path cannot be empty")
        return Path(v).expanduser().absolute()

    def resolve_log_file(self) -> Path:
        """Get the file log lines are appended to."""
        if self.log_file is not None:
            return self.log_file
        return self.log_directory / f"dirmirror_{datetime.now().strftime('%Y%m%d')}.log"


class SyncConfig(BaseModel):
    """Configuration for the synchronization engine."""

    interval_seconds: int = Field(default=60, gt=0)
    hash_algorithm: str = "md5"
    chunk_size_kb: int = Field(default=1024, ge=4, le=65536)
    # None means: decide from the platform
    case_insensitive_paths: bool | None = None

    @field_validator("hash_algorithm")
    @classmethod
    def check_algorithm(cls, v: str) -> str:
        name = v.lower()
        # shake digests need an explicit length
        if name not in hashlib.algorithms_available or name.startswith("shake_"):
            raise ValueError(f"Unsupported hash algorithm: {v}")
        return name

    @property
    def chunk_size(self) -> int:
        return self.chunk_size_kb * 1024

    @property
    def paths_case_insensitive(self) -> bool:
        if self.case_insensitive_paths is not None:
            return self.case_insensitive_paths
        return sys.platform in ("win32", "darwin")


class DirMirrorConfig(BaseModel):
    """Main dirmirror configuration."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)

    @classmethod
    def load(cls, config_path: Path | None = None) -> DirMirrorConfig:
        """Load configuration from file or create default."""
        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH

        if config_path.exists():
            with open(config_path) as f:
                data = json.load(f)
            return cls.model_validate(data)

        return cls()

    def save(self, config_path: Path | None = None) -> None:
        """Save configuration to file."""
        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH

        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2, default=str)


def load_config(config_path: Path | None = None) -> DirMirrorConfig:
    """Load or create configuration."""
    return DirMirrorConfig.load(config_path)
