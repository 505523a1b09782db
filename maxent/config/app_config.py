#!filepath: maxent/config/app_config.py
from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from maxent.utils.errors import ConfigurationError
from .log_config import LogConfig
from .training_config import TrainingParameters


def default_config_path() -> Path:
    """
    maxent/config/app_config.py -> maxent/config/base.yml
    """
    return Path(__file__).resolve().parent / "base.yml"


class AppConfig(BaseModel):
    log: LogConfig = Field(default_factory=LogConfig)
    training: TrainingParameters = Field(default_factory=TrainingParameters)

    @classmethod
    def load(cls, path: str | Path | None = None, env_file: str | Path | None = None) -> "AppConfig":
        """
        Load YAML config + .env

        - default file: maxent/config/base.yml
        - MAXENT_LOG_LEVEL / MAXENT_LOG_DIR override the log section
        """
        load_dotenv(env_file if env_file is not None else Path.cwd() / ".env")

        path = Path(path) if path is not None else default_config_path()
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

        log = dict(raw.get("log") or {})
        if os.getenv("MAXENT_LOG_LEVEL"):
            log["level"] = os.getenv("MAXENT_LOG_LEVEL")
        if os.getenv("MAXENT_LOG_DIR"):
            log["dir"] = os.getenv("MAXENT_LOG_DIR")
        raw["log"] = log

        try:
            return cls(
                log=LogConfig(**raw["log"]),
                training=TrainingParameters.from_mapping(raw.get("training")),
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid config {path}: {e}") from e
