#!filepath: maxent/config/training_config.py
from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from maxent.utils.errors import ConfigurationError


class Algorithms:
    """Built-in algorithm names (values of the ``Algorithm`` key)."""

    MAXENT = "MaxEnt"
    MAXENT_QN = "QuasiNewtonMaxEnt"
    NAIVE_BAYES = "NaiveBayes"


class DataIndexers:
    ONE_PASS = "OnePass"
    TWO_PASS = "TwoPass"


class TrainingParameters(BaseModel):
    """
    TrainingParameters (FINAL / FROZEN)

    Keys follow the external naming (``Algorithm``, ``Iterations`` ...);
    snake_case field names are accepted as well.

    Unknown keys are kept (``extra="allow"``) so that custom trainers can
    read their own options from the same mapping.

    ``L1Cost`` / ``L2Cost`` left as None mean "use the trainer default".
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    algorithm: str = Field(default=Algorithms.MAXENT, alias="Algorithm", min_length=1)
    iterations: int = Field(default=100, alias="Iterations", gt=0)
    cutoff: int = Field(default=5, alias="Cutoff", ge=0)
    l1_cost: Optional[float] = Field(default=None, alias="L1Cost", ge=0)
    l2_cost: Optional[float] = Field(default=None, alias="L2Cost", ge=0)
    threads: int = Field(default=1, alias="Threads", ge=1)
    data_indexer: Literal["OnePass", "TwoPass"] = Field(
        default=DataIndexers.ONE_PASS, alias="DataIndexer"
    )

    # Naive Bayes
    smoothing: bool = Field(default=True, alias="Smoothing")

    # Quasi-Newton
    memory: int = Field(default=15, alias="Memory", gt=0)
    max_fct_eval: int = Field(default=30000, alias="MaxFctEval", gt=0)

    # ------------------------------------------------------------------
    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> "TrainingParameters":
        try:
            return cls(**dict(raw or {}))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid training parameters: {e}") from e

    @classmethod
    def load(cls, path: str | Path) -> "TrainingParameters":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Training parameters not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        return cls.from_mapping(raw)

    def with_overrides(self, **overrides: Any) -> "TrainingParameters":
        """Return a copy with the given (alias or field) keys replaced."""
        raw = self.model_dump(by_alias=True)
        fields = type(self).model_fields
        for key, value in overrides.items():
            if value is None:
                continue
            if key in fields and fields[key].alias:
                key = fields[key].alias
            raw[key] = value
        return type(self).from_mapping(raw)

    def extra(self, key: str, default: Any = None) -> Any:
        return (self.model_extra or {}).get(key, default)
