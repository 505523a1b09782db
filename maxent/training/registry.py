#!filepath: maxent/training/registry.py
from __future__ import annotations

from typing import Any, Callable, Dict, List

from maxent.config.training_config import TrainingParameters
from maxent.training.trainer import EventTrainer
from maxent.utils.errors import ConfigurationError

TrainerFactory = Callable[..., EventTrainer]


class TrainerRegistry:
    """
    TrainerRegistry

    Explicit name -> trainer factory mapping, owned by the caller.

    Registration rules:
    - names are unique
    - a factory must expose a callable ``train`` (trainer classes do)
    - factories are called as factory(params, inst=inst)
    """

    def __init__(self):
        self._factories: Dict[str, TrainerFactory] = {}

    @classmethod
    def with_defaults(cls) -> "TrainerRegistry":
        from maxent.training.engines import (
            GISTrainEngine,
            NaiveBayesTrainEngine,
            QNTrainEngine,
        )

        registry = cls()
        for engine in (GISTrainEngine, QNTrainEngine, NaiveBayesTrainEngine):
            registry.register(engine.algorithm, engine)
        return registry

    # ------------------------------------------------------------------
    def register(self, name: str, factory: TrainerFactory) -> None:
        if not name:
            raise ConfigurationError("Trainer name must not be empty")
        if name in self._factories:
            raise ConfigurationError(f"Trainer already registered: {name}")
        if not callable(factory) or not callable(getattr(factory, "train", None)):
            raise ConfigurationError(
                f"Trainer factory for {name} does not provide a callable train()"
            )
        self._factories[name] = factory

    def names(self) -> List[str]:
        return list(self._factories)

    def __contains__(self, name: str) -> bool:
        return name in self._factories

    def is_valid(self, params: Any) -> bool:
        if not isinstance(params, TrainingParameters):
            try:
                params = TrainingParameters.from_mapping(params)
            except (TypeError, ValueError):
                return False
        return params.algorithm in self._factories

    def create(self, params: TrainingParameters, inst: Any = None) -> EventTrainer:
        factory = self._factories.get(params.algorithm)
        if factory is None:
            available = ", ".join(self._factories)
            raise ConfigurationError(
                f"No trainer for {params.algorithm}. Available: {available}"
            )
        return factory(params, inst=inst)
