#!filepath: tests/training/conftest.py
from __future__ import annotations

import pytest

from maxent.config.training_config import TrainingParameters
from maxent.observability.instrumentation import Instrumentation


@pytest.fixture
def make_params():
    """
    Factory fixture for TrainingParameters (external key names).

    Usage:
        params = make_params("NaiveBayes", Smoothing=False)
    """

    def _make(algorithm: str, **overrides) -> TrainingParameters:
        raw = {"Algorithm": algorithm, "Cutoff": 0, "Iterations": 100}
        raw.update(overrides)
        return TrainingParameters.from_mapping(raw)

    return _make


@pytest.fixture
def inst() -> Instrumentation:
    return Instrumentation(enabled=True)
