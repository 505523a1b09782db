#!filepath: maxent/training/context.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from maxent.config.training_config import TrainingParameters
from maxent.model.base_model import AbstractModel
from maxent.model.data_indexer import IndexedMatrix


@dataclass
class TrainingContext:
    """
    TrainingContext (FINAL / FROZEN)

    Semantics:
    - One context == one train() call
    - params / inst are bound at creation
    - matrix, model, history and metrics are filled while training
    """

    # -------------------------
    # Static bindings
    # -------------------------
    params: TrainingParameters
    inst: Any

    # -------------------------
    # Training state
    # -------------------------
    matrix: Optional[IndexedMatrix] = None
    model: Optional[AbstractModel] = None

    # one dict per optimizer iteration (see TrainReportEngine)
    history: List[Dict[str, Any]] = field(default_factory=list)
    metrics: Dict[str, Any] = field(default_factory=dict)
