#!filepath: maxent/training/trainer.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable, Mapping, Optional, Union

from maxent.config.training_config import TrainingParameters
from maxent.model.base_model import AbstractModel, TrainingInfo
from maxent.model.data_indexer import IndexedMatrix, create_data_indexer
from maxent.model.event import Event
from maxent.observability.instrumentation import NoOpInstrumentation
from maxent.training.context import TrainingContext
from maxent.training.evaluator import ModelEvaluator
from maxent.utils.errors import ConfigurationError
from maxent.utils.logger import logs


class EventTrainer(ABC):
    """
    EventTrainer (FINAL / FROZEN)

    Template:
        train(events)
          -> index     (DataIndexer from params.data_indexer / params.cutoff)
          -> optimize  (do_train, algorithm specific)
          -> metrics   (events / predicates / outcomes / training accuracy)

    Each train() call builds a fresh TrainingContext, kept on
    ``self.ctx`` for reporting.
    """

    algorithm: str = ""

    def __init__(self, params: TrainingParameters, inst: Any = None):
        self.params = params
        self.inst = inst if inst is not None else NoOpInstrumentation()
        self.ctx: Optional[TrainingContext] = None

    # ------------------------------------------------------------------
    # Public API (FROZEN)
    # ------------------------------------------------------------------
    def train(self, events: Iterable[Event]) -> AbstractModel:
        ctx = TrainingContext(params=self.params, inst=self.inst)
        self.ctx = ctx

        logs.info(
            f"[{type(self).__name__}] start | algorithm={self.params.algorithm} "
            f"cutoff={self.params.cutoff} iterations={self.params.iterations}"
        )

        indexer = create_data_indexer(self.params.data_indexer, self.params.cutoff)
        with self.inst.timer("index"):
            ctx.matrix = indexer.index(events)

        with self.inst.timer("optimize"):
            model = self.do_train(ctx)

        ctx.model = model
        ctx.metrics.update(
            {
                "events": ctx.matrix.num_samples,
                "unique_events": ctx.matrix.num_events,
                "predicates": ctx.matrix.num_preds,
                "outcomes": ctx.matrix.num_outcomes,
                "training_accuracy": ModelEvaluator(ctx.matrix).accuracy_of_model(model),
            }
        )
        self.inst.metrics.update(ctx.metrics)

        logs.info(
            f"[{type(self).__name__}] done | training accuracy="
            f"{ctx.metrics['training_accuracy']:.5f}"
        )
        return model

    @abstractmethod
    def do_train(self, ctx: TrainingContext) -> AbstractModel:
        """
        Consume ctx.matrix, may append ctx.history / ctx.metrics,
        return the immutable model.
        """
        raise NotImplementedError

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def training_info(self, matrix: IndexedMatrix) -> TrainingInfo:
        return TrainingInfo(
            algorithm=self.params.algorithm,
            cutoff=self.params.cutoff,
            iterations=self.params.iterations,
            event_hash=matrix.event_hash,
            language=self.params.extra("Language"),
        )


def train_model(
    events: Iterable[Event],
    params: Union[TrainingParameters, Mapping[str, Any], None] = None,
    registry=None,
    inst: Any = None,
) -> AbstractModel:
    """
    Train one model with the trainer registered under ``params.algorithm``.

    ``registry`` defaults to a fresh TrainerRegistry.with_defaults().
    """
    from maxent.training.registry import TrainerRegistry

    if not isinstance(params, TrainingParameters):
        params = TrainingParameters.from_mapping(params)

    registry = registry if registry is not None else TrainerRegistry.with_defaults()
    if params.algorithm not in registry:
        raise ConfigurationError(
            f"Unknown algorithm: {params.algorithm}. Available: {', '.join(registry.names())}"
        )

    trainer = registry.create(params, inst=inst)
    return trainer.train(events)
