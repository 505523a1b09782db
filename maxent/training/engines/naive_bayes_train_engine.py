#!filepath: maxent/training/engines/naive_bayes_train_engine.py
from __future__ import annotations

from maxent.config.training_config import Algorithms
from maxent.model.naive_bayes_model import NaiveBayesModel
from maxent.training.context import TrainingContext
from maxent.training.trainer import EventTrainer
from maxent.utils.logger import logs


class NaiveBayesTrainEngine(EventTrainer):
    """
    Counts (count * value) mass per (outcome, predicate).
    No iterations; ``Smoothing`` is handed to the model.
    """

    algorithm = Algorithms.NAIVE_BAYES

    def do_train(self, ctx: TrainingContext) -> NaiveBayesModel:
        m = ctx.matrix
        params = m.outcome_feature_counts()

        logs.info(
            f"[NaiveBayes] counted | preds={m.num_preds} outcomes={m.num_outcomes} "
            f"smoothing={self.params.smoothing}"
        )

        return NaiveBayesModel(
            params,
            m.pred_labels,
            m.outcome_labels,
            smoothing=self.params.smoothing,
            info=self.training_info(m),
        )
