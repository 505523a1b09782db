#!filepath: maxent/training/evaluator.py
from __future__ import annotations

import numpy as np

from maxent.model.base_model import AbstractModel
from maxent.model.data_indexer import IndexedMatrix
from maxent.utils.logger import logs


class ModelEvaluator:
    """
    Training-set accuracy, weighted by event counts.

    Used as the QNMinimizer ``evaluator`` callback and for the final
    training metrics. Ties go to the first outcome.
    """

    def __init__(self, matrix: IndexedMatrix):
        self.matrix = matrix

    def accuracy_of_parameters(self, x: np.ndarray) -> float:
        m = self.matrix
        params = np.asarray(x, dtype=np.float64).reshape(m.num_outcomes, m.num_preds)
        scores = np.asarray(m.design_matrix @ params.T)
        return self._accuracy(np.argmax(scores, axis=1))

    def accuracy_of_model(self, model: AbstractModel) -> float:
        m = self.matrix
        labels = m.pred_labels
        predicted = np.empty(m.num_events, dtype=np.int64)

        for i, ctx in enumerate(m.contexts):
            context = [labels[p] for p in ctx]
            probs = model.eval(context, m.row_values(i))
            predicted[i] = int(np.argmax(probs))

        # model outcome order may differ from the matrix order
        mapping = np.array([model.get_index(label) for label in m.outcome_labels])
        return self._accuracy(predicted, mapping)

    def _accuracy(self, predicted: np.ndarray, mapping: np.ndarray | None = None) -> float:
        expected = self.matrix.outcomes if mapping is None else mapping[self.matrix.outcomes]
        counts = self.matrix.counts
        total = counts.sum()
        if total == 0:
            return 0.0
        return float(counts[predicted == expected].sum() / total)

    def __call__(self, iteration: int, x: np.ndarray) -> None:
        logs.info(
            f"[ModelEvaluator] iteration={iteration} training accuracy={self.accuracy_of_parameters(x):.5f}"
        )
