#!filepath: maxent/model/maxent_model.py
from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
from scipy.special import logsumexp

from maxent.model.base_model import AbstractModel, ModelType, TrainingInfo
from maxent.utils.errors import StructuralError


class MaxentModel(AbstractModel):
    """
    Linear exponential model shared by the GIS and QN trainers.

        p(o | ctx) = exp(sum_k w[o, pred_k] * v_k) / Z(ctx)

    Normalized with a max-subtracted log-sum-exp.
    """

    def __init__(
        self,
        parameters,
        pred_labels: Sequence[str],
        outcome_labels: Sequence[str],
        model_type: ModelType = ModelType.QN,
        info: Optional[TrainingInfo] = None,
    ):
        model_type = ModelType(model_type)
        if model_type is ModelType.NAIVE_BAYES:
            raise StructuralError("MaxentModel cannot carry a NaiveBayes model type")
        self._model_type = model_type
        super().__init__(parameters, pred_labels, outcome_labels, info)

    @property
    def model_type(self) -> ModelType:
        return self._model_type

    def scores(self, preds: np.ndarray, values: np.ndarray) -> np.ndarray:
        return self._params[:, preds] @ values

    def _eval_indexed(self, preds: np.ndarray, values: np.ndarray) -> np.ndarray:
        scores = self.scores(preds, values)
        return np.exp(scores - logsumexp(scores))
