#!filepath: maxent/model/naive_bayes_model.py
from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
from scipy.special import logsumexp

from maxent.model.base_model import AbstractModel, ModelType, TrainingInfo

# Lidstone smoothing constant
SMOOTHING_DELTA = 0.05


class NaiveBayesModel(AbstractModel):
    """
    NaiveBayesModel

    parameters[o, p] holds the (count * value) mass of predicate p observed
    with outcome o. Outcome totals are the row sums; the vocabulary is the
    number of predicates.

        log p(o | ctx) ~ log prior(o) + sum_k log P(pred_k | o)

        prior(o)      = total(o) / sum(total)
        P(p | o)      = (n[o, p] * v + delta) / (total(o) + delta * V)   smoothing=True
                      = n[o, p] * v / total(o)                           smoothing=False

    ``smoothing`` is fixed at construction.
    """

    def __init__(
        self,
        parameters,
        pred_labels: Sequence[str],
        outcome_labels: Sequence[str],
        smoothing: bool = True,
        info: Optional[TrainingInfo] = None,
    ):
        super().__init__(parameters, pred_labels, outcome_labels, info)
        self.smoothing = bool(smoothing)

        totals = self._params.sum(axis=1)
        totals.flags.writeable = False
        self._outcome_totals = totals

    @property
    def model_type(self) -> ModelType:
        return ModelType.NAIVE_BAYES

    @property
    def outcome_totals(self) -> np.ndarray:
        return self._outcome_totals

    def _likelihoods(self, numerator: np.ndarray) -> np.ndarray:
        totals = self._outcome_totals
        if self.smoothing:
            vocabulary = self.num_preds
            return (numerator + SMOOTHING_DELTA) / (totals + SMOOTHING_DELTA * vocabulary)

        out = np.zeros_like(numerator)
        np.divide(numerator, totals, out=out, where=totals > 0)
        return out

    def _eval_indexed(self, preds: np.ndarray, values: np.ndarray) -> np.ndarray:
        totals = self._outcome_totals
        grand_total = totals.sum()

        with np.errstate(divide="ignore"):
            log_probs = np.log(totals / grand_total) if grand_total > 0 else np.zeros(self.num_outcomes)
            for pred, value in zip(preds, values):
                log_probs = log_probs + np.log(self._likelihoods(self._params[:, pred] * value))

        if np.all(np.isneginf(log_probs)):
            # every outcome ruled out (unsmoothed zero counts): no information
            return np.full(self.num_outcomes, 1.0 / self.num_outcomes)

        return np.exp(log_probs - logsumexp(log_probs))

    def _same_extra(self, other: "NaiveBayesModel") -> bool:
        return self.smoothing == other.smoothing
