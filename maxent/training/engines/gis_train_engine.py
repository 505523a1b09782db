#!filepath: maxent/training/engines/gis_train_engine.py
from __future__ import annotations

import numpy as np
from scipy.special import logsumexp

from maxent.config.training_config import Algorithms
from maxent.model.base_model import ModelType
from maxent.model.maxent_model import MaxentModel
from maxent.training.context import TrainingContext
from maxent.training.trainer import EventTrainer
from maxent.utils.errors import ConfigurationError
from maxent.utils.logger import logs

# stop when the log-likelihood gains less than this per iteration
LL_THRESHOLD = 1e-4


class GISTrainEngine(EventTrainer):
    """
    Generalized Iterative Scaling.

        C      = max_i sum(values_i)
        lambda += (log E_observed - log E_model) / C

    Only (outcome, predicate) pairs with observed mass get a parameter;
    the others stay 0.
    """

    algorithm = Algorithms.MAXENT

    def do_train(self, ctx: TrainingContext) -> MaxentModel:
        m = ctx.matrix
        design = m.design_matrix
        outcomes = m.outcomes
        counts = m.counts.astype(np.float64)
        rows = np.arange(m.num_events)

        correction = float(np.asarray(design.sum(axis=1)).max())
        if correction <= 0:
            raise ConfigurationError("GIS needs events with positive feature mass")

        observed = m.outcome_feature_counts()
        active = observed > 0
        log_observed = np.log(observed, where=active, out=np.zeros_like(observed))

        params = np.zeros((m.num_outcomes, m.num_preds), dtype=np.float64)
        total = counts.sum()
        prev_ll = None

        logs.info(
            f"[GIS] start | events={m.num_samples} preds={m.num_preds} "
            f"outcomes={m.num_outcomes} correction={correction:g}"
        )

        for iteration in range(1, self.params.iterations + 1):
            scores = np.asarray(design @ params.T)
            lse = logsumexp(scores, axis=1)
            ll = float(np.dot(counts, scores[rows, outcomes] - lse))

            correct = np.argmax(scores, axis=1) == outcomes
            accuracy = float(counts[correct].sum() / total)
            ctx.history.append(
                {"iteration": iteration, "loglikelihood": ll, "accuracy": accuracy}
            )
            logs.debug(f"[GIS] {iteration:>4}: loglikelihood={ll:.6f} accuracy={accuracy:.5f}")

            if prev_ll is not None:
                if ll < prev_ll:
                    logs.warning(f"[GIS] model diverging: loglikelihood {prev_ll:.6f} -> {ll:.6f}")
                    break
                if ll - prev_ll < LL_THRESHOLD:
                    break
            prev_ll = ll

            probs = np.exp(scores - lse[:, None]) * counts[:, None]
            expected = np.asarray(design.T @ probs).T

            update = np.zeros_like(params)
            np.subtract(
                log_observed,
                np.log(expected, where=active, out=np.zeros_like(expected)),
                out=update,
                where=active,
            )
            params += update / correction

        ctx.metrics["iterations"] = len(ctx.history)
        ctx.metrics["loglikelihood"] = ctx.history[-1]["loglikelihood"]

        return MaxentModel(
            params,
            m.pred_labels,
            m.outcome_labels,
            model_type=ModelType.GIS,
            info=self.training_info(m),
        )
