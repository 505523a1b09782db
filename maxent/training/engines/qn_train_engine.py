#!filepath: maxent/training/engines/qn_train_engine.py
from __future__ import annotations

from dataclasses import asdict

from maxent.config.training_config import Algorithms
from maxent.model.base_model import ModelType
from maxent.model.maxent_model import MaxentModel
from maxent.optim.function import Regularized
from maxent.optim.neg_log_likelihood import NegLogLikelihood, ParallelNegLogLikelihood
from maxent.optim.qn_minimizer import QNMinimizer
from maxent.training.context import TrainingContext
from maxent.training.evaluator import ModelEvaluator
from maxent.training.trainer import EventTrainer
from maxent.utils.logger import logs

DEFAULT_L1_COST = 0.1
DEFAULT_L2_COST = 0.1


class QNTrainEngine(EventTrainer):
    """
    Regularized negative log-likelihood minimized with L-BFGS
    (OWL-QN when L1Cost > 0).

    Threads > 1 evaluates the objective on row slices in parallel.
    """

    algorithm = Algorithms.MAXENT_QN

    def do_train(self, ctx: TrainingContext) -> MaxentModel:
        m = ctx.matrix
        p = self.params

        l1_cost = DEFAULT_L1_COST if p.l1_cost is None else p.l1_cost
        l2_cost = DEFAULT_L2_COST if p.l2_cost is None else p.l2_cost

        if p.threads > 1:
            objective = ParallelNegLogLikelihood(m, p.threads)
        else:
            objective = NegLogLikelihood(m)

        function = Regularized(objective, l1_cost=l1_cost, l2_cost=l2_cost)

        logs.info(
            f"[QN] start | dimension={function.dimension} l1={l1_cost} l2={l2_cost} "
            f"memory={p.memory} threads={p.threads}"
        )

        minimizer = QNMinimizer(
            m=p.memory,
            max_iterations=p.iterations,
            max_fct_eval=p.max_fct_eval,
            evaluator=ModelEvaluator(m),
        )
        with objective:
            x = minimizer.minimize(function)

        result = minimizer.last_result
        ctx.history.extend(asdict(record) for record in result.history)
        ctx.metrics.update(
            {
                "iterations": result.iterations,
                "termination": result.termination.value,
                "objective": result.value,
                "fct_evals": result.fct_evals,
            }
        )

        return MaxentModel(
            x,
            m.pred_labels,
            m.outcome_labels,
            model_type=ModelType.QN,
            info=self.training_info(m),
        )
