#!filepath: tests/training/test_qn_trainer.py
import numpy as np
import pytest

from maxent.model.base_model import ModelType
from maxent.model.maxent_model import MaxentModel
from maxent.optim.neg_log_likelihood import ParallelNegLogLikelihood
from maxent.training.engines import QNTrainEngine
from maxent.training.trainer import train_model


def test_learns_separating_predicates(make_params, weather_events):
    model = train_model(weather_events, make_params("QuasiNewtonMaxEnt"))

    assert isinstance(model, MaxentModel)
    assert model.model_type is ModelType.QN
    assert model.best_outcome(model.eval(["clouds"])) == "rain"
    assert model.best_outcome(model.eval(["clear", "cold"])) == "sun"
    assert model.eval(["clouds", "humid"]).sum() == pytest.approx(1.0)


def test_training_metrics_and_history(make_params, weather_events, inst):
    trainer = QNTrainEngine(make_params("QuasiNewtonMaxEnt"), inst=inst)
    trainer.train(weather_events)
    ctx = trainer.ctx

    assert ctx.metrics["training_accuracy"] == 1.0
    assert ctx.metrics["events"] == 16
    assert ctx.metrics["unique_events"] == 4
    assert ctx.metrics["termination"] in ("CONVERGED", "MAX_ITERATIONS")
    assert ctx.history and set(ctx.history[0]) == {
        "iteration", "value", "grad_norm", "step_size", "fct_evals",
    }

    assert "index" in inst.timeline
    assert "optimize" in inst.timeline
    assert inst.metrics.metrics["predicates"] == 6


def test_model_info(make_params, weather_events):
    params = make_params("QuasiNewtonMaxEnt", Cutoff=1, Iterations=50, Language="en")
    model = train_model(weather_events, params)

    assert model.info.algorithm == "QuasiNewtonMaxEnt"
    assert model.info.cutoff == 1
    assert model.info.iterations == 50
    assert model.info.language == "en"
    assert len(model.info.event_hash) == 64


def test_l1_drives_unused_weights_to_zero(make_params, weather_events):
    model = train_model(weather_events, make_params("QuasiNewtonMaxEnt", L1Cost=2.0, L2Cost=0.0))

    assert np.count_nonzero(model.parameters == 0.0) > 0


def test_indexers_give_identical_models(make_params, weather_events):
    one = train_model(weather_events, make_params("QuasiNewtonMaxEnt", DataIndexer="OnePass"))
    two = train_model(weather_events, make_params("QuasiNewtonMaxEnt", DataIndexer="TwoPass"))

    assert one == two


def test_threads_match_sequential(make_params, weather_events):
    seq = train_model(weather_events, make_params("QuasiNewtonMaxEnt", Threads=1))
    par = train_model(weather_events, make_params("QuasiNewtonMaxEnt", Threads=3))

    for context in (["clouds"], ["clear", "warm"], ["cold", "warm"]):
        np.testing.assert_allclose(par.eval(context), seq.eval(context), atol=1e-4)


def test_parallel_objective_is_closed_after_training(make_params, weather_events, monkeypatch):
    closed = []
    original = ParallelNegLogLikelihood.close

    def close(self):
        closed.append(self.threads)
        original(self)

    monkeypatch.setattr(ParallelNegLogLikelihood, "close", close)
    train_model(weather_events, make_params("QuasiNewtonMaxEnt", Threads=3))

    assert closed == [3]


def test_real_valued_events(make_params, real_valued_events):
    model = train_model(real_valued_events, make_params("QuasiNewtonMaxEnt", L1Cost=0.0, L2Cost=0.01))

    assert model.best_outcome(model.eval(["temp", "sun"], [3.0, 1.0])) == "hot"
    assert model.best_outcome(model.eval(["temp", "wind"], [0.5, 2.0])) == "cold"
