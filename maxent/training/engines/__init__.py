"""
Train engines (FINAL / FROZEN)

Each engine is an EventTrainer bound to one ``Algorithm`` name:

- GISTrainEngine         MaxEnt             Generalized Iterative Scaling
- QNTrainEngine          QuasiNewtonMaxEnt  L-BFGS / OWL-QN on the
                                            regularized log-likelihood
- NaiveBayesTrainEngine  NaiveBayes         weighted counts

Engines share indexing, timing and metrics through EventTrainer and only
implement do_train(ctx).
"""
from .gis_train_engine import GISTrainEngine
from .qn_train_engine import QNTrainEngine
from .naive_bayes_train_engine import NaiveBayesTrainEngine
from .train_report_engine import TrainReportEngine

__all__ = [
    "GISTrainEngine",
    "QNTrainEngine",
    "NaiveBayesTrainEngine",
    "TrainReportEngine",
]
