from .function import Function, Regularized, pseudo_gradient
from .neg_log_likelihood import NegLogLikelihood, ParallelNegLogLikelihood
from .line_search import LineSearchResult, constrained_line_search, line_search
from .qn_minimizer import IterationRecord, MinimizerResult, QNMinimizer, Termination

__all__ = [
    "Function",
    "Regularized",
    "pseudo_gradient",
    "NegLogLikelihood",
    "ParallelNegLogLikelihood",
    "LineSearchResult",
    "line_search",
    "constrained_line_search",
    "QNMinimizer",
    "Termination",
    "MinimizerResult",
    "IterationRecord",
]
