#!filepath: maxent/model/base_model.py
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

import numpy as np

from maxent.model.index_table import IndexTable
from maxent.utils.errors import StructuralError


class ModelType(str, Enum):
    GIS = "GIS"
    QN = "QN"
    NAIVE_BAYES = "NaiveBayes"


@dataclass(frozen=True)
class TrainingInfo:
    """
    Model metadata written to the artifact manifest.
    """

    algorithm: Optional[str] = None
    cutoff: Optional[int] = None
    iterations: Optional[int] = None
    event_hash: Optional[str] = None
    language: Optional[str] = None


class AbstractModel(ABC):
    """
    AbstractModel (FINAL / FROZEN)

    Immutable scored model:
    - parameters : (num_outcomes x num_preds) read-only float64 matrix;
                   ``parameters.ravel()`` is the flat training vector
                   indexed as outcome * num_preds + pred
    - predicate table (IndexTable) + ordered outcome labels
    - TrainingInfo metadata

    Evaluation contract:
        eval(context, values=None) -> per-outcome probabilities (sum 1.0)

    Predicates unknown to the model are ignored.
    Instances are never mutated and may be shared between threads.
    """

    def __init__(
        self,
        parameters,
        pred_labels: Sequence[str],
        outcome_labels: Sequence[str],
        info: Optional[TrainingInfo] = None,
    ):
        n_preds, n_outcomes = len(pred_labels), len(outcome_labels)

        params = np.array(parameters, dtype=np.float64)
        if params.ndim == 1:
            if params.size != n_preds * n_outcomes:
                raise StructuralError(
                    f"parameter length {params.size} != {n_outcomes} outcomes x {n_preds} predicates"
                )
            params = params.reshape(n_outcomes, n_preds)
        elif params.shape != (n_outcomes, n_preds):
            raise StructuralError(
                f"parameter shape {params.shape} != ({n_outcomes}, {n_preds})"
            )
        params.flags.writeable = False

        if len(set(outcome_labels)) != n_outcomes:
            raise StructuralError("outcome labels must be unique")

        self._params = params
        self._pmap: IndexTable[str] = IndexTable(list(pred_labels))
        self._outcomes: List[str] = list(outcome_labels)
        self._outcome_index = {label: i for i, label in enumerate(self._outcomes)}
        self.info = info or TrainingInfo()

    # ------------------------------------------------------------------
    # identity
    # ------------------------------------------------------------------
    @property
    @abstractmethod
    def model_type(self) -> ModelType:
        ...

    # ------------------------------------------------------------------
    # accessors
    # ------------------------------------------------------------------
    @property
    def parameters(self) -> np.ndarray:
        return self._params

    @property
    def pred_labels(self) -> List[str]:
        return self._pmap.to_list()

    @property
    def pred_table(self) -> IndexTable[str]:
        return self._pmap

    @property
    def outcome_labels(self) -> List[str]:
        return list(self._outcomes)

    @property
    def num_outcomes(self) -> int:
        return len(self._outcomes)

    @property
    def num_preds(self) -> int:
        return len(self._pmap)

    def get_outcome(self, index: int) -> str:
        return self._outcomes[index]

    def get_index(self, outcome: str) -> int:
        return self._outcome_index.get(outcome, IndexTable.NOT_FOUND)

    def best_outcome(self, probs: Sequence[float]) -> str:
        # first maximum wins on ties
        return self._outcomes[int(np.argmax(probs))]

    def all_outcomes(self, probs: Sequence[float]) -> str:
        return " ".join(f"{label}[{p:.4f}]" for label, p in zip(self._outcomes, probs))

    # ------------------------------------------------------------------
    # evaluation
    # ------------------------------------------------------------------
    def eval(self, context: Sequence[str], values: Optional[Sequence[float]] = None) -> np.ndarray:
        if values is not None and len(values) != len(context):
            raise ValueError(
                f"values length {len(values)} != context length {len(context)}"
            )

        preds: List[int] = []
        vals: List[float] = []
        for i, pred in enumerate(context):
            idx = self._pmap.get(pred)
            if idx != IndexTable.NOT_FOUND:
                preds.append(idx)
                vals.append(1.0 if values is None else float(values[i]))

        return self._eval_indexed(
            np.asarray(preds, dtype=np.int64), np.asarray(vals, dtype=np.float64)
        )

    @abstractmethod
    def _eval_indexed(self, preds: np.ndarray, values: np.ndarray) -> np.ndarray:
        ...

    # ------------------------------------------------------------------
    # equality
    # ------------------------------------------------------------------
    def _same_extra(self, other: "AbstractModel") -> bool:
        return True

    def __eq__(self, other) -> bool:
        if self is other:
            return True
        if not isinstance(other, AbstractModel) or type(self) is not type(other):
            return False
        return (
            self.model_type == other.model_type
            and self._outcomes == other._outcomes
            and self._pmap == other._pmap
            and np.array_equal(self._params, other._params)
            and self._same_extra(other)
        )

    def __hash__(self) -> int:
        return hash((self.model_type, tuple(self._outcomes), self._pmap))

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(type={self.model_type.value}, "
            f"outcomes={self.num_outcomes}, preds={self.num_preds})"
        )
