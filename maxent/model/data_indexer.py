#!filepath: maxent/model/data_indexer.py
from __future__ import annotations

import os
import tempfile
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass
from functools import cached_property
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np
from scipy import sparse

from maxent.model.event import Event
from maxent.model.event_stream import HashSumEventStream, read_spool_line, spool_line
from maxent.utils.errors import ConfigurationError
from maxent.utils.logger import logs


# ============================================================
# Indexed training matrix (FROZEN)
# ============================================================
@dataclass(frozen=True, eq=False)
class IndexedMatrix:
    """
    Compacted training data.

    Row i describes one DISTINCT event:
    - contexts[i] : sorted predicate indices
    - values[i]   : real weights parallel to contexts[i]
                    (``values`` is None when no event carried real values)
    - outcomes[i] : outcome index
    - counts[i]   : how many raw events collapsed into this row

    Rows keep first-seen order, so re-indexing the same stream yields
    the same matrix.
    """

    contexts: List[np.ndarray]
    values: Optional[List[np.ndarray]]
    outcomes: np.ndarray
    counts: np.ndarray
    pred_labels: List[str]
    outcome_labels: List[str]
    pred_counts: np.ndarray
    event_hash: str
    cutoff: int

    @property
    def num_events(self) -> int:
        return len(self.contexts)

    @property
    def num_samples(self) -> int:
        return int(self.counts.sum())

    @property
    def num_preds(self) -> int:
        return len(self.pred_labels)

    @property
    def num_outcomes(self) -> int:
        return len(self.outcome_labels)

    @property
    def dimension(self) -> int:
        return self.num_preds * self.num_outcomes

    def row_values(self, i: int) -> np.ndarray:
        if self.values is None:
            return np.ones(len(self.contexts[i]), dtype=np.float64)
        return self.values[i]

    @cached_property
    def design_matrix(self) -> sparse.csr_matrix:
        """
        (num_events x num_preds) CSR matrix of predicate weights.
        Repeated predicates inside a row are summed by the sparse
        products, which matches summing them one by one.
        """
        indptr = np.zeros(self.num_events + 1, dtype=np.int64)
        for i, ctx in enumerate(self.contexts):
            indptr[i + 1] = indptr[i] + len(ctx)

        if self.num_events:
            indices = np.concatenate(self.contexts).astype(np.int32)
            data = np.concatenate([self.row_values(i) for i in range(self.num_events)])
        else:
            indices = np.zeros(0, dtype=np.int32)
            data = np.zeros(0, dtype=np.float64)

        return sparse.csr_matrix(
            (data, indices, indptr), shape=(self.num_events, self.num_preds)
        )

    def outcome_feature_counts(self) -> np.ndarray:
        """
        (num_outcomes x num_preds) observed mass: sum of count * value of
        every predicate occurrence, split by the event outcome.
        """
        weights = sparse.csr_matrix(
            (
                self.counts.astype(np.float64),
                (np.arange(self.num_events), self.outcomes),
            ),
            shape=(self.num_events, self.num_outcomes),
        )
        return np.asarray((self.design_matrix.T @ weights).T.todense())


# ============================================================
# Indexers
# ============================================================
class DataIndexer(ABC):
    """
    DataIndexer (FINAL / FROZEN)

    Responsibility:
    - apply the predicate cutoff (number of DISTINCT events a predicate
      occurs in, counted once per event)
    - number predicates / outcomes in first-seen order
    - drop events left without predicates
    - merge identical events into one row with an occurrence count
    - fingerprint the raw stream

    Subclasses only differ in how the raw stream is held between the
    counting pass and the indexing pass.
    """

    name: str = ""

    def __init__(self, cutoff: int = 0):
        if cutoff < 0:
            raise ConfigurationError(f"cutoff must be >= 0, got {cutoff}")
        self.cutoff = cutoff

    @abstractmethod
    def index(self, events: Iterable[Event]) -> IndexedMatrix:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # shared helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _count(counter: Counter, event: Event) -> None:
        # dict.fromkeys keeps first-seen order and drops repeats
        for pred in dict.fromkeys(event.context):
            counter[pred] += 1

    def _retained(self, counter: Counter) -> List[str]:
        # Counter preserves insertion (= first-seen) order
        return [pred for pred, n in counter.items() if n >= self.cutoff]

    def _build(
        self,
        events: Iterable[Event],
        counter: Counter,
        event_hash: str,
        num_raw: int,
    ) -> IndexedMatrix:
        pred_labels = self._retained(counter)
        pred_index: Dict[str, int] = {p: i for i, p in enumerate(pred_labels)}
        outcome_index: Dict[str, int] = {}

        rows: Dict[Tuple, int] = {}
        contexts: List[Tuple[int, ...]] = []
        values: List[Tuple[float, ...]] = []
        outcomes: List[int] = []
        counts: List[int] = []

        has_real = False
        dropped = 0

        for event in events:
            pairs = [
                (pred_index[c], event.value_at(k))
                for k, c in enumerate(event.context)
                if c in pred_index
            ]
            if not pairs:
                dropped += 1
                logs.debug(f"[DataIndexer] dropped event {event}: no predicate passed the cutoff")
                continue

            if event.values is not None:
                has_real = True

            pairs.sort(key=lambda t: t[0])
            preds = tuple(p for p, _ in pairs)
            vals = tuple(v for _, v in pairs)

            oid = outcome_index.setdefault(event.outcome, len(outcome_index))
            key = (oid, preds, vals)

            row = rows.get(key)
            if row is None:
                rows[key] = len(contexts)
                contexts.append(preds)
                values.append(vals)
                outcomes.append(oid)
                counts.append(1)
            else:
                counts[row] += 1

        if not contexts:
            raise ConfigurationError(
                f"[DataIndexer] no usable events after cutoff={self.cutoff} "
                f"(raw={num_raw}, dropped={dropped})"
            )

        if dropped:
            logs.warning(f"[DataIndexer] dropped {dropped} events without predicates")

        outcome_labels = [None] * len(outcome_index)
        for label, i in outcome_index.items():
            outcome_labels[i] = label

        logs.info(
            f"[DataIndexer] {self.name} cutoff={self.cutoff} raw={num_raw} "
            f"unique={len(contexts)} preds={len(pred_labels)} outcomes={len(outcome_labels)}"
        )

        return IndexedMatrix(
            contexts=[np.asarray(c, dtype=np.int32) for c in contexts],
            values=[np.asarray(v, dtype=np.float64) for v in values] if has_real else None,
            outcomes=np.asarray(outcomes, dtype=np.int32),
            counts=np.asarray(counts, dtype=np.int64),
            pred_labels=pred_labels,
            outcome_labels=outcome_labels,
            pred_counts=np.asarray([counter[p] for p in pred_labels], dtype=np.int64),
            event_hash=event_hash,
            cutoff=self.cutoff,
        )


class OnePassDataIndexer(DataIndexer):
    """
    Counts predicates and indexes from one in-memory copy of the stream.
    Fast; the whole event list is resident once.
    """

    name = "OnePass"

    def index(self, events: Iterable[Event]) -> IndexedMatrix:
        stream = HashSumEventStream(events)
        event_list = list(stream)

        counter: Counter = Counter()
        for event in event_list:
            self._count(counter, event)

        return self._build(event_list, counter, stream.hexdigest(), len(event_list))


class TwoPassDataIndexer(DataIndexer):
    """
    Pass 1 counts predicates and spools events to a temporary file;
    pass 2 indexes from the spool. The raw list is never resident.
    """

    name = "TwoPass"

    def index(self, events: Iterable[Event]) -> IndexedMatrix:
        fd, spool_path = tempfile.mkstemp(prefix="maxent-events-", suffix=".jsonl")
        try:
            stream = HashSumEventStream(events)
            counter: Counter = Counter()
            num_raw = 0

            with os.fdopen(fd, "w", encoding="utf-8") as spool:
                for event in stream:
                    self._count(counter, event)
                    spool.write(spool_line(event))
                    spool.write("\n")
                    num_raw += 1

            logs.debug(f"[DataIndexer] spooled {num_raw} events to {spool_path}")

            with open(spool_path, "r", encoding="utf-8") as spool:
                return self._build(
                    (read_spool_line(line) for line in spool if line.strip()),
                    counter,
                    stream.hexdigest(),
                    num_raw,
                )
        finally:
            os.remove(spool_path)


def create_data_indexer(name: str, cutoff: int) -> DataIndexer:
    if name == OnePassDataIndexer.name:
        return OnePassDataIndexer(cutoff)
    if name == TwoPassDataIndexer.name:
        return TwoPassDataIndexer(cutoff)
    raise ConfigurationError(f"Unknown DataIndexer: {name}")
