#!filepath: maxent/model/event.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple


@dataclass(frozen=True)
class Event:
    """
    One labeled training sample.

    - outcome : label
    - context : ordered feature (predicate) names
    - values  : optional real weights, parallel to ``context``;
                None means every predicate has weight 1.0
    """

    outcome: str
    context: Tuple[str, ...]
    values: Optional[Tuple[float, ...]] = None

    def __init__(
        self,
        outcome: str,
        context: Sequence[str],
        values: Optional[Sequence[float]] = None,
    ):
        object.__setattr__(self, "outcome", outcome)
        object.__setattr__(self, "context", tuple(context))
        object.__setattr__(
            self, "values", None if values is None else tuple(float(v) for v in values)
        )

        if self.values is not None and len(self.values) != len(self.context):
            raise ValueError(
                f"[Event] values length {len(self.values)} != context length {len(self.context)}"
            )
        if self.values is not None and not all(math.isfinite(v) for v in self.values):
            raise ValueError(f"[Event] values must be finite, got {self.values}")

    def value_at(self, i: int) -> float:
        return 1.0 if self.values is None else self.values[i]

    def __str__(self) -> str:
        if self.values is None:
            feats = " ".join(self.context)
        else:
            feats = " ".join(f"{c}={v!r}" for c, v in zip(self.context, self.values))
        return f"{self.outcome} [{feats}]"
