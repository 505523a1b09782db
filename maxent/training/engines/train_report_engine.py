#!filepath: maxent/training/engines/train_report_engine.py
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import pandas as pd

from maxent.training.context import TrainingContext
from maxent.utils.logger import logs


class TrainReportEngine:
    """
    TrainReportEngine (FINAL / FROZEN)

    Responsibility:
    - turn the per-iteration training history into a DataFrame
    - summarize the final metrics
    - no training side effects
    """

    # ------------------------------------------------------------------
    # Public API (FROZEN)
    # ------------------------------------------------------------------
    def history_frame(self, ctx: TrainingContext) -> pd.DataFrame:
        if not ctx.history:
            return pd.DataFrame(columns=["iteration"])

        df = pd.DataFrame(ctx.history)
        return df.sort_values("iteration").reset_index(drop=True)

    def summarize(self, ctx: TrainingContext) -> Dict[str, Any]:
        summary: Dict[str, Any] = {"algorithm": ctx.params.algorithm}
        summary.update(ctx.metrics)
        summary.update({f"time_{k}": v for k, v in ctx.inst.timeline.items()})
        return summary

    def write(self, ctx: TrainingContext, path: str | Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        df = self.history_frame(ctx)
        df.to_csv(path, index=False)

        logs.info(f"[TrainReportEngine] wrote {len(df)} iterations -> {path}")
        return path
