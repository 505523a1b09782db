#!filepath: maxent/observability/timer.py
import time
from typing import Dict


class Timer:
    """
    High-resolution named timer
    - start(name)
    - end(name) -> seconds for this run
    - total(name) -> seconds accumulated over all runs of ``name``
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._start: Dict[str, float] = {}
        self._total: Dict[str, float] = {}

    def start(self, name: str):
        if not self.enabled:
            return
        self._start[name] = time.perf_counter()

    def end(self, name: str) -> float:
        if not self.enabled or name not in self._start:
            return 0.0
        elapsed = time.perf_counter() - self._start.pop(name)
        self._total[name] = self._total.get(name, 0.0) + elapsed
        return elapsed

    def total(self, name: str) -> float:
        return self._total.get(name, 0.0)
