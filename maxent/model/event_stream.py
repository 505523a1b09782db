#!filepath: maxent/model/event_stream.py
from __future__ import annotations

import hashlib
import json
import math
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from maxent.model.event import Event
from maxent.utils.errors import InvalidFormatError


# ============================================================
# Text event format
# ============================================================
def parse_contexts(tokens: Sequence[str]) -> Tuple[List[str], Optional[List[float]]]:
    """
    Split ``name=value`` tokens into names and real values.

    A token whose suffix after the last ``=`` is not a number is kept as a
    plain predicate name with weight 1.0. Returns ``values=None`` when no
    token carried a real value.
    """
    names: List[str] = []
    values: List[float] = []
    has_real = False

    for token in tokens:
        ei = token.rfind("=")
        if 0 < ei < len(token) - 1:
            try:
                value = float(token[ei + 1:])
            except ValueError:
                names.append(token)
                values.append(1.0)
                continue

            if not math.isfinite(value):
                raise InvalidFormatError(f"Non-finite values are not allowed: {token}")
            if value < 0:
                raise InvalidFormatError(f"Negative values are not allowed: {token}")
            names.append(token[:ei])
            values.append(value)
            has_real = True
        else:
            names.append(token)
            values.append(1.0)

    return names, (values if has_real else None)


def parse_event_line(line: str, *, real_valued: bool = True) -> Optional[Event]:
    """
    ``outcome ctx1 ctx2 ...`` -> Event. Blank lines give None.
    """
    tokens = line.split()
    if not tokens:
        return None

    outcome, rest = tokens[0], tokens[1:]
    if not real_valued:
        return Event(outcome, rest)

    names, values = parse_contexts(rest)
    return Event(outcome, names, values)


def event_to_line(event: Event) -> str:
    if event.values is None:
        return " ".join([event.outcome, *event.context])
    return " ".join(
        [event.outcome, *(f"{c}={v!r}" for c, v in zip(event.context, event.values))]
    )


# ============================================================
# Streams
# ============================================================
class FileEventStream:
    """
    Re-iterable event stream over a text file (one event per line).

    Every ``iter()`` re-opens the file, so the stream can feed a
    two-pass indexer.
    """

    def __init__(self, path: str | Path, *, real_valued: bool = True, encoding: str = "utf-8"):
        self.path = Path(path)
        self.real_valued = real_valued
        self.encoding = encoding

        if not self.path.exists():
            raise FileNotFoundError(f"Event file not found: {self.path}")

    def __iter__(self) -> Iterator[Event]:
        with open(self.path, "r", encoding=self.encoding) as f:
            for lineno, line in enumerate(f, start=1):
                try:
                    event = parse_event_line(line, real_valued=self.real_valued)
                except InvalidFormatError as e:
                    raise InvalidFormatError(f"{self.path}:{lineno}: {e}") from e
                if event is not None:
                    yield event


def write_events(events: Iterable[Event], path: str | Path, encoding: str = "utf-8") -> int:
    n = 0
    with open(path, "w", encoding=encoding) as f:
        for event in events:
            f.write(event_to_line(event))
            f.write("\n")
            n += 1
    return n


class HashSumEventStream:
    """
    Pass-through stream that fingerprints every event it yields.

    ``hexdigest()`` is the SHA-256 over the events seen so far; it is
    stored as ``Training-Eventhash`` in the model manifest.
    """

    def __init__(self, events: Iterable[Event]):
        self._events = events
        self._digest = hashlib.sha256()

    def __iter__(self) -> Iterator[Event]:
        for event in self._events:
            self._digest.update(str(event).encode("utf-8"))
            self._digest.update(b"\n")
            yield event

    def hexdigest(self) -> str:
        return self._digest.hexdigest()


# ============================================================
# Spool format (lossless, used by the two-pass indexer)
# ============================================================
def spool_line(event: Event) -> str:
    return json.dumps(
        [event.outcome, list(event.context), None if event.values is None else list(event.values)],
        ensure_ascii=False,
    )


def read_spool_line(line: str) -> Event:
    outcome, context, values = json.loads(line)
    return Event(outcome, context, values)
