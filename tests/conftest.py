#!filepath: tests/conftest.py
from __future__ import annotations

from pathlib import Path
from typing import List

import pytest
from loguru import logger

from maxent.model.event import Event

DATA_DIR = Path(__file__).resolve().parent / "data"


@pytest.fixture(autouse=True)
def disable_file_logger():
    logger.remove()
    logger.add(lambda msg: None)  # or sys.stderr
    yield


@pytest.fixture
def data_dir() -> Path:
    return DATA_DIR


@pytest.fixture
def news_events() -> List[Event]:
    """
    Four bag-of-words events, two outcomes.

    politics: the=2 united=2 nations=1 states=1 and=1   (total 7)
    sports  : manchester=2 united=1 and=1 barca=1       (total 5)
    """
    return [
        Event("politics", ["the", "united", "nations"]),
        Event("politics", ["the", "united", "states", "and"]),
        Event("sports", ["manchester", "united"]),
        Event("sports", ["manchester", "and", "barca"]),
    ]


@pytest.fixture
def weather_events() -> List[Event]:
    """Small separable set, outcomes driven by one predicate each."""
    events = []
    for _ in range(6):
        events.append(Event("rain", ["clouds", "humid", "cold"]))
        events.append(Event("sun", ["clear", "dry", "warm"]))
    for _ in range(2):
        events.append(Event("rain", ["clouds", "warm"]))
        events.append(Event("sun", ["clear", "cold"]))
    return events


@pytest.fixture
def real_valued_events() -> List[Event]:
    return [
        Event("hot", ["temp", "sun"], [3.0, 1.0]),
        Event("hot", ["temp", "sun"], [2.5, 0.5]),
        Event("cold", ["temp", "wind"], [0.5, 2.0]),
        Event("cold", ["temp", "wind", "sun"], [0.2, 1.5, 0.1]),
    ]
