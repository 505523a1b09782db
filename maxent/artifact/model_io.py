#!filepath: maxent/artifact/model_io.py
"""
Single-stream model formats.

Record order (both formats):

    model type           GIS | QN | NaiveBayes
    smoothing            NaiveBayes only, 1 / 0
    num outcomes         int
    outcome labels       one string each
    num predicates       int
    predicate labels     one string each
    num parameters       int (= outcomes * predicates)
    parameters           outcome-major doubles

Binary: big-endian ints / doubles, strings as u2 length + UTF-8.
Plain text: one record per line.
"""
from __future__ import annotations

import struct
from abc import ABC, abstractmethod
from typing import BinaryIO, TextIO

import numpy as np

from maxent.model.base_model import AbstractModel, ModelType
from maxent.model.maxent_model import MaxentModel
from maxent.model.naive_bayes_model import NaiveBayesModel
from maxent.utils.errors import InvalidFormatError


# ============================================================
# Writers
# ============================================================
class ModelWriter(ABC):
    def __init__(self, model: AbstractModel):
        self.model = model

    @abstractmethod
    def write_utf(self, s: str) -> None:
        ...

    @abstractmethod
    def write_int(self, i: int) -> None:
        ...

    @abstractmethod
    def write_double(self, d: float) -> None:
        ...

    def close(self) -> None:
        pass

    def persist(self) -> None:
        model = self.model
        self.write_utf(model.model_type.value)
        if isinstance(model, NaiveBayesModel):
            self.write_int(1 if model.smoothing else 0)

        self.write_int(model.num_outcomes)
        for label in model.outcome_labels:
            self.write_utf(label)

        self.write_int(model.num_preds)
        for label in model.pred_labels:
            self.write_utf(label)

        params = model.parameters.ravel()
        self.write_int(params.size)
        for value in params:
            self.write_double(float(value))

        self.close()


class BinaryModelWriter(ModelWriter):
    def __init__(self, model: AbstractModel, stream: BinaryIO):
        super().__init__(model)
        self.stream = stream

    def write_utf(self, s: str) -> None:
        data = s.encode("utf-8")
        if len(data) > 0xFFFF:
            raise InvalidFormatError(f"String too long for the binary format: {len(data)} bytes")
        self.stream.write(struct.pack(">H", len(data)))
        self.stream.write(data)

    def write_int(self, i: int) -> None:
        self.stream.write(struct.pack(">i", i))

    def write_double(self, d: float) -> None:
        self.stream.write(struct.pack(">d", d))

    def close(self) -> None:
        self.stream.flush()


class PlainTextModelWriter(ModelWriter):
    def __init__(self, model: AbstractModel, stream: TextIO):
        super().__init__(model)
        self.stream = stream

    def write_utf(self, s: str) -> None:
        if "\n" in s:
            raise InvalidFormatError(f"Line break in a plain-text record: {s!r}")
        self.stream.write(f"{s}\n")

    def write_int(self, i: int) -> None:
        self.stream.write(f"{i}\n")

    def write_double(self, d: float) -> None:
        # repr round-trips a float64 exactly
        self.stream.write(f"{d!r}\n")

    def close(self) -> None:
        self.stream.flush()


# ============================================================
# Readers
# ============================================================
class ModelReader(ABC):
    @abstractmethod
    def read_utf(self) -> str:
        ...

    @abstractmethod
    def read_int(self) -> int:
        ...

    @abstractmethod
    def read_double(self) -> float:
        ...

    def get_model(self) -> AbstractModel:
        raw_type = self.read_utf()
        try:
            model_type = ModelType(raw_type)
        except ValueError:
            raise InvalidFormatError(f"Unknown model type: {raw_type!r}") from None

        smoothing = True
        if model_type is ModelType.NAIVE_BAYES:
            smoothing = self.read_int() != 0

        outcomes = [self.read_utf() for _ in range(self._count())]
        preds = [self.read_utf() for _ in range(self._count())]

        size = self._count()
        if size != len(outcomes) * len(preds):
            raise InvalidFormatError(
                f"{size} parameters for {len(outcomes)} outcomes x {len(preds)} predicates"
            )
        params = np.array([self.read_double() for _ in range(size)], dtype=np.float64)

        if model_type is ModelType.NAIVE_BAYES:
            return NaiveBayesModel(params, preds, outcomes, smoothing=smoothing)
        return MaxentModel(params, preds, outcomes, model_type=model_type)

    def _count(self) -> int:
        n = self.read_int()
        if n < 0:
            raise InvalidFormatError(f"Negative count: {n}")
        return n


class BinaryModelReader(ModelReader):
    def __init__(self, stream: BinaryIO):
        self.stream = stream

    def _read(self, n: int) -> bytes:
        data = self.stream.read(n)
        if len(data) != n:
            raise InvalidFormatError("Unexpected end of model stream")
        return data

    def read_utf(self) -> str:
        (length,) = struct.unpack(">H", self._read(2))
        try:
            return self._read(length).decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidFormatError(f"Invalid UTF-8 in model stream: {e}") from e

    def read_int(self) -> int:
        return struct.unpack(">i", self._read(4))[0]

    def read_double(self) -> float:
        return struct.unpack(">d", self._read(8))[0]


class PlainTextModelReader(ModelReader):
    def __init__(self, stream: TextIO):
        self.stream = stream

    def _line(self) -> str:
        line = self.stream.readline()
        if not line:
            raise InvalidFormatError("Unexpected end of model stream")
        return line.rstrip("\n")

    def read_utf(self) -> str:
        return self._line()

    def read_int(self) -> int:
        line = self._line()
        try:
            return int(line)
        except ValueError:
            raise InvalidFormatError(f"Expected an integer, got {line!r}") from None

    def read_double(self) -> float:
        line = self._line()
        try:
            return float(line)
        except ValueError:
            raise InvalidFormatError(f"Expected a number, got {line!r}") from None
