#!filepath: maxent/artifact/serializers.py
from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping

import numpy as np

from maxent.utils.errors import InvalidFormatError, StructuralError


class ArtifactKind(str, Enum):
    """Section kind, keyed by the entry file extension."""

    MANIFEST = "properties"
    LABELS = "labels"
    PARAMETERS = "params"

    @classmethod
    def from_entry(cls, entry_name: str) -> "ArtifactKind":
        _, dot, ext = entry_name.rpartition(".")
        if not dot:
            raise StructuralError(f"Artifact entry without extension: {entry_name}")
        try:
            return cls(ext)
        except ValueError:
            raise StructuralError(f"Unknown artifact entry type: {entry_name}") from None


@dataclass(frozen=True)
class Serializer:
    encode: Callable[[Any], bytes]
    decode: Callable[[bytes], Any]


# ============================================================
# Manifest: key=value lines
# ============================================================
def encode_manifest(manifest: Mapping[str, str]) -> bytes:
    lines = []
    for key, value in manifest.items():
        key, value = str(key), str(value)
        if not key or "=" in key or "\n" in key or "\n" in value:
            raise StructuralError(f"Manifest entry cannot be written: {key!r}")
        lines.append(f"{key}={value}\n")
    return "".join(lines).encode("utf-8")


def decode_manifest(data: bytes) -> Dict[str, str]:
    manifest: Dict[str, str] = {}
    for lineno, line in enumerate(_text(data).split("\n"), start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, eq, value = line.partition("=")
        if not eq or not key:
            raise InvalidFormatError(f"Malformed manifest line {lineno}: {line!r}")
        manifest[key.strip()] = value.strip()
    return manifest


# ============================================================
# Labels: one UTF-8 label per line
# ============================================================
def encode_labels(labels: List[str]) -> bytes:
    for label in labels:
        if "\n" in label or "\r" in label:
            raise StructuralError(f"Label contains a line break: {label!r}")
    return "".join(f"{label}\n" for label in labels).encode("utf-8")


def decode_labels(data: bytes) -> List[str]:
    text = _text(data)
    if not text:
        return []
    if not text.endswith("\n"):
        raise InvalidFormatError("Label section is truncated")
    return text[:-1].split("\n")


# ============================================================
# Parameters: <rows:u4><cols:u4> + rows*cols float64, little-endian
# ============================================================
_SHAPE = struct.Struct("<II")


def encode_parameters(params: np.ndarray) -> bytes:
    params = np.asarray(params, dtype="<f8")
    if params.ndim != 2:
        raise StructuralError(f"Parameters must be 2-D, got shape {params.shape}")
    rows, cols = params.shape
    return _SHAPE.pack(rows, cols) + np.ascontiguousarray(params).tobytes()


def decode_parameters(data: bytes) -> np.ndarray:
    if len(data) < _SHAPE.size:
        raise InvalidFormatError("Parameter section is too short")
    rows, cols = _SHAPE.unpack_from(data)
    body = data[_SHAPE.size:]
    if len(body) != rows * cols * 8:
        raise InvalidFormatError(
            f"Parameter section holds {len(body)} bytes, expected {rows * cols * 8}"
        )
    return np.frombuffer(body, dtype="<f8").astype(np.float64).reshape(rows, cols)


def _text(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidFormatError(f"Section is not valid UTF-8: {e}") from e


# ============================================================
# Registry
# ============================================================
class SerializerRegistry:
    """
    ArtifactKind -> Serializer.

    Every artifact entry is encoded/decoded through the serializer of
    its kind; an entry whose kind has no serializer is rejected.
    """

    def __init__(self):
        self._serializers: Dict[ArtifactKind, Serializer] = {}

    @classmethod
    def with_defaults(cls) -> "SerializerRegistry":
        registry = cls()
        registry.register(ArtifactKind.MANIFEST, Serializer(encode_manifest, decode_manifest))
        registry.register(ArtifactKind.LABELS, Serializer(encode_labels, decode_labels))
        registry.register(ArtifactKind.PARAMETERS, Serializer(encode_parameters, decode_parameters))
        return registry

    def register(self, kind: ArtifactKind, serializer: Serializer) -> None:
        kind = ArtifactKind(kind)
        if kind in self._serializers:
            raise StructuralError(f"Serializer already registered for {kind.name}")
        self._serializers[kind] = serializer

    def __contains__(self, kind: ArtifactKind) -> bool:
        return kind in self._serializers

    def get(self, kind: ArtifactKind) -> Serializer:
        serializer = self._serializers.get(kind)
        if serializer is None:
            raise StructuralError(f"No serializer registered for {kind.name}")
        return serializer

    def encode(self, entry_name: str, obj: Any) -> bytes:
        return self.get(ArtifactKind.from_entry(entry_name)).encode(obj)

    def decode(self, entry_name: str, data: bytes) -> Any:
        return self.get(ArtifactKind.from_entry(entry_name)).decode(data)
