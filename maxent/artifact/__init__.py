from .serializers import ArtifactKind, Serializer, SerializerRegistry
from .model_artifact import ModelArtifact, build_manifest, load_model, save_model
from .model_io import (
    BinaryModelReader,
    BinaryModelWriter,
    PlainTextModelReader,
    PlainTextModelWriter,
)
from .model_store import ModelStore

__all__ = [
    "ArtifactKind",
    "Serializer",
    "SerializerRegistry",
    "ModelArtifact",
    "build_manifest",
    "save_model",
    "load_model",
    "BinaryModelWriter",
    "BinaryModelReader",
    "PlainTextModelWriter",
    "PlainTextModelReader",
    "ModelStore",
]
