#!filepath: maxent/artifact/model_artifact.py
from __future__ import annotations

import io
import time
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, BinaryIO, Dict, Optional, Union

from maxent.artifact.serializers import SerializerRegistry
from maxent.model.base_model import AbstractModel, ModelType, TrainingInfo
from maxent.model.maxent_model import MaxentModel
from maxent.model.naive_bayes_model import NaiveBayesModel
from maxent.utils.errors import InvalidFormatError
from maxent.utils.logger import logs

Target = Union[str, Path, BinaryIO]

# ============================================================
# Layout (FROZEN)
# ============================================================
MANIFEST_ENTRY = "manifest.properties"
PREDICATES_ENTRY = "predicates.labels"
OUTCOMES_ENTRY = "outcomes.labels"
PARAMETERS_ENTRY = "parameters.params"

MANIFEST_VERSION = "1.0"
COMPONENT_NAME = "MaxentModel"

MANIFEST_VERSION_KEY = "Manifest-Version"
MODEL_TYPE_KEY = "Model-Type"
COMPONENT_NAME_KEY = "Component-Name"
LANGUAGE_KEY = "Language"
TIMESTAMP_KEY = "Timestamp"
ALGORITHM_KEY = "Training-Algorithm"
CUTOFF_KEY = "Training-Cutoff"
ITERATIONS_KEY = "Training-Iterations"
EVENTHASH_KEY = "Training-Eventhash"
SMOOTHING_KEY = "NaiveBayes-Smoothing"

_RESERVED = (MANIFEST_ENTRY, PREDICATES_ENTRY, OUTCOMES_ENTRY, PARAMETERS_ENTRY)


@dataclass
class ModelArtifact:
    """
    ModelArtifact (FINAL / FROZEN)

    Zip container:
        manifest.properties   key=value metadata (always first)
        predicates.labels     predicate labels, one per line
        outcomes.labels       outcome labels, one per line
        parameters.params     (num_outcomes x num_preds) float64 matrix
        <name>.<kind>         optional extra sections

    Every entry goes through the SerializerRegistry of its kind.
    """

    model: AbstractModel
    manifest: Dict[str, str] = field(default_factory=dict)
    extras: Dict[str, Any] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # write
    # ------------------------------------------------------------------
    @classmethod
    def from_model(cls, model: AbstractModel, extras: Optional[Dict[str, Any]] = None) -> "ModelArtifact":
        return cls(model=model, manifest=build_manifest(model), extras=dict(extras or {}))

    def write(self, target: Target, registry: Optional[SerializerRegistry] = None) -> None:
        registry = registry or SerializerRegistry.with_defaults()

        entries = {
            MANIFEST_ENTRY: self.manifest,
            PREDICATES_ENTRY: self.model.pred_labels,
            OUTCOMES_ENTRY: self.model.outcome_labels,
            PARAMETERS_ENTRY: self.model.parameters,
        }
        for name, obj in self.extras.items():
            if name in _RESERVED:
                raise InvalidFormatError(f"Extra section uses a reserved name: {name}")
            entries[name] = obj

        # encode everything before touching the target
        payload = {name: registry.encode(name, obj) for name, obj in entries.items()}

        with zipfile.ZipFile(_open_target(target, "w"), "w", zipfile.ZIP_DEFLATED) as zf:
            for name, data in payload.items():
                zf.writestr(name, data)

        logs.debug(f"[ModelArtifact] wrote {len(payload)} entries ({self.model!r})")

    # ------------------------------------------------------------------
    # read
    # ------------------------------------------------------------------
    @classmethod
    def read(cls, source: Target, registry: Optional[SerializerRegistry] = None) -> "ModelArtifact":
        registry = registry or SerializerRegistry.with_defaults()

        try:
            zf = zipfile.ZipFile(_open_target(source, "r"), "r")
        except zipfile.BadZipFile as e:
            raise InvalidFormatError(f"Not a model artifact: {e}") from e

        with zf:
            names = zf.namelist()
            if MANIFEST_ENTRY not in names:
                raise InvalidFormatError(f"Artifact has no {MANIFEST_ENTRY}")

            sections = {name: registry.decode(name, zf.read(name)) for name in names}

        for required in (PREDICATES_ENTRY, OUTCOMES_ENTRY, PARAMETERS_ENTRY):
            if required not in sections:
                raise InvalidFormatError(f"Artifact has no {required}")

        manifest = sections.pop(MANIFEST_ENTRY)
        model = _build_model(
            manifest,
            sections.pop(PREDICATES_ENTRY),
            sections.pop(OUTCOMES_ENTRY),
            sections.pop(PARAMETERS_ENTRY),
        )
        return cls(model=model, manifest=manifest, extras=sections)


# ============================================================
# Manifest
# ============================================================
def build_manifest(model: AbstractModel) -> Dict[str, str]:
    info = model.info
    manifest = {
        MANIFEST_VERSION_KEY: MANIFEST_VERSION,
        MODEL_TYPE_KEY: model.model_type.value,
        COMPONENT_NAME_KEY: COMPONENT_NAME,
        TIMESTAMP_KEY: str(int(time.time() * 1000)),
    }

    optional = {
        LANGUAGE_KEY: info.language,
        ALGORITHM_KEY: info.algorithm,
        CUTOFF_KEY: info.cutoff,
        ITERATIONS_KEY: info.iterations,
        EVENTHASH_KEY: info.event_hash,
    }
    manifest.update({k: str(v) for k, v in optional.items() if v is not None})

    if isinstance(model, NaiveBayesModel):
        manifest[SMOOTHING_KEY] = str(model.smoothing).lower()
    return manifest


def _info_from_manifest(manifest: Dict[str, str]) -> TrainingInfo:
    def _int(key: str) -> Optional[int]:
        raw = manifest.get(key)
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            raise InvalidFormatError(f"Manifest {key} is not an integer: {raw!r}") from None

    return TrainingInfo(
        algorithm=manifest.get(ALGORITHM_KEY),
        cutoff=_int(CUTOFF_KEY),
        iterations=_int(ITERATIONS_KEY),
        event_hash=manifest.get(EVENTHASH_KEY),
        language=manifest.get(LANGUAGE_KEY),
    )


def _build_model(manifest, pred_labels, outcome_labels, parameters) -> AbstractModel:
    if MANIFEST_VERSION_KEY not in manifest:
        raise InvalidFormatError(f"Manifest misses {MANIFEST_VERSION_KEY}")

    raw_type = manifest.get(MODEL_TYPE_KEY)
    try:
        model_type = ModelType(raw_type)
    except ValueError:
        raise InvalidFormatError(f"Unknown {MODEL_TYPE_KEY}: {raw_type!r}") from None

    info = _info_from_manifest(manifest)

    if model_type is ModelType.NAIVE_BAYES:
        raw = manifest.get(SMOOTHING_KEY, "true").lower()
        if raw not in ("true", "false"):
            raise InvalidFormatError(f"Manifest {SMOOTHING_KEY} is not a boolean: {raw!r}")
        return NaiveBayesModel(
            parameters, pred_labels, outcome_labels, smoothing=raw == "true", info=info
        )

    return MaxentModel(parameters, pred_labels, outcome_labels, model_type=model_type, info=info)


def _open_target(target: Target, mode: str):
    if isinstance(target, (str, Path)):
        return str(target)
    if not isinstance(target, io.IOBase) and not hasattr(target, "read" if mode == "r" else "write"):
        raise TypeError(f"Unsupported artifact target: {type(target).__name__}")
    return target


# ============================================================
# Convenience API
# ============================================================
def save_model(model: AbstractModel, target: Target, registry: Optional[SerializerRegistry] = None) -> None:
    ModelArtifact.from_model(model).write(target, registry)


def load_model(source: Target, registry: Optional[SerializerRegistry] = None) -> AbstractModel:
    return ModelArtifact.read(source, registry).model
