#!filepath: tests/artifact/test_model_artifact.py
import io
import zipfile

import numpy as np
import pytest

from maxent.artifact.model_artifact import (
    MANIFEST_ENTRY,
    ModelArtifact,
    load_model,
    save_model,
)
from maxent.artifact.serializers import (
    ArtifactKind,
    Serializer,
    SerializerRegistry,
    decode_manifest,
    decode_parameters,
    encode_labels,
    encode_manifest,
)
from maxent.training.trainer import train_model
from maxent.utils.errors import InvalidFormatError, StructuralError


@pytest.fixture
def qn_model(weather_events):
    return train_model(weather_events, {"Algorithm": "QuasiNewtonMaxEnt", "Cutoff": 0, "Language": "en"})


@pytest.fixture
def nb_model(news_events):
    return train_model(news_events, {"Algorithm": "NaiveBayes", "Cutoff": 0, "Smoothing": False})


CONTEXTS = [["clouds", "warm"], ["clear"], ["unknown", "cold"], []]


def test_round_trip_qn(tmp_path, qn_model):
    path = tmp_path / "model.bin"
    save_model(qn_model, path)
    loaded = load_model(path)

    assert loaded == qn_model
    for context in CONTEXTS:
        np.testing.assert_allclose(loaded.eval(context), qn_model.eval(context), atol=1e-8)

    assert loaded.info.language == "en"
    assert loaded.info.event_hash == qn_model.info.event_hash


def test_round_trip_naive_bayes_keeps_smoothing(nb_model):
    buffer = io.BytesIO()
    save_model(nb_model, buffer)
    buffer.seek(0)
    loaded = load_model(buffer)

    assert loaded == nb_model
    assert loaded.smoothing is False
    assert loaded.eval(["united"])[loaded.get_index("politics")] == pytest.approx(2.0 / 3.0)


def test_container_layout(tmp_path, nb_model):
    path = tmp_path / "nb.bin"
    save_model(nb_model, path)

    with zipfile.ZipFile(path) as zf:
        names = zf.namelist()
        manifest = decode_manifest(zf.read(MANIFEST_ENTRY))
        labels = zf.read("outcomes.labels").decode("utf-8")
        params = decode_parameters(zf.read("parameters.params"))

    assert names[0] == MANIFEST_ENTRY
    assert set(names) == {
        "manifest.properties", "predicates.labels", "outcomes.labels", "parameters.params",
    }
    assert manifest["Manifest-Version"] == "1.0"
    assert manifest["Model-Type"] == "NaiveBayes"
    assert manifest["NaiveBayes-Smoothing"] == "false"
    assert manifest["Training-Cutoff"] == "0"
    assert manifest["Training-Iterations"] == "100"
    assert int(manifest["Timestamp"]) > 0
    assert labels == "politics\nsports\n"
    np.testing.assert_array_equal(params, nb_model.parameters)


def test_missing_manifest_rejected(tmp_path):
    path = tmp_path / "broken.bin"
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("outcomes.labels", encode_labels(["a"]))

    with pytest.raises(InvalidFormatError):
        load_model(path)


def test_missing_section_rejected(tmp_path):
    path = tmp_path / "broken.bin"
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr(MANIFEST_ENTRY, encode_manifest({"Manifest-Version": "1.0", "Model-Type": "QN"}))

    with pytest.raises(InvalidFormatError):
        load_model(path)


def test_unknown_model_type_rejected(tmp_path, qn_model):
    path = tmp_path / "model.bin"
    artifact = ModelArtifact.from_model(qn_model)
    artifact.manifest["Model-Type"] = "Perceptron"
    artifact.write(path)

    with pytest.raises(InvalidFormatError):
        load_model(path)


def test_not_a_zip_rejected(tmp_path):
    path = tmp_path / "model.bin"
    path.write_bytes(b"definitely not a zip")

    with pytest.raises(InvalidFormatError):
        load_model(path)


def test_unknown_entry_type_rejected(tmp_path, qn_model):
    path = tmp_path / "model.bin"

    with pytest.raises(StructuralError):
        ModelArtifact.from_model(qn_model, extras={"notes.txt": "hello"}).write(path)
    assert not path.exists()

    save_model(qn_model, path)
    with zipfile.ZipFile(path, "a") as zf:
        zf.writestr("notes.txt", b"hello")

    with pytest.raises(StructuralError):
        load_model(path)


def test_unregistered_kind_rejected(tmp_path, qn_model):
    registry = SerializerRegistry()
    registry.register(ArtifactKind.MANIFEST, Serializer(encode_manifest, decode_manifest))

    with pytest.raises(StructuralError):
        save_model(qn_model, tmp_path / "model.bin", registry=registry)


def test_extra_sections_round_trip(tmp_path, qn_model):
    path = tmp_path / "model.bin"
    ModelArtifact.from_model(qn_model, extras={"tags.labels": ["weather", "demo"]}).write(path)

    artifact = ModelArtifact.read(path)
    assert artifact.extras == {"tags.labels": ["weather", "demo"]}
    assert artifact.model == qn_model


def test_extra_section_cannot_shadow_model(tmp_path, qn_model):
    with pytest.raises(InvalidFormatError):
        ModelArtifact.from_model(qn_model, extras={"outcomes.labels": ["x"]}).write(tmp_path / "m.bin")


def test_duplicate_serializer_rejected():
    registry = SerializerRegistry.with_defaults()
    with pytest.raises(StructuralError):
        registry.register(ArtifactKind.LABELS, Serializer(encode_labels, lambda data: data))


def test_artifact_kind_from_entry():
    assert ArtifactKind.from_entry("manifest.properties") is ArtifactKind.MANIFEST
    assert ArtifactKind.from_entry("a.b.labels") is ArtifactKind.LABELS

    with pytest.raises(StructuralError):
        ArtifactKind.from_entry("README")
    with pytest.raises(StructuralError):
        ArtifactKind.from_entry("model.json")


def test_manifest_parsing():
    manifest = decode_manifest(b"# comment\nA=1\n\nB = x=y\n")
    assert manifest == {"A": "1", "B": "x=y"}

    with pytest.raises(InvalidFormatError):
        decode_manifest(b"no separator here\n")


def test_truncated_parameters_rejected():
    with pytest.raises(InvalidFormatError):
        decode_parameters(b"\x02\x00\x00\x00\x02\x00\x00\x00" + b"\x00" * 8)
