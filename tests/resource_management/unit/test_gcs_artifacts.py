"""GCS artifact client tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from avro_bigtable_load_tester.resource_management.gcs_artifacts import (
    ArtifactError,
    GcsArtifactClient,
    get_full_gcs_path,
)


class FakeBlob:
    def __init__(self, store: dict[str, str], name: str) -> None:
        self._store = store
        self.name = name

    def upload_from_filename(self, filename: str) -> None:
        self._store[self.name] = Path(filename).read_text(encoding="utf-8")

    def delete(self) -> None:
        del self._store[self.name]


class FakeBucket:
    def __init__(self, store: dict[str, str]) -> None:
        self._store = store

    def blob(self, name: str) -> FakeBlob:
        return FakeBlob(self._store, name)


class FakeStorageClient:
    def __init__(self) -> None:
        self.objects: dict[str, str] = {}
        self.list_calls = 0

    def bucket(self, name: str) -> FakeBucket:
        return FakeBucket(self.objects)

    def list_blobs(self, bucket: str, prefix: str):
        self.list_calls += 1
        return [FakeBlob(self.objects, name) for name in self.objects if name.startswith(prefix)]


def _source(tmp_path: Path) -> Path:
    path = tmp_path / "schema.json"
    path.write_text("{}", encoding="utf-8")
    return path


@pytest.mark.parametrize(
    ("bucket", "parts", "expected"),
    [
        ("bucket", ("root", "run", "test"), "gs://bucket/root/run/test"),
        ("bucket/", ("/root/", "run/"), "gs://bucket/root/run"),
        ("bucket", ("", "input/schema.json"), "gs://bucket/input/schema.json"),
        ("bucket", (), "gs://bucket"),
    ],
)
def test_full_gcs_path_never_doubles_separators(
    bucket: str, parts: tuple[str, ...], expected: str
) -> None:
    assert get_full_gcs_path(bucket, *parts) == expected


def test_upload_places_artifacts_under_run_prefix(tmp_path: Path) -> None:
    client = FakeStorageClient()
    artifacts = GcsArtifactClient(client, "bucket", "avrotobigtablelt/", run_id="run-1")

    artifact = artifacts.upload_artifact("input/schema.json", _source(tmp_path))

    assert artifacts.run_prefix == "avrotobigtablelt/run-1"
    assert artifact.bucket == "bucket"
    assert artifact.name == "avrotobigtablelt/run-1/input/schema.json"
    assert client.objects == {"avrotobigtablelt/run-1/input/schema.json": "{}"}


def test_upload_of_missing_source_raises(tmp_path: Path) -> None:
    artifacts = GcsArtifactClient(FakeStorageClient(), "bucket", "root", run_id="run-1")

    with pytest.raises(ArtifactError, match="not found"):
        artifacts.upload_artifact("input/schema.json", tmp_path / "missing.json")


def test_cleanup_deletes_only_this_runs_objects_and_is_idempotent(tmp_path: Path) -> None:
    client = FakeStorageClient()
    client.objects["root/other-run/input/schema.json"] = "{}"
    artifacts = GcsArtifactClient(client, "bucket", "root", run_id="run-1")
    artifacts.upload_artifact("input/schema.json", _source(tmp_path))
    client.objects["root/run-1/testBacklog10gb/output-00001.avro"] = "data"

    artifacts.cleanup_all()
    artifacts.cleanup_all()

    assert client.objects == {"root/other-run/input/schema.json": "{}"}
    assert client.list_calls == 1


def test_create_uses_client_factory_and_generates_run_id() -> None:
    created: list[str] = []

    def factory(project: str) -> FakeStorageClient:
        created.append(project)
        return FakeStorageClient()

    first = GcsArtifactClient.create("my-project", "bucket", "root", client_factory=factory)
    second = GcsArtifactClient.create("my-project", "bucket", "root", client_factory=factory)

    assert created == ["my-project", "my-project"]
    assert first.run_id != second.run_id
    assert first.bucket == "bucket"
