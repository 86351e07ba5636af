"""Run-scoped artifact storage in a GCS bucket."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from google.api_core import exceptions as google_exceptions
from google.cloud import storage

from .resource_ids import generate_run_id

logger = logging.getLogger(__name__)


class ArtifactError(Exception):
    """Raised when an artifact cannot be uploaded."""


@dataclass(frozen=True)
class Artifact:
    """An uploaded object; ``name`` is the object path inside ``bucket``."""

    bucket: str
    name: str


def get_full_gcs_path(bucket: str, *path_parts: str) -> str:
    """Compose ``gs://bucket/part/part`` without doubled separators."""
    parts = [part.strip("/") for part in path_parts if part and part.strip("/")]
    return "/".join([f"gs://{bucket.strip('/')}", *parts])


class GcsArtifactClient:
    """Uploads artifacts under ``<root_dir>/<run_id>/`` and deletes them on cleanup."""

    def __init__(self, client: Any, bucket: str, root_dir: str, run_id: str | None = None) -> None:
        self._client = client
        self._bucket_name = bucket
        self._bucket = client.bucket(bucket)
        self._root_dir = root_dir.strip("/")
        self._run_id = run_id or generate_run_id()
        self._cleaned_up = False

    @classmethod
    def create(
        cls,
        project: str,
        bucket: str,
        root_dir: str,
        *,
        client_factory: Callable[..., Any] | None = None,
    ) -> GcsArtifactClient:
        factory = client_factory or storage.Client
        return cls(factory(project=project), bucket, root_dir)

    @property
    def bucket(self) -> str:
        return self._bucket_name

    @property
    def root_dir(self) -> str:
        return self._root_dir

    @property
    def run_id(self) -> str:
        return self._run_id

    @property
    def run_prefix(self) -> str:
        return f"{self._root_dir}/{self._run_id}"

    def upload_artifact(self, artifact_name: str, local_path: Path | str) -> Artifact:
        """Copy ``local_path`` to ``<root_dir>/<run_id>/<artifact_name>``."""
        source = Path(local_path)
        if not source.is_file():
            raise ArtifactError(f"Artifact source not found: {source}")
        object_name = f"{self.run_prefix}/{artifact_name.strip('/')}"
        blob = self._bucket.blob(object_name)
        try:
            blob.upload_from_filename(str(source))
        except google_exceptions.GoogleAPICallError as exc:
            raise ArtifactError(f"Failed to upload {source} to {object_name}: {exc}") from exc
        logger.info("Uploaded %s to %s", source.name, get_full_gcs_path(self.bucket, object_name))
        return Artifact(bucket=self._bucket_name, name=object_name)

    def cleanup_all(self) -> None:
        """Delete every object under the run prefix. Safe to call more than once."""
        if self._cleaned_up:
            return
        self._cleaned_up = True
        blobs = list(self._client.list_blobs(self._bucket_name, prefix=f"{self.run_prefix}/"))
        for blob in blobs:
            blob.delete()
        logger.info("Deleted %d objects under %s", len(blobs), self.run_prefix)
