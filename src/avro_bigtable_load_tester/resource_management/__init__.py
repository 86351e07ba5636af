"""Resource provisioning, artifact upload and cleanup exports."""

from .bigtable_resources import BigtableResourceError, BigtableResourceManager, SampledRow
from .cleanup import (
    ProvisionedResources,
    ResourceCleanupError,
    ResourceManager,
    clean_resources,
    provisioned_resources,
)
from .gcs_artifacts import Artifact, ArtifactError, GcsArtifactClient, get_full_gcs_path
from .resource_ids import generate_instance_id, generate_run_id, generate_table_id

__all__ = [
    "Artifact",
    "ArtifactError",
    "BigtableResourceError",
    "BigtableResourceManager",
    "GcsArtifactClient",
    "ProvisionedResources",
    "ResourceCleanupError",
    "ResourceManager",
    "SampledRow",
    "clean_resources",
    "generate_instance_id",
    "generate_run_id",
    "generate_table_id",
    "get_full_gcs_path",
    "provisioned_resources",
]
