"""
AWS ECR client for registry operations.

Lists repositories and images with boto3 paginators and deletes image
manifests in batches. Every botocore failure is translated into a
RegistryError carrying actionable guidance.
"""

from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ecr_pruner.error_utils import RegistryError, create_registry_error
from ecr_pruner.logging_utils import get_logger
from ecr_pruner.models import ImageId
from ecr_pruner.registry import DeletionExecutor, RegistryClient

logger = get_logger(__name__)

# BatchDeleteImage accepts at most 100 image ids per call
BATCH_DELETE_LIMIT = 100


class EcrRegistryClient(RegistryClient, DeletionExecutor):
    """ECR-backed registry client and deletion executor."""

    def __init__(
        self,
        client: Any = None,
        region: Optional[str] = None,
        registry_id: Optional[str] = None,
        repository_prefix: str = "",
    ):
        """Initialize EcrRegistryClient.

        Args:
            client: Pre-built boto3 ECR client (a new one is created when omitted)
            region: AWS region used when creating the client
            registry_id: Registry (account) id; None targets the caller's default registry
            repository_prefix: Only repositories starting with this prefix are listed
        """
        self.client = client or boto3.client("ecr", region_name=region)
        self.registry_id = registry_id
        self.repository_prefix = repository_prefix or ""

    @classmethod
    def from_config(cls, config_manager) -> "EcrRegistryClient":
        """Build a client from a ConfigManager"""
        return cls(
            region=config_manager.get_region(),
            registry_id=config_manager.get_registry_id(),
            repository_prefix=config_manager.get_repository_prefix(),
        )

    def _registry_args(self) -> Dict[str, str]:
        return {"registryId": self.registry_id} if self.registry_id else {}

    def list_repositories(self) -> List[str]:
        """List repository names, filtered by the configured prefix."""
        try:
            paginator = self.client.get_paginator("describe_repositories")
            names = []
            for page in paginator.paginate(**self._registry_args()):
                for repo in page.get("repositories", []):
                    names.append(repo["repositoryName"])
        except (BotoCoreError, ClientError) as e:
            raise create_registry_error("describe_repositories", e)

        if self.repository_prefix:
            filtered = [name for name in names if name.startswith(self.repository_prefix)]
            logger.info(
                f"{len(filtered)} of {len(names)} repositories match prefix '{self.repository_prefix}'"
            )
            return filtered
        return names

    def list_images(self, repository: str) -> List[ImageId]:
        """List all digest/tag pairs of a repository, untagged images included."""
        try:
            paginator = self.client.get_paginator("list_images")
            images = []
            for page in paginator.paginate(repositoryName=repository, **self._registry_args()):
                for image_id in page.get("imageIds", []):
                    images.append(ImageId.from_ecr(image_id))
            return images
        except (BotoCoreError, ClientError) as e:
            raise create_registry_error("list_images", e, repository=repository)

    def delete_images(self, repository: str, digests: List[str]) -> int:
        """Delete image manifests by digest.

        Deleting by digest removes every tag pointing at the manifest. Images
        reported as already gone are not counted and not treated as failures;
        any other per-image failure raises after all batches were attempted.

        Returns:
            Number of image ids ECR reported as deleted
        """
        if not digests:
            return 0

        deleted = 0
        failures = []
        for start in range(0, len(digests), BATCH_DELETE_LIMIT):
            batch = digests[start:start + BATCH_DELETE_LIMIT]
            try:
                response = self.client.batch_delete_image(
                    repositoryName=repository,
                    imageIds=[{"imageDigest": digest} for digest in batch],
                    **self._registry_args(),
                )
            except (BotoCoreError, ClientError) as e:
                raise create_registry_error("batch_delete_image", e, repository=repository)

            deleted += len(response.get("imageIds", []))
            for failure in response.get("failures", []):
                digest = failure.get("imageId", {}).get("imageDigest")
                code = failure.get("failureCode")
                if code == "ImageNotFound":
                    logger.warning(f"{repository}: image {digest} not found (may have already been deleted)")
                    continue
                failures.append(f"{digest}: {code} {failure.get('failureReason', '')}".strip())

        if failures:
            raise RegistryError(
                message=f"Failed to delete {len(failures)} image(s) from {repository} ({deleted} deleted)",
                operation="batch_delete_image",
                repository=repository,
                error_code="ImageDeletionFailure",
                details={"deleted": deleted, "failures": "; ".join(failures)},
            )
        return deleted
