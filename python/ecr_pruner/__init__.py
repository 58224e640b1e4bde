"""
Prune stale versioned container images from ECR repositories.
"""

from ecr_pruner.cleanup import CleanupOrchestrator, DryRunDeletionExecutor
from ecr_pruner.error_utils import AggregateError, ListRepositoriesError, RegistryError
from ecr_pruner.models import ImageId, Summary
from ecr_pruner.retention import compute_deletable

__all__ = [
    "AggregateError",
    "CleanupOrchestrator",
    "DryRunDeletionExecutor",
    "ImageId",
    "ListRepositoriesError",
    "RegistryError",
    "Summary",
    "compute_deletable",
]
