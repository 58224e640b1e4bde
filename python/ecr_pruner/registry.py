"""
Interfaces the cleanup orchestrator consumes.

Implementations raise RegistryError for any transport failure.
"""

from abc import ABC, abstractmethod
from typing import List

from ecr_pruner.models import ImageId


class RegistryClient(ABC):
    """Read access to repositories and their images"""

    @abstractmethod
    def list_repositories(self) -> List[str]:
        """Return the names of all repositories"""

    @abstractmethod
    def list_images(self, repository: str) -> List[ImageId]:
        """Return every digest/tag pair in a repository"""


class DeletionExecutor(ABC):
    """Deletes image manifests from a repository"""

    @abstractmethod
    def delete_images(self, repository: str, digests: List[str]) -> int:
        """Delete the given digests and return how many were deleted"""
