#!/usr/bin/env python3
"""
Cleanup orchestration across all repositories of a registry.

Every repository is processed by its own task (list images, apply the
retention policy, delete). Tasks return a RepositoryOutcome and the results
are folded into a Summary after all of them finished, so a failing
repository never affects its siblings.
"""

import concurrent.futures
from typing import List, Optional

from ecr_pruner.error_utils import AggregateError, ListRepositoriesError, RegistryError
from ecr_pruner.logging_utils import get_logger, log_exception
from ecr_pruner.models import DEFAULT_VERSION_PREFIX, OutcomeStatus, RepositoryOutcome, Summary
from ecr_pruner.registry import DeletionExecutor, RegistryClient
from ecr_pruner.retention import DEFAULT_KEEP_VERSIONS, compute_deletable

logger = get_logger(__name__)


class DryRunDeletionExecutor(DeletionExecutor):
    """Reports what would be deleted without touching the registry."""

    def delete_images(self, repository: str, digests: List[str]) -> int:
        for digest in digests:
            logger.info(f"DRY RUN: {repository}: would delete {digest}")
        return len(digests)


class CleanupOrchestrator:
    """Applies the retention policy to every repository concurrently"""

    def __init__(
        self,
        registry: RegistryClient,
        deleter: DeletionExecutor,
        keep: int = DEFAULT_KEEP_VERSIONS,
        version_prefix: str = DEFAULT_VERSION_PREFIX,
        max_workers: Optional[int] = None,
    ):
        """Initialize the orchestrator

        Args:
            registry: Source of repositories and their images
            deleter: Executor used for repositories with deletable images
            keep: Number of newest versioned images retained per repository
            version_prefix: Tag prefix marking versioned images
            max_workers: Cap on concurrent repositories (default: one worker per repository)
        """
        if keep < 1:
            raise ValueError(f"keep must be a positive integer, got: {keep}")
        if max_workers is not None and max_workers < 1:
            raise ValueError(f"max_workers must be a positive integer, got: {max_workers}")
        self.registry = registry
        self.deleter = deleter
        self.keep = keep
        self.version_prefix = version_prefix
        self.max_workers = max_workers

    @property
    def dry_run(self) -> bool:
        return isinstance(self.deleter, DryRunDeletionExecutor)

    def run(self) -> Summary:
        """Clean up all repositories.

        Returns:
            Summary of the run when every repository succeeded

        Raises:
            ListRepositoriesError: Repositories could not be listed; nothing was processed
            AggregateError: One or more repositories failed; other deletions still happened
        """
        logger.info("Starting cleanup" + (" (dry run)" if self.dry_run else ""))
        try:
            repositories = self.registry.list_repositories()
        except RegistryError as e:
            logger.error(f"Cleanup failed: {e.message}")
            raise ListRepositoriesError(e) from e

        outcomes = self._process_all(repositories)
        summary = Summary.from_outcomes(outcomes, dry_run=self.dry_run)

        logger.info(f"{summary.cleaned} repositories cleaned up; {summary.skipped} skipped out of {summary.total}")

        if summary.errored:
            logger.error(f"Cleanup failed for: {', '.join(summary.failed_repositories)}")
            raise AggregateError(summary.errored, summary.failed_repositories, summary)

        logger.info("Cleanup successful")
        return summary

    def _process_all(self, repositories: List[str]) -> List[RepositoryOutcome]:
        """Run one task per repository and wait for all of them"""
        if not repositories:
            return []

        workers = self.max_workers or len(repositories)
        with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(self.clean_repository, repository) for repository in repositories]
            # Results in submission order, so reports are stable across runs
            return [future.result() for future in futures]

    def clean_repository(self, repository: str) -> RepositoryOutcome:
        """List, filter and delete for a single repository.

        Failures are recorded in the returned outcome instead of raised.
        """
        try:
            images = self.registry.list_images(repository)
            deletable = compute_deletable(images, keep=self.keep, prefix=self.version_prefix)

            if not deletable:
                logger.info(f"{repository}: Nothing to delete")
                return RepositoryOutcome(repository, OutcomeStatus.SKIPPED)

            deleted = self.deleter.delete_images(repository, [image.digest for image in deletable])
            verb = "Would delete" if self.dry_run else "Deleted"
            logger.info(f"{repository}: {verb} {deleted} old images")
            return RepositoryOutcome(repository, OutcomeStatus.CLEANED, deleted=deleted)

        except RegistryError as e:
            logger.error(f"{repository} cleanup error: {e.message}")
            return RepositoryOutcome(repository, OutcomeStatus.ERRORED, error=e.message)
        except Exception as e:
            log_exception(logger, f"{repository} cleanup error: unexpected failure", e)
            return RepositoryOutcome(repository, OutcomeStatus.ERRORED, error=f"{type(e).__name__}: {e}")
