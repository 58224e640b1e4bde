"""
Entry point for scheduled invocations (e.g. an AWS Lambda on an EventBridge schedule).

The handler returns the run summary on success and raises on failure, so the
scheduler records failed runs.
"""

from typing import Any, Dict, Optional

from ecr_pruner.cleanup import CleanupOrchestrator, DryRunDeletionExecutor
from ecr_pruner.config_manager import config_manager
from ecr_pruner.ecr_client import EcrRegistryClient
from ecr_pruner.error_utils import AggregateError, ListRepositoriesError
from ecr_pruner.logging_utils import get_logger, setup_logging

logger = get_logger(__name__)


def _is_dry_run(event: Optional[Dict[str, Any]]) -> bool:
    if event and "dry_run" in event:
        return bool(event["dry_run"])
    return config_manager.is_dry_run_by_default()


def handler(event: Optional[Dict[str, Any]] = None, context: Any = None) -> Dict[str, Any]:
    """Run one cleanup pass.

    Args:
        event: Invocation payload; an optional ``dry_run`` key overrides the configured mode
        context: Runtime context (unused)

    Returns:
        Dict with a message and the run summary

    Raises:
        RuntimeError: When repositories could not be listed or any repository failed
    """
    setup_logging(config_manager.get_log_level())

    client = EcrRegistryClient.from_config(config_manager)
    deleter = DryRunDeletionExecutor() if _is_dry_run(event) else client
    orchestrator = CleanupOrchestrator(
        registry=client,
        deleter=deleter,
        keep=config_manager.get_keep_versions(),
        version_prefix=config_manager.get_version_prefix(),
        max_workers=config_manager.get_max_workers(),
    )

    try:
        summary = orchestrator.run()
    except (ListRepositoriesError, AggregateError) as e:
        logger.error(f"Cleanup failed: {e}")
        raise RuntimeError(f"Cleanup failed: {e}") from e

    return {"message": "Cleanup successful", "summary": summary.to_dict()}
