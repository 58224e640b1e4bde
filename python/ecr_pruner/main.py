#!/usr/bin/env python3
"""
Prune stale versioned images from ECR repositories.

Keeps every image without a version tag and the newest N ``version-<semver>``
images of each repository; everything else is deleted. Runs in dry-run mode
unless --apply is given or dry_run_by_default is disabled in config.yaml.

Usage examples:
  # Show what would be deleted (default: dry-run)
  ecr-pruner

  # Delete, keeping the 10 newest versions per repository
  ecr-pruner --apply --keep 10

  # Only repositories under a prefix, saving a JSON report
  ecr-pruner --repository-prefix team-a/ --output reports/team-a.json
"""

import argparse
import sys
from typing import List, Optional

from ecr_pruner.cleanup import CleanupOrchestrator, DryRunDeletionExecutor
from ecr_pruner.config_manager import ConfigManager, ConfigValidationError
from ecr_pruner.ecr_client import EcrRegistryClient
from ecr_pruner.error_utils import AggregateError, ListRepositoriesError
from ecr_pruner.logging_utils import get_logger, setup_logging
from ecr_pruner.models import Summary
from ecr_pruner.report_utils import format_summary_table, save_summary

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_PARTIAL_FAILURE = 1
EXIT_FATAL = 2


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Delete old versioned images from ECR repositories (default: dry-run)",
        epilog=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", help="Path to config.yaml (default: CONFIG_FILE env var or ./config.yaml)")
    parser.add_argument("--apply", action="store_true", help="Actually delete images (default: dry-run)")
    parser.add_argument("--keep", type=int, help="Number of newest versioned images to keep per repository")
    parser.add_argument("--max-workers", type=int, help="Maximum repositories processed concurrently")
    parser.add_argument("--repository-prefix", help="Only process repositories whose name starts with this prefix")
    parser.add_argument("--region", help="AWS region of the registry")
    parser.add_argument("--registry-id", help="AWS account id of the registry")
    parser.add_argument("--output", help="Write the run summary as JSON to this path")
    parser.add_argument("--save-report", action="store_true",
                        help="Write a timestamped JSON summary to the configured reports directory")
    parser.add_argument("--log-level", type=str.upper, choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level (default: from config)")
    parser.add_argument("--show-config", action="store_true", help="Print the effective configuration and exit")
    return parser.parse_args(argv)


def build_orchestrator(config: ConfigManager, args: argparse.Namespace) -> CleanupOrchestrator:
    """Wire the ECR client, deletion executor and retention settings together"""
    client = EcrRegistryClient(
        region=args.region or config.get_region(),
        registry_id=args.registry_id or config.get_registry_id(),
        repository_prefix=(
            args.repository_prefix if args.repository_prefix is not None else config.get_repository_prefix()
        ),
    )
    dry_run = not args.apply and config.is_dry_run_by_default()
    deleter = DryRunDeletionExecutor() if dry_run else client

    return CleanupOrchestrator(
        registry=client,
        deleter=deleter,
        keep=args.keep if args.keep is not None else config.get_keep_versions(),
        version_prefix=config.get_version_prefix(),
        max_workers=args.max_workers if args.max_workers is not None else config.get_max_workers(),
    )


def report(summary: Summary, config: ConfigManager, args: argparse.Namespace) -> None:
    print(format_summary_table(summary))
    if args.output:
        save_summary(args.output, summary)
    elif args.save_report:
        save_summary(config.get_cleanup_summary_path(), summary, timestamp=True)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_arguments(argv)

    try:
        config = ConfigManager(config_file=args.config)
    except ConfigValidationError as e:
        setup_logging()
        logger.error(str(e))
        return EXIT_FATAL

    setup_logging(args.log_level or config.get_log_level())

    if args.show_config:
        config.print_config()
        return EXIT_OK

    try:
        orchestrator = build_orchestrator(config, args)
    except (ConfigValidationError, ValueError) as e:
        logger.error(f"Invalid settings: {e}")
        return EXIT_FATAL

    if orchestrator.dry_run:
        logger.info("Running in DRY RUN mode - no images will be deleted (use --apply to delete)")
    else:
        logger.warning("Running in DELETE mode - images will be deleted")

    try:
        summary = orchestrator.run()
    except ListRepositoriesError as e:
        logger.error(str(e))
        return EXIT_FATAL
    except AggregateError as e:
        report(e.summary, config, args)
        logger.error(f"Cleanup failed: {e}")
        return EXIT_PARTIAL_FAILURE

    report(summary, config, args)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
