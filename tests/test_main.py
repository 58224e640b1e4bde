"""Tests for the command line entry point in ecr_pruner/main.py"""

import json
import os
import tempfile
from unittest.mock import MagicMock, patch

import pytest

from ecr_pruner import main as cli
from ecr_pruner.cleanup import DryRunDeletionExecutor
from ecr_pruner.error_utils import AggregateError, ListRepositoriesError, RegistryError
from ecr_pruner.models import OutcomeStatus, RepositoryOutcome, Summary


@pytest.fixture(autouse=True)
def clean_environment():
    """Keep environment overrides from leaking into the CLI configuration"""
    keys = ("DRY_RUN", "KEEP_VERSIONS", "MAX_WORKERS", "REPOSITORY_PREFIX", "CONFIG_FILE", "LOG_LEVEL")
    env = {k: v for k, v in os.environ.items() if k not in keys}
    with patch.dict(os.environ, env, clear=True):
        yield


@pytest.fixture
def mock_boto3():
    with patch("ecr_pruner.ecr_client.boto3.client") as mock_factory:
        yield mock_factory


def _summary(errored=False):
    outcomes = [RepositoryOutcome("app", OutcomeStatus.CLEANED, deleted=2)]
    if errored:
        outcomes.append(RepositoryOutcome("broken", OutcomeStatus.ERRORED, error="boom"))
    return Summary.from_outcomes(outcomes)


class TestBuildOrchestrator:
    """Tests for wiring settings into the orchestrator"""

    def test_dry_run_by_default(self, mock_boto3):
        args = cli.parse_arguments(["--config", "/nonexistent/config.yaml"])
        config = cli.ConfigManager(config_file=args.config)

        orchestrator = cli.build_orchestrator(config, args)

        assert isinstance(orchestrator.deleter, DryRunDeletionExecutor)
        assert orchestrator.keep == 20
        assert orchestrator.max_workers is None

    def test_apply_uses_ecr_client_for_deletion(self, mock_boto3):
        args = cli.parse_arguments(["--config", "/nonexistent/config.yaml", "--apply", "--keep", "5",
                                    "--max-workers", "3", "--region", "eu-west-1"])
        config = cli.ConfigManager(config_file=args.config)

        orchestrator = cli.build_orchestrator(config, args)

        assert orchestrator.deleter is orchestrator.registry
        assert orchestrator.keep == 5
        assert orchestrator.max_workers == 3
        mock_boto3.assert_called_once_with("ecr", region_name="eu-west-1")

    def test_dry_run_disabled_in_config(self, mock_boto3):
        with patch.dict(os.environ, {"DRY_RUN": "false"}):
            args = cli.parse_arguments(["--config", "/nonexistent/config.yaml"])
            config = cli.ConfigManager(config_file=args.config)
            orchestrator = cli.build_orchestrator(config, args)
        assert not orchestrator.dry_run

    def test_repository_prefix_argument(self, mock_boto3):
        args = cli.parse_arguments(["--config", "/nonexistent/config.yaml", "--repository-prefix", "team/"])
        config = cli.ConfigManager(config_file=args.config)
        orchestrator = cli.build_orchestrator(config, args)
        assert orchestrator.registry.repository_prefix == "team/"


class TestMain:
    """Tests for exit codes and reporting"""

    def _run(self, argv, run_result=None, run_error=None):
        orchestrator = MagicMock()
        orchestrator.dry_run = True
        if run_error is not None:
            orchestrator.run.side_effect = run_error
        else:
            orchestrator.run.return_value = run_result
        with patch.object(cli, "build_orchestrator", return_value=orchestrator):
            return cli.main(["--config", "/nonexistent/config.yaml"] + argv)

    def test_success(self, capsys):
        assert self._run([], run_result=_summary()) == cli.EXIT_OK
        assert "app" in capsys.readouterr().out

    def test_writes_output_report(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "summary.json")
            assert self._run(["--output", path], run_result=_summary()) == cli.EXIT_OK
            with open(path) as f:
                assert json.load(f)["cleaned"] == 1

    def test_partial_failure(self, capsys):
        summary = _summary(errored=True)
        error = AggregateError(1, ["broken"], summary)
        assert self._run([], run_error=error) == cli.EXIT_PARTIAL_FAILURE
        assert "broken" in capsys.readouterr().out

    def test_listing_failure(self):
        error = ListRepositoriesError(RegistryError("denied", operation="describe_repositories"))
        assert self._run([], run_error=error) == cli.EXIT_FATAL

    def test_invalid_config_file(self):
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            f.write("retention:\n  keep_versions: 0\n")
            path = f.name
        try:
            assert cli.main(["--config", path]) == cli.EXIT_FATAL
        finally:
            os.unlink(path)

    def test_invalid_keep_argument(self, mock_boto3):
        assert cli.main(["--config", "/nonexistent/config.yaml", "--keep", "0"]) == cli.EXIT_FATAL

    def test_show_config(self, capsys):
        assert cli.main(["--config", "/nonexistent/config.yaml", "--show-config"]) == cli.EXIT_OK
        assert "Keep Versions: 20" in capsys.readouterr().out
