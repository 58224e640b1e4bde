"""Unit tests for ecr_pruner/report_utils.py"""

import json
import os
import tempfile
from datetime import datetime

from ecr_pruner.models import OutcomeStatus, RepositoryOutcome, Summary
from ecr_pruner.report_utils import add_timestamp_to_path, format_summary_table, save_json, save_summary


def _summary(dry_run=False):
    return Summary.from_outcomes(
        [
            RepositoryOutcome("app", OutcomeStatus.CLEANED, deleted=6),
            RepositoryOutcome("tools", OutcomeStatus.SKIPPED),
            RepositoryOutcome("broken", OutcomeStatus.ERRORED, error="Registry operation list_images failed"),
        ],
        dry_run=dry_run,
    )


class TestSaveJson:
    """Tests for save_json function"""

    def test_save_simple_dict(self):
        """Test saving a simple dictionary"""
        with tempfile.TemporaryDirectory() as tmpdir:
            file_path = os.path.join(tmpdir, "test.json")
            data = {"key1": "value1", "key2": 42}

            save_json(file_path, data)

            with open(file_path, 'r') as f:
                assert json.load(f) == data

    def test_creates_parent_directories(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            file_path = os.path.join(tmpdir, "nested", "dir", "test.json")
            save_json(file_path, {"a": 1})
            assert os.path.exists(file_path)

    def test_serializes_datetimes_sets_and_enums(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            file_path = os.path.join(tmpdir, "test.json")
            data = {
                "when": datetime(2026, 1, 15, 14, 30),
                "tags": {"b", "a"},
                "status": OutcomeStatus.SKIPPED,
            }

            save_json(file_path, data)

            with open(file_path, 'r') as f:
                loaded = json.load(f)
            assert loaded == {"when": "2026-01-15T14:30:00", "tags": ["a", "b"], "status": "skipped"}

    def test_timestamped_filename(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            saved = save_json(os.path.join(tmpdir, "report.json"), {}, timestamp=True)
            name = os.path.basename(saved)
            assert name.startswith("report-")
            assert name.endswith(".json")
            assert name != "report.json"


class TestAddTimestampToPath:
    def test_inserts_before_extension(self):
        path = add_timestamp_to_path("reports/cleanup-summary.json", "2026-01-15-14-30-00")
        assert path == os.path.join("reports", "cleanup-summary-2026-01-15-14-30-00.json")


class TestSummaryReports:
    """Tests for summary rendering and saving"""

    def test_table_lists_every_repository(self):
        table = format_summary_table(_summary())
        for name in ("app", "tools", "broken"):
            assert name in table
        assert "1 cleaned, 1 skipped, 1 errored out of 3 repositories; 6 images deleted" in table

    def test_table_marks_dry_run(self):
        table = format_summary_table(_summary(dry_run=True))
        assert "DRY RUN:" in table
        assert "6 images would be deleted" in table

    def test_save_summary(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            file_path = os.path.join(tmpdir, "summary.json")
            save_summary(file_path, _summary())

            with open(file_path, 'r') as f:
                loaded = json.load(f)
            assert loaded["cleaned"] == 1
            assert loaded["errored"] == 1
            assert loaded["total"] == 3
            assert loaded["repositories"][2]["status"] == "errored"
            assert "generated_at" in loaded
