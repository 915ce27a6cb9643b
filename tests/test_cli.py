"""Tests for CLI commands"""

from unittest.mock import Mock, patch

import pytest
from typer.testing import CliRunner

from cli.client.base import VocabJobsError
from cli.main import app


@pytest.fixture
def runner():
    """CLI test runner"""
    return CliRunner()


def _mock_client(mock_client_class):
    mock_client = Mock()
    mock_client.__enter__ = Mock(return_value=mock_client)
    mock_client.__exit__ = Mock(return_value=None)
    mock_client_class.return_value = mock_client
    return mock_client


class TestMainCommands:
    """Test main CLI commands"""

    @patch("cli.main.VocabJobsClient")
    def test_status_success(self, mock_client_class, runner):
        mock_client = _mock_client(mock_client_class)
        mock_client.health_check.return_value = {
            "version": "1.0.0",
            "environment": "development",
            "worker": {"running": True, "queue_depth": 3},
        }

        result = runner.invoke(app, ["status"])
        assert result.exit_code == 0
        assert "Connected Successfully" in result.stdout

    @patch("cli.main.VocabJobsClient")
    def test_status_failure(self, mock_client_class, runner):
        mock_client = _mock_client(mock_client_class)
        mock_client.health_check.side_effect = VocabJobsError("Connection failed")

        result = runner.invoke(app, ["status"])
        assert result.exit_code == 1
        assert "Connection Failed" in result.stdout

    @patch("cli.main.VocabJobsClient")
    def test_stats(self, mock_client_class, runner):
        mock_client = _mock_client(mock_client_class)
        mock_client.get_stats.return_value = {
            "total": 4,
            "pending": 1,
            "processing": 1,
            "completed": 1,
            "failed": 1,
            "retrying": 0,
            "in_flight_count": 1,
            "running": True,
        }

        result = runner.invoke(app, ["stats"])
        assert result.exit_code == 0
        assert "Queue Statistics" in result.stdout


class TestJobCommands:
    """Test job commands"""

    @patch("cli.main.VocabJobsClient")
    def test_enqueue_with_data(self, mock_client_class, runner):
        mock_client = _mock_client(mock_client_class)
        mock_client.enqueue_job.return_value = {"job_id": "abc123", "status": "pending"}

        result = runner.invoke(
            app,
            ["enqueue", "send_email", "--data", '{"to": "a@b.c"}', "--priority", "high"],
        )

        assert result.exit_code == 0
        assert "abc123" in result.stdout
        mock_client.enqueue_job.assert_called_once_with(
            "send_email", {"to": "a@b.c"}, priority="high", max_attempts=None
        )

    def test_enqueue_rejects_invalid_json(self, runner):
        result = runner.invoke(app, ["enqueue", "send_email", "--data", "{not json"])
        assert result.exit_code == 2
        assert "Invalid JSON" in result.stdout

    @patch("cli.main.VocabJobsClient")
    def test_list_jobs(self, mock_client_class, runner):
        mock_client = _mock_client(mock_client_class)
        mock_client.list_jobs.return_value = {
            "jobs": [
                {
                    "id": "1234567890",
                    "type": "send_email",
                    "priority": "normal",
                    "status": "failed",
                    "attempts": 3,
                    "max_attempts": 3,
                    "error": "smtp down",
                }
            ],
            "total": 1,
        }

        result = runner.invoke(app, ["list", "--status", "failed"])

        assert result.exit_code == 0
        assert "send_email" in result.stdout
        mock_client.list_jobs.assert_called_once_with(status="failed", job_type=None)

    @patch("cli.main.VocabJobsClient")
    def test_list_jobs_empty(self, mock_client_class, runner):
        mock_client = _mock_client(mock_client_class)
        mock_client.list_jobs.return_value = {"jobs": [], "total": 0}

        result = runner.invoke(app, ["list"])
        assert result.exit_code == 0
        assert "No jobs found" in result.stdout

    @patch("cli.main.VocabJobsClient")
    def test_show_missing_job(self, mock_client_class, runner):
        mock_client = _mock_client(mock_client_class)
        mock_client.get_job.side_effect = VocabJobsError("API Error 404: Job not found")

        result = runner.invoke(app, ["show", "missing"])
        assert result.exit_code == 1

    @patch("cli.main.VocabJobsClient")
    def test_clear_completed(self, mock_client_class, runner):
        mock_client = _mock_client(mock_client_class)
        mock_client.clear_completed.return_value = {"removed": 5}

        result = runner.invoke(app, ["clear-completed"])
        assert result.exit_code == 0
        assert "Removed 5 completed jobs" in result.stdout
