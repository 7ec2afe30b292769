"""Unit tests for structured logging setup."""

import io
import json
import logging

import structlog

from rankflow.observability import bind_job_context, clear_job_context, configure_logging


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_output_with_job_context(self) -> None:
        """Test JSON lines carry the bound job context."""
        output = io.StringIO()
        configure_logging(level=logging.INFO, output=output, json_format=True)

        bind_job_context("job-1", "sync-graph")
        try:
            structlog.get_logger().bind(component="test").info("graph_sync_complete", users=2)
        finally:
            clear_job_context()

        line = json.loads(output.getvalue().strip().splitlines()[-1])
        assert line["event"] == "graph_sync_complete"
        assert line["job_id"] == "job-1"
        assert line["job"] == "sync-graph"
        assert line["component"] == "test"
        assert line["level"] == "info"

    def test_level_filters(self) -> None:
        """Test events below the configured level are dropped."""
        output = io.StringIO()
        configure_logging(level=logging.WARNING, output=output)

        structlog.get_logger().info("recommendation_cache_hit")

        assert output.getvalue() == ""

    def test_clear_job_context(self) -> None:
        """Test cleared context no longer appears."""
        output = io.StringIO()
        configure_logging(output=output)

        bind_job_context("job-2", "sync-users")
        clear_job_context()
        structlog.get_logger().info("leaderboard_rebuilt")

        line = json.loads(output.getvalue().strip())
        assert "job_id" not in line
