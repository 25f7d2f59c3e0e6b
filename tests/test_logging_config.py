"""Tests for logging configuration."""

import pytest
import structlog

from coliving_reports import InMemoryRecordStore, RecordRepository, ReportGenerator
from coliving_reports.config import ReportingConfig
from coliving_reports.logging_config import configure_logging, report_context


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


class ContextRecordingStore(InMemoryRecordStore):
    """Store that remembers the logging context seen by each read."""

    def __init__(self):
        super().__init__()
        self.contexts = []

    def lrange(self, key, start=0, stop=-1):
        self.contexts.append(structlog.contextvars.get_contextvars())
        return super().lrange(key, start, stop)


class TestConfigureLogging:
    """Test suite for configure_logging."""

    def test_json_renderer(self):
        configure_logging(level="DEBUG", format="json", config=ReportingConfig(env="test"))

        processors = structlog.get_config()["processors"]
        assert structlog.is_configured()
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_console_renderer(self):
        configure_logging(level="INFO", format="console", config=ReportingConfig(env="test"))

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_environment_stamped(self):
        """Every event should carry the configured environment."""
        configure_logging(format="json", config=ReportingConfig(env="staging"))

        stamper = next(
            p for p in structlog.get_config()["processors"]
            if getattr(p, "__name__", "") == "add_environment"
        )
        assert stamper(None, "info", {"event": "x"})["env"] == "staging"
        assert stamper(None, "info", {"event": "x", "env": "other"})["env"] == "other"


class TestReportContext:
    """Test suite for report_context."""

    def test_binds_during_call(self):
        class Service:
            @report_context("financial")
            def run(self, user_id):
                return structlog.contextvars.get_contextvars()

        context = Service().run("user1")

        assert context == {"report": "financial", "user_id": "user1"}
        assert structlog.contextvars.get_contextvars() == {}

    def test_restored_after_error(self):
        class Service:
            @report_context("tax_summary")
            def run(self, user_id):
                raise RuntimeError("boom")

        structlog.contextvars.bind_contextvars(request_id="r1")
        with pytest.raises(RuntimeError):
            Service().run("user1")

        assert structlog.contextvars.get_contextvars() == {"request_id": "r1"}

    def test_generator_binds_report_fields(self, config):
        """Record fetches inside a report should see the report context."""
        store = ContextRecordingStore()
        generator = ReportGenerator(RecordRepository(store), config=config)

        generator.generate_cash_flow_analysis("user9", "2024-01-01", "2024-01-31")

        assert store.contexts
        for context in store.contexts:
            assert context["report"] == "cash_flow"
            assert context["user_id"] == "user9"
