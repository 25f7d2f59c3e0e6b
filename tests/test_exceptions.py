"""Tests for the exception hierarchy."""

from coliving_reports.exceptions import (
    ColivingReportsError,
    ConfigurationError,
    ExportError,
    RecordFetchError,
    ValidationError,
)


class TestExceptions:
    """Test suite for package exceptions."""

    def test_hierarchy(self):
        for cls in (RecordFetchError, ValidationError, ConfigurationError, ExportError):
            assert issubclass(cls, ColivingReportsError)

    def test_str_and_repr(self):
        error = ColivingReportsError("boom", details={"code": 1})

        assert str(error) == "boom"
        assert "details={'code': 1}" in repr(error)
        assert error.recoverable is False

    def test_record_fetch_error_details(self):
        error = RecordFetchError("failed", key="user:u:payments", operation="lrange")

        assert error.recoverable is True
        assert error.details == {"key": "user:u:payments", "operation": "lrange"}

    def test_validation_error_details(self):
        error = ValidationError(
            "bad", field="granularity", value="hourly", constraint="Must be one of: daily"
        )

        assert error.details["field"] == "granularity"
        assert error.details["value"] == "hourly"
        assert error.recoverable is True

    def test_export_error_details(self):
        error = ExportError("no", export_format="pdf", report_type="financial")

        assert error.details == {"export_format": "pdf", "report_type": "financial"}
        assert error.recoverable is False

    def test_configuration_error_details(self):
        error = ConfigurationError("bad config", config_key="env", expected="production")

        assert error.details == {"config_key": "env", "expected": "production"}
