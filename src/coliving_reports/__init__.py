"""Coliving Reports - Financial and tax reporting for coliving properties."""

__version__ = "0.1.0"

from .config import ReportingConfig, get_config
from .exceptions import (
    ColivingReportsError,
    ConfigurationError,
    ExportError,
    RecordFetchError,
    ValidationError,
)
from .exporters import ExportResult, ReportExporter, export_report
from .models import (
    CashFlowAnalysis,
    FinancialReport,
    ProfitLossStatement,
    TaxSummary,
)
from .reports import ReportGenerator
from .store import InMemoryRecordStore, RecordRepository, RecordStore

__all__ = [
    "ReportGenerator",
    "ReportExporter",
    "ExportResult",
    "export_report",
    "RecordStore",
    "InMemoryRecordStore",
    "RecordRepository",
    "ReportingConfig",
    "get_config",
    "FinancialReport",
    "ProfitLossStatement",
    "CashFlowAnalysis",
    "TaxSummary",
    "ColivingReportsError",
    "RecordFetchError",
    "ValidationError",
    "ConfigurationError",
    "ExportError",
]
