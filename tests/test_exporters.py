"""Tests for report exports."""

import csv
import io
import re
from datetime import date, datetime
from decimal import Decimal

import pytest

from coliving_reports import ExportError, ReportExporter, ValidationError, export_report
from coliving_reports.exporters import (
    ExportFormat,
    ReportKind,
    build_sections,
    format_cell,
    generate_file_name,
)
from coliving_reports.models import CategoryTrend

START = "2024-01-01"
END = "2024-02-28"


def result_file_prefix(exporter, report) -> str:
    name = exporter.export(report, "csv").file_name
    return name.rsplit("_", 1)[0]


@pytest.fixture
def exporter() -> ReportExporter:
    return ReportExporter()


@pytest.fixture
def financial_report(generator):
    return generator.generate_financial_report("user1", START, END, include_comparison=True)


class TestFileName:
    """Test suite for generated file names."""

    def test_pattern(self):
        """File names should carry the report name, window and timestamp."""
        name = generate_file_name(
            ReportKind.PROFIT_LOSS,
            ExportFormat.CSV,
            date(2024, 1, 1),
            date(2024, 2, 28),
            now=datetime(2024, 3, 1, 9, 30, 5),
        )

        assert name == "Profit-Loss-Statement_2024-01-01_2024-02-28_20240301-093005.csv"

    def test_text_extension(self):
        """Text exports should use the txt extension."""
        name = generate_file_name(
            ReportKind.TAX_SUMMARY, ExportFormat.TEXT, date(2024, 1, 1), date(2024, 12, 31)
        )

        assert name.startswith("Tax-Summary_2024-01-01_2024-12-31_")
        assert name.endswith(".txt")


class TestFormatCell:
    """Test suite for cell formatting."""

    def test_values(self):
        """Cells should render decimals to cents, booleans as Yes/No and enums by value."""
        assert format_cell(Decimal("88.75")) == "88.75"
        assert format_cell(Decimal("1") / Decimal("3")) == "0.33"
        assert format_cell(True) == "Yes"
        assert format_cell(False) == "No"
        assert format_cell(CategoryTrend.UP) == "up"
        assert format_cell(date(2024, 1, 5)) == "2024-01-05"
        assert format_cell(None) == ""
        assert format_cell(3) == "3"


class TestCsvExport:
    """Test suite for CSV exports."""

    def test_result_metadata(self, exporter, financial_report):
        """CSV exports should be named and typed correctly."""
        result = exporter.export(financial_report, "csv")

        assert result.mime_type == "text/csv"
        assert re.match(
            r"^Financial-Report_2024-01-01_2024-02-28_\d{8}-\d{6}\.csv$", result.file_name
        )

    def test_every_cell_quoted(self, exporter, financial_report):
        """Every line should consist of quoted cells."""
        content = exporter.export(financial_report, "csv").content.decode("utf-8")

        for line in content.splitlines():
            assert line.startswith('"') and line.endswith('"')

    def test_financial_rows(self, exporter, financial_report):
        """Summary rows should carry the report values."""
        content = exporter.export(financial_report, "csv").content.decode("utf-8")
        rows = list(csv.reader(io.StringIO(content)))

        assert rows[0] == ["Financial Report Summary"]
        assert rows[1] == ["Period", "2024-01-01 to 2024-02-28"]
        assert ["Total Revenue", "4000.00"] in rows
        assert ["Net Income", "3550.00"] in rows
        assert ["2024-02", "2000.00", "150.00", "1850.00", "3550.00"] in rows
        assert ["Revenue", "0.00", "4000.00", "100.00"] in rows

    def test_top_expenses_and_averages(self, exporter, financial_report):
        """Expense rows should carry averages and the largest expenses."""
        content = exporter.export(financial_report, "csv").content.decode("utf-8")
        rows = list(csv.reader(io.StringIO(content)))

        assert ["Average Expense", "150.00"] in rows
        assert ["maintenance", "200.00", "1", "200.00", "44.44", "down"] in rows
        top = rows.index(["Top Expenses"])
        assert rows[top + 1] == ["Date", "Category", "Description", "Amount"]
        assert rows[top + 2] == ["2024-01-10", "maintenance", "Plumbing repair", "200.00"]

    def test_tax_rows(self, exporter, generator):
        """Tax exports should list deductions and recommendations."""
        summary = generator.generate_tax_summary("tax_user", 2024)
        content = exporter.export(summary, "csv").content.decode("utf-8")
        rows = list(csv.reader(io.StringIO(content)))

        assert ["maintenance", "Repairs and maintenance", "2000.00", "1", "1", "Yes"] in rows
        assert ["Total Deductions", "", "4400.00", "", "", ""] in rows
        assert ["Total Deductible", "4400.00"] in rows
        assert ["Deductible (%)", "100.00"] in rows
        assert ["Recommendations"] in rows
        assert result_file_prefix(exporter, summary) == "Tax-Summary_2024-01-01_2024-12-31"

    def test_cash_flow_forecast_section(self, exporter, generator):
        """Forecast rows should follow the historical data."""
        analysis = generator.generate_cash_flow_analysis(
            "user1", START, END, include_forecast=True
        )
        content = exporter.export(analysis, "csv").content.decode("utf-8")

        assert '"Forecast (Projected)"' in content
        assert '"2024-03"' in content

    def test_custom_file_name(self, exporter, financial_report):
        """An explicit file name should be used as given."""
        result = exporter.export(financial_report, "csv", file_name="report.csv")

        assert result.file_name == "report.csv"


class TestTextExport:
    """Test suite for plain-text exports."""

    def test_sections(self, exporter, generator):
        """Text exports should contain each section heading."""
        statement = generator.generate_profit_loss_statement("user1", START, END)
        result = exporter.export(statement, "text")
        text = result.content.decode("utf-8")

        assert result.mime_type == "text/plain"
        assert "PROFIT LOSS STATEMENT" in text
        assert "REVENUE" in text
        assert "BREAKDOWN BY MONTH" in text
        assert "END OF REPORT" in text


class TestPdfExport:
    """Test suite for PDF exports."""

    def test_pdf_bytes(self, exporter, financial_report):
        """PDF exports should produce a PDF document."""
        result = exporter.export(financial_report, ExportFormat.PDF)

        assert result.mime_type == "application/pdf"
        assert result.content.startswith(b"%PDF")
        assert result.file_name.endswith(".pdf")

    def test_tax_pdf(self, exporter, generator):
        """Tax summaries should render to PDF."""
        summary = generator.generate_tax_summary("tax_user", 2024, format="irs-ready")

        assert exporter.export(summary, "pdf").content.startswith(b"%PDF")


class TestExportErrors:
    """Test suite for export failures."""

    def test_excel_unsupported(self, exporter, financial_report):
        """Excel exports should be rejected."""
        with pytest.raises(ValidationError) as exc_info:
            exporter.export(financial_report, "excel")

        assert exc_info.value.field == "format"

    def test_unknown_report(self, exporter):
        """Objects that are not reports should raise ExportError."""
        with pytest.raises(ExportError):
            exporter.export({"not": "a report"}, "csv")


class TestBuildSections:
    """Test suite for section layout."""

    def test_comparison_section_only_when_present(self, generator):
        """The comparison section should appear only with a comparison."""
        plain = generator.generate_financial_report("user1", START, END)
        compared = generator.generate_financial_report(
            "user1", START, END, include_comparison=True
        )

        assert "Period Comparison" not in [s.title for s in build_sections(plain)]
        assert "Period Comparison" in [s.title for s in build_sections(compared)]


class TestExportReport:
    """Test suite for export_report."""

    def test_financial(self, generator):
        """Financial exports should include the comparison."""
        result = export_report(generator, "financial", "csv", "user1", START, END)

        assert result.file_name.startswith("Financial-Report_2024-01-01_2024-02-28_")
        assert b'"Period Comparison"' in result.content

    def test_tax_year_from_start(self, generator):
        """Tax exports should cover the calendar year of the start date."""
        result = export_report(
            generator, "tax-summary", "text", "tax_user", "2024-03-01", "2024-06-30"
        )

        assert result.file_name.startswith("Tax-Summary_2024-01-01_2024-12-31_")

    def test_unknown_report_type(self, generator):
        """Unknown report types should raise ValidationError."""
        with pytest.raises(ValidationError):
            export_report(generator, "balance-sheet", "csv", "user1", START, END)
