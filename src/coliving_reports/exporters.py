"""Report export to CSV, plain text and PDF.

Every report is first laid out as a list of ExportSection tables; the
format renderers only decide how those tables are drawn.
"""

import csv
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from io import BytesIO, StringIO
from typing import Any, Optional, Union
from xml.sax.saxutils import escape

import structlog
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .exceptions import ExportError
from .models import CashFlowAnalysis, FinancialReport, ProfitLossStatement, TaxSummary
from .periods import coerce_enum, require_date

logger = structlog.get_logger()

Report = Union[FinancialReport, ProfitLossStatement, CashFlowAnalysis, TaxSummary]


class ExportFormat(str, Enum):
    """Supported export formats."""

    CSV = "csv"
    TEXT = "text"
    PDF = "pdf"

    @property
    def extension(self) -> str:
        return {"csv": "csv", "text": "txt", "pdf": "pdf"}[self.value]

    @property
    def mime_type(self) -> str:
        return {
            "csv": "text/csv",
            "text": "text/plain",
            "pdf": "application/pdf",
        }[self.value]


class ReportKind(str, Enum):
    """Report kinds, as named in export requests."""

    FINANCIAL = "financial"
    PROFIT_LOSS = "profit-loss"
    CASH_FLOW = "cash-flow"
    TAX_SUMMARY = "tax-summary"

    @property
    def display_name(self) -> str:
        """File-name prefix for the report kind."""
        return {
            "financial": "Financial-Report",
            "profit-loss": "Profit-Loss-Statement",
            "cash-flow": "Cash-Flow-Analysis",
            "tax-summary": "Tax-Summary",
        }[self.value]

    @classmethod
    def of(cls, report: Any) -> "ReportKind":
        """The kind of a report model instance."""
        for model, kind in (
            (FinancialReport, cls.FINANCIAL),
            (ProfitLossStatement, cls.PROFIT_LOSS),
            (CashFlowAnalysis, cls.CASH_FLOW),
            (TaxSummary, cls.TAX_SUMMARY),
        ):
            if isinstance(report, model):
                return kind
        raise ExportError(
            f"Cannot export object of type {type(report).__name__}",
            report_type=type(report).__name__,
        )


@dataclass
class ExportSection:
    """A titled table of rows."""
    title: str
    rows: list[list[Any]] = field(default_factory=list)
    header: Optional[list[str]] = None


@dataclass
class ExportResult:
    """A rendered report ready to be downloaded."""
    file_name: str
    mime_type: str
    content: bytes


def generate_file_name(
    kind: ReportKind,
    export_format: ExportFormat,
    start: date,
    end: date,
    now: Optional[datetime] = None,
) -> str:
    """Build `{Report-Name}_{start}_{end}_{timestamp}.{ext}`.

    Example:
        >>> generate_file_name(ReportKind.FINANCIAL, ExportFormat.CSV,
        ...     date(2024, 1, 1), date(2024, 2, 28), datetime(2024, 3, 1, 9, 30))
        'Financial-Report_2024-01-01_2024-02-28_20240301-093000.csv'
    """
    timestamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
    return (
        f"{kind.display_name}_{start.isoformat()}_{end.isoformat()}"
        f"_{timestamp}.{export_format.extension}"
    )


def format_cell(value: Any) -> str:
    """Render one table cell. Decimals are rounded to cents."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, Decimal):
        return str(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


# =============================================================================
# SECTION LAYOUT
# =============================================================================

_FLOW_HEADER = ["Period", "Income", "Expenses", "Net Flow", "Cumulative"]


def _period_text(report: Report) -> str:
    return f"{report.period.start.isoformat()} to {report.period.end.isoformat()}"


def _flow_rows(points) -> list[list[Any]]:
    return [
        [p.period_label, p.income, p.expenses, p.net_flow, p.cumulative_flow]
        for p in points
    ]


def _financial_sections(report: FinancialReport) -> list[ExportSection]:
    sections = [
        ExportSection("Financial Report Summary", [["Period", _period_text(report)]]),
        ExportSection(
            "Income Summary",
            [
                ["Total Revenue", report.income.total_revenue],
                ["Rent Revenue", report.income.rent_revenue],
                ["Other Revenue", report.income.other_revenue],
            ],
        ),
        ExportSection(
            "Expense Summary",
            [
                ["Total Expenses", report.expenses.total_expenses],
                ["Operating Expenses", report.expenses.operating_expenses],
                ["Reimbursements", report.expenses.reimbursements],
                ["Average Expense", report.expenses.average_expense],
                ["Net Income", report.net_income],
                ["Profit Margin (%)", report.profit_margin],
            ],
        ),
        ExportSection(
            "Payment Method Breakdown",
            [[m.method, m.amount, m.count, m.percentage]
             for m in report.income.payment_method_breakdown],
            header=["Method", "Amount", "Count", "Percentage"],
        ),
        ExportSection(
            "Expense Category Breakdown",
            [[c.category, c.amount, c.count, c.average_amount, c.percentage, c.trend]
             for c in report.expenses.category_breakdown],
            header=["Category", "Amount", "Count", "Average", "Percentage", "Trend"],
        ),
        ExportSection(
            "Top Expenses",
            [[e.date, e.category, e.description, e.amount]
             for e in report.expenses.top_expenses],
            header=["Date", "Category", "Description", "Amount"],
        ),
        ExportSection("Monthly Cash Flow", _flow_rows(report.cash_flow), header=_FLOW_HEADER),
    ]
    if report.comparison:
        previous = report.comparison.previous_period
        growth = report.comparison.growth
        sections.append(
            ExportSection(
                "Period Comparison",
                [
                    ["Revenue", previous.income.total_revenue, report.income.total_revenue, growth.revenue],
                    ["Expenses", previous.expenses.total_expenses, report.expenses.total_expenses, growth.expenses],
                    ["Net Income", previous.net_income, report.net_income, growth.net_income],
                ],
                header=["Metric", "Previous", "Current", "Growth (%)"],
            )
        )
    return sections


def _profit_loss_sections(report: ProfitLossStatement) -> list[ExportSection]:
    sections = [
        ExportSection("Profit & Loss Statement", [["Period", _period_text(report)]]),
        ExportSection(
            "Revenue",
            [
                ["Rent Income", report.revenue.rent_income],
                ["Other Income", report.revenue.other_income],
                ["Total Revenue", report.revenue.total_revenue],
            ],
        ),
        ExportSection(
            "Operating Expenses",
            [[c.category, c.amount] for c in report.expenses.operating_expenses]
            + [["Total Operating Expenses", report.expenses.total_operating_expenses]],
        ),
        ExportSection(
            "Other Expenses",
            [
                ["Depreciation", report.expenses.depreciation],
                ["Total Expenses", report.expenses.total_expenses],
            ],
        ),
        ExportSection(
            "Profit Summary",
            [
                ["Gross Profit", report.gross_profit],
                ["Operating Income", report.operating_income],
                ["Net Income", report.net_income],
            ],
        ),
        ExportSection(
            "Margins",
            [
                ["Gross Margin (%)", report.margins.gross],
                ["Operating Margin (%)", report.margins.operating],
                ["Net Margin (%)", report.margins.net],
            ],
        ),
    ]
    if report.breakdown:
        sections.append(
            ExportSection(
                f"Breakdown by {report.group_by.value.title()}",
                [[b.period, b.revenue, b.expenses, b.net_income] for b in report.breakdown],
                header=["Period", "Revenue", "Expenses", "Net Income"],
            )
        )
    return sections


def _cash_flow_sections(report: CashFlowAnalysis) -> list[ExportSection]:
    sections = [
        ExportSection("Cash Flow Analysis", [["Period", _period_text(report)]]),
        ExportSection(
            "Summary",
            [
                ["Total Inflow", report.summary.total_inflow],
                ["Total Outflow", report.summary.total_outflow],
                ["Net Cash Flow", report.summary.net_cash_flow],
                ["Average Monthly Flow", report.summary.average_monthly_flow],
            ],
        ),
        ExportSection(
            "Trends",
            [
                ["Inflow Trend", report.trends.inflow_trend],
                ["Outflow Trend", report.trends.outflow_trend],
                ["Net Flow Trend", report.trends.net_flow_trend],
            ],
        ),
        ExportSection(
            f"{report.granularity.value.title()} Data",
            _flow_rows(report.monthly_data),
            header=_FLOW_HEADER,
        ),
    ]
    if report.forecast:
        sections.append(
            ExportSection("Forecast (Projected)", _flow_rows(report.forecast), header=_FLOW_HEADER)
        )
    return sections


def _tax_sections(report: TaxSummary) -> list[ExportSection]:
    deductions = report.deductions
    sections = [
        ExportSection("Tax Summary", [["Tax Year", report.tax_year], ["Format", report.format]]),
        ExportSection(
            "Income Summary",
            [
                ["Total Rental Income", report.income.total_rental_income],
                ["Other Income", report.income.other_income],
                ["Total Income", report.income.total_income],
            ],
        ),
        ExportSection(
            "Deductions",
            [
                [d.category, d.irs_category, d.amount, d.count, d.receipts_count, d.deductible]
                for d in deductions.operating_expenses
            ]
            + [
                ["Depreciation", "Depreciation expense", deductions.depreciation, 1, "", True],
                ["Total Deductions", "", deductions.total_deductions, "", "", ""],
            ],
            header=["Category", "IRS Category", "Amount", "Count", "Receipts", "Deductible"],
        ),
        ExportSection(
            "Tax Calculation",
            [
                ["Net Rental Income", report.net_rental_income],
                ["Taxable Income", report.taxable_income],
                ["Total Deductible", report.total_deductible],
                ["Total Non-Deductible", report.total_non_deductible],
                ["Deductible (%)", report.deductible_percentage],
            ],
        ),
    ]
    if report.schedule_e_totals:
        sections.append(
            ExportSection(
                "Schedule E Totals",
                [[line, amount] for line, amount in report.schedule_e_totals.items()],
                header=["Schedule E Line", "Amount"],
            )
        )
    if report.receipts:
        sections.append(
            ExportSection(
                "Receipts",
                [[r.date, r.category, r.description, r.amount, r.receipt_url or "Missing"]
                 for r in report.receipts],
                header=["Date", "Category", "Description", "Amount", "Receipt"],
            )
        )
    sections.append(
        ExportSection(
            "Recommendations",
            [[r.priority, r.type, r.title, r.potential_savings or Decimal("0")]
             for r in report.recommendations],
            header=["Priority", "Type", "Title", "Potential Savings"],
        )
    )
    return sections


_SECTION_BUILDERS = {
    ReportKind.FINANCIAL: _financial_sections,
    ReportKind.PROFIT_LOSS: _profit_loss_sections,
    ReportKind.CASH_FLOW: _cash_flow_sections,
    ReportKind.TAX_SUMMARY: _tax_sections,
}


def build_sections(report: Report) -> list[ExportSection]:
    """Lay a report out as titled tables."""
    return _SECTION_BUILDERS[ReportKind.of(report)](report)


# =============================================================================
# EXPORTER
# =============================================================================


class ReportExporter:
    """
    Render report models to downloadable files.

    Example:
        exporter = ReportExporter()
        result = exporter.export(report, "csv")
        with open(result.file_name, "wb") as f:
            f.write(result.content)
    """

    def export(
        self,
        report: Report,
        format: Any = ExportFormat.CSV,
        file_name: Optional[str] = None,
    ) -> ExportResult:
        """
        Render a report.

        Args:
            report: Any of the four report models
            format: csv, text or pdf
            file_name: Overrides the generated file name

        Returns:
            ExportResult with the rendered bytes

        Raises:
            ValidationError: If the format is not supported
            ExportError: If the report cannot be rendered
        """
        export_format = coerce_enum(ExportFormat, format, "format")
        kind = ReportKind.of(report)
        sections = build_sections(report)

        if export_format == ExportFormat.CSV:
            content = self._format_csv(sections).encode("utf-8")
        elif export_format == ExportFormat.TEXT:
            content = self._format_text(kind, sections).encode("utf-8")
        else:
            content = self._format_pdf(kind, report, sections)

        name = file_name or generate_file_name(
            kind, export_format, report.period.start, report.period.end
        )
        logger.info(
            "report_exported",
            report_type=kind.value,
            format=export_format.value,
            file_name=name,
            size=len(content),
        )
        return ExportResult(file_name=name, mime_type=export_format.mime_type, content=content)

    def _format_csv(self, sections: list[ExportSection]) -> str:
        """Sections separated by a blank row; every cell is quoted."""
        buffer = StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        for index, section in enumerate(sections):
            if index:
                writer.writerow([""])
            writer.writerow([section.title])
            if section.header:
                writer.writerow(section.header)
            for row in section.rows:
                writer.writerow([format_cell(cell) for cell in row])
        return buffer.getvalue()

    def _format_text(self, kind: ReportKind, sections: list[ExportSection]) -> str:
        """Format report as plain text."""
        output = [kind.display_name.replace("-", " ").upper(), "=" * 60]

        for section in sections:
            output.append("")
            output.append(section.title.upper())
            output.append("-" * 60)
            table = [section.header] if section.header else []
            table += [[format_cell(cell) for cell in row] for row in section.rows]
            if not table:
                output.append("(none)")
                continue
            widths = [
                max(len(row[i]) for row in table if i < len(row))
                for i in range(max(len(row) for row in table))
            ]
            for row in table:
                output.append(
                    "  ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)).rstrip()
                )

        output.append("")
        output.append("=" * 60)
        output.append("END OF REPORT")
        output.append("=" * 60)
        return "\n".join(output)

    def _format_pdf(
        self, kind: ReportKind, report: Report, sections: list[ExportSection]
    ) -> bytes:
        """Format report as PDF using reportlab."""
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=letter,
            rightMargin=0.75 * inch,
            leftMargin=0.75 * inch,
            topMargin=0.75 * inch,
            bottomMargin=0.75 * inch,
            title=kind.display_name.replace("-", " "),
        )

        styles = getSampleStyleSheet()
        styles.add(ParagraphStyle(
            name='ReportTitle',
            parent=styles['Heading1'],
            fontSize=18,
            spaceAfter=20,
            alignment=TA_CENTER,
            textColor=colors.HexColor('#1a365d'),
        ))
        styles.add(ParagraphStyle(
            name='SectionHeading',
            parent=styles['Heading2'],
            fontSize=14,
            spaceAfter=12,
            spaceBefore=20,
            textColor=colors.HexColor('#2c5282'),
        ))

        elements = [
            Paragraph(kind.display_name.replace("-", " ").upper(), styles['ReportTitle']),
        ]
        header_table = Table(
            [
                ["Period:", _period_text(report)],
                ["Generated:", report.generated_at.strftime('%B %d, %Y')],
            ],
            colWidths=[1.5 * inch, 4 * inch],
        )
        header_table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
            ('FONTNAME', (1, 0), (1, -1), 'Helvetica'),
            ('FONTSIZE', (0, 0), (-1, -1), 10),
            ('ALIGN', (0, 0), (0, -1), 'RIGHT'),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
        ]))
        elements.append(header_table)
        elements.append(Spacer(1, 0.2 * inch))

        for section in sections:
            elements.append(Paragraph(escape(section.title), styles['SectionHeading']))
            data = [section.header] if section.header else []
            data += [[format_cell(cell) for cell in row] for row in section.rows]
            if not data:
                elements.append(Paragraph("None", styles['Normal']))
                continue

            table = Table(data, hAlign='LEFT')
            style = [
                ('FONTNAME', (0, 0), (-1, -1), 'Helvetica'),
                ('FONTSIZE', (0, 0), (-1, -1), 9),
                ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
                ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
            ]
            if section.header:
                style += [
                    ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#2c5282')),
                    ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
                    ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
                ]
            else:
                style.append(('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'))
            table.setStyle(TableStyle(style))
            elements.append(table)

        try:
            doc.build(elements)
        except Exception as e:
            logger.error("pdf_export_failed", report_type=kind.value, error=str(e))
            raise ExportError(
                f"Failed to render {kind.display_name} as PDF",
                export_format=ExportFormat.PDF.value,
                report_type=kind.value,
                details={"error": str(e)},
            ) from e
        pdf_bytes = buffer.getvalue()
        buffer.close()
        return pdf_bytes


def export_report(
    generator,
    report_kind: Any,
    format: Any,
    user_id: str,
    start_date: Any,
    end_date: Any,
    property_id: Optional[str] = None,
    file_name: Optional[str] = None,
) -> ExportResult:
    """
    Generate a report with its standard export options and render it.

    Financial reports include the period comparison; profit & loss
    statements are grouped by month with details; cash flow is monthly
    without forecast; the tax summary covers the calendar year of
    start_date in detailed format.

    Args:
        generator: A ReportGenerator
        report_kind: financial, profit-loss, cash-flow or tax-summary
        format: csv, text or pdf
    """
    kind = coerce_enum(ReportKind, report_kind, "report_type")
    if kind == ReportKind.FINANCIAL:
        report = generator.generate_financial_report(
            user_id, start_date, end_date, property_id=property_id,
            report_type="monthly", include_comparison=True,
        )
    elif kind == ReportKind.PROFIT_LOSS:
        report = generator.generate_profit_loss_statement(
            user_id, start_date, end_date, property_id=property_id,
            group_by="month", include_details=True,
        )
    elif kind == ReportKind.CASH_FLOW:
        report = generator.generate_cash_flow_analysis(
            user_id, start_date, end_date, property_id=property_id,
            granularity="monthly", include_forecast=False,
        )
    else:
        tax_year = require_date(start_date, "start_date").year
        report = generator.generate_tax_summary(
            user_id, tax_year, property_id=property_id,
            include_receipts=True, format="detailed",
        )
    return ReportExporter().export(report, format, file_name=file_name)
