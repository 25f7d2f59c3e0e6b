"""Report generation service.

ReportGenerator is the entry point for callers. Each generate_* method
validates its parameters, fetches records through a RecordRepository, runs
the calculators and returns a fully populated report model. Calculators are
created per call, so a generator can be shared between requests.
"""

from decimal import Decimal
from typing import Any, Optional

import structlog

from .aggregator import AggregateResult, Aggregator
from .calculation import HUNDRED, ZERO
from .cash_flow import CashFlowAnalyzer
from .comparison import compare_reports
from .config import ReportingConfig, get_config
from .exceptions import ValidationError
from .logging_config import report_context
from .models import (
    CashFlowAnalysis,
    ExpenseRecord,
    FinancialReport,
    IncomeRecord,
    Margins,
    PeriodBreakdown,
    ProfitLossExpenses,
    ProfitLossStatement,
    ReportPeriod,
    RevenueSummary,
    TaxSummary,
    TaxSummaryFormat,
)
from .periods import Granularity, GroupBy, PeriodWindow, ReportType, coerce_enum
from .store import RecordRepository
from .tax import TaxCategorizer

logger = structlog.get_logger()


class ReportGenerator:
    """
    Produce financial, profit & loss, cash-flow and tax reports.

    Example:
        repository = RecordRepository(InMemoryRecordStore())
        generator = ReportGenerator(repository)
        report = generator.generate_financial_report(
            "user1", "2024-01-01", "2024-02-28", include_comparison=True
        )
        print(report.net_income, report.comparison.growth.revenue)
    """

    def __init__(
        self,
        repository: RecordRepository,
        config: Optional[ReportingConfig] = None,
    ):
        """
        Initialize the generator.

        Args:
            repository: Record access for payments, expenses and properties
            config: Reporting configuration; loaded from the environment if omitted
        """
        self.repository = repository
        self.config = config or get_config()

    def _aggregator(self) -> Aggregator:
        return Aggregator(trend_threshold=self.config.cashflow.trend_threshold)

    def _cash_flow_analyzer(self) -> CashFlowAnalyzer:
        cfg = self.config.cashflow
        return CashFlowAnalyzer(
            trend_threshold=cfg.trend_threshold,
            trend_window=cfg.trend_window,
            forecast_periods=cfg.forecast_periods,
            forecast_window=cfg.forecast_window,
        )

    # =========================================================================
    # FINANCIAL REPORT
    # =========================================================================

    @report_context("financial")
    def generate_financial_report(
        self,
        user_id: str,
        start_date: Any,
        end_date: Any,
        property_id: Optional[str] = None,
        report_type: Any = ReportType.MONTHLY,
        include_comparison: bool = False,
    ) -> FinancialReport:
        """
        Summarize income, expenses and monthly cash flow for a window.

        Args:
            user_id: Owner of the records
            start_date: Window start (date, datetime or ISO string), inclusive
            end_date: Window end, inclusive
            property_id: Restrict to one property
            report_type: Cadence label (monthly, quarterly, yearly)
            include_comparison: Add growth against the preceding window

        Returns:
            FinancialReport

        Raises:
            ValidationError: If the window or report type is invalid
            RecordFetchError: If the record store fails
        """
        window = PeriodWindow.from_values(start_date, end_date)
        report_type = coerce_enum(ReportType, report_type, "report_type")
        logger.info(
            "report_generation_started",
            property_id=property_id,
            start=window.start.isoformat(),
            end=window.end.isoformat(),
        )

        payments = self.repository.fetch_income(user_id, property_id)
        expenses = self.repository.fetch_expenses(user_id, property_id)

        report = self._build_financial_report(payments, expenses, window, report_type)
        if include_comparison:
            previous_window = window.previous()
            if previous_window is None:
                logger.warning(
                    "comparison_unavailable",
                    start=window.start.isoformat(),
                    reason="no_earlier_dates",
                )
            else:
                previous = self._build_financial_report(
                    payments, expenses, previous_window, report_type
                )
                report.comparison = compare_reports(report, previous)

        logger.info(
            "report_generation_completed",
            net_income=str(report.net_income),
        )
        return report

    def _build_financial_report(
        self,
        payments: list[IncomeRecord],
        expenses: list[ExpenseRecord],
        window: PeriodWindow,
        report_type: ReportType,
    ) -> FinancialReport:
        aggregator = self._aggregator()
        result = aggregator.aggregate(payments, expenses, window)

        analyzer = self._cash_flow_analyzer()
        cash_flow = analyzer.build_series(
            result.payments, result.expenses, window, Granularity.MONTHLY
        )

        return FinancialReport(
            period=ReportPeriod(start=window.start, end=window.end, type=report_type),
            income=result.income,
            expenses=result.expense_summary,
            net_income=result.net_income,
            profit_margin=result.profit_margin,
            cash_flow=cash_flow,
            audit_log=aggregator.audit_log + analyzer.audit_log,
        )

    # =========================================================================
    # PROFIT & LOSS
    # =========================================================================

    @report_context("profit_loss")
    def generate_profit_loss_statement(
        self,
        user_id: str,
        start_date: Any,
        end_date: Any,
        property_id: Optional[str] = None,
        group_by: Any = GroupBy.MONTH,
        include_details: bool = True,
    ) -> ProfitLossStatement:
        """
        Build a profit & loss statement with prorated depreciation.

        Args:
            user_id: Owner of the records
            start_date: Window start, inclusive
            end_date: Window end, inclusive
            property_id: Restrict to one property
            group_by: Breakdown grouping (month, quarter, year)
            include_details: Include the per-period breakdown

        Returns:
            ProfitLossStatement
        """
        window = PeriodWindow.from_values(start_date, end_date)
        group_by = coerce_enum(GroupBy, group_by, "group_by")
        logger.info(
            "report_generation_started",
            property_id=property_id,
            start=window.start.isoformat(),
            end=window.end.isoformat(),
        )

        payments = self.repository.fetch_income(user_id, property_id)
        expenses = self.repository.fetch_expenses(user_id, property_id)
        properties = self.repository.fetch_properties(user_id, property_id)

        aggregator = self._aggregator()
        result = aggregator.aggregate(payments, expenses, window)

        categorizer = TaxCategorizer(self.config.tax)
        depreciation = categorizer.prorate_depreciation(properties, window.days)

        revenue = result.income.total_revenue
        operating_total = result.expense_summary.total_expenses
        gross_profit = revenue - operating_total
        operating_income = gross_profit - depreciation

        analyzer = self._cash_flow_analyzer()
        breakdown = []
        if include_details:
            breakdown = self._period_breakdown(analyzer, result, group_by)

        statement = ProfitLossStatement(
            period=ReportPeriod(start=window.start, end=window.end),
            group_by=group_by,
            revenue=RevenueSummary(
                rent_income=result.income.rent_revenue,
                other_income=result.income.other_revenue,
                total_revenue=revenue,
            ),
            expenses=ProfitLossExpenses(
                operating_expenses=result.expense_summary.category_breakdown,
                total_operating_expenses=operating_total,
                depreciation=depreciation,
                total_expenses=operating_total + depreciation,
            ),
            gross_profit=gross_profit,
            operating_income=operating_income,
            net_income=operating_income,
            margins=Margins(
                gross=self._margin(gross_profit, revenue),
                operating=self._margin(operating_income, revenue),
                net=self._margin(operating_income, revenue),
            ),
            breakdown=breakdown,
            audit_log=aggregator.audit_log + categorizer.audit_log + analyzer.audit_log,
        )

        logger.info(
            "report_generation_completed",
            net_income=str(statement.net_income),
        )
        return statement

    @staticmethod
    def _margin(amount: Decimal, revenue: Decimal) -> Decimal:
        if revenue > 0:
            return amount / revenue * HUNDRED
        return ZERO

    @staticmethod
    def _period_breakdown(
        analyzer: CashFlowAnalyzer, result: AggregateResult, group_by: GroupBy
    ) -> list[PeriodBreakdown]:
        series = analyzer.build_series(
            result.payments, result.expenses, result.window, group_by.granularity
        )
        return [
            PeriodBreakdown(
                period=point.period_label,
                revenue=point.income,
                expenses=point.expenses,
                net_income=point.net_flow,
            )
            for point in series
        ]

    # =========================================================================
    # CASH FLOW
    # =========================================================================

    @report_context("cash_flow")
    def generate_cash_flow_analysis(
        self,
        user_id: str,
        start_date: Any,
        end_date: Any,
        property_id: Optional[str] = None,
        granularity: Any = Granularity.MONTHLY,
        include_forecast: bool = False,
    ) -> CashFlowAnalysis:
        """
        Bucket cash flow over a window, classify trends and optionally forecast.

        Args:
            user_id: Owner of the records
            start_date: Window start, inclusive
            end_date: Window end, inclusive
            property_id: Restrict to one property
            granularity: Bucket size (daily, weekly, monthly, quarterly, yearly)
            include_forecast: Append projected future buckets

        Returns:
            CashFlowAnalysis
        """
        window = PeriodWindow.from_values(start_date, end_date)
        granularity = coerce_enum(Granularity, granularity, "granularity")
        logger.info(
            "report_generation_started",
            property_id=property_id,
            granularity=granularity.value,
        )

        payments = self.repository.fetch_income(user_id, property_id)
        expenses = self.repository.fetch_expenses(user_id, property_id)

        aggregator = self._aggregator()
        kept_payments = aggregator.filter_income(payments, window)
        kept_expenses = aggregator.filter_expenses(expenses, window)

        analyzer = self._cash_flow_analyzer()
        series = analyzer.build_series(kept_payments, kept_expenses, window, granularity)
        summary = analyzer.summarize(series)
        trends = analyzer.classify_trends(series)
        forecast = analyzer.forecast(series, window, granularity) if include_forecast else None

        analysis = CashFlowAnalysis(
            period=ReportPeriod(start=window.start, end=window.end),
            granularity=granularity,
            summary=summary,
            monthly_data=series,
            trends=trends,
            forecast=forecast,
            audit_log=analyzer.audit_log,
        )

        logger.info(
            "report_generation_completed",
            buckets=len(series),
            net_cash_flow=str(summary.net_cash_flow),
        )
        return analysis

    # =========================================================================
    # TAX SUMMARY
    # =========================================================================

    @report_context("tax_summary")
    def generate_tax_summary(
        self,
        user_id: str,
        tax_year: Any,
        property_id: Optional[str] = None,
        include_receipts: bool = True,
        format: Any = TaxSummaryFormat.DETAILED,
    ) -> TaxSummary:
        """
        Categorize a calendar year's records for Schedule E.

        Args:
            user_id: Owner of the records
            tax_year: Calendar year, e.g. 2024
            property_id: Restrict to one property
            include_receipts: List receipt-bearing expenses
            format: summary, detailed or irs-ready

        Returns:
            TaxSummary
        """
        year = self._validate_tax_year(tax_year)
        format = coerce_enum(TaxSummaryFormat, format, "format")
        window = PeriodWindow.for_tax_year(year)
        logger.info(
            "report_generation_started",
            property_id=property_id,
            tax_year=year,
            format=format.value,
        )

        payments = self.repository.fetch_income(user_id, property_id)
        expenses = self.repository.fetch_expenses(user_id, property_id)
        properties = self.repository.fetch_properties(user_id, property_id)

        aggregator = self._aggregator()
        categorizer = TaxCategorizer(self.config.tax)
        summary = categorizer.summarize(
            tax_year=year,
            payments=aggregator.filter_income(payments, window),
            expenses=aggregator.filter_expenses(expenses, window),
            properties=properties,
            include_receipts=include_receipts,
            format=format,
        )

        logger.info(
            "report_generation_completed",
            taxable_income=str(summary.taxable_income),
            recommendations=len(summary.recommendations),
        )
        return summary

    @staticmethod
    def _validate_tax_year(tax_year: Any) -> int:
        try:
            year = int(str(tax_year).strip())
        except (TypeError, ValueError):
            year = None
        if year is None or not 1 <= year <= 9999:
            raise ValidationError(
                f"Invalid tax year: {tax_year}",
                field="tax_year",
                value=str(tax_year),
                constraint="Calendar year between 1 and 9999",
            )
        return year
