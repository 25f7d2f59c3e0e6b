"""Report result models.

Every model here is derived, request-scoped output. Nothing is persisted;
each report call builds fresh instances.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from ..periods import GroupBy, Granularity, ReportType


def _utc_now() -> dt.datetime:
    """Return current UTC datetime with timezone info."""
    return dt.datetime.now(dt.timezone.utc)


# =============================================================================
# ENUMERATIONS
# =============================================================================


class CategoryTrend(str, Enum):
    """Spend direction of an expense category within a period."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class FlowTrend(str, Enum):
    """Direction of inflow or outflow across a cash-flow series."""

    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class NetFlowTrend(str, Enum):
    """Direction of net cash flow across a series."""

    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


class RecommendationType(str, Enum):
    """Kinds of tax recommendation."""

    DEDUCTION = "deduction"
    DOCUMENTATION = "documentation"
    TIMING = "timing"
    STRATEGY = "strategy"


class RecommendationPriority(str, Enum):
    """Recommendation urgency."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort rank; lower sorts first."""
        return {"high": 0, "medium": 1, "low": 2}[self.value]


class TaxSummaryFormat(str, Enum):
    """Level of detail in a tax summary."""

    SUMMARY = "summary"
    DETAILED = "detailed"
    IRS_READY = "irs-ready"


# =============================================================================
# AUDIT
# =============================================================================


class AuditEntry(BaseModel):
    """One calculation step recorded while building a report."""

    timestamp: dt.datetime = Field(default_factory=_utc_now)
    step: str
    input_value: str
    output_value: str
    source: str
    notes: Optional[str] = None


# =============================================================================
# BREAKDOWNS
# =============================================================================


class CategoryTotal(BaseModel):
    """Expense total for one category."""

    category: str
    amount: Decimal = Decimal("0")
    count: int = Field(default=0, ge=0)
    average_amount: Decimal = Field(
        default=Decimal("0"),
        description="amount / count, 0 for an empty category",
    )
    percentage: Decimal = Field(
        default=Decimal("0"),
        description="Share of total expenses (0-100)",
    )
    trend: CategoryTrend = CategoryTrend.STABLE


class TopExpense(BaseModel):
    """One of the largest expenses in a period."""

    expense_id: str
    date: Optional[dt.date] = None
    amount: Decimal = Decimal("0")
    category: str
    description: Optional[str] = None


class PaymentMethodTotal(BaseModel):
    """Revenue total for one payment method."""

    method: str
    amount: Decimal = Decimal("0")
    count: int = Field(default=0, ge=0)
    percentage: Decimal = Field(
        default=Decimal("0"),
        description="Share of total revenue (0-100)",
    )


class CashFlowPoint(BaseModel):
    """Income, expenses and running balance for one time bucket."""

    period_label: str = Field(description="Bucket label, e.g. 2024-01 or 2024-W03")
    income: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")
    net_flow: Decimal = Field(default=Decimal("0"), description="income - expenses")
    cumulative_flow: Decimal = Field(
        default=Decimal("0"),
        description="Running sum of net_flow up to and including this bucket",
    )


# =============================================================================
# FINANCIAL REPORT
# =============================================================================


class ReportPeriod(BaseModel):
    """The window a report covers."""

    start: dt.date
    end: dt.date
    type: Optional[ReportType] = None


class IncomeSummary(BaseModel):
    """Revenue totals for a period."""

    total_revenue: Decimal = Decimal("0")
    rent_revenue: Decimal = Decimal("0")
    other_revenue: Decimal = Decimal("0")
    payment_method_breakdown: list[PaymentMethodTotal] = Field(default_factory=list)


class ExpenseSummary(BaseModel):
    """Expense totals for a period."""

    total_expenses: Decimal = Decimal("0")
    category_breakdown: list[CategoryTotal] = Field(default_factory=list)
    reimbursements: Decimal = Decimal("0")
    operating_expenses: Decimal = Decimal("0")
    average_expense: Decimal = Decimal("0")
    top_expenses: list[TopExpense] = Field(
        default_factory=list,
        description="Largest expenses, amount descending",
    )


class GrowthRates(BaseModel):
    """Period-over-period change, in percent."""

    revenue: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")
    net_income: Decimal = Decimal("0")


class PeriodComparison(BaseModel):
    """A report's prior period and the growth since then."""

    previous_period: "FinancialReport"
    growth: GrowthRates


class FinancialReport(BaseModel):
    """Revenue, expenses and cash flow for a period."""

    period: ReportPeriod
    income: IncomeSummary
    expenses: ExpenseSummary
    net_income: Decimal = Decimal("0")
    profit_margin: Decimal = Field(
        default=Decimal("0"),
        description="net_income / total_revenue * 100; 0 when there is no revenue",
    )
    cash_flow: list[CashFlowPoint] = Field(default_factory=list)
    comparison: Optional[PeriodComparison] = None
    generated_at: dt.datetime = Field(default_factory=_utc_now)
    audit_log: list[AuditEntry] = Field(default_factory=list)


# =============================================================================
# PROFIT & LOSS
# =============================================================================


class RevenueSummary(BaseModel):
    rent_income: Decimal = Decimal("0")
    other_income: Decimal = Decimal("0")
    total_revenue: Decimal = Decimal("0")


class ProfitLossExpenses(BaseModel):
    operating_expenses: list[CategoryTotal] = Field(default_factory=list)
    total_operating_expenses: Decimal = Decimal("0")
    depreciation: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")


class Margins(BaseModel):
    """Margins in percent; each is 0 when there is no revenue."""

    gross: Decimal = Decimal("0")
    operating: Decimal = Decimal("0")
    net: Decimal = Decimal("0")


class PeriodBreakdown(BaseModel):
    """Revenue and expenses for one month, quarter or year."""

    period: str
    revenue: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")
    net_income: Decimal = Decimal("0")


class ProfitLossStatement(BaseModel):
    """Profit & loss statement for a period."""

    period: ReportPeriod
    group_by: GroupBy = GroupBy.MONTH
    revenue: RevenueSummary
    expenses: ProfitLossExpenses
    gross_profit: Decimal = Decimal("0")
    operating_income: Decimal = Decimal("0")
    net_income: Decimal = Decimal("0")
    margins: Margins = Field(default_factory=Margins)
    breakdown: list[PeriodBreakdown] = Field(default_factory=list)
    generated_at: dt.datetime = Field(default_factory=_utc_now)
    audit_log: list[AuditEntry] = Field(default_factory=list)


# =============================================================================
# CASH FLOW
# =============================================================================


class CashFlowSummary(BaseModel):
    total_inflow: Decimal = Decimal("0")
    total_outflow: Decimal = Decimal("0")
    net_cash_flow: Decimal = Decimal("0")
    average_monthly_flow: Decimal = Field(
        default=Decimal("0"),
        description="net_cash_flow divided by the number of buckets",
    )


class CashFlowTrends(BaseModel):
    inflow_trend: FlowTrend = FlowTrend.STABLE
    outflow_trend: FlowTrend = FlowTrend.STABLE
    net_flow_trend: NetFlowTrend = NetFlowTrend.STABLE


class CashFlowAnalysis(BaseModel):
    """Time-bucketed cash flow with trends and an optional forecast."""

    period: ReportPeriod
    granularity: Granularity = Granularity.MONTHLY
    summary: CashFlowSummary = Field(default_factory=CashFlowSummary)
    monthly_data: list[CashFlowPoint] = Field(
        default_factory=list,
        description="Historical buckets at the requested granularity",
    )
    trends: CashFlowTrends = Field(default_factory=CashFlowTrends)
    forecast: Optional[list[CashFlowPoint]] = None
    generated_at: dt.datetime = Field(default_factory=_utc_now)
    audit_log: list[AuditEntry] = Field(default_factory=list)


# =============================================================================
# TAX
# =============================================================================


class IRSCategoryMapping(BaseModel):
    """How a business expense category lands on Schedule E."""

    business_category: str
    irs_schedule_e: str
    description: str
    requirements: list[str] = Field(default_factory=list)


class TaxIncome(BaseModel):
    total_rental_income: Decimal = Decimal("0")
    other_income: Decimal = Decimal("0")
    total_income: Decimal = Decimal("0")


class TaxDeductionCategory(BaseModel):
    """Expenses in one business category, with their Schedule E line."""

    category: str
    irs_category: str
    amount: Decimal = Decimal("0")
    count: int = Field(default=0, ge=0)
    receipts_count: int = Field(default=0, ge=0)
    deductible: bool = True
    description: str = ""


class TaxDeductions(BaseModel):
    operating_expenses: list[TaxDeductionCategory] = Field(default_factory=list)
    depreciation: Decimal = Decimal("0")
    total_deductions: Decimal = Decimal("0")


class ReceiptSummary(BaseModel):
    """An expense that needs, or has, a receipt on file."""

    expense_id: str
    date: Optional[dt.date] = None
    amount: Decimal = Decimal("0")
    category: str
    description: Optional[str] = None
    receipt_url: Optional[str] = None
    deductible: bool = True


class TaxRecommendation(BaseModel):
    """A suggested action to reduce tax or audit exposure."""

    type: RecommendationType
    title: str
    description: str
    priority: RecommendationPriority
    potential_savings: Optional[Decimal] = None


class TaxSummary(BaseModel):
    """Schedule E oriented summary for one tax year."""

    tax_year: int
    format: TaxSummaryFormat = TaxSummaryFormat.DETAILED
    period: ReportPeriod
    income: TaxIncome
    deductions: TaxDeductions
    net_rental_income: Decimal = Decimal("0")
    taxable_income: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="max(0, net_rental_income)",
    )
    total_deductible: Decimal = Field(
        default=Decimal("0"),
        description="Operating expenses in deductible categories",
    )
    total_non_deductible: Decimal = Field(
        default=Decimal("0"),
        description="Operating expenses in non-deductible categories",
    )
    deductible_percentage: Decimal = Field(
        default=Decimal("0"),
        description="Deductible share of operating expenses (0-100)",
    )
    receipts: list[ReceiptSummary] = Field(default_factory=list)
    recommendations: list[TaxRecommendation] = Field(default_factory=list)
    irs_categories: list[IRSCategoryMapping] = Field(default_factory=list)
    schedule_e_totals: Optional[dict[str, Decimal]] = None
    generated_at: dt.datetime = Field(default_factory=_utc_now)
    audit_log: list[AuditEntry] = Field(default_factory=list)


PeriodComparison.model_rebuild()
FinancialReport.model_rebuild()
