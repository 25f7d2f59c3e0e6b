"""Data models for coliving reports.

This package provides:
- Stored record models with lenient parsing (records.py)
- Report result models, enumerations and the audit entry (reports.py)
"""

from coliving_reports.models.records import (
    UNCATEGORIZED,
    UNKNOWN_METHOD,
    ExpenseRecord,
    IncomeRecord,
    PropertyRecord,
    coerce_amount,
    coerce_optional_amount,
)
from coliving_reports.models.reports import (
    # Enumerations
    CategoryTrend,
    FlowTrend,
    NetFlowTrend,
    RecommendationPriority,
    RecommendationType,
    TaxSummaryFormat,
    # Audit
    AuditEntry,
    # Breakdowns
    CashFlowPoint,
    CategoryTotal,
    TopExpense,
    PaymentMethodTotal,
    # Financial report
    ExpenseSummary,
    FinancialReport,
    GrowthRates,
    IncomeSummary,
    PeriodComparison,
    ReportPeriod,
    # Profit & loss
    Margins,
    PeriodBreakdown,
    ProfitLossExpenses,
    ProfitLossStatement,
    RevenueSummary,
    # Cash flow
    CashFlowAnalysis,
    CashFlowSummary,
    CashFlowTrends,
    # Tax
    IRSCategoryMapping,
    ReceiptSummary,
    TaxDeductionCategory,
    TaxDeductions,
    TaxIncome,
    TaxRecommendation,
    TaxSummary,
)

__all__ = [
    # Records
    "UNCATEGORIZED",
    "UNKNOWN_METHOD",
    "IncomeRecord",
    "ExpenseRecord",
    "PropertyRecord",
    "coerce_amount",
    "coerce_optional_amount",
    # Enumerations
    "CategoryTrend",
    "FlowTrend",
    "NetFlowTrend",
    "RecommendationPriority",
    "RecommendationType",
    "TaxSummaryFormat",
    # Audit
    "AuditEntry",
    # Breakdowns
    "CashFlowPoint",
    "CategoryTotal",
    "TopExpense",
    "PaymentMethodTotal",
    # Financial report
    "ExpenseSummary",
    "FinancialReport",
    "GrowthRates",
    "IncomeSummary",
    "PeriodComparison",
    "ReportPeriod",
    # Profit & loss
    "Margins",
    "PeriodBreakdown",
    "ProfitLossExpenses",
    "ProfitLossStatement",
    "RevenueSummary",
    # Cash flow
    "CashFlowAnalysis",
    "CashFlowSummary",
    "CashFlowTrends",
    # Tax
    "IRSCategoryMapping",
    "ReceiptSummary",
    "TaxDeductionCategory",
    "TaxDeductions",
    "TaxIncome",
    "TaxRecommendation",
    "TaxSummary",
]
