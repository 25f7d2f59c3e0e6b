"""Period-over-period growth rates."""

from decimal import Decimal

from .calculation import HUNDRED, ZERO
from .models import FinancialReport, GrowthRates, PeriodComparison


def calculate_growth_rate(previous: Decimal, current: Decimal) -> Decimal:
    """Percent change from previous to current.

    With no previous value, any positive current value counts as 100%
    growth and anything else as 0.

    Example:
        >>> calculate_growth_rate(Decimal("1000"), Decimal("1500"))
        Decimal('50')
    """
    if previous == 0:
        return HUNDRED if current > 0 else ZERO
    return (current - previous) / previous * HUNDRED


def compare_reports(current: FinancialReport, previous: FinancialReport) -> PeriodComparison:
    """Growth of revenue, expenses and net income against a previous report."""
    return PeriodComparison(
        previous_period=previous,
        growth=GrowthRates(
            revenue=calculate_growth_rate(
                previous.income.total_revenue, current.income.total_revenue
            ),
            expenses=calculate_growth_rate(
                previous.expenses.total_expenses, current.expenses.total_expenses
            ),
            net_income=calculate_growth_rate(previous.net_income, current.net_income),
        ),
    )
