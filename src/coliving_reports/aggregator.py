"""Income and expense aggregation for a reporting period.

The Aggregator filters records to a PeriodWindow and reduces them, in a
single pass each, to totals and breakdowns. Its AggregateResult keeps the
filtered records so the cash-flow analyzer and tax categorizer can reuse
them without fetching or filtering again.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Optional

from .calculation import ZERO, AuditedCalculator, compare_levels, percentage_of
from .models import (
    CategoryTotal,
    CategoryTrend,
    ExpenseRecord,
    ExpenseSummary,
    IncomeRecord,
    IncomeSummary,
    PaymentMethodTotal,
    TopExpense,
)
from .periods import PeriodWindow


@dataclass
class AggregateResult:
    """Everything the aggregator derived for one window."""

    window: PeriodWindow
    payments: list[IncomeRecord]
    expenses: list[ExpenseRecord]
    income: IncomeSummary
    expense_summary: ExpenseSummary
    net_income: Decimal = ZERO
    profit_margin: Decimal = ZERO
    excluded: dict[str, int] = field(default_factory=dict)


class Aggregator(AuditedCalculator):
    """
    Sum payments and expenses into report totals.

    Only completed payments count as revenue. Records whose date could not
    be parsed fall outside every window.
    """

    def __init__(
        self,
        trend_threshold: Decimal = Decimal("0.05"),
        top_expenses_limit: int = 10,
    ):
        """
        Args:
            trend_threshold: Relative change between the two halves of the
                window that marks a category as trending up or down.
            top_expenses_limit: How many of the largest expenses to list.
        """
        super().__init__()
        self.trend_threshold = trend_threshold
        self.top_expenses_limit = top_expenses_limit

    def filter_income(
        self, payments: Iterable[IncomeRecord], window: PeriodWindow
    ) -> list[IncomeRecord]:
        """Completed payments dated inside the window."""
        return [p for p in payments if p.is_completed and window.contains(p.date)]

    def filter_expenses(
        self, expenses: Iterable[ExpenseRecord], window: PeriodWindow
    ) -> list[ExpenseRecord]:
        """Expenses dated inside the window."""
        return [e for e in expenses if window.contains(e.date)]

    def aggregate(
        self,
        payments: Iterable[IncomeRecord],
        expenses: Iterable[ExpenseRecord],
        window: PeriodWindow,
    ) -> AggregateResult:
        """
        Filter records to the window and compute all totals.

        Args:
            payments: Every payment fetched for the user or property
            expenses: Every expense fetched for the user or property
            window: Reporting period (inclusive)

        Returns:
            AggregateResult with summaries, net income and profit margin
        """
        all_payments = list(payments)
        all_expenses = list(expenses)
        kept_payments = self.filter_income(all_payments, window)
        kept_expenses = self.filter_expenses(all_expenses, window)

        excluded = {
            "payments": len(all_payments) - len(kept_payments),
            "expenses": len(all_expenses) - len(kept_expenses),
        }
        self._log_step(
            step="filter_records",
            input_value=f"{len(all_payments)} payments, {len(all_expenses)} expenses",
            output_value=f"{len(kept_payments)} payments, {len(kept_expenses)} expenses",
            source=f"Window {window.start.isoformat()} to {window.end.isoformat()}",
            notes="Pending payments and undated records are excluded",
        )

        income = self.summarize_income(kept_payments)
        expense_summary = self.summarize_expenses(kept_expenses, window)

        net_income = income.total_revenue - expense_summary.total_expenses
        profit_margin = self.profit_margin(net_income, income.total_revenue)

        self._log_step(
            step="net_income",
            input_value=f"{income.total_revenue} - {expense_summary.total_expenses}",
            output_value=str(net_income),
            source="Revenue minus expenses",
        )
        self._log_step(
            step="profit_margin",
            input_value=f"{net_income} / {income.total_revenue}",
            output_value=str(profit_margin),
            source="Net income as percent of revenue",
            notes="0 when revenue is 0" if income.total_revenue == 0 else None,
        )

        return AggregateResult(
            window=window,
            payments=kept_payments,
            expenses=kept_expenses,
            income=income,
            expense_summary=expense_summary,
            net_income=net_income,
            profit_margin=profit_margin,
            excluded=excluded,
        )

    @staticmethod
    def profit_margin(net_income: Decimal, total_revenue: Decimal) -> Decimal:
        """Net income as a percent of revenue; 0 when there is no revenue."""
        if total_revenue > 0:
            return net_income / total_revenue * Decimal("100")
        return ZERO

    def summarize_income(self, payments: list[IncomeRecord]) -> IncomeSummary:
        """Revenue totals and payment-method breakdown."""
        total_revenue = ZERO
        rent_revenue = ZERO
        for payment in payments:
            total_revenue += payment.amount
            if payment.is_rent:
                rent_revenue += payment.amount

        self._log_step(
            step="total_revenue",
            input_value=f"{len(payments)} completed payments",
            output_value=str(total_revenue),
            source="Payment records",
            notes=f"rent={rent_revenue}",
        )

        return IncomeSummary(
            total_revenue=total_revenue,
            rent_revenue=rent_revenue,
            other_revenue=total_revenue - rent_revenue,
            payment_method_breakdown=self.payment_method_breakdown(payments, total_revenue),
        )

    def summarize_expenses(
        self, expenses: list[ExpenseRecord], window: Optional[PeriodWindow] = None
    ) -> ExpenseSummary:
        """Expense totals, reimbursement split and category breakdown."""
        total_expenses = ZERO
        reimbursements = ZERO
        for expense in expenses:
            total_expenses += expense.amount
            if expense.is_reimbursable:
                reimbursements += expense.amount

        self._log_step(
            step="total_expenses",
            input_value=f"{len(expenses)} expenses",
            output_value=str(total_expenses),
            source="Expense records",
            notes=f"reimbursable={reimbursements}",
        )

        return ExpenseSummary(
            total_expenses=total_expenses,
            category_breakdown=self.category_breakdown(expenses, window),
            reimbursements=reimbursements,
            operating_expenses=total_expenses - reimbursements,
            average_expense=total_expenses / len(expenses) if expenses else ZERO,
            top_expenses=self.top_expenses(expenses),
        )

    def top_expenses(self, expenses: list[ExpenseRecord]) -> list[TopExpense]:
        """The largest expenses, amount descending; ties keep record order."""
        ranked = sorted(expenses, key=lambda e: e.amount, reverse=True)
        return [
            TopExpense(
                expense_id=e.id,
                date=e.date,
                amount=e.amount,
                category=e.category,
                description=e.description,
            )
            for e in ranked[: self.top_expenses_limit]
        ]

    def payment_method_breakdown(
        self, payments: list[IncomeRecord], total_revenue: Decimal
    ) -> list[PaymentMethodTotal]:
        """Revenue grouped by payment method, in first-seen order.

        Empty when total revenue is 0.
        """
        if total_revenue == 0:
            return []

        totals: dict[str, list] = {}
        for payment in payments:
            entry = totals.setdefault(payment.payment_method, [ZERO, 0])
            entry[0] += payment.amount
            entry[1] += 1

        return [
            PaymentMethodTotal(
                method=method,
                amount=amount,
                count=count,
                percentage=percentage_of(amount, total_revenue),
            )
            for method, (amount, count) in totals.items()
        ]

    def category_breakdown(
        self, expenses: list[ExpenseRecord], window: Optional[PeriodWindow] = None
    ) -> list[CategoryTotal]:
        """Expenses grouped by category, in first-seen order.

        Empty when total expenses are 0. When a window is given each
        category also gets a trend comparing its spend in the first and
        second halves of the window.
        """
        total_expenses = sum((e.amount for e in expenses), ZERO)
        if total_expenses == 0:
            return []

        midpoint = window.midpoint if window else None
        totals: dict[str, dict] = {}
        for expense in expenses:
            entry = totals.setdefault(
                expense.category,
                {"amount": ZERO, "count": 0, "first": ZERO, "second": ZERO},
            )
            entry["amount"] += expense.amount
            entry["count"] += 1
            if midpoint is not None and expense.date is not None:
                half = "first" if expense.date <= midpoint else "second"
                entry[half] += expense.amount

        breakdown = []
        for category, entry in totals.items():
            trend = CategoryTrend.STABLE
            if midpoint is not None:
                direction = compare_levels(entry["first"], entry["second"], self.trend_threshold)
                if direction > 0:
                    trend = CategoryTrend.UP
                elif direction < 0:
                    trend = CategoryTrend.DOWN
            breakdown.append(
                CategoryTotal(
                    category=category,
                    amount=entry["amount"],
                    count=entry["count"],
                    average_amount=entry["amount"] / entry["count"],
                    percentage=percentage_of(entry["amount"], total_expenses),
                    trend=trend,
                )
            )
        return breakdown
