"""Cash-flow time series, trend classification and forecasting."""

from decimal import Decimal
from typing import Iterable

from .calculation import ZERO, AuditedCalculator, compare_levels, mean
from .models import (
    CashFlowPoint,
    CashFlowSummary,
    CashFlowTrends,
    ExpenseRecord,
    FlowTrend,
    IncomeRecord,
    NetFlowTrend,
)
from .periods import (
    Granularity,
    PeriodWindow,
    bucket_label,
    bucket_start,
    iter_bucket_starts,
    next_bucket_start,
)


class CashFlowAnalyzer(AuditedCalculator):
    """
    Bucket income and expenses over time.

    Series are zero-filled: every bucket overlapping the window appears,
    in chronological order, whether or not it saw any activity, so the
    cumulative flow reads as a continuous balance.
    """

    def __init__(
        self,
        trend_threshold: Decimal = Decimal("0.05"),
        trend_window: int = 3,
        forecast_periods: int = 6,
        forecast_window: int = 6,
    ):
        super().__init__()
        self.trend_threshold = trend_threshold
        self.trend_window = trend_window
        self.forecast_periods = forecast_periods
        self.forecast_window = forecast_window

    def build_series(
        self,
        payments: Iterable[IncomeRecord],
        expenses: Iterable[ExpenseRecord],
        window: PeriodWindow,
        granularity: Granularity = Granularity.MONTHLY,
    ) -> list[CashFlowPoint]:
        """
        Build the historical series for a window.

        Args:
            payments: Payments already filtered to the window
            expenses: Expenses already filtered to the window
            window: Reporting period
            granularity: Bucket size

        Returns:
            One CashFlowPoint per bucket with a running cumulative flow
        """
        buckets: dict[str, list[Decimal]] = {
            bucket_label(start, granularity): [ZERO, ZERO]
            for start in iter_bucket_starts(window, granularity)
        }

        for payment in payments:
            if window.contains(payment.date):
                buckets[bucket_label(payment.date, granularity)][0] += payment.amount
        for expense in expenses:
            if window.contains(expense.date):
                buckets[bucket_label(expense.date, granularity)][1] += expense.amount

        series = []
        cumulative = ZERO
        for label, (income, outflow) in buckets.items():
            net_flow = income - outflow
            cumulative += net_flow
            series.append(
                CashFlowPoint(
                    period_label=label,
                    income=income,
                    expenses=outflow,
                    net_flow=net_flow,
                    cumulative_flow=cumulative,
                )
            )

        self._log_step(
            step="cash_flow_series",
            input_value=f"{granularity.value} buckets",
            output_value=f"{len(series)} buckets, cumulative={cumulative}",
            source=f"Window {window.start.isoformat()} to {window.end.isoformat()}",
        )
        return series

    def summarize(self, series: list[CashFlowPoint]) -> CashFlowSummary:
        """Totals over the series; average flow is per bucket."""
        total_inflow = sum((p.income for p in series), ZERO)
        total_outflow = sum((p.expenses for p in series), ZERO)
        net_cash_flow = sum((p.net_flow for p in series), ZERO)
        average = net_cash_flow / len(series) if series else ZERO

        self._log_step(
            step="average_flow",
            input_value=f"{net_cash_flow} / {len(series)}",
            output_value=str(average),
            source="Net cash flow per bucket",
        )
        return CashFlowSummary(
            total_inflow=total_inflow,
            total_outflow=total_outflow,
            net_cash_flow=net_cash_flow,
            average_monthly_flow=average,
        )

    def classify_trends(self, series: list[CashFlowPoint]) -> CashFlowTrends:
        """
        Compare the first and last few buckets of the series.

        The mean of the last `trend_window` buckets is compared with the
        mean of the first `trend_window`. A series shorter than two buckets
        is stable on every axis.
        """
        if len(series) < 2:
            return CashFlowTrends()

        earlier = series[: self.trend_window]
        recent = series[-self.trend_window:]

        def direction(attr: str) -> int:
            return compare_levels(
                mean([getattr(p, attr) for p in earlier]),
                mean([getattr(p, attr) for p in recent]),
                self.trend_threshold,
            )

        flow_labels = {1: FlowTrend.INCREASING, -1: FlowTrend.DECREASING, 0: FlowTrend.STABLE}
        net_labels = {1: NetFlowTrend.IMPROVING, -1: NetFlowTrend.DECLINING, 0: NetFlowTrend.STABLE}

        trends = CashFlowTrends(
            inflow_trend=flow_labels[direction("income")],
            outflow_trend=flow_labels[direction("expenses")],
            net_flow_trend=net_labels[direction("net_flow")],
        )
        self._log_step(
            step="cash_flow_trends",
            input_value=f"first {len(earlier)} vs last {len(recent)} buckets",
            output_value=(
                f"{trends.inflow_trend.value}/{trends.outflow_trend.value}/"
                f"{trends.net_flow_trend.value}"
            ),
            source=f"Threshold {self.trend_threshold}",
        )
        return trends

    def forecast(
        self,
        series: list[CashFlowPoint],
        window: PeriodWindow,
        granularity: Granularity = Granularity.MONTHLY,
    ) -> list[CashFlowPoint]:
        """
        Project the series forward by `forecast_periods` buckets.

        Each projected bucket carries the average income and expenses of the
        most recent `forecast_window` historical buckets. Cumulative flow
        continues from the last historical bucket. Projection stops early
        when the next bucket would start after date.max.
        """
        if not series:
            return []

        recent = series[-self.forecast_window:]
        avg_income = mean([p.income for p in recent])
        avg_expenses = mean([p.expenses for p in recent])
        net_flow = avg_income - avg_expenses

        cumulative = series[-1].cumulative_flow
        start = bucket_start(window.end, granularity)
        projected = []
        for _ in range(self.forecast_periods):
            start = next_bucket_start(start, granularity)
            if start is None:
                break
            cumulative += net_flow
            projected.append(
                CashFlowPoint(
                    period_label=bucket_label(start, granularity),
                    income=avg_income,
                    expenses=avg_expenses,
                    net_flow=net_flow,
                    cumulative_flow=cumulative,
                )
            )

        self._log_step(
            step="cash_flow_forecast",
            input_value=f"average of last {len(recent)} buckets",
            output_value=f"{len(projected)} periods, net={net_flow} each",
            source="Average-based projection",
        )
        return projected
