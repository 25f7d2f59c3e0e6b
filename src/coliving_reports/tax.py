"""Tax categorization for rental income and expenses.

Reclassifies a tax year's expenses into Schedule E lines, adds
straight-line depreciation and produces deduction-readiness
recommendations. All thresholds come from TaxConfig.
"""

from decimal import Decimal
from typing import Iterable, Optional

import structlog

from .calculation import ZERO, AuditedCalculator, percentage_of
from .config import TaxConfig
from .irs_categories import (
    IRS_CATEGORY_MAPPINGS,
    calculate_total_depreciation,
    describe_category,
    get_irs_category,
    is_deductible,
)
from .models import (
    ExpenseRecord,
    IncomeRecord,
    PropertyRecord,
    ReceiptSummary,
    RecommendationPriority,
    RecommendationType,
    ReportPeriod,
    TaxDeductionCategory,
    TaxDeductions,
    TaxIncome,
    TaxRecommendation,
    TaxSummary,
    TaxSummaryFormat,
)
from .periods import PeriodWindow

logger = structlog.get_logger()

DEPRECIATION_LINE = "Depreciation expense or depletion"
DAYS_PER_YEAR = Decimal("365")


class TaxCategorizer(AuditedCalculator):
    """
    Build a TaxSummary from one tax year's records.

    Example:
        categorizer = TaxCategorizer(TaxConfig())
        summary = categorizer.summarize(
            tax_year=2024,
            payments=payments,
            expenses=expenses,
            properties=properties,
        )
        print(summary.taxable_income)
    """

    def __init__(self, config: Optional[TaxConfig] = None):
        super().__init__()
        self.config = config or TaxConfig()

    def summarize(
        self,
        tax_year: int,
        payments: Iterable[IncomeRecord],
        expenses: Iterable[ExpenseRecord],
        properties: Iterable[PropertyRecord],
        include_receipts: bool = True,
        format: TaxSummaryFormat = TaxSummaryFormat.DETAILED,
    ) -> TaxSummary:
        """
        Categorize a tax year.

        Args:
            tax_year: Calendar year being reported
            payments: Completed payments dated in the tax year
            expenses: Expenses dated in the tax year
            properties: Property purchase data for depreciation
            include_receipts: Whether to list receipt-bearing expenses
            format: Output detail level

        Returns:
            TaxSummary with deductions, depreciation and recommendations
        """
        window = PeriodWindow.for_tax_year(tax_year)
        payments = list(payments)
        expenses = list(expenses)

        income = self.summarize_income(payments)
        categories = self.categorize_expenses(expenses)
        depreciation = self.calculate_depreciation(list(properties))

        operating_total = sum((c.amount for c in categories), ZERO)
        total_deductions = operating_total + depreciation
        net_rental_income = income.total_income - total_deductions
        taxable_income = max(net_rental_income, ZERO)

        self._log_step(
            step="taxable_income",
            input_value=f"{income.total_income} - ({operating_total} + {depreciation})",
            output_value=str(taxable_income),
            source="Schedule E net",
            notes="Floored at 0" if net_rental_income < 0 else None,
        )

        deductible, non_deductible = self.deductible_split(categories)

        recommendations = self.build_recommendations(
            income=income,
            expenses=expenses,
            categories=categories,
            depreciation=depreciation,
        )

        receipts = []
        if include_receipts and format != TaxSummaryFormat.SUMMARY:
            receipts = self.collect_receipts(expenses)

        return TaxSummary(
            tax_year=tax_year,
            format=format,
            period=ReportPeriod(start=window.start, end=window.end),
            income=income,
            deductions=TaxDeductions(
                operating_expenses=categories,
                depreciation=depreciation,
                total_deductions=total_deductions,
            ),
            net_rental_income=net_rental_income,
            taxable_income=taxable_income,
            total_deductible=deductible,
            total_non_deductible=non_deductible,
            deductible_percentage=percentage_of(deductible, operating_total),
            receipts=receipts,
            recommendations=recommendations,
            irs_categories=(
                [] if format == TaxSummaryFormat.SUMMARY else list(IRS_CATEGORY_MAPPINGS)
            ),
            schedule_e_totals=(
                self.schedule_e_totals(categories, depreciation)
                if format == TaxSummaryFormat.IRS_READY
                else None
            ),
            audit_log=self.audit_log,
        )

    def summarize_income(self, payments: list[IncomeRecord]) -> TaxIncome:
        rental = sum((p.amount for p in payments if p.is_rent), ZERO)
        total = sum((p.amount for p in payments), ZERO)
        self._log_step(
            step="tax_income",
            input_value=f"{len(payments)} payments",
            output_value=f"rental={rental}, total={total}",
            source="Completed payments in tax year",
        )
        return TaxIncome(
            total_rental_income=rental,
            other_income=total - rental,
            total_income=total,
        )

    def categorize_expenses(
        self, expenses: list[ExpenseRecord]
    ) -> list[TaxDeductionCategory]:
        """Group expenses by category and attach the Schedule E line."""
        grouped: dict[str, TaxDeductionCategory] = {}
        for expense in expenses:
            entry = grouped.get(expense.category)
            if entry is None:
                entry = TaxDeductionCategory(
                    category=expense.category,
                    irs_category=get_irs_category(expense.category),
                    deductible=is_deductible(
                        expense.category, self.config.non_deductible_categories
                    ),
                    description=describe_category(expense.category),
                )
                grouped[expense.category] = entry
            entry.amount += expense.amount
            entry.count += 1
            if expense.has_receipt:
                entry.receipts_count += 1

        categories = list(grouped.values())
        self._log_step(
            step="categorize_expenses",
            input_value=f"{len(expenses)} expenses",
            output_value=f"{len(categories)} categories",
            source="IRS Schedule E mapping",
        )
        return categories

    def calculate_depreciation(self, properties: list[PropertyRecord]) -> Decimal:
        """Annual straight-line depreciation across all properties."""
        depreciation = calculate_total_depreciation(
            properties,
            recovery_years=self.config.depreciation_years,
            land_value_ratio=self.config.land_value_ratio,
        )
        self._log_step(
            step="depreciation",
            input_value=f"{len(properties)} properties",
            output_value=str(depreciation),
            source=f"(purchase - land) / {self.config.depreciation_years}",
            notes="No depreciable property found" if depreciation == 0 else None,
        )
        return depreciation

    def prorate_depreciation(self, properties: list[PropertyRecord], days: int) -> Decimal:
        """Annual depreciation scaled to a window of `days` days."""
        annual = self.calculate_depreciation(properties)
        prorated = annual * Decimal(days) / DAYS_PER_YEAR
        self._log_step(
            step="prorated_depreciation",
            input_value=f"{annual} * {days} / {DAYS_PER_YEAR}",
            output_value=str(prorated),
            source="Straight-line depreciation for the statement window",
        )
        return prorated

    def collect_receipts(self, expenses: list[ExpenseRecord]) -> list[ReceiptSummary]:
        """Expenses with a receipt or above the receipt threshold, largest first."""
        threshold = self.config.receipt_threshold
        selected = [e for e in expenses if e.has_receipt or e.amount > threshold]
        selected.sort(key=lambda e: e.amount, reverse=True)
        return [
            ReceiptSummary(
                expense_id=e.id,
                date=e.date,
                amount=e.amount,
                category=e.category,
                description=e.description,
                receipt_url=e.receipt_url,
                deductible=is_deductible(e.category, self.config.non_deductible_categories),
            )
            for e in selected
        ]

    def deductible_split(
        self, categories: list[TaxDeductionCategory]
    ) -> tuple[Decimal, Decimal]:
        """Operating expenses split into (deductible, non-deductible) totals."""
        deductible = sum((c.amount for c in categories if c.deductible), ZERO)
        non_deductible = sum((c.amount for c in categories if not c.deductible), ZERO)
        self._log_step(
            step="deductible_split",
            input_value=f"{len(categories)} categories",
            output_value=f"deductible={deductible}, non_deductible={non_deductible}",
            source="Category deductibility",
        )
        return deductible, non_deductible

    def schedule_e_totals(
        self, categories: list[TaxDeductionCategory], depreciation: Decimal
    ) -> dict[str, Decimal]:
        """Deductible amounts per Schedule E line, plus depreciation."""
        totals: dict[str, Decimal] = {}
        for category in categories:
            if not category.deductible:
                continue
            totals[category.irs_category] = (
                totals.get(category.irs_category, ZERO) + category.amount
            )
        if depreciation > 0:
            totals[DEPRECIATION_LINE] = depreciation
        return totals

    def build_recommendations(
        self,
        income: TaxIncome,
        expenses: list[ExpenseRecord],
        categories: list[TaxDeductionCategory],
        depreciation: Decimal,
    ) -> list[TaxRecommendation]:
        """
        Run each readiness check and sort the results by priority.

        Checks run in a fixed order and each adds at most one
        recommendation; the sort is stable, so that order survives within
        a priority.
        """
        cfg = self.config
        recommendations: list[TaxRecommendation] = []

        if depreciation == 0:
            recommendations.append(
                TaxRecommendation(
                    type=RecommendationType.DEDUCTION,
                    title="Add Property Depreciation Data",
                    description=(
                        "No purchase price is recorded for your property. Residential "
                        f"rentals depreciate over {cfg.depreciation_years} years and "
                        "the deduction can be significant."
                    ),
                    priority=RecommendationPriority.HIGH,
                    potential_savings=cfg.depreciation_savings_estimate,
                )
            )

        missing = [
            e
            for e in expenses
            if not e.has_receipt and is_deductible(e.category, cfg.non_deductible_categories)
        ]
        if missing:
            at_risk = sum((e.amount for e in missing), ZERO)
            above_threshold = any(e.amount > cfg.receipt_threshold for e in missing)
            recommendations.append(
                TaxRecommendation(
                    type=RecommendationType.DOCUMENTATION,
                    title="Missing Receipt Documentation",
                    description=(
                        f"{len(missing)} deductible expense(s) totalling ${at_risk:,.2f} "
                        "have no receipt on file. Upload receipts to support these "
                        "deductions."
                    ),
                    priority=(
                        RecommendationPriority.HIGH
                        if above_threshold
                        else RecommendationPriority.MEDIUM
                    ),
                    potential_savings=at_risk * cfg.estimated_tax_rate,
                )
            )

        maintenance = sum(
            (c.amount for c in categories if c.category == "maintenance"), ZERO
        )
        if 0 < maintenance < income.total_rental_income * cfg.low_maintenance_ratio:
            recommendations.append(
                TaxRecommendation(
                    type=RecommendationType.DEDUCTION,
                    title="Low Maintenance Deductions",
                    description=(
                        "Your maintenance expenses are unusually low. Check whether "
                        "deductible repairs and upkeep are missing from your records."
                    ),
                    priority=RecommendationPriority.MEDIUM,
                )
            )

        has_professional = any(c.category == "professional" for c in categories)
        if income.total_income > cfg.high_income_threshold and not has_professional:
            recommendations.append(
                TaxRecommendation(
                    type=RecommendationType.STRATEGY,
                    title="Consider Professional Tax Consultation",
                    description=(
                        "With rental income at this level, a tax professional may find "
                        "deductions and strategies you are missing. Their fees are "
                        "deductible too."
                    ),
                    priority=RecommendationPriority.MEDIUM,
                    potential_savings=cfg.professional_savings_estimate,
                )
            )

        late_expenses = [
            e for e in expenses if e.date is not None and e.date.month >= cfg.year_end_cutoff_month
        ]
        if not late_expenses and income.total_rental_income > cfg.year_end_income_threshold:
            recommendations.append(
                TaxRecommendation(
                    type=RecommendationType.TIMING,
                    title="Year-End Expense Planning",
                    description=(
                        "No expenses are recorded for the last quarter. Scheduling "
                        "planned repairs or purchases before year-end brings the "
                        "deduction into this tax year."
                    ),
                    priority=RecommendationPriority.MEDIUM,
                )
            )

        recommendations.sort(key=lambda r: r.priority.rank)
        logger.info(
            "tax_recommendations_generated",
            count=len(recommendations),
            types=[r.type.value for r in recommendations],
        )
        return recommendations
