"""Tests for record and report models."""

from datetime import date
from decimal import Decimal

import pytest

from coliving_reports.models import (
    ExpenseRecord,
    IncomeRecord,
    PropertyRecord,
    RecommendationPriority,
    ReportPeriod,
    TaxIncome,
    TaxDeductions,
    TaxSummary,
    coerce_amount,
)


class TestCoerceAmount:
    """Test suite for amount coercion."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (1500, Decimal("1500")),
            (12.5, Decimal("12.5")),
            ("1,250.75", Decimal("1250.75")),
            (" 99 ", Decimal("99")),
            ("abc", Decimal("0")),
            (None, Decimal("0")),
            (True, Decimal("0")),
            ("NaN", Decimal("0")),
            ([], Decimal("0")),
        ],
    )
    def test_values(self, raw, expected):
        assert coerce_amount(raw) == expected


class TestIncomeRecord:
    """Test suite for IncomeRecord parsing."""

    def test_camel_case_fields(self):
        record = IncomeRecord.model_validate(
            {"id": 7, "amount": "1500", "date": "2024-01-15T10:00:00Z",
             "type": "RENT", "status": "Completed", "paymentMethod": "ach",
             "propertyId": "p1"}
        )

        assert record.id == "7"
        assert record.date == date(2024, 1, 15)
        assert record.is_rent
        assert record.is_completed
        assert record.payment_method == "ach"
        assert record.property_id == "p1"

    def test_defaults(self):
        """Missing fields should get neutral defaults."""
        record = IncomeRecord.model_validate({})

        assert record.amount == Decimal("0")
        assert record.date is None
        assert record.type == "other"
        assert not record.is_completed
        assert record.payment_method == "unknown"


class TestExpenseRecord:
    """Test suite for ExpenseRecord parsing."""

    def test_receipt_and_flags(self):
        record = ExpenseRecord.model_validate(
            {"amount": 20, "category": " Utilities ", "receiptUrl": "https://x/r.pdf",
             "isReimbursable": "true"}
        )

        assert record.category == "utilities"
        assert record.has_receipt
        assert record.is_reimbursable

    def test_blank_receipt_is_missing(self):
        record = ExpenseRecord.model_validate({"amount": 20, "receiptUrl": "  ", "category": ""})

        assert not record.has_receipt
        assert record.category == "uncategorized"


class TestPropertyRecord:
    """Test suite for PropertyRecord parsing."""

    def test_unreadable_price_is_missing(self):
        record = PropertyRecord.model_validate({"purchasePrice": "unknown", "landValue": 50000})

        assert record.purchase_price is None
        assert record.land_value == Decimal("50000")


class TestReportModels:
    """Test suite for report models."""

    def test_taxable_income_cannot_be_negative(self):
        with pytest.raises(ValueError):
            TaxSummary(
                tax_year=2024,
                period=ReportPeriod(start=date(2024, 1, 1), end=date(2024, 12, 31)),
                income=TaxIncome(),
                deductions=TaxDeductions(),
                taxable_income=Decimal("-1"),
            )

    def test_priority_rank(self):
        ranks = [p.rank for p in RecommendationPriority]

        assert ranks == [0, 1, 2]
