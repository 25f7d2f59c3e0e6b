"""Stored record models: payments, expenses and properties.

Records come from the key-value store as loosely shaped dictionaries with
camelCase keys. Parsing is lenient: a malformed field never rejects a
record. Amounts that cannot be read become 0, dates that cannot be read
become None (which excludes the record from every reporting window), and
a missing expense category becomes "uncategorized".
"""

import datetime as dt
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from ..periods import parse_date

UNCATEGORIZED = "uncategorized"
UNKNOWN_METHOD = "unknown"


def coerce_amount(value: Any) -> Decimal:
    """Convert a stored amount to Decimal, treating unreadable values as 0."""
    amount = coerce_optional_amount(value)
    return amount if amount is not None else Decimal("0")


def coerce_optional_amount(value: Any) -> Optional[Decimal]:
    """Convert a stored amount to Decimal, or None when it cannot be read."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip().replace(",", ""))
        except InvalidOperation:
            return None
    else:
        return None
    if not amount.is_finite():
        return None
    return amount


def _coerce_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _coerce_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes", "y"}
    return bool(value)


class IncomeRecord(BaseModel):
    """A tenant payment.

    Only payments with status "completed" count toward revenue.
    """

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
        "json_schema_extra": {
            "examples": [
                {
                    "id": "1",
                    "amount": 1500,
                    "date": "2024-01-15",
                    "type": "rent",
                    "status": "completed",
                    "paymentMethod": "bank_transfer",
                }
            ]
        },
    }

    id: str = Field(default="", description="Payment identifier")
    amount: Decimal = Field(
        default=Decimal("0"),
        description="Payment amount in the currency's major unit",
    )
    date: Optional[dt.date] = Field(
        default=None,
        description="Payment date; None when the stored value could not be parsed",
    )
    type: str = Field(default="other", description="Payment type: rent, deposit, other, ...")
    status: str = Field(default="pending", description="Payment status: pending, completed, ...")
    payment_method: str = Field(
        default=UNKNOWN_METHOD,
        alias="paymentMethod",
        description="How the payment was made",
    )
    property_id: Optional[str] = Field(
        default=None,
        alias="propertyId",
        description="Property the payment belongs to",
    )

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        """Store ids as strings."""
        return _coerce_text(v) or ""

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount_to_decimal(cls, v):
        """Coerce amounts to Decimal; unreadable values become 0."""
        return coerce_amount(v)

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, v):
        """Parse dates leniently; unreadable values become None."""
        return parse_date(v)

    @field_validator("type", "status", mode="before")
    @classmethod
    def normalize_label(cls, v, info):
        """Lower-case type and status labels."""
        text = _coerce_text(v)
        if text is None:
            return "other" if info.field_name == "type" else "pending"
        return text.lower()

    @field_validator("payment_method", mode="before")
    @classmethod
    def default_method(cls, v):
        """Missing payment methods are reported as unknown."""
        return _coerce_text(v) or UNKNOWN_METHOD

    @field_validator("property_id", mode="before")
    @classmethod
    def coerce_property_id(cls, v):
        return _coerce_text(v)

    @property
    def is_completed(self) -> bool:
        """True if the payment has settled."""
        return self.status == "completed"

    @property
    def is_rent(self) -> bool:
        """True for rent payments."""
        return self.type == "rent"


class ExpenseRecord(BaseModel):
    """A property expense."""

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
        "json_schema_extra": {
            "examples": [
                {
                    "id": "1",
                    "amount": 200,
                    "date": "2024-01-10",
                    "category": "maintenance",
                    "description": "Plumbing repair",
                    "receiptUrl": "https://example.com/receipt1.jpg",
                }
            ]
        },
    }

    id: str = Field(default="", description="Expense identifier")
    amount: Decimal = Field(
        default=Decimal("0"),
        description="Expense amount in the currency's major unit",
    )
    date: Optional[dt.date] = Field(
        default=None,
        description="Expense date; None when the stored value could not be parsed",
    )
    category: str = Field(
        default=UNCATEGORIZED,
        description="Free-form category, normalized to lower case",
    )
    description: Optional[str] = Field(default=None, description="What the expense was for")
    receipt_url: Optional[str] = Field(
        default=None,
        alias="receiptUrl",
        description="Link to the uploaded receipt",
    )
    is_reimbursable: bool = Field(
        default=False,
        alias="isReimbursable",
        description="Whether a tenant or co-owner reimburses this expense",
    )
    property_id: Optional[str] = Field(
        default=None,
        alias="propertyId",
        description="Property the expense belongs to",
    )

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        """Store ids as strings."""
        return _coerce_text(v) or ""

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount_to_decimal(cls, v):
        """Coerce amounts to Decimal; unreadable values become 0."""
        return coerce_amount(v)

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, v):
        """Parse dates leniently; unreadable values become None."""
        return parse_date(v)

    @field_validator("category", mode="before")
    @classmethod
    def normalize_category(cls, v):
        """Compare categories case-insensitively."""
        text = _coerce_text(v)
        return text.lower() if text else UNCATEGORIZED

    @field_validator("description", "receipt_url", "property_id", mode="before")
    @classmethod
    def coerce_optional_text(cls, v):
        return _coerce_text(v)

    @field_validator("is_reimbursable", mode="before")
    @classmethod
    def coerce_flag(cls, v):
        return _coerce_flag(v)

    @property
    def has_receipt(self) -> bool:
        """True if a receipt has been attached."""
        return self.receipt_url is not None


class PropertyRecord(BaseModel):
    """Purchase data for a rental property, used for depreciation."""

    model_config = {"populate_by_name": True, "extra": "ignore"}

    id: str = Field(default="", description="Property identifier")
    purchase_price: Optional[Decimal] = Field(
        default=None,
        alias="purchasePrice",
        description="Purchase price of the property",
    )
    land_value: Optional[Decimal] = Field(
        default=None,
        alias="landValue",
        description="Portion of the purchase price attributable to land",
    )

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return _coerce_text(v) or ""

    @field_validator("purchase_price", "land_value", mode="before")
    @classmethod
    def coerce_price(cls, v):
        """Unreadable prices are treated as missing."""
        return coerce_optional_amount(v)
