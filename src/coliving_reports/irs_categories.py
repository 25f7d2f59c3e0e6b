"""IRS Schedule E categories and depreciation rules for rental property.

This module holds the single lookup table that maps the application's
expense categories to Schedule E (Supplemental Income and Loss) lines.
The tax summary, the profit & loss statement and the exporters all read
from here.

Sources:
- Schedule E instructions: https://www.irs.gov/instructions/i1040se
- Publication 527 (Residential Rental Property): https://www.irs.gov/publications/p527
- Publication 946 (How To Depreciate Property), Table 7-1 (27.5-year GDS)
"""

from decimal import Decimal
from typing import Iterable, Optional

from .models import UNCATEGORIZED, IRSCategoryMapping, PropertyRecord


# =============================================================================
# SCHEDULE E MAPPINGS
# =============================================================================

OTHER_EXPENSES = "Other expenses"

IRS_CATEGORY_MAPPINGS: tuple[IRSCategoryMapping, ...] = (
    IRSCategoryMapping(
        business_category="maintenance",
        irs_schedule_e="Repairs and maintenance",
        description="Ordinary repairs that keep property in good operating condition",
        requirements=[
            "Must be ordinary and necessary",
            "Cannot add value or extend life",
            "Receipts required",
        ],
    ),
    IRSCategoryMapping(
        business_category="utilities",
        irs_schedule_e="Utilities",
        description="Gas, electricity, water, trash, internet for rental property",
        requirements=["Property-related only", "Receipts or statements required"],
    ),
    IRSCategoryMapping(
        business_category="insurance",
        irs_schedule_e="Insurance",
        description="Property insurance, liability insurance",
        requirements=["Property-related coverage", "Policy documents required"],
    ),
    IRSCategoryMapping(
        business_category="supplies",
        irs_schedule_e=OTHER_EXPENSES,
        description="Cleaning supplies, small tools, office supplies",
        requirements=["Business use only", "Receipts required"],
    ),
    IRSCategoryMapping(
        business_category="professional",
        irs_schedule_e="Legal and other professional fees",
        description="Attorney fees, accounting fees, property management",
        requirements=["Business-related services", "Invoices required"],
    ),
    IRSCategoryMapping(
        business_category="advertising",
        irs_schedule_e="Advertising",
        description="Marketing costs to find tenants",
        requirements=["Rental-related advertising", "Receipts required"],
    ),
    IRSCategoryMapping(
        business_category="travel",
        irs_schedule_e="Travel",
        description="Travel expenses for property management",
        requirements=["Business purpose", "Mileage logs", "Receipts for expenses"],
    ),
)

_MAPPINGS_BY_CATEGORY = {m.business_category: m for m in IRS_CATEGORY_MAPPINGS}

DEFAULT_NON_DEDUCTIBLE_CATEGORIES = frozenset(
    {"personal", "capital_improvement", "loan_principal"}
)


def normalize_category(category: Optional[str]) -> str:
    """Lower-case a category name; empty values become "uncategorized"."""
    if category is None or not category.strip():
        return UNCATEGORIZED
    return category.strip().lower()


def get_irs_mapping(category: Optional[str]) -> Optional[IRSCategoryMapping]:
    """Return the Schedule E mapping for a category, if there is one."""
    return _MAPPINGS_BY_CATEGORY.get(normalize_category(category))


def get_irs_category(category: Optional[str]) -> str:
    """Return the Schedule E line for a category.

    Every category maps to exactly one line; anything not in the table
    (including "uncategorized") lands on "Other expenses".
    """
    mapping = get_irs_mapping(category)
    return mapping.irs_schedule_e if mapping else OTHER_EXPENSES


def describe_category(category: Optional[str]) -> str:
    """Human-readable description of what a category covers."""
    mapping = get_irs_mapping(category)
    if mapping:
        return mapping.description
    return f"{normalize_category(category)} expenses"


def is_deductible(
    category: Optional[str],
    non_deductible: Iterable[str] = DEFAULT_NON_DEDUCTIBLE_CATEGORIES,
) -> bool:
    """Return False for personal and capital categories, True otherwise."""
    return normalize_category(category) not in {normalize_category(c) for c in non_deductible}


# =============================================================================
# DEPRECIATION
# =============================================================================

# Residential rental property, GDS straight-line
RESIDENTIAL_RECOVERY_YEARS = Decimal("27.5")

# Share of purchase price assumed to be land when no land value is recorded
DEFAULT_LAND_VALUE_RATIO = Decimal("0.20")


def calculate_depreciable_basis(
    purchase_price: Decimal,
    land_value: Optional[Decimal] = None,
    land_value_ratio: Decimal = DEFAULT_LAND_VALUE_RATIO,
) -> Decimal:
    """Building cost basis: purchase price less land.

    Land is not depreciable. When land_value is unknown it is estimated as
    land_value_ratio of the purchase price. Never negative.
    """
    if land_value is None:
        land_value = purchase_price * land_value_ratio
    return max(purchase_price - land_value, Decimal("0"))


def calculate_annual_depreciation(
    purchase_price: Decimal,
    land_value: Optional[Decimal] = None,
    recovery_years: Decimal = RESIDENTIAL_RECOVERY_YEARS,
    land_value_ratio: Decimal = DEFAULT_LAND_VALUE_RATIO,
) -> Decimal:
    """Straight-line annual depreciation for one property.

    Example:
        >>> calculate_annual_depreciation(Decimal("300000"), Decimal("60000"))
        Decimal('8727.272727272727272727272727')
    """
    basis = calculate_depreciable_basis(purchase_price, land_value, land_value_ratio)
    if basis <= 0:
        return Decimal("0")
    return basis / recovery_years


def calculate_total_depreciation(
    properties: Iterable[PropertyRecord],
    recovery_years: Decimal = RESIDENTIAL_RECOVERY_YEARS,
    land_value_ratio: Decimal = DEFAULT_LAND_VALUE_RATIO,
) -> Decimal:
    """Sum annual depreciation across properties.

    Properties without a purchase price contribute nothing; with no
    properties at all the result is 0.
    """
    total = Decimal("0")
    for prop in properties:
        if prop.purchase_price is None or prop.purchase_price <= 0:
            continue
        total += calculate_annual_depreciation(
            prop.purchase_price,
            prop.land_value,
            recovery_years=recovery_years,
            land_value_ratio=land_value_ratio,
        )
    return total
