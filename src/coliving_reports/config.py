"""Configuration system for coliving reports.

This module provides Pydantic Settings-based configuration with environment
variable support and sensible defaults for report generation.

Usage:
    from coliving_reports.config import ReportingConfig

    # Load from environment variables and .env file
    config = ReportingConfig()

    # Access tax settings
    print(config.tax.depreciation_years)

    # Access cash-flow settings
    print(config.cashflow.forecast_periods)
"""

from decimal import Decimal
from functools import lru_cache
from typing import Literal

import pydantic
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class TaxConfig(BaseSettings):
    """Tax summary settings.

    Thresholds and estimates used by the tax categorizer. Supports
    environment variables with the prefix COLIVING_TAX_.

    Environment Variables:
        COLIVING_TAX_DEPRECIATION_YEARS: Recovery period for residential rentals
        COLIVING_TAX_LAND_VALUE_RATIO: Land share assumed when land value is unknown
        COLIVING_TAX_RECEIPT_THRESHOLD: Amount above which a receipt is required
        COLIVING_TAX_ESTIMATED_TAX_RATE: Marginal rate used for savings estimates
        COLIVING_TAX_HIGH_INCOME_THRESHOLD: Income that triggers a consultation tip
        COLIVING_TAX_YEAR_END_INCOME_THRESHOLD: Rental income that triggers year-end planning
    """

    model_config = SettingsConfigDict(
        env_prefix="COLIVING_TAX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    depreciation_years: Decimal = Field(
        default=Decimal("27.5"),
        gt=0,
        description="Straight-line recovery period for residential rental property",
    )
    land_value_ratio: Decimal = Field(
        default=Decimal("0.20"),
        ge=0,
        le=1,
        description="Fraction of purchase price assumed to be land when land value is missing",
    )
    receipt_threshold: Decimal = Field(
        default=Decimal("75"),
        ge=0,
        description="Expenses above this amount require a receipt",
    )
    estimated_tax_rate: Decimal = Field(
        default=Decimal("0.25"),
        ge=0,
        le=1,
        description="Tax rate used to estimate potential savings",
    )
    high_income_threshold: Decimal = Field(
        default=Decimal("50000"),
        ge=0,
        description="Total income above which a professional consultation is suggested",
    )
    year_end_income_threshold: Decimal = Field(
        default=Decimal("20000"),
        ge=0,
        description="Rental income above which year-end planning is suggested",
    )
    year_end_cutoff_month: int = Field(
        default=10,
        ge=1,
        le=12,
        description="First month counted as year-end for timing checks",
    )
    low_maintenance_ratio: Decimal = Field(
        default=Decimal("0.05"),
        ge=0,
        description="Maintenance spend below this share of rental income is flagged",
    )
    depreciation_savings_estimate: Decimal = Field(
        default=Decimal("5000"),
        ge=0,
        description="Savings estimate attached to the missing depreciation recommendation",
    )
    professional_savings_estimate: Decimal = Field(
        default=Decimal("2000"),
        ge=0,
        description="Savings estimate attached to the consultation recommendation",
    )
    non_deductible_categories: list[str] = Field(
        default_factory=lambda: ["personal", "capital_improvement", "loan_principal"],
        description="Expense categories that are never deductible",
    )

    @field_validator("non_deductible_categories")
    @classmethod
    def normalize_categories(cls, v: list[str]) -> list[str]:
        """Lower-case and strip category names."""
        return [c.strip().lower() for c in v if c and c.strip()]


class CashFlowConfig(BaseSettings):
    """Cash-flow analysis settings.

    Environment Variables:
        COLIVING_CASHFLOW_TREND_THRESHOLD: Relative change that counts as a trend
        COLIVING_CASHFLOW_TREND_WINDOW: Buckets averaged at each end of the series
        COLIVING_CASHFLOW_FORECAST_PERIODS: Number of projected periods
        COLIVING_CASHFLOW_FORECAST_WINDOW: Recent buckets averaged for the forecast
    """

    model_config = SettingsConfigDict(
        env_prefix="COLIVING_CASHFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    trend_threshold: Decimal = Field(
        default=Decimal("0.05"),
        ge=0,
        description="Relative change between early and recent averages that counts as a trend",
    )
    trend_window: int = Field(
        default=3,
        gt=0,
        description="Number of buckets averaged at the start and end of the series",
    )
    forecast_periods: int = Field(
        default=6,
        gt=0,
        le=60,
        description="Number of future periods to project",
    )
    forecast_window: int = Field(
        default=6,
        gt=0,
        description="Number of recent buckets averaged for the forecast",
    )


class ReportingConfig(BaseSettings):
    """Root configuration for coliving reports.

    Environment Variables:
        COLIVING_ENV: Environment name (development, staging, production, test)
        COLIVING_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        COLIVING_LOG_FORMAT: Log output format (json or console)

    Example:
        # Load all configuration from environment
        config = ReportingConfig()

        # Override specific settings
        config = ReportingConfig(
            tax=TaxConfig(receipt_threshold=Decimal("100")),
            cashflow=CashFlowConfig(forecast_periods=12),
        )
    """

    model_config = SettingsConfigDict(
        env_prefix="COLIVING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    env: str = Field(
        default="development",
        description="Environment name (development, staging, production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format",
    )

    tax: TaxConfig = Field(default_factory=TaxConfig)
    cashflow: CashFlowConfig = Field(default_factory=CashFlowConfig)

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment name."""
        valid_envs = {"development", "staging", "production", "test"}
        v_lower = v.lower().strip()
        if v_lower not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of: {valid_envs}")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper().strip()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {valid_levels}")
        return v_upper

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"


@lru_cache
def get_config() -> ReportingConfig:
    """Load and cache configuration from the environment.

    Raises:
        ConfigurationError: If an environment value fails validation.
    """
    try:
        return ReportingConfig()
    except pydantic.ValidationError as e:
        raise ConfigurationError(
            "Invalid reporting configuration",
            details={"errors": e.errors(include_url=False)},
        ) from e
