"""Shared calculation helpers: audit logging and zero-safe arithmetic."""

from decimal import Decimal
from typing import Optional

import structlog

from .models import AuditEntry

logger = structlog.get_logger()

ZERO = Decimal("0")
HUNDRED = Decimal("100")


class AuditedCalculator:
    """
    Base for calculators that record every step they take.

    Each step is appended to an in-memory audit log, which report builders
    attach to the report, and emitted as a structured log event.
    """

    def __init__(self) -> None:
        self._audit_log: list[AuditEntry] = []

    @property
    def audit_log(self) -> list[AuditEntry]:
        """Steps recorded so far, oldest first."""
        return list(self._audit_log)

    def _log_step(
        self,
        step: str,
        input_value: str,
        output_value: str,
        source: str,
        notes: Optional[str] = None,
    ) -> None:
        """Add an entry to the audit log."""
        entry = AuditEntry(
            step=step,
            input_value=input_value,
            output_value=output_value,
            source=source,
            notes=notes,
        )
        self._audit_log.append(entry)
        logger.info(
            "calculation_step",
            step=step,
            input=input_value,
            output=output_value,
            source=source,
        )


def percentage_of(amount: Decimal, total: Decimal) -> Decimal:
    """amount / total * 100, or 0 when total is 0."""
    if total == 0:
        return ZERO
    return amount / total * HUNDRED


def compare_levels(earlier: Decimal, recent: Decimal, threshold: Decimal) -> int:
    """Compare two levels with a relative dead band.

    Returns 1 if recent exceeds earlier by more than threshold times the
    magnitude of earlier, -1 if it falls short by more than that, else 0.
    With earlier == 0 any nonzero recent value counts as a change.
    """
    band = abs(earlier) * threshold
    if recent > earlier + band:
        return 1
    if recent < earlier - band:
        return -1
    return 0


def mean(values: list[Decimal]) -> Decimal:
    """Arithmetic mean; 0 for an empty list."""
    if not values:
        return ZERO
    return sum(values, ZERO) / len(values)
