"""Record store access for report generation.

Report code never talks to a concrete database. It receives a RecordStore,
any object with Redis-style get/set/lrange/rpush methods, and reads through
RecordRepository, which knows the key layout and turns raw stored
dictionaries into record models.

Key layout:
    payments:{property_id}        user:{user_id}:payments
    expenses:{property_id}        user:{user_id}:expenses
    property:{property_id}        user:{user_id}:properties
"""

import copy
import json
from typing import Any, Optional, Protocol, TypeVar, runtime_checkable

import pydantic
import structlog
from pydantic import BaseModel

from .exceptions import RecordFetchError
from .models import ExpenseRecord, IncomeRecord, PropertyRecord

logger = structlog.get_logger()

RecordT = TypeVar("RecordT", bound=BaseModel)


@runtime_checkable
class RecordStore(Protocol):
    """Minimal key-value capability needed by the reporting layer."""

    def get(self, key: str) -> Optional[Any]:
        """Return the value stored at key, or None."""
        ...

    def set(self, key: str, value: Any) -> None:
        """Store a single value at key."""
        ...

    def lrange(self, key: str, start: int = 0, stop: int = -1) -> list[Any]:
        """Return list items between start and stop (inclusive, -1 = end)."""
        ...

    def rpush(self, key: str, *values: Any) -> int:
        """Append values to the list at key and return its new length."""
        ...


class InMemoryRecordStore:
    """Process-local RecordStore.

    Values are deep-copied on the way in and out so callers cannot mutate
    stored state, matching the behavior of a serializing remote store.
    """

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}
        self._lists: dict[str, list[Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        return copy.deepcopy(self._values.get(key))

    def set(self, key: str, value: Any) -> None:
        self._values[key] = copy.deepcopy(value)

    def lrange(self, key: str, start: int = 0, stop: int = -1) -> list[Any]:
        items = self._lists.get(key, [])
        end = len(items) if stop == -1 else stop + 1
        return copy.deepcopy(items[start:end])

    def rpush(self, key: str, *values: Any) -> int:
        items = self._lists.setdefault(key, [])
        items.extend(copy.deepcopy(v) for v in values)
        return len(items)


# =============================================================================
# KEYS
# =============================================================================


def payments_key(user_id: str, property_id: Optional[str] = None) -> str:
    return f"payments:{property_id}" if property_id else f"user:{user_id}:payments"


def expenses_key(user_id: str, property_id: Optional[str] = None) -> str:
    return f"expenses:{property_id}" if property_id else f"user:{user_id}:expenses"


def properties_key(user_id: str, property_id: Optional[str] = None) -> str:
    return f"property:{property_id}" if property_id else f"user:{user_id}:properties"


class RecordRepository:
    """Fetches and parses the records a report needs.

    Fetch failures raise RecordFetchError. Individual records that cannot be
    parsed at all (not a mapping, invalid JSON) are skipped with a warning;
    malformed fields inside a record are coerced by the record models.
    """

    def __init__(self, store: RecordStore):
        self.store = store

    def fetch_income(
        self, user_id: str, property_id: Optional[str] = None
    ) -> list[IncomeRecord]:
        """All stored payments for a user, or for one property."""
        key = payments_key(user_id, property_id)
        records = self._parse_all(IncomeRecord, self._read_list(key), key)
        return self._scope_to_property(records, property_id)

    def fetch_expenses(
        self, user_id: str, property_id: Optional[str] = None
    ) -> list[ExpenseRecord]:
        """All stored expenses for a user, or for one property."""
        key = expenses_key(user_id, property_id)
        records = self._parse_all(ExpenseRecord, self._read_list(key), key)
        return self._scope_to_property(records, property_id)

    def fetch_properties(
        self, user_id: str, property_id: Optional[str] = None
    ) -> list[PropertyRecord]:
        """Property purchase data: the one property, or all of a user's."""
        key = properties_key(user_id, property_id)
        if property_id:
            raw = self._read_value(key)
            raw_items = [] if raw is None else [raw]
        else:
            raw_items = self._read_list(key)
        return self._parse_all(PropertyRecord, raw_items, key)

    def _read_list(self, key: str) -> list[Any]:
        try:
            items = self.store.lrange(key, 0, -1)
        except Exception as e:
            logger.error("record_fetch_failed", key=key, operation="lrange", error=str(e))
            raise RecordFetchError(
                f"Failed to read records from {key}",
                key=key,
                operation="lrange",
                details={"error": str(e)},
            ) from e
        return list(items or [])

    def _read_value(self, key: str) -> Optional[Any]:
        try:
            return self.store.get(key)
        except Exception as e:
            logger.error("record_fetch_failed", key=key, operation="get", error=str(e))
            raise RecordFetchError(
                f"Failed to read record {key}",
                key=key,
                operation="get",
                details={"error": str(e)},
            ) from e

    def _parse_all(
        self, model: type[RecordT], raw_items: list[Any], key: str
    ) -> list[RecordT]:
        records = []
        for index, raw in enumerate(raw_items):
            if isinstance(raw, str):
                try:
                    raw = json.loads(raw)
                except json.JSONDecodeError:
                    logger.warning("record_skipped", key=key, index=index, reason="invalid_json")
                    continue
            if isinstance(raw, BaseModel):
                raw = raw.model_dump(by_alias=True)
            if not isinstance(raw, dict):
                logger.warning("record_skipped", key=key, index=index, reason="not_a_mapping")
                continue
            try:
                records.append(model.model_validate(raw))
            except pydantic.ValidationError as e:
                logger.warning(
                    "record_skipped",
                    key=key,
                    index=index,
                    reason="validation_failed",
                    errors=e.error_count(),
                )
        logger.debug("records_fetched", key=key, count=len(records))
        return records

    @staticmethod
    def _scope_to_property(records: list, property_id: Optional[str]) -> list:
        # Records tagged with another property are dropped even under a property key.
        if not property_id:
            return records
        return [r for r in records if r.property_id in (None, property_id)]
