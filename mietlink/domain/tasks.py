from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from mietlink.core.errors import ValidationError

MAX_TITLE_LENGTH = 500


@dataclass(frozen=True)
class TaskDraft:
    title: str
    days_before_exit: int
    due_date: Optional[date]
    mandatory: bool = True


@dataclass(frozen=True)
class ItemFailure:
    index: int
    error: str

    def as_dict(self) -> dict:
        return {"index": self.index, "error": self.error}


@dataclass
class DraftBatch:
    drafts: List[Tuple[int, TaskDraft]] = field(default_factory=list)
    failures: List[ItemFailure] = field(default_factory=list)


def derive_due_date(earliest_exit: Optional[date], days_before_exit: int) -> Optional[date]:
    """earliest_exit minus the offset, or None when the property has no exit date."""
    if earliest_exit is None:
        return None
    try:
        return earliest_exit - timedelta(days=days_before_exit)
    except OverflowError:
        raise ValidationError("days_before_exit is out of range")


def _coerce_days(value: Any) -> int:
    if isinstance(value, bool) or value is None:
        raise ValidationError("days_before_exit must be an integer")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError("days_before_exit must be a whole number of days")
        value = int(value)
    elif isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            raise ValidationError("days_before_exit must be an integer")
    elif not isinstance(value, int):
        raise ValidationError("days_before_exit must be an integer")
    if value < 0:
        raise ValidationError("days_before_exit cannot be negative")
    return value


def build_draft(item: Any, earliest_exit: Optional[date]) -> TaskDraft:
    if not isinstance(item, Mapping):
        raise ValidationError("task item must be an object with title and days_before_exit")
    title = item.get("title")
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("task title is required")
    title = title.strip()
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(f"task title longer than {MAX_TITLE_LENGTH} characters")
    raw_days = item["days_before_exit"] if "days_before_exit" in item else item.get("daysBeforeExit")
    days = _coerce_days(raw_days)
    return TaskDraft(title=title, days_before_exit=days, due_date=derive_due_date(earliest_exit, days))


def build_drafts(items: Iterable[Any], earliest_exit: Optional[date]) -> DraftBatch:
    """Turn extracted obligations into task drafts, item by item.

    A bad item is recorded as a failure; it never aborts the rest of the batch.
    """
    batch = DraftBatch()
    for index, item in enumerate(items):
        try:
            batch.drafts.append((index, build_draft(item, earliest_exit)))
        except ValidationError as e:
            batch.failures.append(ItemFailure(index, e.message))
    return batch
