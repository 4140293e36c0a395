"""
Field rules checked before any task mutation.

Every rule returns ``(is_valid, error_message)``; the message is empty when
the value passes.
"""

from datetime import datetime, timezone
from typing import Any, Optional, Tuple

from .domain import Category, as_utc, utcnow

TITLE_MAX_LENGTH = 50
DESCRIPTION_MAX_LENGTH = 200

TITLE_REQUIRED = "Title is required"
TITLE_TOO_LONG = f"Title must be {TITLE_MAX_LENGTH} characters or less"
DESCRIPTION_TOO_LONG = f"Description must be {DESCRIPTION_MAX_LENGTH} characters or less"
CATEGORY_REQUIRED = "Category is required"
CATEGORY_INVALID = "Invalid category"
DUE_DATE_INVALID = "Invalid due date"
DUE_DATE_IN_PAST = "Due date cannot be in the past"

Result = Tuple[bool, str]

OK: Result = (True, "")


def validate_title(title: Optional[str]) -> Result:
    if title is None or not title.strip():
        return False, TITLE_REQUIRED
    if len(title.strip()) > TITLE_MAX_LENGTH:
        return False, TITLE_TOO_LONG
    return OK


def validate_title_for_update(title: Optional[str]) -> Result:
    """Blank titles pass here; the update simply leaves the title alone"""
    if title is not None and len(title.strip()) > TITLE_MAX_LENGTH:
        return False, TITLE_TOO_LONG
    return OK


def validate_description(description: Optional[str]) -> Result:
    if description is not None and len(description) > DESCRIPTION_MAX_LENGTH:
        return False, DESCRIPTION_TOO_LONG
    return OK


def validate_category(category: Optional[str], required: bool) -> Result:
    if category is None or category == "":
        return (False, CATEGORY_REQUIRED) if required else OK
    if category not in Category.values():
        return False, CATEGORY_INVALID
    return OK


def parse_due_date(value: Any) -> Optional[datetime]:
    """
    Parse a due date into an aware UTC datetime.

    Accepts datetimes, ``YYYY-MM-DD`` (midnight UTC) and ISO-8601 timestamps
    with or without an offset or a trailing ``Z``. Returns None when the
    value cannot be read as a date.
    """
    if isinstance(value, datetime):
        return as_utc(value)
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        if "T" in text or "t" in text or " " in text:
            parsed = datetime.fromisoformat(text)
        else:
            parsed = datetime.fromisoformat(text + "T00:00:00")
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        # Offsets near year 1 or 9999 overflow when shifted to UTC.
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


def validate_due_date(due_date: Any, now: Optional[datetime] = None) -> Result:
    if due_date is None or due_date == "":
        return OK
    parsed = parse_due_date(due_date)
    if parsed is None:
        return False, DUE_DATE_INVALID
    if parsed < (now or utcnow()):
        return False, DUE_DATE_IN_PAST
    return OK
