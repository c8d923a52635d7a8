"""Patient age at a reference date and the child/adult split."""

from __future__ import annotations

from datetime import date
from typing import Optional, Union

from .catalog import AgeCategory

CHILD_AGE_LIMIT = 12

DateLike = Union[date, str, None]


def _as_date(value: DateLike) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, date):
        return value
    value = value.strip()
    if not value:
        return None
    return date.fromisoformat(value[:10])


def age_at(birthday: DateLike, reference: DateLike = None) -> int:
    """Complete years between ``birthday`` and ``reference`` (default today).

    An empty birthday gives 0, which callers must read as "unknown".
    """
    birth = _as_date(birthday)
    if birth is None:
        return 0
    ref = _as_date(reference) or date.today()
    age = ref.year - birth.year
    if (ref.month, ref.day) < (birth.month, birth.day):
        age -= 1
    return age


def age_category(age: int) -> AgeCategory:
    return AgeCategory.CHILD if age < CHILD_AGE_LIMIT else AgeCategory.ADULT
