"""
Translate flat filter parameters into a Django ``Q`` predicate.

Each field may carry a sibling ``<field>_operator`` key selecting how its
value is compared. Conditions are always AND-ed together. Malformed values
never raise: the offending condition is left out of the predicate.

Owner scoping is not handled here; callers add it themselves.
"""
import math
from datetime import datetime, time, timedelta
from typing import Any, Iterable, List, Mapping, Optional

from django.db.models import Q
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

OPERATOR_SUFFIX = "_operator"

TEXT_FIELDS = ("email", "company", "city")
NUMERIC_FIELDS = ("score", "lead_value")
INTEGER_FIELDS = ("score",)
ENUM_FIELDS = ("status", "source")
DATE_FIELDS = ("created_at", "last_activity_at")
BOOLEAN_FIELDS = ("is_qualified",)


def build_filter_query(
    filters: Mapping[str, Any],
    passthrough_fields: Optional[Iterable[str]] = None,
) -> Q:
    """
    Build a conjunction of field conditions from ``filters``.

    Keys without dedicated handling become exact-match conditions. When
    ``passthrough_fields`` is given, only those names are passed through and
    other unknown keys are ignored.
    """
    allowed = set(passthrough_fields) if passthrough_fields is not None else None
    query = Q()

    for key, value in filters.items():
        if key.endswith(OPERATOR_SUFFIX) or _is_blank(value):
            continue

        operator = _first(filters.get(key + OPERATOR_SUFFIX))

        if key in TEXT_FIELDS:
            condition = _text_condition(key, value, operator)
        elif key in NUMERIC_FIELDS:
            condition = _numeric_condition(key, value, operator)
        elif key in ENUM_FIELDS:
            condition = _enum_condition(key, value, operator)
        elif key in DATE_FIELDS:
            condition = _date_condition(key, value, operator)
        elif key in BOOLEAN_FIELDS:
            condition = Q(**{key: _first(value) in (True, "true")})
        elif allowed is None or key in allowed:
            condition = Q(**{key: _first(value)})
        else:
            condition = None

        if condition is not None:
            query &= condition

    return query


def _text_condition(key: str, value: Any, operator: Optional[str]) -> Q:
    if operator == "contains":
        return Q(**{f"{key}__icontains": _first(value)})
    if key == "email":
        # stored lowercase
        return Q(email=str(_first(value)).strip().lower())
    return Q(**{key: _first(value)})


def _numeric_condition(key: str, value: Any, operator: Optional[str]) -> Optional[Q]:
    if operator == "between":
        bounds = [_to_number(bound) for bound in _split(value)]
        if len(bounds) != 2 or None in bounds:
            return None
        low, high = bounds
        if key in INTEGER_FIELDS:
            low, high = math.ceil(low), math.floor(high)
        return Q(**{f"{key}__range": (low, high)})

    number = _to_number(_first(value))
    if number is None:
        return None
    if operator == "gt":
        return Q(**{f"{key}__gt": number})
    if operator == "lt":
        return Q(**{f"{key}__lt": number})
    if key in INTEGER_FIELDS and not number.is_integer():
        # no integer column value can equal a fraction
        return Q(pk__in=[])
    return Q(**{key: number})


def _enum_condition(key: str, value: Any, operator: Optional[str]) -> Optional[Q]:
    if operator == "in":
        choices = _split(value)
        if not choices:
            return None
        return Q(**{f"{key}__in": choices})
    return Q(**{key: _first(value)})


def _date_condition(key: str, value: Any, operator: Optional[str]) -> Optional[Q]:
    if operator == "between":
        bounds = [_to_instant(bound) for bound in _split(value)]
        if len(bounds) != 2 or None in bounds:
            return None
        return Q(**{f"{key}__gte": bounds[0]}) & Q(**{f"{key}__lte": bounds[1]})

    instant = _to_instant(_first(value))
    if instant is None:
        return None
    if operator == "before":
        return Q(**{f"{key}__lt": instant})
    if operator == "after":
        return Q(**{f"{key}__gt": instant})

    # "on", and the default: the whole calendar day, end exclusive
    try:
        start = timezone.make_aware(datetime.combine(timezone.localtime(instant).date(), time.min))
        end = start + timedelta(days=1)
    except OverflowError:
        return None
    return Q(**{f"{key}__gte": start}) & Q(**{f"{key}__lt": end})


def _is_blank(value: Any) -> bool:
    if value is None or value == "":
        return True
    if isinstance(value, (list, tuple)):
        return all(_is_blank(item) for item in value)
    return False


def _first(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def _split(value: Any) -> List[str]:
    """Accept repeated parameters or a single comma separated string."""
    items = value if isinstance(value, (list, tuple)) else [value]
    parts = []
    for item in items:
        if item is None:
            continue
        parts.extend(part.strip() for part in str(item).split(","))
    return [part for part in parts if part]


def _to_number(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _to_instant(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        try:
            parsed = parse_datetime(text)
            if parsed is None:
                day = parse_date(text)
                parsed = datetime.combine(day, time.min) if day else None
        except ValueError:
            return None
    if parsed is None:
        return None
    try:
        if timezone.is_naive(parsed):
            parsed = timezone.make_aware(parsed)
        # fails here for instants that cannot be shifted into local time
        timezone.localtime(parsed)
    except OverflowError:
        return None
    return parsed
