"""
CampFinder Backend — Filter Expressions & SQL Translation
===========================================================

What:  A small typed vocabulary for list filters, and the functions that turn it
       (plus sort and field selection) into SQLAlchemy constructs.
Why:   The query builder stays a pure function over strings; only this module
       knows about columns, column types and PostgreSQL operators.
How:   Each filter is a frozen dataclass. `to_clause()` resolves the field to a
       column of the model, coerces the raw string to the column's Python type and
       returns a boolean clause. Arrays use containment/overlap; `WithinSphere`
       becomes a spherical distance predicate evaluated by the database.

Filter Vocabulary:
    Equals(field, value)            → field = value         (array: @> [value])
    GreaterThan(field, value)       → field > value
    GreaterOrEqual(field, value)    → field >= value
    LessThan(field, value)          → field < value
    LessOrEqual(field, value)       → field <= value
    InSet(field, values)            → field IN (values)     (array: && values)
    WithinSphere(lng, lat, radius)  → angular distance from centre <= radius
"""

import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, List, Optional, Sequence, Tuple, Union

from sqlalchemy import and_, asc, desc, func
from sqlalchemy.dialects.postgresql import ARRAY

from app.exceptions import ValidationError

# Mean equatorial radius used to turn kilometres into an angular radius
EARTH_RADIUS_KM = 6378


@dataclass(frozen=True)
class Equals:
    field: str
    value: str


@dataclass(frozen=True)
class GreaterThan:
    field: str
    value: str


@dataclass(frozen=True)
class GreaterOrEqual:
    field: str
    value: str


@dataclass(frozen=True)
class LessThan:
    field: str
    value: str


@dataclass(frozen=True)
class LessOrEqual:
    field: str
    value: str


@dataclass(frozen=True)
class InSet:
    field: str
    values: Tuple[str, ...]


@dataclass(frozen=True)
class WithinSphere:
    """Points within `radius` radians of (longitude, latitude) on the sphere."""
    longitude: float
    latitude: float
    radius: float


FilterExpression = Union[
    Equals, GreaterThan, GreaterOrEqual, LessThan, LessOrEqual, InSet, WithinSphere
]


@dataclass(frozen=True)
class SortField:
    field: str
    descending: bool = False


def radius_filter(longitude: float, latitude: float, distance_km: float) -> WithinSphere:
    """
    Build the "within sphere" filter for a radius search.

    The distance is expressed as an angle by dividing by Earth's radius, so
    6378 km becomes exactly 1.0 radian.
    """
    return WithinSphere(
        longitude=longitude,
        latitude=latitude,
        radius=distance_km / EARTH_RADIUS_KM,
    )


# ══════════════════════════════════════════════════════════════════════════
# Value Coercion
# ══════════════════════════════════════════════════════════════════════════

_TRUE_WORDS = {"1", "true", "yes", "y", "on"}
_FALSE_WORDS = {"0", "false", "no", "n", "off"}


def _bad_value(field: str, kind: str, value: Any) -> ValidationError:
    return ValidationError(
        message=f"Invalid value for filter field '{field}' (expected {kind})",
        field=field,
        context={"value": str(value), "expected": kind},
    )


def _python_type(column) -> Optional[type]:
    try:
        return column.type.python_type
    except NotImplementedError:
        return None


def _coerce(column, field: str, value: str):
    """Convert a query-string value to what the column stores."""
    python_type = _python_type(column)
    text = str(value).strip()

    if python_type is bool:
        lowered = text.lower()
        if lowered in _TRUE_WORDS:
            return True
        if lowered in _FALSE_WORDS:
            return False
        raise _bad_value(field, "boolean", value)

    if python_type in (int, float):
        try:
            return python_type(text)
        except ValueError:
            raise _bad_value(field, "number", value)

    if python_type is uuid.UUID:
        try:
            return uuid.UUID(text)
        except ValueError:
            raise _bad_value(field, "UUID", value)

    if python_type is datetime:
        try:
            if len(text) == 10 and "T" not in text:
                parsed = datetime.combine(date.fromisoformat(text), datetime.min.time())
            else:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            raise _bad_value(field, "ISO 8601 datetime", value)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    return text


# ══════════════════════════════════════════════════════════════════════════
# Translation
# ══════════════════════════════════════════════════════════════════════════

def _resolve_column(model, field: str):
    columns = model.__table__.c
    if field not in columns:
        raise ValidationError(
            message=f"Unknown filter field '{field}'",
            field=field,
            context={"allowed": sorted(columns.keys())},
        )
    return columns[field]


def _array_clause(column, expr: FilterExpression):
    if isinstance(expr, Equals):
        return column.contains([expr.value])
    if isinstance(expr, InSet):
        return column.overlap(list(expr.values))
    raise ValidationError(
        message=f"Field '{expr.field}' only supports exact match and [in] filters",
        field=expr.field,
    )


def _within_sphere_clause(model, expr: WithinSphere):
    # Spherical law of cosines; clamped to [-1, 1] for acos()
    latitude = _resolve_column(model, "latitude")
    longitude = _resolve_column(model, "longitude")
    cosine = (
        func.sin(func.radians(latitude)) * func.sin(func.radians(expr.latitude))
        + func.cos(func.radians(latitude))
        * func.cos(func.radians(expr.latitude))
        * func.cos(func.radians(longitude) - func.radians(expr.longitude))
    )
    return and_(
        latitude.isnot(None),
        longitude.isnot(None),
        func.acos(func.greatest(func.least(cosine, 1.0), -1.0)) <= expr.radius,
    )


def to_clause(model, expr: FilterExpression):
    """
    Translate one filter expression into a SQLAlchemy boolean clause.

    Raises:
        ValidationError: the field is not a column of `model`, the value can't be
                         coerced to the column type, or the operator doesn't
                         apply to an array column.
    """
    if isinstance(expr, WithinSphere):
        return _within_sphere_clause(model, expr)

    column = _resolve_column(model, expr.field)
    if isinstance(column.type, ARRAY):
        return _array_clause(column, expr)

    if isinstance(expr, InSet):
        return column.in_([_coerce(column, expr.field, v) for v in expr.values])

    value = _coerce(column, expr.field, expr.value)
    if isinstance(expr, Equals):
        return column == value
    if isinstance(expr, GreaterThan):
        return column > value
    if isinstance(expr, GreaterOrEqual):
        return column >= value
    if isinstance(expr, LessThan):
        return column < value
    if isinstance(expr, LessOrEqual):
        return column <= value
    raise TypeError(f"Unsupported filter expression: {expr!r}")


def to_clauses(model, filters: Sequence[FilterExpression]) -> List:
    return [to_clause(model, expr) for expr in filters]


def selection_columns(model, selection: Optional[Sequence[str]]) -> List:
    """
    Columns to fetch for a projection. None selects every column.

    Unknown names are dropped; the primary key is always included.
    """
    columns = model.__table__.c
    if not selection:
        return list(columns)
    names = [name for name in dict.fromkeys(selection) if name in columns]
    if "id" not in names:
        names.insert(0, "id")
    return [columns[name] for name in names]


def order_by_clauses(model, sort: Sequence[SortField]) -> List:
    """ORDER BY terms for the requested sort. Fields that aren't columns are skipped."""
    columns = model.__table__.c
    clauses = []
    for item in sort:
        if item.field not in columns:
            continue
        column = columns[item.field]
        clauses.append(desc(column) if item.descending else asc(column))
    return clauses
