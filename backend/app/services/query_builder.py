"""
CampFinder Backend — List Query Builder & Pager
=================================================

What:  Turns the raw query string of a list request into filters, sort order,
       field selection, skip/limit and pagination links.
Why:   Every list endpoint shares the same conventions:
           GET /api/v1/bootcamps?select=name,city&sort=-average_cost
                                &page=2&limit=10&average_cost[lte]=10000
How:   Pure functions over a str→str mapping. Nothing here raises: malformed
       paging values fall back to defaults, and field/value checking is left to
       the SQL translator in app.services.filters.

Pipeline:
    1. Drop reserved keys (select, sort, page, limit)
    2. `field[gt|gte|lt|lte|in]=v` → comparison expression, anything else → Equals
    3. select=a,b → projection (id always included)
    4. sort=a,-b → ascending a, descending b (default: -created_at)
    5. page/limit → leading integer, defaults 1 and 25 when missing or < 1
    6. skip = (page - 1) * limit
    7. next iff page * limit < total; prev iff skip > 0

Consistency:
    The count and the page fetch are two separate queries. A row inserted or
    deleted between them can shift a page boundary; listings accept that.
"""

import re
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple

from app.services.filters import (
    Equals,
    FilterExpression,
    GreaterOrEqual,
    GreaterThan,
    InSet,
    LessOrEqual,
    LessThan,
    SortField,
)

RESERVED_KEYS = frozenset({"select", "sort", "page", "limit"})

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 25
DEFAULT_SORT: Tuple[SortField, ...] = (SortField("created_at", descending=True),)

COMPARISON_OPERATORS = {
    "gt": GreaterThan,
    "gte": GreaterOrEqual,
    "lt": LessThan,
    "lte": LessOrEqual,
}

_COMPARISON_KEY = re.compile(r"^(?P<field>[^\[\]]+)\[(?P<op>gt|gte|lt|lte|in)\]$")
_LEADING_INTEGER = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class PageLink:
    page: int
    limit: int

    def to_dict(self) -> Dict[str, int]:
        return {"page": self.page, "limit": self.limit}


@dataclass(frozen=True)
class Pagination:
    """Links to the neighbouring pages; None means there is no such page."""
    next: Optional[PageLink] = None
    prev: Optional[PageLink] = None

    def to_dict(self) -> Dict[str, Dict[str, int]]:
        links = {}
        if self.next is not None:
            links["next"] = self.next.to_dict()
        if self.prev is not None:
            links["prev"] = self.prev.to_dict()
        return links


@dataclass(frozen=True)
class ListQuery:
    filters: Tuple[FilterExpression, ...]
    sort: Tuple[SortField, ...]
    selection: Optional[Tuple[str, ...]]
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class PageSpec:
    filters: Tuple[FilterExpression, ...]
    sort: Tuple[SortField, ...]
    selection: Optional[Tuple[str, ...]]
    skip: int
    limit: int
    pagination: Pagination


def parse_integer(value: Optional[str], default: int) -> int:
    """
    Leading integer of `value` ("10abc" → 10), or `default` when there is none
    or it is below 1.
    """
    if value is None:
        return default
    match = _LEADING_INTEGER.match(str(value))
    if not match:
        return default
    number = int(match.group(1))
    return number if number >= 1 else default


def _split_list(value: str) -> Tuple[str, ...]:
    return tuple(token.strip() for token in value.split(",") if token.strip())


def parse_filters(raw_params: Mapping[str, str]) -> Tuple[FilterExpression, ...]:
    filters = []
    for key, value in raw_params.items():
        if key in RESERVED_KEYS:
            continue
        match = _COMPARISON_KEY.match(key)
        if match is None:
            filters.append(Equals(field=key, value=value))
            continue
        field, op = match.group("field"), match.group("op")
        if field in RESERVED_KEYS:
            continue
        if op == "in":
            filters.append(InSet(field=field, values=_split_list(value)))
        else:
            filters.append(COMPARISON_OPERATORS[op](field=field, value=value))
    return tuple(filters)


def parse_selection(raw_select: Optional[str]) -> Optional[Tuple[str, ...]]:
    if not raw_select:
        return None
    fields = _split_list(raw_select)
    if not fields:
        return None
    if "id" not in fields:
        fields = fields + ("id",)
    return fields


def parse_sort(raw_sort: Optional[str]) -> Tuple[SortField, ...]:
    if not raw_sort:
        return DEFAULT_SORT
    sort = []
    for token in _split_list(raw_sort):
        if token.startswith("-"):
            name = token[1:].strip()
            if name:
                sort.append(SortField(name, descending=True))
        else:
            sort.append(SortField(token.lstrip("+")))
    return tuple(sort) or DEFAULT_SORT


def parse_list_query(raw_params: Mapping[str, str]) -> ListQuery:
    """Everything about a list request that doesn't depend on the row count."""
    return ListQuery(
        filters=parse_filters(raw_params),
        sort=parse_sort(raw_params.get("sort")),
        selection=parse_selection(raw_params.get("select")),
        page=parse_integer(raw_params.get("page"), DEFAULT_PAGE),
        limit=parse_integer(raw_params.get("limit"), DEFAULT_LIMIT),
    )


def build_pagination(page: int, limit: int, total_count: int) -> Pagination:
    skip = (page - 1) * limit
    next_link = PageLink(page + 1, limit) if page * limit < total_count else None
    prev_link = PageLink(page - 1, limit) if skip > 0 else None
    return Pagination(next=next_link, prev=prev_link)


def build_page(raw_params: Mapping[str, str], total_count: int) -> PageSpec:
    """
    Full list-query pipeline in one call.

    Args:
        raw_params:  Decoded query string (one value per key).
        total_count: Number of rows matching the filters, ignoring paging.

    Example:
        >>> spec = build_page({"page": "2", "limit": "10"}, total_count=25)
        >>> spec.skip, spec.limit, spec.pagination.to_dict()
        (10, 10, {'next': {'page': 3, 'limit': 10}, 'prev': {'page': 1, 'limit': 10}})
    """
    query = parse_list_query(raw_params)
    return PageSpec(
        filters=query.filters,
        sort=query.sort,
        selection=query.selection,
        skip=query.skip,
        limit=query.limit,
        pagination=build_pagination(query.page, query.limit, total_count),
    )
