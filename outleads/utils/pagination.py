"""
Pagination, sorting and search helpers for list endpoints.

Query parameters understood by every list endpoint:
    page, limit          1-based page and page size
    sortBy, sortOrder    column (camelCase or snake_case) and asc/desc
    search               case-insensitive substring across configured fields
    startDate, endDate   optional ISO 8601 window, where an endpoint supports one
"""

import math
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional, Tuple
from sqlalchemy import asc, desc, or_
from outleads.utils.error_handling import ValidationError

_CAMEL_BOUNDARY = re.compile(r'(?<!^)(?=[A-Z])')


@dataclass
class PageParams:
    page: int
    limit: int
    sort_by: Optional[str]
    sort_order: str
    search: Optional[str]

    @property
    def offset(self):
        return (self.page - 1) * self.limit


def to_snake_case(name: str) -> str:
    return _CAMEL_BOUNDARY.sub('_', name).lower()


def _positive_int(args, name, default):
    raw = args.get(name)
    if raw is None or raw == '':
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer")
    if value < 1:
        raise ValidationError(f"{name} must be greater than or equal to 1")
    return value


def parse_page_params(args, default_limit: int = 10, max_limit: int = 100) -> PageParams:
    """Read and validate pagination parameters from a request's query string.

    page < 1 and limit < 1 are rejected rather than clamped so callers never
    end up with a negative offset. limit is capped at max_limit.
    """
    page = _positive_int(args, 'page', 1)
    limit = min(_positive_int(args, 'limit', default_limit), max_limit)

    sort_order = (args.get('sortOrder') or 'desc').lower()
    if sort_order not in ('asc', 'desc'):
        raise ValidationError("sortOrder must be 'asc' or 'desc'")

    search = (args.get('search') or '').strip() or None
    return PageParams(page=page, limit=limit, sort_by=args.get('sortBy') or None,
                      sort_order=sort_order, search=search)


def escape_like(term: str) -> str:
    return term.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


def apply_search(query, model, fields: Iterable[str], term: Optional[str]):
    """OR a case-insensitive substring match across the given columns."""
    fields = list(fields or [])
    if not term or not fields:
        return query
    pattern = f"%{escape_like(term)}%"
    return query.filter(or_(*[getattr(model, field).ilike(pattern, escape='\\') for field in fields]))


def apply_sort(query, model, sort_by: Optional[str], sort_order: str, default: Tuple[str, str]):
    """Order by a validated column, falling back to the configured default.

    ``default`` is a ``(field, direction)`` pair or a list of them.
    """
    if sort_by:
        column_name = to_snake_case(sort_by)
        if column_name not in model.__table__.columns:
            raise ValidationError(f"Cannot sort by unknown field: {sort_by}")
        orderings = [(column_name, sort_order)]
    else:
        orderings = [default] if isinstance(default[0], str) else list(default)

    for column_name, direction in orderings:
        column = getattr(model, column_name)
        query = query.order_by(asc(column) if direction == 'asc' else desc(column))
    return query


def build_meta(total: int, page: int, limit: int) -> dict:
    return {
        'total': total,
        'page': page,
        'limit': limit,
        'totalPages': math.ceil(total / limit) if limit else 0,
    }


def paginate(query, params: PageParams):
    """Run a counted, offset/limit query. Returns (rows, meta)."""
    total = query.order_by(None).count()
    rows = query.offset(params.offset).limit(params.limit).all()
    return rows, build_meta(total, params.page, params.limit)


def _parse_date(args, name):
    raw = (args.get(name) or '').strip()
    if not raw:
        return None
    try:
        value = datetime.fromisoformat(raw.replace('Z', '+00:00'))
    except ValueError:
        raise ValidationError(f"{name} must be an ISO 8601 date")
    # Stored timestamps are naive UTC
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_date_range(args, start_name='startDate', end_name='endDate'):
    """Read an optional [start, end] window from the query string.

    A bare end date (``2024-03-31``) covers that whole day. Returns
    ``(start, end)``, either of which may be None.
    """
    start = _parse_date(args, start_name)
    end = _parse_date(args, end_name)
    if end is not None and len(args.get(end_name).strip()) == 10:
        end = end + timedelta(days=1) - timedelta(microseconds=1)
    if start is not None and end is not None and start > end:
        raise ValidationError(f"{start_name} must not be after {end_name}")
    return start, end


def apply_date_range(query, column, start, end):
    if start is not None:
        query = query.filter(column >= start)
    if end is not None:
        query = query.filter(column <= end)
    return query
