from __future__ import annotations

"""
Query engine
============

Turns list parameters into one filtered, ordered, paginated `SELECT` and a
`COUNT(*)` over the same predicates.

Rules
-----
- `search` / `genre`: trimmed, case-insensitive substring match; `%` and `_`
  in the input are literal. Blank values are ignored.
- `genre` never matches rows without a genre.
- `time` (posts): `today` → created since 00:00 UTC, `week`/`this_week` →
  created within the last 7 days. Unknown values are ignored.
- Ordering comes from the descriptor's sort resolver; ties (and the default)
  order by `created_at` desc, then `id` desc.
- `page < 1` → 1; `page > MAX_PAGE` → MAX_PAGE (keeps the OFFSET in range).
- `page_size < 1` → default; `page_size > max` → max.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional, Sequence, Tuple

from sqlalchemy import Select, and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mediaboard.services.descriptors import ResourceDescriptor

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 9
MAX_PAGE_SIZE = 50
MAX_PAGE = 1_000_000

TIME_TODAY = "today"
TIME_WEEK = {"week", "this_week"}


@dataclass(frozen=True)
class ListParams:
    search: Optional[str] = None
    genre: Optional[str] = None
    time: Optional[str] = None
    sort: Optional[str] = None
    order: Optional[str] = None
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE


def clamp_page(
    page: Optional[int],
    page_size: Optional[int],
    *,
    default_size: int = DEFAULT_PAGE_SIZE,
    max_size: int = MAX_PAGE_SIZE,
) -> Tuple[int, int]:
    """Normalize paging input to a usable (page, page_size) pair."""
    page = min(page, MAX_PAGE) if page is not None and page >= 1 else 1
    if page_size is None or page_size < 1:
        page_size = default_size
    return page, min(page_size, max_size)


def _contains(column, value: str):
    return func.lower(column).contains(value.lower(), autoescape=True)


def build_conditions(
    desc: ResourceDescriptor,
    params: ListParams,
    *,
    now: Optional[datetime] = None,
) -> List[Any]:
    conds: List[Any] = []

    search = (params.search or "").strip()
    if search:
        conds.append(_contains(desc.column(desc.search_field), search))

    genre = (params.genre or "").strip()
    if desc.genre_filter and genre:
        column = desc.column("genre")
        conds.append(column.is_not(None))
        conds.append(_contains(column, genre))

    window = (params.time or "").strip().lower()
    if desc.time_filter and window:
        now = now or datetime.now(timezone.utc)
        created = desc.column("created_at")
        if window == TIME_TODAY:
            conds.append(created >= now.replace(hour=0, minute=0, second=0, microsecond=0))
        elif window in TIME_WEEK:
            conds.append(created >= now - timedelta(days=7))

    return conds


def order_clauses(desc: ResourceDescriptor, params: ListParams) -> List[Any]:
    tail = [desc.column("created_at").desc(), desc.column("id").desc()]
    spec = desc.sort_resolver(params.sort, params.order)
    if spec is None:
        return tail
    expr, descending = spec
    head = expr.desc() if descending else expr.asc()
    return [head.nulls_last(), *tail]


def build_select(desc: ResourceDescriptor, conds: Sequence[Any]) -> Select:
    stmt = select(desc.model)
    if conds:
        stmt = stmt.where(and_(*conds))
    return stmt


async def run_list(
    db: AsyncSession,
    desc: ResourceDescriptor,
    params: ListParams,
    *,
    now: Optional[datetime] = None,
    default_size: int = DEFAULT_PAGE_SIZE,
    max_size: int = MAX_PAGE_SIZE,
) -> Tuple[List[Any], int]:
    """Return (page of rows, total matching rows)."""
    page, page_size = clamp_page(params.page, params.page_size, default_size=default_size, max_size=max_size)
    conds = build_conditions(desc, params, now=now)

    count_stmt = select(func.count()).select_from(desc.model)
    if conds:
        count_stmt = count_stmt.where(and_(*conds))
    total = (await db.execute(count_stmt)).scalar_one()

    stmt = (
        build_select(desc, conds)
        .order_by(*order_clauses(desc, params))
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    rows = list((await db.execute(stmt)).scalars().all())
    logger.debug(
        "list %s page=%d size=%d total=%d returned=%d", desc.name, page, page_size, total, len(rows)
    )
    return rows, int(total)


__all__ = [
    "MAX_PAGE",
    "ListParams",
    "clamp_page",
    "build_conditions",
    "order_clauses",
    "build_select",
    "run_list",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
]
