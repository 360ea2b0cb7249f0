"""
Search / sort / paginate helpers shared by the admin list views.

Every helper degrades silently: an empty search term, an unknown sort column or
a bogus page number simply means "no filter", "default order" or "page 1".
"""
from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from flask import url_for
from sqlalchemy import or_
from sqlalchemy.orm import Query


SORT_DIRECTIONS = ("asc", "desc")


def _parse_page(raw: Any) -> int:
    try:
        page = int(str(raw).strip())
    except (TypeError, ValueError):
        return 1
    return page if page >= 1 else 1


@dataclass(frozen=True)
class ListParams:
    search: str = ""
    sort: str = ""
    direction: str = "asc"
    page: int = 1

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "ListParams":
        direction = (args.get("direction") or "asc").strip().lower()
        if direction not in SORT_DIRECTIONS:
            direction = "asc"
        return cls(
            search=(args.get("q") or "").strip(),
            sort=(args.get("sort") or "").strip(),
            direction=direction,
            page=_parse_page(args.get("page") or 1),
        )


def apply_search(q: Query, term: str | None, columns: Sequence[Any]) -> Query:
    """Substring match of `term` against any of `columns` (OR-ed)."""
    term = (term or "").strip()
    if not term or not columns:
        return q
    like = f"%{term}%"
    return q.filter(or_(*[col.ilike(like) for col in columns]))


def apply_sort(
    q: Query,
    model: type,
    sort: str | None,
    direction: str | None,
    allowed: Iterable[str],
    *,
    default: Any = None,
) -> Query:
    """
    Order by `sort` when it is in `allowed`, with the primary key as tie-breaker.

    Otherwise order by `default`, a clause or tuple of clauses that should end in
    its own tie-breaker, or by primary key ascending when no default is given.
    """
    sort = (sort or "").strip()
    pk = getattr(model, "id", None)
    if sort and sort in set(allowed):
        col = getattr(model, sort)
        ordering = col.desc() if (direction or "").strip().lower() == "desc" else col.asc()
        q = q.order_by(ordering)
    elif default is not None:
        return q.order_by(*(default if isinstance(default, (tuple, list)) else (default,)))
    if pk is not None:
        q = q.order_by(pk.asc())
    return q


@dataclass
class Page:
    items: list[Any]
    page: int
    per_page: int
    total: int

    @property
    def pages(self) -> int:
        return max(1, math.ceil(self.total / self.per_page)) if self.per_page else 1

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page * self.per_page < self.total

    @property
    def prev_num(self) -> int | None:
        return self.page - 1 if self.has_prev else None

    @property
    def next_num(self) -> int | None:
        return self.page + 1 if self.has_next else None

    @property
    def first_index(self) -> int:
        if not self.items:
            return 0
        return (self.page - 1) * self.per_page + 1

    @property
    def last_index(self) -> int:
        if not self.items:
            return 0
        return self.first_index + len(self.items) - 1


def paginate(q: Query, page: int, per_page: int) -> Page:
    page = _parse_page(page)
    per_page = max(1, int(per_page))
    total = q.order_by(None).count()
    offset = (page - 1) * per_page
    # Past the end there is nothing to fetch; huge offsets would overflow the driver.
    items = q.offset(offset).limit(per_page).all() if offset < total else []
    return Page(items=items, page=page, per_page=per_page, total=total)


def page_url(endpoint: str, page: int, args: Mapping[str, Any]) -> str:
    """Link to another page of the same list, keeping the current query string."""
    # Jinja cannot splat **kwargs in url_for; build the arguments here.
    params = {k: v for k, v in args.items() if k != "page" and v not in (None, "")}
    params["page"] = page
    return url_for(endpoint, **params)


def sort_url(endpoint: str, column: str, params: ListParams, args: Mapping[str, Any]) -> str:
    """Header link that sorts by `column`, flipping direction when it is already active."""
    direction = "desc" if params.sort == column and params.direction == "asc" else "asc"
    merged = {k: v for k, v in args.items() if k not in ("page", "sort", "direction") and v not in (None, "")}
    merged.update({"sort": column, "direction": direction})
    return url_for(endpoint, **merged)
