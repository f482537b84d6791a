from typing import Callable, Optional

from sqlalchemy import func
from sqlmodel import Session, select

MAX_PAGE_SIZE = 100


def paginate(
    *,
    session: Session,
    query,
    page: int = 1,
    limit: int = 12,
    serializer: Optional[Callable] = None,
):
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_PAGE_SIZE)

    total = session.exec(
        select(func.count()).select_from(query.subquery())
    ).one()

    rows = session.exec(
        query.offset((page - 1) * limit).limit(limit)
    ).all()

    return {
        "total_items": total,
        "total_pages": (total + limit - 1) // limit,
        "current_page": page,
        "limit": limit,
        "results": [serializer(r) for r in rows] if serializer else rows,
    }
