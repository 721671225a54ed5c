"""Small SQL aggregation helpers shared by the summary and dashboard services."""
from datetime import datetime
from typing import Dict, Optional, Tuple

from sqlalchemy import extract, func
from sqlalchemy.orm import Session


def scalar_sum(db: Session, column, *filters) -> float:
    """SUM(column) over the filtered rows, 0 when there are none."""
    return float(db.query(func.coalesce(func.sum(column), 0)).filter(*filters).scalar() or 0)


def group_by_month(
    db: Session,
    date_column,
    value,
    *filters,
    since: Optional[datetime] = None,
) -> Dict[Tuple[int, int], float]:
    """
    Aggregate ``value`` per calendar month of ``date_column``.

    Returns {(year, month): value}; months with no rows are absent.
    """
    year = extract("year", date_column)
    month = extract("month", date_column)
    query = db.query(year, month, value).filter(*filters)
    if since is not None:
        query = query.filter(date_column >= since)
    rows = query.group_by(year, month).all()
    return {(int(y), int(m)): v for y, m, v in rows}
