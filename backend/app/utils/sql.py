"""
SQL utilities for consistent handling of aggregate results.

SQLModel/SQLAlchemy may return COUNT/SUM results as int, Decimal, None
or a 1-tuple/Row depending on the dialect. Use scalar_int() to coerce.
"""
from typing import Any


def scalar_int(x: Any) -> int:
    """Convert COUNT/SUM aggregate result to int. Handles int, None or 1-tuple/Row."""
    if x is None:
        return 0
    try:
        return int(x[0])
    except Exception:
        return int(x)
