from __future__ import annotations

import math
from typing import Any, Iterable, Optional


def js_round(value: Optional[float]) -> int:
    """Round half up, like the dashboard front end does."""
    if value is None:
        return 0
    return int(math.floor(float(value) + 0.5))


def percentage(part: int, total: int) -> int:
    return js_round(part / total * 100) if total > 0 else 0


def format_distribution(rows: Iterable[tuple[Any, int]], sentinel: Optional[str] = None) -> dict[str, int]:
    """Turn grouped-count rows into ``{value: count}``.

    Null or empty values are reported under ``sentinel`` when one is given and
    dropped otherwise.
    """
    result: dict[str, int] = {}
    for value, count in rows:
        if value is None or value == "":
            if sentinel is None:
                continue
            key = sentinel
        else:
            key = str(getattr(value, "value", value))
        result[key] = result.get(key, 0) + int(count)
    return result
