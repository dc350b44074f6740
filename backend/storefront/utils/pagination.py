import math
from typing import Any, Optional

# Largest row offset a bigint OFFSET clause accepts with headroom.
MAX_OFFSET = 2**62


def compute_total_pages(total_items: int, page_size: int) -> int:
    safe_total = max(0, int(total_items))
    safe_page_size = max(1, int(page_size))
    return math.ceil(safe_total / safe_page_size)


def max_page(page_size: int) -> int:
    return MAX_OFFSET // max(1, int(page_size))


def clamp_page(page: Any, page_size: int = 1) -> int:
    try:
        value = int(page)
    except (TypeError, ValueError, OverflowError):
        return 1
    return max(1, min(value, max_page(page_size)))


def clamp_page_size(page_size: Any, *, default: int, maximum: int) -> int:
    try:
        value = int(page_size)
    except (TypeError, ValueError):
        value = int(default)
    return max(1, min(value, int(maximum)))


def page_offset(page: int, page_size: int) -> int:
    return (max(1, int(page)) - 1) * max(1, int(page_size))


def parse_int(raw: Optional[str], default: int) -> int:
    """Lenient integer parse for query-string values."""
    if raw is None:
        return default
    try:
        return int(str(raw).strip())
    except ValueError:
        return default
