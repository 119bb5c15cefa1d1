import math
from typing import NamedTuple


class PageWindow(NamedTuple):
    skip: int
    limit: int
    last_page: int


def paginate(total_count: int, page_size: int, page_number: int) -> PageWindow:
    """Compute the offset window for a 1-based page number.

    A page past ``last_page`` still gets a window; querying it returns no rows.
    """
    if page_size < 1:
        raise ValueError("page_size must be at least 1")
    page_number = max(page_number, 1)
    return PageWindow(
        skip=(page_number - 1) * page_size,
        limit=page_size,
        last_page=math.ceil(total_count / page_size),
    )
