import math

from task_service.errors import InvalidInput

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def validate_page(page: int, page_size: int) -> None:
    if page < 1:
        raise InvalidInput("page must be a positive integer")
    if page_size < 1:
        raise InvalidInput("limit must be a positive integer")
    if page_size > MAX_PAGE_SIZE:
        raise InvalidInput(f"limit must not exceed {MAX_PAGE_SIZE}")


def page_offset(page: int, page_size: int) -> int:
    """Number of rows to skip before the requested page."""
    validate_page(page, page_size)
    return (page - 1) * page_size


def page_count(total: int, page_size: int) -> int:
    return math.ceil(total / page_size)
