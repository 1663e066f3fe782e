from dataclasses import dataclass

from storefront.config import settings


@dataclass(frozen=True)
class PageRequest:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def clamp_page(page, limit, max_limit: int = None) -> PageRequest:
    """page is clamped to >= 1, limit into [1, max_limit]."""
    max_limit = max_limit or settings.MAX_PAGE_SIZE
    page = max(1, int(page or 1))
    limit = min(max(1, int(limit or 1)), max_limit)
    return PageRequest(page=page, limit=limit)


def total_pages(total: int, limit: int) -> int:
    return (total + limit - 1) // limit
