from typing import Callable, Optional, TypeVar

from storefront.errors import NotFound

T = TypeVar("T")


def require_owned(
    entity: Optional[T], user_id: int, owner_of: Callable[[T], int], what: str
) -> T:
    """
    Second half of "load, then assert ownership".

    A missing entity and one owned by somebody else raise the same NotFound,
    so callers cannot probe for other users' ids.
    """
    if entity is None or owner_of(entity) != user_id:
        raise NotFound(f"{what} not found")
    return entity
