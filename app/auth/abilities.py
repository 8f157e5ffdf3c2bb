"""
Per-resource ownership checks.

ensure_owner is the guard recipe, pantry and grocery-list routes call after
loading a row by id. No such route is mounted in this service yet; the
check is public so those routers can share one 404/403 policy.
"""

from typing import Optional, Protocol, TypeVar
from uuid import UUID

from app.core.errors import ForbiddenError, NotFoundError
from app.models.user import User


class Owned(Protocol):
    user_id: UUID


OwnedT = TypeVar("OwnedT", bound=Owned)


def ensure_owner(resource: Optional[OwnedT], user: User, label: str = "resource") -> OwnedT:
    """
    Return the resource when it exists and belongs to the user.

    Raises NotFoundError for a missing resource and ForbiddenError when
    it belongs to someone else.
    """
    if resource is None:
        raise NotFoundError(f"A {label} with that id does not exist")

    if resource.user_id != user.id:
        raise ForbiddenError(f"You are not authorized to make changes to this {label}")

    return resource
