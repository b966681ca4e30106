"""
API Dependencies

Request-scoped dependencies shared by the endpoint modules.
"""
from dataclasses import dataclass
from typing import Annotated, Optional

from fastapi import Header

from labops.db.session import get_db  # noqa: F401  (re-exported for endpoints)
from labops.exceptions import AuthenticationError


@dataclass(frozen=True)
class CurrentUser:
    """Identity of the user issuing the request, used for attribution."""
    id: str
    name: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.name} ({self.id})" if self.name else self.id


async def get_current_user(
    x_user_id: Annotated[Optional[str], Header()] = None,
    x_user_name: Annotated[Optional[str], Header()] = None,
) -> CurrentUser:
    """
    Resolve the current user from the identity headers set by the
    authenticating gateway.

    Raises:
        AuthenticationError: if no user id is present
    """
    if not x_user_id or not x_user_id.strip():
        raise AuthenticationError("Missing user identity")
    return CurrentUser(id=x_user_id.strip(), name=(x_user_name or "").strip() or None)
