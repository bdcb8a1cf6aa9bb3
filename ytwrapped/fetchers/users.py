"""User fetchers for the authenticated account."""

from typing import TYPE_CHECKING

from ytwrapped.fetchers.common import validate_payload
from ytwrapped.models import User

if TYPE_CHECKING:
    from ytwrapped.youtrack_client import YouTrackClient

USER_FIELDS = "id,login,fullName,email,avatarUrl"


async def fetch_current_user(client: "YouTrackClient") -> User:
    """Return the user owning the token."""
    payload = await client.get_json("/users/me", params={"fields": USER_FIELDS})
    return validate_payload(User, payload)
