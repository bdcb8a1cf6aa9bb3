"""Project fetchers for the project picker."""

from typing import TYPE_CHECKING

from ytwrapped.errors import ProtocolError
from ytwrapped.fetchers.common import validate_payload
from ytwrapped.models import ProjectRef

if TYPE_CHECKING:
    from ytwrapped.youtrack_client import YouTrackClient

PROJECT_FIELDS = "id,name,shortName,description"
PROJECT_LIMIT = 100


async def fetch_projects(client: "YouTrackClient") -> list[ProjectRef]:
    """Return up to PROJECT_LIMIT projects visible to the user in a single request."""
    payload = await client.get_json(
        "/admin/projects",
        params={"fields": PROJECT_FIELDS, "$top": PROJECT_LIMIT},
    )
    if not isinstance(payload, list):
        msg = "Unexpected project listing payload"
        raise ProtocolError(msg, body=str(payload))
    return [validate_payload(ProjectRef, item) for item in payload]
