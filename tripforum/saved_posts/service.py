"""HTTP access to the saved-post endpoints.

These endpoints identify the viewer through a ``User-Email`` header rather
than a query parameter.
"""

from typing import Any

from tripforum.core.errors import ApiError, read_json, raise_for_status
from tripforum.core.http import ApiClient


def _result(body: Any) -> Any:
    # Wrapped as {"result": ...}
    return body.get("result") if isinstance(body, dict) else body


class SavedPostApi:
    """Save, unsave, check and count calls."""

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    async def is_saved(self, post_id: str, viewer_email: str) -> bool:
        response = await self.client.get(
            f"/api/saved-posts/check/{post_id}", headers={"User-Email": viewer_email}
        )
        raise_for_status(response)
        return bool(_result(read_json(response)))

    async def count(self, post_id: str) -> int:
        """Public save count of a post."""
        response = await self.client.get(f"/api/saved-posts/count/{post_id}")
        raise_for_status(response)
        value = _result(read_json(response))
        try:
            return int(value or 0)
        except (TypeError, ValueError) as e:
            raise ApiError(response.status_code, "Malformed save count") from e

    async def save(self, post_id: str, viewer_email: str, note: str = "") -> None:
        response = await self.client.post(
            "/api/saved-posts/save",
            json={"postId": post_id, "note": note},
            headers={"User-Email": viewer_email},
        )
        raise_for_status(response)

    async def unsave(self, post_id: str, viewer_email: str) -> None:
        response = await self.client.delete(
            f"/api/saved-posts/unsave/{post_id}", headers={"User-Email": viewer_email}
        )
        raise_for_status(response)
