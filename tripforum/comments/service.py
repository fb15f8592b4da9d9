"""HTTP access to the comment endpoints."""

from tripforum.comments.schemas import (
    CommentPayload,
    CreateCommentRequest,
    UpdateCommentRequest,
)
from tripforum.core.errors import raise_for_status
from tripforum.core.http import ApiClient
from tripforum.core.schemas import parse_response, parse_response_list


class CommentApi:
    """Comment list, reply list, create, update and delete calls."""

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    async def list_by_post(self, post_id: str) -> list[CommentPayload]:
        """All comments of a post (top-level and replies), newest first."""
        response = await self.client.get(f"/api/comments/post/{post_id}")
        raise_for_status(response)
        return parse_response_list(CommentPayload, response)

    async def list_replies(self, comment_id: str) -> list[CommentPayload]:
        """Replies of one comment.

        Raises:
            NotFoundError: the parent comment is gone
        """
        response = await self.client.get(f"/api/comments/{comment_id}/replies")
        raise_for_status(response)
        return parse_response_list(CommentPayload, response)

    async def create(self, request: CreateCommentRequest) -> CommentPayload:
        """Create a comment and return it with its server-assigned id."""
        response = await self.client.post("/api/comments", json=request.to_wire())
        raise_for_status(response)
        return parse_response(CommentPayload, response)

    async def update(
        self, comment_id: str, request: UpdateCommentRequest
    ) -> CommentPayload | None:
        """Update a comment's text.

        Returns:
            The updated comment when the server echoes it, else None
        """
        response = await self.client.put(
            f"/api/comments/{comment_id}", json=request.to_wire()
        )
        raise_for_status(response)
        if not response.content:
            return None
        try:
            body = response.json()
            if isinstance(body, dict) and "forumCommentId" in body:
                return CommentPayload.model_validate(body)
        except ValueError:
            # Not JSON, or an echo that does not fit the schema
            return None
        return None

    async def delete(self, comment_id: str, viewer_email: str) -> None:
        response = await self.client.delete(
            f"/api/comments/{comment_id}", params={"userEmail": viewer_email}
        )
        raise_for_status(response)
