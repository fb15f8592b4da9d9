"""Pydantic schemas for the comment endpoints.

Request/response models for:
- Listing comments of a post and replies of a comment
- Creating, updating and deleting comments
"""

from datetime import datetime

from pydantic import Field, field_validator

from tripforum.core.schemas import WireModel


MAX_CONTENT_LENGTH = 10000


def _strip_content(v: str) -> str:
    v = v.strip()
    if not v:
        msg = "Content cannot be empty"
        raise ValueError(msg)
    return v


# ==============================================================================
# Request Schemas
# ==============================================================================


class CreateCommentRequest(WireModel):
    """Request to create a comment or a reply."""

    user_email: str = Field(..., min_length=1)
    forum_post_id: str
    content: str = Field(..., min_length=1, max_length=MAX_CONTENT_LENGTH)
    img_path: str
    parent_comment_id: str | None = None

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        """Strip whitespace and validate content."""
        return _strip_content(v)


class UpdateCommentRequest(WireModel):
    """Request to update a comment's text."""

    content: str = Field(..., min_length=1, max_length=MAX_CONTENT_LENGTH)
    user_email: str = Field(..., min_length=1)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        """Strip whitespace and validate content."""
        return _strip_content(v)


# ==============================================================================
# Response Schemas
# ==============================================================================


class CommentPayload(WireModel):
    """A comment as returned by the server."""

    forum_comment_id: str
    forum_post_id: str | None = None
    parent_comment_id: str | None = None
    user_email: str = ""
    username: str = ""
    user_avatar: str | None = None
    content: str = ""
    created_at: datetime | None = None

    @field_validator("user_email", "username", "content", mode="before")
    @classmethod
    def none_to_empty(cls, v: str | None) -> str:
        return v or ""

    @property
    def is_top_level(self) -> bool:
        return not self.parent_comment_id
