"""Comment tree data types.

The tree is exactly two levels deep. Rather than a general recursive
structure, a node's position is a tagged ``Placement``:
- TopLevel: directly under the post
- Reply(parent_id): under a top-level comment; replies to replies are
  attached to the same top-level parent

Replies are fetched lazily, so a top-level node's reply list is either
``NOT_LOADED`` or ``Loaded(nodes)``; "no replies" and "not fetched yet" are
different values.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Final, Literal


if TYPE_CHECKING:
    from tripforum.comments.node import CommentNode


# ==============================================================================
# Placement
# ==============================================================================


@dataclass(frozen=True, slots=True)
class TopLevel:
    """Comment attached directly to the post."""

    kind: Literal["top"] = "top"


@dataclass(frozen=True, slots=True)
class Reply:
    """Reply attached to a top-level comment."""

    parent_id: str
    kind: Literal["reply"] = "reply"


Placement = TopLevel | Reply


def placement_for(parent_id: str | None) -> Placement:
    return Reply(parent_id) if parent_id else TopLevel()


# ==============================================================================
# Lazy reply list
# ==============================================================================


class _NotLoaded:
    """Sentinel: replies were never fetched."""

    _instance: "_NotLoaded | None" = None

    def __new__(cls) -> "_NotLoaded":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_LOADED"

    def __bool__(self) -> bool:
        return False


NOT_LOADED: Final = _NotLoaded()


@dataclass
class Loaded:
    """Fetched replies, newest first."""

    nodes: list["CommentNode"] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.nodes)


Replies = _NotLoaded | Loaded


# ==============================================================================
# Node lifecycle states
# ==============================================================================


class EditState(str, Enum):
    """Edit lifecycle of a comment."""

    VIEWING = "viewing"
    EDITING = "editing"


class DeleteState(str, Enum):
    """Two-step delete confirmation."""

    IDLE = "idle"
    CONFIRMING = "confirming"


# ==============================================================================
# Post
# ==============================================================================


def _parse_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return None


@dataclass
class Post:
    """The post a comment tree hangs off.

    Owned by the feed; the comment core reads ``id`` and writes
    ``comment_count``.
    """

    id: str
    author_email: str = ""
    author_username: str = ""
    created_at: datetime | None = None
    comment_count: int = 0

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "Post":
        """Create Post from a feed item."""
        return cls(
            id=str(data["forumPostId"]),
            author_email=data.get("userEmail") or "",
            author_username=data.get("username") or "",
            created_at=_parse_datetime(data.get("createdAt")),
            comment_count=data.get("commentCount") or 0,
        )
