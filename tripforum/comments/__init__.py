"""Comment tree module.

Provides the two-level comment tree of a forum post:
- Top-level comments with client-side "show more"
- Lazily loaded replies (one nesting level)
- Edit and two-step delete with pessimistic apply
"""

from tripforum.comments.models import (
    NOT_LOADED,
    DeleteState,
    EditState,
    Loaded,
    Post,
    Reply,
    TopLevel,
)
from tripforum.comments.node import CommentNode
from tripforum.comments.service import CommentApi
from tripforum.comments.tree import CommentTree


__all__ = [
    "NOT_LOADED",
    "CommentApi",
    "CommentNode",
    "CommentTree",
    "DeleteState",
    "EditState",
    "Loaded",
    "Post",
    "Reply",
    "TopLevel",
]
