"""Top-level comment list for one post.

The whole top-level set is fetched once and revealed client-side: the first
K comments by default, all of them after ``reveal()``. New comments are
prepended (the server lists newest first) and every create or delete at any
depth moves the post's comment count by exactly one.
"""

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING

from tripforum.comments.models import Loaded, Post
from tripforum.comments.node import EMPTY_CONTENT_KEY, CommentNode
from tripforum.comments.schemas import CreateCommentRequest
from tripforum.core.context import interaction
from tripforum.core.errors import (
    FieldValidationError,
    ForumError,
    LoginRequiredError,
    OperationInProgressError,
)
from tripforum.core.logging import get_logger
from tripforum.core.result import Err, Ok, Result
from tripforum.core.targets import TargetType


if TYPE_CHECKING:
    from tripforum.auth.identity import ViewerSession
    from tripforum.dependencies import ForumDependencies


logger = get_logger(__name__)


class CommentTree:
    """Owns the top-level comments of a post and its comment count."""

    def __init__(
        self,
        post: Post,
        deps: "ForumDependencies",
        on_count_change: Callable[[int], None] | None = None,
    ) -> None:
        self.post = post
        self.deps = deps
        self.on_count_change = on_count_change
        self.nodes: list[CommentNode] = []
        self.expanded = False
        self.draft = ""
        self.loaded = False
        self.submitting = False
        self.mounted = True

    # ==========================================================================
    # View state
    # ==========================================================================

    @property
    def session(self) -> "ViewerSession":
        return self.deps.session

    @property
    def window_size(self) -> int:
        return self.deps.settings.comments_initial_visible

    @property
    def visible(self) -> list[CommentNode]:
        """Comments currently shown: the first K, or all once revealed."""
        if self.expanded:
            return list(self.nodes)
        return self.nodes[: self.window_size]

    @property
    def has_more(self) -> bool:
        return len(self.nodes) > self.window_size

    def reveal(self) -> bool:
        """Toggle between the first K comments and the full list.

        Returns:
            True when the full list is now shown
        """
        self.expanded = not self.expanded
        return self.expanded

    def find(self, node_id: str) -> CommentNode | None:
        """Look up a loaded comment or reply by id."""
        for node in self.nodes:
            if node.id == node_id:
                return node
            if isinstance(node.replies, Loaded):
                for reply in node.replies.nodes:
                    if reply.id == node_id:
                        return reply
        return None

    # ==========================================================================
    # Count propagation
    # ==========================================================================

    def _publish_count(self, total: int) -> None:
        self.post.comment_count = max(0, total)
        if self.on_count_change:
            self.on_count_change(self.post.comment_count)

    def adjust_count(self, delta: int) -> None:
        """Move the post's comment count by ``delta`` and notify the host."""
        if not self.mounted:
            return
        self._publish_count(self.post.comment_count + delta)

    # ==========================================================================
    # Load
    # ==========================================================================

    @interaction
    async def load(self) -> Result[list[CommentNode]]:
        """Fetch all comments of the post and keep the top-level ones.

        Replies in the response are only counted; each node fetches its own
        replies when expanded. The reported total includes them.
        """
        try:
            payloads = await self.deps.comments.list_by_post(self.post.id)
        except ForumError as e:
            if isinstance(e, LoginRequiredError):
                self.deps.login_required()
            logger.warning("comments_load_failed", post_id=self.post.id, error=e.code)
            return Err(e)

        if not self.mounted:
            return Ok([])

        for node in self.nodes:
            node.unmount()
        self.nodes = [
            CommentNode(payload, self.deps, self)
            for payload in payloads
            if payload.is_top_level
        ]
        self.expanded = False
        self.loaded = True
        self._publish_count(len(payloads))
        logger.debug(
            "comments_loaded",
            post_id=self.post.id,
            top_level=len(self.nodes),
            total=len(payloads),
        )

        if self.nodes:
            await asyncio.gather(
                self.deps.ledger.check_many(
                    [node.id for node in self.nodes], TargetType.COMMENT
                ),
                *(node.prime() for node in self.nodes),
            )
        return Ok(list(self.nodes))

    # ==========================================================================
    # Mutations
    # ==========================================================================

    @interaction
    async def create_top_level(
        self, content: str | None = None
    ) -> Result[CommentNode]:
        """Post a new top-level comment.

        Uses ``draft`` when ``content`` is None. The server-returned node is
        prepended and the count goes up by one; the draft is cleared only on
        success.
        """
        text = (self.draft if content is None else content).strip()
        if not text:
            return Err(FieldValidationError("content", EMPTY_CONTENT_KEY))
        viewer = self.deps.session.current()
        if viewer is None:
            self.deps.login_required()
            return Err(LoginRequiredError())
        if self.submitting:
            return Err(OperationInProgressError())

        self.submitting = True
        try:
            payload = await self.deps.comments.create(
                CreateCommentRequest(
                    user_email=viewer.email,
                    forum_post_id=self.post.id,
                    content=text,
                    img_path=self.deps.settings.comment_image_placeholder,
                )
            )
        except ForumError as e:
            if isinstance(e, LoginRequiredError):
                self.deps.login_required()
            else:
                logger.warning(
                    "comment_create_failed", post_id=self.post.id, error=e.code
                )
            return Err(e)
        finally:
            self.submitting = False

        node = CommentNode(payload, self.deps, self)
        if not self.mounted:
            return Ok(node)
        self.nodes.insert(0, node)
        self.draft = ""
        self.adjust_count(1)
        logger.info("comment_created", post_id=self.post.id, comment_id=node.id)
        return Ok(node)

    def remove(self, node_id: str) -> bool:
        """Drop a deleted top-level comment and count it down.

        Returns:
            False when no such top-level comment is loaded
        """
        before = len(self.nodes)
        self.nodes = [node for node in self.nodes if node.id != node_id]
        if len(self.nodes) == before:
            return False
        self.adjust_count(-1)
        return True

    def unmount(self) -> None:
        """Detach the tree and all its nodes from the view."""
        self.mounted = False
        for node in self.nodes:
            node.unmount()
