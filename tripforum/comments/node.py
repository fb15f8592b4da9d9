"""A single comment or reply in a post's comment tree.

Each node owns its own ``ReactionStore`` and, for top-level comments, a
lazily fetched reply list. Mutations follow the same rule as reactions: the
node's visible data only changes once the server confirmed the call.

Edit lifecycle:   viewing -> editing -> viewing (save | cancel)
Delete lifecycle: idle -> confirming -> (confirm: removed | cancel: idle)
"""

import asyncio
from typing import TYPE_CHECKING

from tripforum.auth.permissions import CommentAffordances
from tripforum.comments.models import (
    NOT_LOADED,
    DeleteState,
    EditState,
    Loaded,
    Placement,
    Replies,
    Reply,
    placement_for,
)
from tripforum.comments.schemas import (
    CommentPayload,
    CreateCommentRequest,
    UpdateCommentRequest,
)
from tripforum.core.context import interaction
from tripforum.core.errors import (
    FieldValidationError,
    ForbiddenError,
    ForumError,
    LoginRequiredError,
    NotFoundError,
    OperationInProgressError,
)
from tripforum.core.logging import get_logger
from tripforum.core.result import Err, Ok, Result
from tripforum.core.targets import TargetType


if TYPE_CHECKING:
    from tripforum.auth.identity import Viewer, ViewerSession
    from tripforum.comments.tree import CommentTree
    from tripforum.dependencies import ForumDependencies


logger = get_logger(__name__)

EMPTY_CONTENT_KEY = "forum.comments.emptyContent"


class InvalidStateError(ForumError):
    """Action not available in the node's current state."""

    def __init__(self, message: str):
        super().__init__(message, "invalid_state")


class CommentNode:
    """One comment or reply, with its reactions and (lazy) replies."""

    def __init__(
        self,
        payload: CommentPayload,
        deps: "ForumDependencies",
        tree: "CommentTree",
        parent: "CommentNode | None" = None,
    ) -> None:
        """Create a node from a server payload.

        Args:
            payload: Comment as returned by the server
            deps: Shared collaborators (APIs, session, ledger, gate)
            tree: Tree of the post this comment belongs to
            parent: Top-level comment when this node is a reply. A reply
                to a reply is attached to the same top-level comment.
        """
        if parent is not None and isinstance(parent.placement, Reply):
            parent = parent.parent
        self.id = payload.forum_comment_id
        self.placement: Placement = placement_for(parent.id if parent else None)
        self.author_email = payload.user_email
        self.author_username = payload.username
        self.author_avatar = payload.user_avatar
        self.content = payload.content
        self.created_at = payload.created_at

        self.reaction = deps.reaction_store(self.id, TargetType.COMMENT)
        self.replies: Replies = NOT_LOADED
        self.replies_visible = False

        self.edit_state = EditState.VIEWING
        self.edit_draft: str | None = None
        self.delete_state = DeleteState.IDLE
        self.reply_draft = ""

        self.saving = False
        self.deleting = False
        self.replying = False
        self.loading_replies = False
        self.mounted = True

        self.deps = deps
        self.tree = tree
        self.parent = parent

    def __repr__(self) -> str:
        return f"CommentNode(id={self.id!r}, placement={self.placement!r})"

    # ==========================================================================
    # Derived view state
    # ==========================================================================

    @property
    def session(self) -> "ViewerSession":
        return self.deps.session

    @property
    def is_reply(self) -> bool:
        return isinstance(self.placement, Reply)

    @property
    def parent_id(self) -> str | None:
        return self.placement.parent_id if isinstance(self.placement, Reply) else None

    @property
    def thread_root(self) -> "CommentNode":
        """The top-level comment whose reply list this node lives in."""
        return self.parent if self.parent is not None else self

    @property
    def display_content(self) -> str:
        if self.edit_state is EditState.EDITING and self.edit_draft is not None:
            return self.edit_draft
        return self.content

    @property
    def report_status(self) -> str:
        """'reported' or 'none', read from the shared ledger."""
        if self.deps.ledger.is_reported(self.id, TargetType.COMMENT):
            return "reported"
        return "none"

    @property
    def affordances(self) -> CommentAffordances:
        return self.deps.gate.affordances(
            self.deps.session.current(), self, self.id, self.deps.ledger
        )

    @property
    def visible_replies(self) -> list["CommentNode"]:
        if isinstance(self.replies, Loaded) and self.replies_visible:
            return list(self.replies.nodes)
        return []

    def is_owned_by(self, viewer: "Viewer | None") -> bool:
        return viewer is not None and self.deps.gate.can_modify(viewer.email, self)

    # ==========================================================================
    # Helpers
    # ==========================================================================

    def _fail(self, event: str, error: ForumError) -> Err:
        if isinstance(error, LoginRequiredError):
            self.deps.login_required()
        else:
            logger.warning(event, comment_id=self.id, error=error.code)
        return Err(error)

    def _owner_or_err(self) -> "Viewer | Err":
        viewer = self.deps.session.current()
        if viewer is None:
            return self._fail("login_required", LoginRequiredError())
        if not self.is_owned_by(viewer):
            return Err(ForbiddenError("Only the author can change this comment"))
        return viewer

    async def prime(self) -> None:
        """Load this node's reaction state (failures degrade to zero)."""
        await self.reaction.load()

    def unmount(self) -> None:
        """Detach the node from the view; late results are ignored."""
        self.mounted = False
        self.reaction.close()
        if isinstance(self.replies, Loaded):
            for reply in self.replies.nodes:
                reply.unmount()

    # ==========================================================================
    # Edit
    # ==========================================================================

    def begin_edit(self) -> bool:
        """Enter edit mode with the current text as draft (owners only)."""
        if not self.is_owned_by(self.deps.session.current()):
            return False
        self.edit_state = EditState.EDITING
        self.edit_draft = self.content
        return True

    def update_edit_draft(self, text: str) -> None:
        if self.edit_state is EditState.EDITING:
            self.edit_draft = text

    def cancel_edit(self) -> None:
        """Leave edit mode and discard the draft."""
        if self.saving:
            return
        self.edit_state = EditState.VIEWING
        self.edit_draft = None

    @interaction
    async def save_edit(self) -> Result[str]:
        """Send the draft; content changes only after the server accepted it.

        Returns:
            Ok(new_content) or Err; on Err the node stays in edit mode with
            the draft intact
        """
        if self.edit_state is not EditState.EDITING:
            return Err(InvalidStateError("Comment is not being edited"))
        text = (self.edit_draft or "").strip()
        if not text:
            return Err(FieldValidationError("content", EMPTY_CONTENT_KEY))
        viewer = self._owner_or_err()
        if isinstance(viewer, Err):
            return viewer
        if self.saving:
            return Err(OperationInProgressError())

        self.saving = True
        try:
            updated = await self.deps.comments.update(
                self.id, UpdateCommentRequest(content=text, user_email=viewer.email)
            )
        except ForumError as e:
            return self._fail("comment_update_failed", e)
        finally:
            self.saving = False

        new_content = updated.content if updated and updated.content else text
        if not self.mounted:
            return Ok(new_content)

        self.content = new_content
        self.edit_state = EditState.VIEWING
        self.edit_draft = None
        logger.info("comment_updated", comment_id=self.id)
        return Ok(new_content)

    # ==========================================================================
    # Delete
    # ==========================================================================

    def request_delete(self) -> bool:
        """First step of delete: ask for confirmation (owners only)."""
        if not self.is_owned_by(self.deps.session.current()):
            return False
        self.delete_state = DeleteState.CONFIRMING
        return True

    def cancel_delete(self) -> None:
        if not self.deleting:
            self.delete_state = DeleteState.IDLE

    @interaction
    async def confirm_delete(self) -> Result[None]:
        """Second step of delete: remove on the server, then locally.

        The node leaves its immediate collection only (the tree for a
        top-level comment, the parent's replies for a reply) and the post
        count drops by one. Loaded replies of a deleted top-level comment
        are not counted down; whether the server cascades is not known.
        """
        if self.delete_state is not DeleteState.CONFIRMING:
            return Err(InvalidStateError("Delete was not requested"))
        viewer = self._owner_or_err()
        if isinstance(viewer, Err):
            self.delete_state = DeleteState.IDLE
            return viewer
        if self.deleting:
            return Err(OperationInProgressError())

        self.deleting = True
        try:
            await self.deps.comments.delete(self.id, viewer.email)
        except ForumError as e:
            return self._fail("comment_delete_failed", e)
        finally:
            self.deleting = False
            self.delete_state = DeleteState.IDLE

        logger.info("comment_deleted", comment_id=self.id, parent_id=self.parent_id)
        if self.parent is not None:
            self.parent.detach_reply(self.id)
        else:
            self.tree.remove(self.id)
        self.unmount()
        return Ok(None)

    # ==========================================================================
    # Replies
    # ==========================================================================

    def detach_reply(self, reply_id: str) -> bool:
        """Drop a deleted reply from this comment's list and count it down."""
        if not isinstance(self.replies, Loaded):
            return False
        before = len(self.replies.nodes)
        self.replies.nodes = [n for n in self.replies.nodes if n.id != reply_id]
        if len(self.replies.nodes) == before:
            return False
        self.tree.adjust_count(-1)
        return True

    @interaction
    async def load_replies(self) -> Result[list["CommentNode"]]:
        """Fetch replies, replacing the NOT_LOADED sentinel.

        A 404 (parent deleted server-side) is an empty reply list. Loaded
        replies get their report status and reactions primed.
        """
        root = self.thread_root
        if root is not self:
            return await root.load_replies()
        if self.loading_replies:
            return Err(OperationInProgressError())

        self.loading_replies = True
        try:
            payloads = await self.deps.comments.list_replies(self.id)
        except NotFoundError:
            logger.info("replies_parent_missing", comment_id=self.id)
            payloads = []
        except ForumError as e:
            return self._fail("replies_load_failed", e)
        finally:
            self.loading_replies = False

        if not self.mounted:
            return Ok([])

        nodes = [
            CommentNode(payload, self.deps, self.tree, parent=self)
            for payload in payloads
        ]
        self.replies = Loaded(nodes)
        self.replies_visible = True
        if nodes:
            await asyncio.gather(
                self.deps.ledger.check_many([n.id for n in nodes], TargetType.COMMENT),
                *(node.prime() for node in nodes),
            )
        return Ok(nodes)

    @interaction
    async def toggle_replies(self) -> Result[bool]:
        """Show/hide replies; the first expansion fetches them.

        Returns:
            Ok(visible) or the load error
        """
        root = self.thread_root
        if root is not self:
            return await root.toggle_replies()
        if isinstance(self.replies, Loaded):
            self.replies_visible = not self.replies_visible
            return Ok(self.replies_visible)
        result = await self.load_replies()
        if isinstance(result, Err):
            return result
        return Ok(self.replies_visible)

    @interaction
    async def create_reply(self, content: str | None = None) -> Result["CommentNode"]:
        """Post a reply under this comment's thread.

        Uses ``reply_draft`` when ``content`` is None. On a reply the new
        node is attached to the same top-level comment. The draft is cleared
        on success and kept on failure.
        """
        root = self.thread_root
        text = (self.reply_draft if content is None else content).strip()
        if not text:
            return Err(FieldValidationError("content", EMPTY_CONTENT_KEY))
        viewer = self.deps.session.current()
        if viewer is None:
            return self._fail("login_required", LoginRequiredError())
        if root.replying:
            return Err(OperationInProgressError())

        root.replying = True
        try:
            if not isinstance(root.replies, Loaded):
                loaded = await root.load_replies()
                if isinstance(loaded, Err):
                    return loaded
            payload = await self.deps.comments.create(
                CreateCommentRequest(
                    user_email=viewer.email,
                    forum_post_id=self.tree.post.id,
                    content=text,
                    img_path=self.deps.settings.comment_image_placeholder,
                    parent_comment_id=root.id,
                )
            )
        except ForumError as e:
            return self._fail("reply_create_failed", e)
        finally:
            root.replying = False

        node = CommentNode(payload, self.deps, self.tree, parent=root)
        if not root.mounted:
            return Ok(node)
        if isinstance(root.replies, Loaded):
            root.replies.nodes.insert(0, node)
        root.replies_visible = True
        self.reply_draft = ""
        self.tree.adjust_count(1)
        logger.info("reply_created", comment_id=node.id, parent_id=root.id)
        return Ok(node)
