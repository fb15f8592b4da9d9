"""Ownership and visibility rules for forum content.

Owners of a comment may edit or delete it; everyone else (when logged in)
may report it. The two sets of controls are never offered together.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from tripforum.auth.identity import Viewer
from tripforum.core.targets import TargetType


if TYPE_CHECKING:
    from tripforum.reports.ledger import ReportLedger


class Authored(Protocol):
    author_email: str


class PostLike(Protocol):
    author_email: str
    author_username: str


def _same(a: str | None, b: str | None) -> bool:
    if not a or not b:
        return False
    return a.strip().lower() == b.strip().lower()


@dataclass(frozen=True, slots=True)
class CommentAffordances:
    """Which controls the viewer gets on one comment."""

    can_edit: bool = False
    can_delete: bool = False
    can_report: bool = False
    already_reported: bool = False


class ModerationGate:
    """Decides who may edit, delete or report forum content."""

    @staticmethod
    def can_modify(viewer_identity: str | None, node: Authored) -> bool:
        """True iff the viewer authored the comment (case-insensitive email)."""
        return _same(viewer_identity, node.author_email)

    @staticmethod
    def can_modify_post(viewer: Viewer | None, post: PostLike) -> bool:
        """Posts also accept a username match, as the feed keys some by name."""
        if viewer is None:
            return False
        return _same(viewer.email, post.author_email) or _same(
            viewer.username, post.author_username
        )

    def affordances(
        self,
        viewer: Viewer | None,
        node: "Authored",
        node_id: str,
        ledger: "ReportLedger",
    ) -> CommentAffordances:
        """Controls for ``node`` as seen by ``viewer``.

        Anonymous viewers get nothing; owners get edit+delete; others get
        report, flagged as already reported when the ledger says so.
        """
        if viewer is None:
            return CommentAffordances()
        if self.can_modify(viewer.email, node):
            return CommentAffordances(can_edit=True, can_delete=True)
        reported = ledger.is_reported(node_id, TargetType.COMMENT)
        return CommentAffordances(can_report=not reported, already_reported=reported)
