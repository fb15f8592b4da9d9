"""Dependency wiring for the forum core.

Everything a forum page needs is built once into a ``ForumDependencies``
and passed by reference to each comment tree and node. In particular the
``ReportLedger`` is a single shared instance so that dedup state is visible
to every node at once.
"""

from collections.abc import Callable
from dataclasses import dataclass

import httpx

from tripforum.auth.identity import ViewerSession
from tripforum.auth.permissions import ModerationGate
from tripforum.comments.service import CommentApi
from tripforum.config.settings import Settings
from tripforum.core.http import ApiClient
from tripforum.core.targets import Target, TargetType
from tripforum.reactions.service import ReactionApi
from tripforum.reactions.store import ReactionStore
from tripforum.reports.flow import ReportFlow
from tripforum.reports.ledger import ReportLedger
from tripforum.reports.service import ReportApi
from tripforum.saved_posts.service import SavedPostApi
from tripforum.saved_posts.store import SavedPostToggle


def _identity(key: str) -> str:
    return key


@dataclass
class ForumDependencies:
    """Shared collaborators for one forum page."""

    settings: Settings
    session: ViewerSession
    client: ApiClient
    comments: CommentApi
    reactions: ReactionApi
    reports: ReportApi
    saved_posts: SavedPostApi
    ledger: ReportLedger
    gate: ModerationGate
    translate: Callable[[str], str] = _identity
    on_login_required: Callable[[], None] | None = None

    def login_required(self) -> None:
        """Notify the host that a gated action needs a logged-in viewer."""
        if self.on_login_required:
            self.on_login_required()

    def reaction_store(
        self, target_id: str, target_type: TargetType = TargetType.COMMENT
    ) -> ReactionStore:
        return ReactionStore(
            Target(target_type, target_id),
            self.reactions,
            self.session,
            on_login_required=self.on_login_required,
        )

    def report_flow(self) -> ReportFlow:
        return ReportFlow(
            self.reports,
            self.ledger,
            self.session,
            self.settings,
            translate=self.translate,
            on_login_required=self.on_login_required,
        )

    def saved_post_toggle(self, post_id: str) -> SavedPostToggle:
        return SavedPostToggle(
            post_id,
            self.saved_posts,
            self.session,
            on_login_required=self.on_login_required,
        )

    async def aclose(self) -> None:
        await self.client.aclose()


def build_dependencies(
    settings: Settings,
    session: ViewerSession,
    *,
    translate: Callable[[str], str] | None = None,
    on_login_required: Callable[[], None] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ForumDependencies:
    """Create the API clients, shared ledger and gate for a forum page.

    Args:
        settings: Client settings
        session: Current-viewer accessor; also supplies the bearer token
        translate: Localization function for display strings
        on_login_required: Called whenever an anonymous viewer hits a gated
            action or the server answers 401
        transport: Optional httpx transport override (used by tests)
    """
    client = ApiClient(settings, token_provider=session.token, transport=transport)
    reports = ReportApi(client, settings.duplicate_report_error_code)
    return ForumDependencies(
        settings=settings,
        session=session,
        client=client,
        comments=CommentApi(client),
        reactions=ReactionApi(client),
        reports=reports,
        saved_posts=SavedPostApi(client),
        ledger=ReportLedger(reports, session),
        gate=ModerationGate(),
        translate=translate or _identity,
        on_login_required=on_login_required,
    )
