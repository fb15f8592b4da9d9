"""HTTP access to the reaction endpoints."""

from tripforum.core.errors import raise_for_status
from tripforum.core.http import ApiClient
from tripforum.core.schemas import parse_response
from tripforum.core.targets import Target, TargetType
from tripforum.reactions.models import ReactionKind, ReactionState
from tripforum.reactions.schemas import ReactionRequest, ReactionSummaryResponse


_SUMMARY_PATHS = {
    TargetType.POST: "/api/reactions/post/{id}/summary",
    TargetType.COMMENT: "/api/reactions/comment/{id}/summary",
}


class ReactionApi:
    """Reaction summary, add and remove calls."""

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    async def get_summary(
        self, target: Target, viewer_email: str | None
    ) -> ReactionState:
        """Fetch counts and, when an identity is given, the viewer's reaction."""
        params = {"userEmail": viewer_email} if viewer_email else None
        response = await self.client.get(
            _SUMMARY_PATHS[target.type].format(id=target.id), params=params
        )
        raise_for_status(response)
        return parse_response(ReactionSummaryResponse, response).to_state()

    async def add(self, target: Target, kind: ReactionKind, viewer_email: str) -> None:
        """Add (or switch to) ``kind`` for the viewer."""
        body = ReactionRequest(
            target_id=target.id,
            target_type=target.type,
            reaction_type=kind,
            user_email=viewer_email,
        )
        response = await self.client.post("/api/reactions/add", json=body.to_wire())
        raise_for_status(response)

    async def remove(
        self, target: Target, kind: ReactionKind, viewer_email: str
    ) -> None:
        """Remove the viewer's ``kind`` reaction."""
        body = ReactionRequest(
            target_id=target.id,
            target_type=target.type,
            reaction_type=kind,
            user_email=viewer_email,
        )
        response = await self.client.post("/api/reactions/delete", json=body.to_wire())
        raise_for_status(response)
