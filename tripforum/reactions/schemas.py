"""Wire schemas for the reaction endpoints."""

from pydantic import Field, field_validator

from tripforum.core.schemas import WireModel
from tripforum.core.targets import TargetType
from tripforum.reactions.models import ReactionKind, ReactionState


class ReactionSummaryResponse(WireModel):
    """Counts for one target plus the asking viewer's reaction."""

    like_count: int = 0
    dislike_count: int = 0
    user_reaction: ReactionKind | None = None

    @field_validator("like_count", "dislike_count", mode="before")
    @classmethod
    def default_missing_count(cls, v: int | None) -> int:
        return v or 0

    @field_validator("user_reaction", mode="before")
    @classmethod
    def normalize_reaction(cls, v: str | None) -> str | None:
        return v.upper() if v else None

    def to_state(self) -> ReactionState:
        return ReactionState(
            like_count=max(0, self.like_count),
            dislike_count=max(0, self.dislike_count),
            user_reaction=self.user_reaction,
        )


class ReactionRequest(WireModel):
    """Body of reaction add/remove calls."""

    target_id: str
    target_type: TargetType
    reaction_type: ReactionKind
    user_email: str = Field(..., min_length=1)
