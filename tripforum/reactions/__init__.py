"""Like/dislike reactions for posts and comments."""

from tripforum.reactions.models import ReactionKind, ReactionState
from tripforum.reactions.service import ReactionApi
from tripforum.reactions.store import ReactionStore


__all__ = ["ReactionApi", "ReactionKind", "ReactionState", "ReactionStore"]
