"""Reaction state for a single post or comment.

Likes and dislikes are two independent tallies on the server. The viewer may
hold at most one of them; ``ReactionState`` encodes that exclusivity and the
count arithmetic applied after the server confirmed a change.
"""

from dataclasses import dataclass, replace
from enum import Enum


class ReactionKind(str, Enum):
    """Available reaction kinds."""

    LIKE = "LIKE"
    DISLIKE = "DISLIKE"

    @property
    def opposite(self) -> "ReactionKind":
        return ReactionKind.DISLIKE if self is ReactionKind.LIKE else ReactionKind.LIKE


@dataclass(frozen=True, slots=True)
class ReactionState:
    """Aggregate counts plus the viewer's own reaction."""

    like_count: int = 0
    dislike_count: int = 0
    user_reaction: ReactionKind | None = None

    def count(self, kind: ReactionKind) -> int:
        return self.like_count if kind is ReactionKind.LIKE else self.dislike_count

    def _with_count(self, kind: ReactionKind, value: int) -> "ReactionState":
        value = max(0, value)
        if kind is ReactionKind.LIKE:
            return replace(self, like_count=value)
        return replace(self, dislike_count=value)

    def after_remove(self, kind: ReactionKind) -> "ReactionState":
        """State once the server confirmed the viewer's reaction was removed."""
        state = self._with_count(kind, self.count(kind) - 1)
        return replace(state, user_reaction=None)

    def after_add(self, kind: ReactionKind) -> "ReactionState":
        """State once the server confirmed ``kind`` was added.

        A switch from the opposite kind is a single round trip: the opposite
        count drops by one in the same update.
        """
        state = self._with_count(kind, self.count(kind) + 1)
        if self.user_reaction is kind.opposite:
            state = state._with_count(kind.opposite, self.count(kind.opposite) - 1)
        return replace(state, user_reaction=kind)
