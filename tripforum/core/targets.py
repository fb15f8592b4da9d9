"""Addressable forum targets (posts and comments)."""

from dataclasses import dataclass
from enum import Enum


class TargetType(str, Enum):
    """Kinds of target a reaction or report can point at."""

    POST = "POST"
    COMMENT = "COMMENT"


@dataclass(frozen=True, slots=True)
class Target:
    """A post or comment identified by type and id."""

    type: TargetType
    id: str
