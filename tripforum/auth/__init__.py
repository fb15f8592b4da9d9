from tripforum.auth.identity import Viewer, ViewerSession
from tripforum.auth.permissions import CommentAffordances, ModerationGate


__all__ = ["CommentAffordances", "ModerationGate", "Viewer", "ViewerSession"]
