from tripforum.saved_posts.service import SavedPostApi
from tripforum.saved_posts.store import SavedPostToggle


__all__ = ["SavedPostApi", "SavedPostToggle"]
