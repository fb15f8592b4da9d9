"""Forum client core for the travel platform.

Comment tree with lazy replies, like/dislike reactions, report submission
with per-session dedup, and saved posts, synchronized against the forum API.
"""

__version__ = "0.1.0"
