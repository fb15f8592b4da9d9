"""Current-viewer identity.

The forum core never authenticates anyone itself: the host application logs
the viewer in and hands over the resulting identity and bearer token. A
``ViewerSession`` is the accessor the rest of the core reads them through.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tripforum.core.errors import LoginRequiredError


class Viewer(BaseModel):
    """Authenticated viewer."""

    model_config = ConfigDict(frozen=True)

    email: str = Field(..., min_length=3, description="Email address")
    username: str = Field(..., min_length=1, description="Display name")
    avatar: str | None = Field(None, description="Avatar reference")

    @field_validator("email", "username")
    @classmethod
    def strip_value(cls, v: str) -> str:
        return v.strip()


class ViewerSession:
    """Holds the current viewer, bearer token and stored identity fallback."""

    def __init__(
        self,
        viewer: Viewer | None = None,
        token: str | None = None,
        stored_email: str | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            viewer: Logged-in viewer, or None when browsing anonymously
            token: Bearer token for authenticated calls
            stored_email: Best-effort identity remembered from an earlier
                session; only used for read-only reaction summaries
        """
        self._viewer = viewer
        self._token = token
        self._stored_email = stored_email

    def current(self) -> Viewer | None:
        """Return the logged-in viewer, or None."""
        return self._viewer

    def token(self) -> str | None:
        """Return the bearer token, or None."""
        return self._token if self._viewer else None

    @property
    def is_authenticated(self) -> bool:
        return self._viewer is not None

    def require(self) -> Viewer:
        """Return the viewer or raise ``LoginRequiredError``."""
        if self._viewer is None:
            raise LoginRequiredError
        return self._viewer

    def reaction_identity(self) -> str | None:
        """Identity used to look up the viewer's own reaction.

        Falls back to the stored email so a returning viewer still sees
        their reaction highlighted before logging in again.
        """
        if self._viewer is not None:
            return self._viewer.email
        return self._stored_email

    def login(self, viewer: Viewer, token: str | None) -> None:
        self._viewer = viewer
        self._token = token
        self._stored_email = viewer.email

    def logout(self) -> None:
        """Forget the session; the stored email survives as a fallback."""
        self._viewer = None
        self._token = None
