"""Client-side reaction store for one target.

Toggle protocol:
- clicking the kind the viewer already holds removes it
- clicking the other kind (or any kind with no reaction) adds it; a switch
  is a single ``add`` call, the server drops the old row itself

State is only changed after the server confirmed the call, so a failed
request never leaves the counts drifting. A store handles one click at a
time: a second click while the first is outstanding is refused.
"""

from collections.abc import Callable

from tripforum.auth.identity import ViewerSession
from tripforum.core.context import interaction
from tripforum.core.errors import (
    ForumError,
    LoginRequiredError,
    OperationInProgressError,
)
from tripforum.core.logging import get_logger
from tripforum.core.result import Err, Ok, Result
from tripforum.core.targets import Target
from tripforum.reactions.models import ReactionKind, ReactionState
from tripforum.reactions.service import ReactionApi


logger = get_logger(__name__)


class ReactionStore:
    """Reaction counts and the viewer's reaction for a post or comment."""

    def __init__(
        self,
        target: Target,
        api: ReactionApi,
        session: ViewerSession,
        on_login_required: Callable[[], None] | None = None,
        initial: ReactionState | None = None,
    ) -> None:
        self.target = target
        self.api = api
        self.session = session
        self.on_login_required = on_login_required
        self.state = initial or ReactionState()
        self.pending = False
        self._closed = False

    def close(self) -> None:
        """Detach the store; results that arrive afterwards are discarded."""
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    @interaction
    async def load(self) -> ReactionState:
        """Fetch counts and the viewer's reaction.

        Any failure leaves the current (zero) state in place; reaction display
        must never block rendering the comment it belongs to.
        """
        try:
            state = await self.api.get_summary(
                self.target, self.session.reaction_identity()
            )
        except ForumError as e:
            logger.debug(
                "reaction_load_failed",
                target_type=self.target.type.value,
                target_id=self.target.id,
                error=e.code,
            )
            return self.state

        if not self._closed:
            self.state = state
        return self.state

    def _login_required(self, error: LoginRequiredError) -> Err:
        if self.on_login_required:
            self.on_login_required()
        return Err(error)

    @interaction
    async def set_reaction(self, kind: ReactionKind) -> Result[ReactionState]:
        """Apply the toggle protocol for a click on ``kind``.

        Returns:
            Ok(new_state) once the server confirmed, Err otherwise
        """
        viewer = self.session.current()
        if viewer is None:
            return self._login_required(LoginRequiredError())
        if self.pending:
            return Err(OperationInProgressError())

        previous = self.state
        self.pending = True
        try:
            if previous.user_reaction is kind:
                await self.api.remove(self.target, kind, viewer.email)
                new_state = previous.after_remove(kind)
            else:
                await self.api.add(self.target, kind, viewer.email)
                new_state = previous.after_add(kind)
        except LoginRequiredError as e:
            return self._login_required(e)
        except ForumError as e:
            logger.warning(
                "reaction_update_failed",
                target_type=self.target.type.value,
                target_id=self.target.id,
                reaction=kind.value,
                error=e.code,
            )
            return Err(e)
        finally:
            self.pending = False

        if self._closed:
            logger.debug("reaction_result_discarded", target_id=self.target.id)
            return Ok(new_state)

        self.state = new_state
        logger.info(
            "reaction_updated",
            target_type=self.target.type.value,
            target_id=self.target.id,
            user_reaction=getattr(new_state.user_reaction, "value", None),
        )
        return Ok(new_state)
