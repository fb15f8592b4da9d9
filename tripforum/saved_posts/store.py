"""Saved flag and save count for one post."""

import asyncio
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
from tripforum.saved_posts.service import SavedPostApi


logger = get_logger(__name__)


class SavedPostToggle:
    """Save/unsave control for a post, applied after server confirmation."""

    def __init__(
        self,
        post_id: str,
        api: SavedPostApi,
        session: ViewerSession,
        on_login_required: Callable[[], None] | None = None,
    ) -> None:
        self.post_id = post_id
        self.api = api
        self.session = session
        self.on_login_required = on_login_required
        self.saved = False
        self.save_count = 0
        self.pending = False

    async def _load_saved(self) -> bool:
        viewer = self.session.current()
        if viewer is None:
            return False
        try:
            return await self.api.is_saved(self.post_id, viewer.email)
        except ForumError as e:
            logger.debug("saved_check_failed", post_id=self.post_id, error=e.code)
            return False

    async def _load_count(self) -> int:
        try:
            return await self.api.count(self.post_id)
        except ForumError as e:
            logger.debug("save_count_failed", post_id=self.post_id, error=e.code)
            return 0

    @interaction
    async def load(self) -> tuple[bool, int]:
        """Fetch the viewer's saved flag and the public count.

        Failures degrade to not-saved / zero.
        """
        self.saved, self.save_count = await asyncio.gather(
            self._load_saved(), self._load_count()
        )
        return self.saved, self.save_count

    @interaction
    async def toggle(self) -> Result[bool]:
        """Save the post, or unsave it when already saved.

        Returns:
            Ok(saved) once the server confirmed, Err otherwise
        """
        viewer = self.session.current()
        if viewer is None:
            if self.on_login_required:
                self.on_login_required()
            return Err(LoginRequiredError())
        if self.pending:
            return Err(OperationInProgressError())

        self.pending = True
        try:
            if self.saved:
                await self.api.unsave(self.post_id, viewer.email)
            else:
                await self.api.save(self.post_id, viewer.email)
        except LoginRequiredError as e:
            if self.on_login_required:
                self.on_login_required()
            return Err(e)
        except ForumError as e:
            logger.warning("save_toggle_failed", post_id=self.post_id, error=e.code)
            return Err(e)
        finally:
            self.pending = False

        if self.saved:
            self.saved = False
            self.save_count = max(0, self.save_count - 1)
        else:
            self.saved = True
            self.save_count += 1
        logger.info("post_saved_toggled", post_id=self.post_id, saved=self.saved)
        return Ok(self.saved)
