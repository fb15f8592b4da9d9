"""Per-session record of what the viewer has already reported.

One ledger is shared by every comment node rendered for a forum page, so a
report confirmed on one node immediately changes the affordance on every
other node showing the same target. Entries are keyed by viewer, target type
and target id, and are never removed: there is no way to withdraw a report.
"""

import asyncio
from collections.abc import Callable, Iterable

from tripforum.auth.identity import ViewerSession
from tripforum.core.errors import ForumError
from tripforum.core.logging import get_logger
from tripforum.core.targets import Target, TargetType
from tripforum.reports.service import ReportApi


logger = get_logger(__name__)

LedgerKey = tuple[str, TargetType, str]
LedgerListener = Callable[[Target], None]


class ReportLedger:
    """Shared, monotonic set of reported targets."""

    def __init__(self, api: ReportApi, session: ViewerSession) -> None:
        self.api = api
        self.session = session
        self._reported: set[LedgerKey] = set()
        self._listeners: list[LedgerListener] = []

    def _key(self, viewer_email: str, target: Target) -> LedgerKey:
        return (viewer_email.lower(), target.type, target.id)

    def subscribe(self, listener: LedgerListener) -> Callable[[], None]:
        """Register a callback fired synchronously when a target is marked.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def is_reported(
        self, target_id: str, target_type: TargetType = TargetType.COMMENT
    ) -> bool:
        """Has the current viewer already reported this target?"""
        viewer = self.session.current()
        if viewer is None:
            return False
        target = Target(target_type, target_id)
        return self._key(viewer.email, target) in self._reported

    def mark_reported(
        self, target_id: str, target_type: TargetType = TargetType.COMMENT
    ) -> None:
        """Record a confirmed (or duplicate) report. Idempotent."""
        viewer = self.session.current()
        if viewer is None:
            return
        target = Target(target_type, target_id)
        key = self._key(viewer.email, target)
        if key in self._reported:
            return
        self._reported.add(key)
        logger.debug(
            "report_marked", target_type=target_type.value, target_id=target_id
        )
        for listener in list(self._listeners):
            listener(target)

    async def _check_one(self, viewer_email: str, target: Target) -> bool:
        try:
            return await self.api.check(viewer_email, target)
        except ForumError as e:
            logger.warning(
                "report_check_failed",
                target_type=target.type.value,
                target_id=target.id,
                error=e.code,
            )
            return False

    async def check_many(
        self,
        target_ids: Iterable[str],
        target_type: TargetType = TargetType.COMMENT,
    ) -> set[str]:
        """Prime the ledger for a batch of targets.

        One check call per id not already known to be reported; ids whose
        check fails are treated as not reported.

        Returns:
            The subset of ``target_ids`` the viewer has reported
        """
        viewer = self.session.current()
        ids = list(dict.fromkeys(target_ids))
        if viewer is None or not ids:
            return set()

        unknown = [
            target_id
            for target_id in ids
            if not self.is_reported(target_id, target_type)
        ]
        results = await asyncio.gather(
            *(
                self._check_one(viewer.email, Target(target_type, target_id))
                for target_id in unknown
            )
        )

        current = self.session.current()
        same_viewer = current is not None and current.email == viewer.email
        for target_id, reported in zip(unknown, results, strict=True):
            if reported and same_viewer:
                self.mark_reported(target_id, target_type)

        return {
            target_id for target_id in ids if self.is_reported(target_id, target_type)
        }
