"""Report submission flow.

    closed -> reason_selection -> submitting -> success | duplicate | error

- reason_selection: at least one reason, optional description (trimmed,
  capped, blank becomes None). Validation never reaches the network.
- success: ledger marked, acknowledgement shown and auto-dismissed.
- duplicate: the server already had a report from this viewer; the ledger is
  marked and the modal closes without the acknowledgement.
- error: ledger untouched, draft kept so the viewer can retry as is.
"""

import asyncio
from collections.abc import Callable

from tripforum.auth.identity import ViewerSession
from tripforum.config.settings import Settings
from tripforum.core.context import interaction
from tripforum.core.errors import (
    DuplicateReportError,
    FieldValidationError,
    ForumError,
    LoginRequiredError,
)
from tripforum.core.logging import get_logger
from tripforum.core.targets import Target, TargetType
from tripforum.reports.ledger import ReportLedger
from tripforum.reports.models import (
    ReportDraft,
    ReportFlowState,
    ReportOutcome,
    ReportReason,
)
from tripforum.reports.schemas import CreateReportRequest
from tripforum.reports.service import ReportApi


logger = get_logger(__name__)

SUBMIT_ERROR_KEY = "forum.modals.report.submitError"


def _identity(key: str) -> str:
    return key


class ReportFlow:
    """Drives the report modal for one post or comment at a time."""

    def __init__(
        self,
        api: ReportApi,
        ledger: ReportLedger,
        session: ViewerSession,
        settings: Settings,
        translate: Callable[[str], str] | None = None,
        on_login_required: Callable[[], None] | None = None,
    ) -> None:
        self.api = api
        self.ledger = ledger
        self.session = session
        self.settings = settings
        self.translate = translate or _identity
        self.on_login_required = on_login_required

        self.state = ReportFlowState.CLOSED
        self.draft: ReportDraft | None = None
        self.field_errors: dict[str, str] = {}
        self.error_message: str | None = None
        self._dismiss_handle: asyncio.TimerHandle | None = None

    # ------------------------------------------------------------------
    # View state
    # ------------------------------------------------------------------

    @property
    def modal_open(self) -> bool:
        return self.state in (
            ReportFlowState.REASON_SELECTION,
            ReportFlowState.SUBMITTING,
            ReportFlowState.ERROR,
        )

    @property
    def acknowledgement_visible(self) -> bool:
        return self.state is ReportFlowState.SUCCESS

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def open(
        self, target_id: str, target_type: TargetType = TargetType.COMMENT
    ) -> bool:
        """Start reporting a target.

        Returns:
            False when the viewer is anonymous or already reported the target
        """
        if not self.session.is_authenticated:
            if self.on_login_required:
                self.on_login_required()
            return False
        if self.ledger.is_reported(target_id, target_type):
            return False
        if self.state is ReportFlowState.SUBMITTING:
            return False

        self._cancel_auto_dismiss()
        self.draft = ReportDraft(target=Target(target_type, target_id))
        self.field_errors = {}
        self.error_message = None
        self.state = ReportFlowState.REASON_SELECTION
        return True

    def toggle_reason(self, reason: ReportReason) -> None:
        if self.draft is None or self.state is ReportFlowState.SUBMITTING:
            return
        self.draft.toggle_reason(reason)
        self.field_errors.pop("reasons", None)

    def set_description(self, text: str) -> None:
        if self.draft is None or self.state is ReportFlowState.SUBMITTING:
            return
        self.draft.description = text
        self.field_errors.pop("description", None)

    def cancel(self) -> None:
        """Close the modal and discard the draft (ignored while submitting)."""
        if self.state is ReportFlowState.SUBMITTING:
            return
        self._reset(ReportFlowState.CLOSED)

    def dismiss_acknowledgement(self) -> None:
        self._cancel_auto_dismiss()
        if self.state is ReportFlowState.SUCCESS:
            self.state = ReportFlowState.CLOSED

    @interaction
    async def submit(self) -> ReportOutcome:
        """Validate and send the draft.

        Returns:
            The outcome; ``INVALID`` and ``LOGIN_REQUIRED`` leave the draft
            in place, as does ``ERROR``
        """
        draft = self.draft
        if draft is None or not self.modal_open:
            return ReportOutcome.INVALID
        if self.state is ReportFlowState.SUBMITTING:
            return ReportOutcome.IN_PROGRESS

        try:
            draft.validate(self.settings.report_description_max_length)
        except FieldValidationError as e:
            self.field_errors[e.field] = self.translate(e.message)
            return ReportOutcome.INVALID

        viewer = self.session.current()
        if viewer is None:
            if self.on_login_required:
                self.on_login_required()
            return ReportOutcome.LOGIN_REQUIRED

        target = draft.target
        self.state = ReportFlowState.SUBMITTING
        self.error_message = None
        try:
            await self.api.create(viewer.email, CreateReportRequest.from_draft(draft))
        except DuplicateReportError:
            logger.info(
                "report_already_exists",
                target_type=target.type.value,
                target_id=target.id,
            )
            self.ledger.mark_reported(target.id, target.type)
            self._reset(ReportFlowState.DUPLICATE)
            return ReportOutcome.DUPLICATE
        except LoginRequiredError:
            self.state = ReportFlowState.REASON_SELECTION
            if self.on_login_required:
                self.on_login_required()
            return ReportOutcome.LOGIN_REQUIRED
        except ForumError as e:
            logger.warning(
                "report_submit_failed",
                target_type=target.type.value,
                target_id=target.id,
                error=e.code,
            )
            self.state = ReportFlowState.ERROR
            self.error_message = self.translate(SUBMIT_ERROR_KEY)
            return ReportOutcome.ERROR

        logger.info(
            "report_submitted",
            target_type=target.type.value,
            target_id=target.id,
            reasons=[reason.value for reason in draft.reasons],
        )
        self.ledger.mark_reported(target.id, target.type)
        self._reset(ReportFlowState.SUCCESS)
        self._schedule_auto_dismiss()
        return ReportOutcome.SUCCESS

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _reset(self, state: ReportFlowState) -> None:
        self.draft = None
        self.field_errors = {}
        self.error_message = None
        self.state = state

    def _schedule_auto_dismiss(self) -> None:
        self._cancel_auto_dismiss()
        loop = asyncio.get_running_loop()
        self._dismiss_handle = loop.call_later(
            self.settings.report_success_dismiss_seconds, self.dismiss_acknowledgement
        )

    def _cancel_auto_dismiss(self) -> None:
        if self._dismiss_handle is not None:
            self._dismiss_handle.cancel()
            self._dismiss_handle = None
