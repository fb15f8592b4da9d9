"""Report domain types.

- ReportReason: closed set of reasons a viewer can pick
- ReportDraft: the transient modal state (reasons + optional description)
- ReportFlowState / ReportOutcome: the submission state machine
"""

from dataclasses import dataclass, field
from enum import Enum

from tripforum.core.errors import FieldValidationError
from tripforum.core.targets import Target


class ReportReason(str, Enum):
    """Reasons for reporting a post or comment."""

    SPAM = "SPAM"
    INAPPROPRIATE = "INAPPROPRIATE"
    VIOLENCE = "VIOLENCE"
    HARASSMENT = "HARASSMENT"
    HATE_SPEECH = "HATE_SPEECH"
    FALSE_INFO = "FALSE_INFO"
    COPYRIGHT = "COPYRIGHT"
    OTHER = "OTHER"


class ReportFlowState(str, Enum):
    """Where the report modal currently is."""

    CLOSED = "closed"
    REASON_SELECTION = "reason_selection"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    DUPLICATE = "duplicate"
    ERROR = "error"


class ReportOutcome(str, Enum):
    """How a submission ended."""

    SUCCESS = "success"
    DUPLICATE = "duplicate"
    ERROR = "error"
    INVALID = "invalid"
    LOGIN_REQUIRED = "login_required"
    IN_PROGRESS = "in_progress"


@dataclass
class ReportDraft:
    """Reasons and description collected before submit. Never persisted."""

    target: Target
    reasons: set[ReportReason] = field(default_factory=set)
    description: str = ""

    def toggle_reason(self, reason: ReportReason) -> None:
        if reason in self.reasons:
            self.reasons.discard(reason)
        else:
            self.reasons.add(reason)

    def cleaned_description(self) -> str | None:
        """Trimmed description, or None when blank."""
        return self.description.strip() or None

    def validate(self, max_description_length: int) -> None:
        """Check the draft before anything is sent.

        Raises:
            FieldValidationError: no reason selected, or description too long
        """
        if not self.reasons:
            raise FieldValidationError(
                "reasons", "forum.modals.report.selectReasonError"
            )
        description = self.cleaned_description()
        if description is not None and len(description) > max_description_length:
            raise FieldValidationError(
                "description", "forum.modals.report.descriptionTooLong"
            )
