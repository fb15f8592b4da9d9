"""Wire schemas for report endpoints."""

from pydantic import Field, field_validator

from tripforum.core.schemas import WireModel
from tripforum.core.targets import TargetType
from tripforum.reports.models import ReportDraft, ReportReason


class CreateReportRequest(WireModel):
    """Request to report a post or comment."""

    target_type: TargetType
    target_id: str
    reasons: list[ReportReason] = Field(..., min_length=1)
    description: str | None = None

    @field_validator("description")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None

    @classmethod
    def from_draft(cls, draft: ReportDraft) -> "CreateReportRequest":
        # Stable order so retries send an identical body
        reasons = [reason for reason in ReportReason if reason in draft.reasons]
        return cls(
            target_type=draft.target.type,
            target_id=draft.target.id,
            reasons=reasons,
            description=draft.cleaned_description(),
        )
