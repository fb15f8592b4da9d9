"""Report submission and per-session dedup ledger."""

from tripforum.reports.flow import ReportFlow
from tripforum.reports.ledger import ReportLedger
from tripforum.reports.models import (
    ReportDraft,
    ReportFlowState,
    ReportOutcome,
    ReportReason,
)
from tripforum.reports.service import ReportApi


__all__ = [
    "ReportApi",
    "ReportDraft",
    "ReportFlow",
    "ReportFlowState",
    "ReportLedger",
    "ReportOutcome",
    "ReportReason",
]
