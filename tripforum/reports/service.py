"""HTTP access to the report endpoints."""

from tripforum.core.errors import read_json, raise_for_status
from tripforum.core.http import ApiClient
from tripforum.core.targets import Target
from tripforum.reports.schemas import CreateReportRequest


class ReportApi:
    """Report check and create calls."""

    def __init__(self, client: ApiClient, duplicate_error_code: int) -> None:
        self.client = client
        self.duplicate_error_code = duplicate_error_code

    async def check(self, viewer_email: str, target: Target) -> bool:
        """Return True if the viewer already reported ``target``."""
        response = await self.client.get(
            "/api/reports/check",
            params={
                "userEmail": viewer_email,
                "targetType": target.type.value,
                "targetId": target.id,
            },
        )
        raise_for_status(response)
        return read_json(response) is True

    async def create(self, viewer_email: str, request: CreateReportRequest) -> None:
        """Submit a report.

        Raises:
            DuplicateReportError: the viewer had already reported the target
        """
        response = await self.client.post(
            "/api/reports/create",
            params={"userEmail": viewer_email},
            json=request.to_wire(),
        )
        raise_for_status(response, duplicate_report_code=self.duplicate_error_code)
