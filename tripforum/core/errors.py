"""Forum client error hierarchy.

Every failure surfaced by the forum core is a ``ForumError`` carrying a
stable ``code`` so the host UI can pick a message without string matching.
"""

from typing import Any

import httpx


class ForumError(Exception):
    """Base forum error."""

    def __init__(self, message: str, code: str = "forum_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class LoginRequiredError(ForumError):
    """Viewer is not authenticated (no identity, or the server answered 401)."""

    def __init__(self, message: str = "Login required"):
        super().__init__(message, "login_required")


class FieldValidationError(ForumError):
    """Client-side validation failure scoped to one input field."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message, "validation_error")


class NetworkError(ForumError):
    """Request never produced an HTTP response (timeout, DNS, refused)."""

    def __init__(self, message: str = "Network request failed"):
        super().__init__(message, "network_error")


class OperationInProgressError(ForumError):
    """The same control already has a request outstanding."""

    def __init__(self, message: str = "Operation already in progress"):
        super().__init__(message, "operation_in_progress")


class ApiError(ForumError):
    """Server answered with a non-success status."""

    def __init__(
        self,
        status_code: int,
        message: str = "Request failed",
        error_code: int | None = None,
    ):
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(message, "api_error")


class NotFoundError(ApiError):
    """Target no longer exists (e.g. replies of a deleted comment)."""

    def __init__(self, message: str = "Not found"):
        super().__init__(httpx.codes.NOT_FOUND, message)


class ForbiddenError(ApiError):
    """Server refused an action the client believed was allowed."""

    def __init__(self, message: str = "Forbidden"):
        super().__init__(httpx.codes.FORBIDDEN, message)


class DuplicateReportError(ApiError):
    """Server says the viewer already reported this target."""

    def __init__(self, error_code: int, message: str = "Already reported"):
        super().__init__(httpx.codes.BAD_REQUEST, message, error_code)
        self.code = "already_reported"


def _error_body(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def raise_for_status(
    response: httpx.Response, duplicate_report_code: int | None = None
) -> None:
    """Convert a non-success response into the matching ``ForumError``.

    Args:
        response: HTTP response from the forum API
        duplicate_report_code: Server error code meaning "already reported";
            when given, a 400 carrying it raises ``DuplicateReportError``

    Raises:
        LoginRequiredError: 401
        ForbiddenError: 403
        NotFoundError: 404
        DuplicateReportError: 400 with the duplicate report code
        ApiError: any other non-2xx status
    """
    if response.is_success:
        return

    status_code = response.status_code
    if status_code == httpx.codes.UNAUTHORIZED:
        raise LoginRequiredError
    if status_code == httpx.codes.FORBIDDEN:
        raise ForbiddenError
    if status_code == httpx.codes.NOT_FOUND:
        raise NotFoundError

    body = _error_body(response)
    error_code = body.get("code")
    message = body.get("message") or f"Request failed with status {status_code}"
    if (
        status_code == httpx.codes.BAD_REQUEST
        and duplicate_report_code is not None
        and error_code == duplicate_report_code
    ):
        raise DuplicateReportError(error_code, message)
    raise ApiError(
        status_code, message, error_code if isinstance(error_code, int) else None
    )


def read_json(response: httpx.Response) -> Any:
    """Decode the body of a successful response.

    Raises:
        ApiError: the body is not JSON (e.g. a plain-text or HTML page)
    """
    try:
        return response.json()
    except ValueError as e:
        raise ApiError(response.status_code, "Malformed response body") from e
