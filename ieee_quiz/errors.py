from datetime import datetime
from typing import Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse


class QuizError(Exception):
    """Base for errors surfaced to the caller. Never retried."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def extras(self) -> dict[str, Any]:
        return {}


class Unauthenticated(QuizError):
    status_code = 401
    message = "Unauthorized"


class AlreadyAttemptedToday(QuizError):
    status_code = 429
    message = "You have already attempted today's quiz. Please try again tomorrow."

    def __init__(self, last_attempt_at: datetime):
        super().__init__()
        self.last_attempt_at = last_attempt_at

    def extras(self) -> dict[str, Any]:
        return {"lastAttempt": self.last_attempt_at.isoformat()}


class UserRecordNotFound(QuizError):
    status_code = 404
    message = "User data not found"

    def __init__(self, user_id: str):
        super().__init__()
        self.user_id = user_id


class InvalidRequest(QuizError):
    status_code = 400
    message = "Invalid request"


class MalformedSubmission(QuizError):
    status_code = 400
    message = "Invalid answers format"

    def __init__(self, details: Optional[list[str]] = None):
        super().__init__()
        self.details = details or []

    def extras(self) -> dict[str, Any]:
        return {"details": self.details}


async def quiz_error_handler(request: Request, exc: QuizError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, **exc.extras()},
    )
