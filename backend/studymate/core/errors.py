"""Domain error kinds and their HTTP status codes."""

from __future__ import annotations


class StudyMateError(Exception):
    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ServiceError(StudyMateError):
    """Transport failure talking to OCR, chat or image hosting."""

    status_code = 502
    default_message = "Service is unavailable, please try again"


class MalformedResponseError(StudyMateError):
    """Model output could not be turned into the expected JSON shape."""

    status_code = 502
    default_message = "Received a malformed response from the model"


class InputValidationError(StudyMateError):
    status_code = 422
    default_message = "Invalid input"


class AuthenticationError(StudyMateError):
    status_code = 401
    default_message = "Authentication required"


class ConflictError(StudyMateError):
    status_code = 409
    default_message = "Conflict"


class SolverBusyError(StudyMateError):
    status_code = 409
    default_message = "An image is already being processed"


class UnknownQuestionError(StudyMateError):
    status_code = 404
    default_message = "Question not found"


class NoAnswersError(StudyMateError):
    status_code = 409
    default_message = "No answers to export yet"


class StaleResultError(StudyMateError):
    """The solver was reset or moved to a new image while a call was in flight."""

    status_code = 409
    default_message = "Solver session was reset"
