"""
Admissions Service Errors

Every error carries the HTTP status and machine-readable code the routers
use to build the {"error", "message"} response body.
"""

from uuid import UUID


class AdmissionServiceError(Exception):
    """Base exception for admission service errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class PayloadValidationError(AdmissionServiceError):
    """Raised when a request is missing fields or carries malformed values."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            status_code=400,
        )


class ForbiddenError(AdmissionServiceError):
    """Raised when the principal's role may not perform the action."""

    def __init__(
        self,
        message: str = "You are not allowed to perform this action.",
        error_code: str = "FORBIDDEN",
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=403,
        )


class CourseMismatchError(ForbiddenError):
    """Raised when a teacher acts on an application outside their course."""

    def __init__(self, principal_course: str | None, application_course: str):
        self.principal_course = principal_course
        self.application_course = application_course
        super().__init__(
            message="This application belongs to a different course.",
            error_code="COURSE_MISMATCH",
        )


class ApplicationNotFoundError(AdmissionServiceError):
    """
    Raised when no active application matches.

    Also covers applications whose current status does not allow the
    requested action, so a stale request never reveals the record's state.
    """

    def __init__(self, application_id: UUID | None = None, message: str | None = None):
        if message is None:
            message = (
                f"Application {application_id} not found"
                if application_id
                else "Application not found"
            )
        super().__init__(
            message=message,
            error_code="APPLICATION_NOT_FOUND",
            status_code=404,
        )


class DuplicateApplicationError(AdmissionServiceError):
    """Raised when an active application already uses the email or mobile."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(
            message=f"An application with this {field} already exists.",
            error_code="DUPLICATE_APPLICATION",
            status_code=409,
        )


class ConfigurationError(AdmissionServiceError):
    """Raised when required operational configuration is missing."""

    def __init__(self, message: str, error_code: str = "CONFIGURATION_ERROR"):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=400,
        )


class TeacherNotConfiguredError(ConfigurationError):
    """Raised when no teacher with an email is mapped to the course."""

    def __init__(self, course: str):
        self.course = course
        super().__init__(
            message=f"No teacher is configured for course {course}.",
            error_code="TEACHER_NOT_CONFIGURED",
        )


class NotificationNotFoundError(AdmissionServiceError):
    """Raised when a notification does not exist or is not visible to the principal."""

    def __init__(self, notification_id: UUID | None = None):
        super().__init__(
            message=(
                f"Notification {notification_id} not found"
                if notification_id
                else "Notification not found"
            ),
            error_code="NOTIFICATION_NOT_FOUND",
            status_code=404,
        )
