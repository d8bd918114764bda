"""Application error taxonomy. Each error carries the HTTP status it maps to."""


class AppError(Exception):
    """Base error raised by services; rendered as {"message": ...} by the API."""

    status_code = 500

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


class ValidationError(AppError):
    """Malformed or missing input."""

    status_code = 400


class ConflictError(AppError):
    """Uniqueness violation (e.g. username already registered)."""

    status_code = 400


class AuthError(AppError):
    """Missing credential."""

    status_code = 401


class InvalidTokenError(AuthError):
    """Token is malformed, expired, or fails signature verification."""

    status_code = 403


class InvalidCredentialsError(AuthError):
    """Unknown username or wrong password. Same message for both cases."""

    status_code = 400


class ForbiddenError(AppError):
    """Valid credential, insufficient role."""

    status_code = 403


class NotFoundError(AppError):
    """Record store is empty or no record matches."""

    status_code = 404


class IngestionError(AppError):
    """Uploaded workbook could not be parsed."""

    status_code = 500


class StoreError(AppError):
    """Underlying persistence failure."""

    status_code = 500
