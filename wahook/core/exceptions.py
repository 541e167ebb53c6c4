"""
Exception hierarchy for wahook.

Validation errors are surfaced synchronously to the caller and never retried.
Webhook and extraction errors abort the notification for a single event.
Delivery errors are raised per subscriber URL once the retry budget is spent.
"""

from wahook.schemas.core.types import ErrorCode


class WahookError(Exception):
    """Base exception for all wahook errors."""

    def __init__(self, message: str, error_code: ErrorCode):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class ValidationError(WahookError):
    """Raised when a caller supplies malformed or missing input."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.VALIDATION_ERROR):
        super().__init__(message, error_code)


class InvalidIdentityError(ValidationError):
    """Raised when a phone number or JID cannot be parsed."""

    def __init__(self, raw: str, reason: str):
        self.raw = raw
        super().__init__(f"Invalid JID '{raw}': {reason}", ErrorCode.INVALID_IDENTITY)


class UnsupportedMediaError(ValidationError):
    """Raised when a media content type is not accepted."""

    def __init__(self, mime_type: str | None):
        self.mime_type = mime_type
        super().__init__(
            f"Unsupported audio format: {mime_type}", ErrorCode.UNSUPPORTED_MEDIA
        )


class WebhookError(WahookError):
    """Raised when a webhook payload cannot be built or sent."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.WEBHOOK_ERROR):
        super().__init__(message, error_code)


class ExtractionError(WebhookError):
    """Raised when media referenced by an event could not be stored locally."""

    def __init__(self, media_kind: str, cause: Exception | str):
        self.media_kind = media_kind
        self.cause = cause
        super().__init__(
            f"Failed to download {media_kind}: {cause}", ErrorCode.EXTRACTION_ERROR
        )


class DeliveryError(WebhookError):
    """Raised when every delivery attempt to a subscriber URL failed."""

    def __init__(self, url: str, attempts: int, last_error: Exception | None):
        self.url = url
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Failed after {attempts} attempts: {last_error}",
            ErrorCode.DELIVERY_ERROR,
        )


class ClientUnavailableError(WahookError):
    """Raised when the WhatsApp client is missing, disconnected or logged out."""

    def __init__(self, message: str = "WhatsApp client not initialized"):
        super().__init__(message, ErrorCode.CLIENT_UNAVAILABLE)


class ActionError(WahookError):
    """Raised when an outbound action on the WhatsApp client fails."""

    def __init__(self, action: str, cause: Exception | str):
        self.action = action
        self.cause = cause
        super().__init__(f"Failed to {action}: {cause}", ErrorCode.ACTION_ERROR)
