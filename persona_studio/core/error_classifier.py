"""
Error Classifier

Maps raw generation-service failures onto the studio's error taxonomy.

A failure counts as permission-denied (or rate-limited) when either the structured
status exposed by the SDK (``google.genai.errors.APIError`` carries ``code`` and
``status``) or the message text says so. Raw transport errors are not guaranteed to
have any particular shape, so the text is always checked as well.
"""

import logging
from dataclasses import dataclass
from typing import NoReturn, Optional

from .errors import (
    AccessDeniedError,
    BillingRequiredError,
    PersonaStudioError,
    RateLimitedError,
)

logger = logging.getLogger(__name__)

PERMISSION_DENIED = "PERMISSION_DENIED"
RESOURCE_EXHAUSTED = "RESOURCE_EXHAUSTED"


@dataclass(frozen=True)
class ServiceStatus:
    """Status of a failed service call, as far as it can be determined."""
    code: Optional[int] = None
    reason: Optional[str] = None
    message: str = ""

    @property
    def is_permission_denied(self) -> bool:
        return (
            self.code == 403
            or self.reason == PERMISSION_DENIED
            or "403" in self.message
            or PERMISSION_DENIED in self.message
        )

    @property
    def is_rate_limited(self) -> bool:
        return (
            self.code == 429
            or self.reason == RESOURCE_EXHAUSTED
            or "429" in self.message
            or RESOURCE_EXHAUSTED in self.message
        )


def _error_message(error: BaseException) -> str:
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return f"{message} {error}"
    return str(error)


def extract_status(error: BaseException) -> ServiceStatus:
    """Collect the structured status of ``error`` together with its message text."""
    code = None
    for attr in ("code", "status_code"):
        value = getattr(error, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            code = value
            break

    reason = getattr(error, "status", None)
    if not isinstance(reason, str) or not reason:
        reason = None

    return ServiceStatus(code=code, reason=reason, message=_error_message(error))


def is_fatal(error: Optional[BaseException]) -> bool:
    """True for permission-class failures, which invalidate a whole batch."""
    if error is None:
        return False
    if isinstance(error, AccessDeniedError):
        return True
    if isinstance(error, RateLimitedError):
        return False
    return extract_status(error).is_permission_denied


def classify(error: BaseException, model_tier: Optional[str] = None) -> NoReturn:
    """
    Raise the classified form of ``error``. Never returns.

    Args:
        error: The raw error raised by the service call.
        model_tier: Tier of the failed request; permission failures on "pro"
            become BillingRequiredError.

    Raises:
        BillingRequiredError, AccessDeniedError, RateLimitedError, or the
        original error unchanged when it matches nothing.
    """
    # Already classified
    if isinstance(error, (AccessDeniedError, RateLimitedError)):
        raise error

    tier = getattr(model_tier, "value", model_tier)
    status = extract_status(error)

    if status.is_permission_denied:
        logger.error(f"Gemini operation error: {error}")
        if tier == "pro":
            raise BillingRequiredError(
                "Access Denied (403). 'Banana Pro' requires a Google Cloud project with billing enabled. "
                "Please switch to 'Flash Lite' or use a paid API key."
            ) from error
        raise AccessDeniedError(
            "Access Denied (403). Please check if your API key is valid and has permissions "
            "for the Generative AI API."
        ) from error

    if status.is_rate_limited:
        logger.error(f"Gemini operation error: {error}")
        raise RateLimitedError(
            "Quota Exceeded (429). You are generating too fast. Please wait a moment."
        ) from error

    if not isinstance(error, PersonaStudioError):
        logger.error(f"Gemini operation error: {error}")
    raise error
