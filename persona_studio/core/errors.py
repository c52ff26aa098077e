"""
Error taxonomy for Persona Studio.

Every error raised to callers carries a short, human-readable ``hint`` telling
the user what to do next. Service errors that match none of these types are
passed through unchanged.
"""

from typing import Optional


class PersonaStudioError(Exception):
    """Base error for all classified failures."""

    hint: str = ""
    status_code: Optional[int] = None

    def __init__(self, message: str, hint: Optional[str] = None):
        if hint is not None:
            self.hint = hint
        super().__init__(message)


class MissingCredentialError(PersonaStudioError):
    """No API key is registered and no environment default is set."""

    hint = "Register an API key before generating."

    def __init__(self, message: str = "API key not found. Please register your API key."):
        super().__init__(message)


class AccessDeniedError(PersonaStudioError):
    """The service rejected the key (HTTP 403 / PERMISSION_DENIED)."""

    status_code = 403
    hint = "Check that your API key is valid and enabled for the Generative AI API."


class BillingRequiredError(AccessDeniedError):
    """Permission failure on the pro tier, which needs a billing-enabled project."""

    hint = "Switch to the standard tier or use a billing-enabled API key."


class RateLimitedError(PersonaStudioError):
    """The service throttled the request (HTTP 429)."""

    status_code = 429
    hint = "You are generating too fast. Wait a moment and reduce the request rate."


class ModelRefusalError(PersonaStudioError):
    """The model answered with text instead of an image."""

    hint = "Rephrase the scene or try a different reference photo."

    def __init__(self, refusal_text: str):
        self.refusal_text = refusal_text
        super().__init__(f"Model refused: {refusal_text}")


class NoImageProducedError(PersonaStudioError):
    """The response carried no candidates or no parts."""

    hint = "Try again; the service returned an empty response."

    def __init__(self, message: str = "No image generated."):
        super().__init__(message)


class InvalidResponseError(PersonaStudioError):
    """A structured (JSON) response was empty or could not be parsed."""

    hint = "Try again with a clearer photo or a simpler scenario."


class EmptyStoryError(PersonaStudioError):
    """A story run finished without a single generated image."""

    hint = "Try again later or switch model tier."

    def __init__(self, message: str = "Failed to generate any images."):
        super().__init__(message)
