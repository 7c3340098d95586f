from __future__ import annotations

from typing import Optional


CREDENTIAL = "credential"
QUOTA = "quota"
RATE_LIMIT = "rate_limit"
UNKNOWN = "unknown"

# User-facing message and details per hint
_HINT_MESSAGES = {
    CREDENTIAL: ("Invalid API key", "Please check GEMINI_API_KEY in your .env file and restart the server"),
    QUOTA: ("API quota exceeded", "Please check your account billing and usage limits"),
    RATE_LIMIT: ("Rate limit exceeded", "Please wait a moment and try again"),
    UNKNOWN: ("Failed to generate content", None),
}


def classify_generation_error(message: str, status_code: Optional[int] = None) -> str:
    text = (message or "").lower()
    if status_code in (401, 403) or "api key" in text or "api_key" in text or "not configured" in text or "authentication" in text:
        return CREDENTIAL
    if "insufficient_quota" in text or "quota" in text or "billing" in text:
        return QUOTA
    if status_code == 429 or "rate_limit" in text or "rate limit" in text or "resource_exhausted" in text:
        return RATE_LIMIT
    return UNKNOWN


class GenerationError(RuntimeError):
    """The text-generation collaborator failed (credential, quota, rate limit, network).

    Never retried by the orchestrator; callers surface it as-is with the
    classified ``hint``.
    """

    def __init__(self, message: str, *, hint: Optional[str] = None, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.hint = hint or classify_generation_error(message, status_code)

    @property
    def user_message(self) -> str:
        return _HINT_MESSAGES.get(self.hint, _HINT_MESSAGES[UNKNOWN])[0]

    @property
    def user_details(self) -> str:
        details = _HINT_MESSAGES.get(self.hint, _HINT_MESSAGES[UNKNOWN])[1]
        return details or str(self)

    def to_payload(self) -> dict:
        return {"error": self.user_message, "details": self.user_details, "hint": self.hint}
