from __future__ import annotations

import pytest

from reading_builder.dependencies import generation_http_error
from reading_builder.errors import CREDENTIAL, QUOTA, RATE_LIMIT, UNKNOWN, GenerationError, classify_generation_error


@pytest.mark.parametrize(
    ("message", "status", "hint"),
    [
        ("API key not valid", None, CREDENTIAL),
        ("forbidden", 403, CREDENTIAL),
        ("insufficient_quota for this project", None, QUOTA),
        ("RESOURCE_EXHAUSTED", None, RATE_LIMIT),
        ("too many requests", 429, RATE_LIMIT),
        ("connection reset", None, UNKNOWN),
    ],
)
def test_classify_generation_error(message, status, hint) -> None:
    assert classify_generation_error(message, status) == hint


def test_payload_uses_friendly_message() -> None:
    exc = GenerationError("Gemini request failed (429): slow down", status_code=429)

    assert exc.to_payload() == {
        "error": "Rate limit exceeded",
        "details": "Please wait a moment and try again",
        "hint": RATE_LIMIT,
    }


def test_unknown_error_details_fall_back_to_message() -> None:
    exc = GenerationError("socket closed")

    assert exc.hint == UNKNOWN
    assert exc.user_details == "socket closed"


@pytest.mark.parametrize(
    ("hint", "status"),
    [(CREDENTIAL, 500), (QUOTA, 429), (RATE_LIMIT, 429), (UNKNOWN, 502)],
)
def test_http_status_per_hint(hint, status) -> None:
    error = generation_http_error(GenerationError("boom", hint=hint))

    assert error.status_code == status
    assert error.detail["hint"] == hint
