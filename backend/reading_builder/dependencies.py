from __future__ import annotations

from typing import AsyncIterator

from fastapi import Depends, HTTPException

from .errors import CREDENTIAL, QUOTA, RATE_LIMIT, GenerationError
from .gemini_client import GeminiClient
from .orchestrator import RetryOrchestrator, TextGenerator


_STATUS_BY_HINT = {CREDENTIAL: 500, QUOTA: 429, RATE_LIMIT: 429}


def generation_http_error(exc: GenerationError) -> HTTPException:
    return HTTPException(status_code=_STATUS_BY_HINT.get(exc.hint, 502), detail=exc.to_payload())


async def get_text_generator() -> AsyncIterator[TextGenerator]:
    try:
        client = GeminiClient()
    except GenerationError as exc:
        raise generation_http_error(exc)
    try:
        yield client.generate_text
    finally:
        await client.aclose()


def get_orchestrator(generator: TextGenerator = Depends(get_text_generator)) -> RetryOrchestrator:
    return RetryOrchestrator(generator)
