from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from ..dependencies import generation_http_error, get_text_generator
from ..errors import GenerationError
from ..orchestrator import TextGenerator
from ..parser import parse_passage
from ..prompts import SYSTEM_PROMPT, build_request
from ..schemas import GenerationInput, IssueCode
from ..scorecard import build_scorecard
from ..validator import validate_simple


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/generate", tags=["generation"])


class GenerateRequest(GenerationInput):
    # Set by clients that drive their own retry loop
    strict_mode: bool = False
    retry_count: int = 0


@router.post("")
async def generate(req: GenerateRequest, generator: TextGenerator = Depends(get_text_generator)):
    """Single generation without the retry loop; the caller decides what to do with the result."""
    attempt = req.retry_count if req.retry_count > 0 else int(req.strict_mode)
    # A client-side retry only ever happens because the output had A)-D) options
    codes = [IssueCode.MULTIPLE_CHOICE_FORBIDDEN] if attempt else []
    logger.info("Generating passage on %r (attempt %s)", req.topic, attempt + 1)
    try:
        raw = await generator(SYSTEM_PROMPT, build_request(req, codes, attempt))
    except GenerationError as exc:
        logger.error("Generation failed: %s", exc)
        raise generation_http_error(exc)
    outcome = parse_passage(raw)
    return {
        "raw": raw,
        "parsed": outcome.passage,
        "parse_error": outcome.error,
        "scorecard": build_scorecard(raw),
        "validation": validate_simple(raw),
    }
