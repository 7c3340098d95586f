from __future__ import annotations

import asyncio
import logging
import random
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from .parser import parse_passage
from .policy import BATCH_RETRY, REGENERATE_RETRY, SIMPLE_POLICY, RetryPolicy, ValidationPolicy
from .prompts import SYSTEM_PROMPT, build_request
from .schemas import GeneratedPassage, GenerationInput, IssueCode, ValidationReport
from .scorecard import build_scorecard
from .topics import random_topic
from .validator import validate_passage


logger = logging.getLogger(__name__)

# (instructions, request) -> completion text; raises GenerationError on failure
TextGenerator = Callable[[str, str], Awaitable[str]]
Sleeper = Callable[[float], Awaitable[None]]

MAX_BATCH_SIZE = 10


class PassageState(str, Enum):
    REQUESTING = "requesting"
    VALIDATING = "validating"
    RETRYING = "retrying"
    ACCEPTED = "accepted"
    GIVEN_UP = "given_up"


class RetryOrchestrator:
    """Drives generate -> validate -> regenerate for one passage at a time.

    A passage is retried with corrective instructions until the validator
    accepts it or the retry budget runs out; in the latter case the last
    document is still returned, flagged ``needs_regeneration``. Generation
    errors are not retried and propagate to the caller.
    """

    def __init__(
        self,
        generator: TextGenerator,
        *,
        policy: ValidationPolicy = SIMPLE_POLICY,
        instructions: str = SYSTEM_PROMPT,
        sleep: Sleeper = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._generator = generator
        self._policy = policy
        self._instructions = instructions
        self._sleep = sleep
        self._rng = rng
        self.state = PassageState.REQUESTING
        self.transitions: List[PassageState] = []

    def _enter(self, state: PassageState) -> None:
        self.state = state
        self.transitions.append(state)

    def _finish(
        self,
        passage_id: int,
        req: GenerationInput,
        raw: str,
        report: ValidationReport,
        retry_count: int,
    ) -> GeneratedPassage:
        return GeneratedPassage(
            id=passage_id,
            raw=raw,
            parsed=parse_passage(raw).passage,
            report=report,
            scorecard=build_scorecard(raw),
            retry_count=retry_count,
            needs_regeneration=not report.is_valid,
            topic_used=req.topic,
            domain_used=req.domain,
            state="accepted" if report.is_valid else "given_up",
        )

    async def generate_passage(
        self,
        req: GenerationInput,
        retry: RetryPolicy = BATCH_RETRY,
        *,
        passage_id: int = 1,
    ) -> GeneratedPassage:
        self.transitions = []
        attempt = 0
        codes: List[IssueCode] = []
        while True:
            self._enter(PassageState.REQUESTING)
            raw = await self._generator(self._instructions, build_request(req, codes, attempt))
            self._enter(PassageState.VALIDATING)
            report = validate_passage(raw, self._policy)
            if report.is_valid:
                self._enter(PassageState.ACCEPTED)
                if attempt:
                    logger.info("Passage %s accepted after %s retries", passage_id, attempt)
                return self._finish(passage_id, req, raw, report, attempt)
            if attempt >= retry.max_retries:
                self._enter(PassageState.GIVEN_UP)
                logger.warning(
                    "Passage %s still invalid after %s retries: %s",
                    passage_id,
                    attempt,
                    "; ".join(report.issues),
                )
                return self._finish(passage_id, req, raw, report, attempt)
            attempt += 1
            codes = list(report.codes)
            self._enter(PassageState.RETRYING)
            logger.info(
                "Passage %s failed validation (score %s), retry %s/%s: %s",
                passage_id,
                report.score,
                attempt,
                retry.max_retries,
                "; ".join(report.issues),
            )
            await self._sleep(retry.delay_seconds)

    async def generate_batch(
        self,
        req: GenerationInput,
        count: int = 1,
        retry: RetryPolicy = BATCH_RETRY,
    ) -> List[GeneratedPassage]:
        """Generate ``count`` passages one after another, in passage order.

        With more than one passage each gets its own random sample topic. A
        passage that exhausts its retries is kept and flagged; a
        ``GenerationError`` aborts the whole batch.
        """
        if count < 1 or count > MAX_BATCH_SIZE:
            raise ValueError(f"count must be between 1 and {MAX_BATCH_SIZE}")
        passages: List[GeneratedPassage] = []
        for passage_id in range(1, count + 1):
            current = req
            if count > 1:
                pick = random_topic(self._rng)
                current = req.model_copy(update={"topic": pick["topic"], "domain": pick["domain"]})
            logger.info("Generating passage %s of %s (%s)", passage_id, count, current.topic)
            passages.append(await self.generate_passage(current, retry, passage_id=passage_id))
        flagged = [p.id for p in passages if p.needs_regeneration]
        if flagged:
            logger.info("%s passage(s) may need manual regeneration: %s", len(flagged), flagged)
        return passages

    async def regenerate_passage(
        self,
        req: GenerationInput,
        passage_id: int,
        retry: RetryPolicy = REGENERATE_RETRY,
    ) -> GeneratedPassage:
        return await self.generate_passage(req, retry, passage_id=passage_id)
