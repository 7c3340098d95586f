from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .settings import settings


class ValidationPolicy(BaseModel):
    """Thresholds, penalties and bonuses for one structural validation run."""

    model_config = ConfigDict(frozen=True)

    name: str
    min_paragraphs: int
    # Above this is only a warning
    max_paragraphs: Optional[int] = None
    min_questions: int = 20
    min_answers: int = 20
    answer_tolerance: int = 2
    forbid_multiple_choice: bool = False
    check_option_format: bool = False
    require_section_order: bool = False

    issue_penalty: int = 20
    warning_penalty: int = 0
    malformed_option_penalty: int = 0

    paragraph_bonus: int = 0
    paragraph_bonus_at: int = 15
    question_bonus: int = 0
    question_bonus_at: int = 20
    clean_options_bonus: int = 0
    clean_options_min_multiple_choice: int = 5
    answer_match_bonus: int = 0


# Gate for the interactive retry loop: open-ended questions only
SIMPLE_POLICY = ValidationPolicy(
    name="simple",
    min_paragraphs=15,
    min_answers=20,
    forbid_multiple_choice=True,
    issue_penalty=20,
    paragraph_bonus=15,
    paragraph_bonus_at=15,
    question_bonus=15,
    question_bonus_at=20,
)

# Diagnostic reporting: multiple choice allowed but must be well formed
DETAILED_POLICY = ValidationPolicy(
    name="detailed",
    min_paragraphs=12,
    max_paragraphs=16,
    min_answers=15,
    check_option_format=True,
    require_section_order=True,
    issue_penalty=25,
    warning_penalty=5,
    malformed_option_penalty=15,
    question_bonus=5,
    question_bonus_at=25,
    clean_options_bonus=10,
    answer_match_bonus=10,
)

POLICIES = {SIMPLE_POLICY.name: SIMPLE_POLICY, DETAILED_POLICY.name: DETAILED_POLICY}


class RetryPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_retries: int = Field(ge=0)
    # Fixed pause between attempts, no backoff
    delay_seconds: float = Field(ge=0)


BATCH_RETRY = RetryPolicy(max_retries=settings.batch_max_retries, delay_seconds=settings.batch_retry_delay)
REGENERATE_RETRY = RetryPolicy(max_retries=settings.regenerate_max_retries, delay_seconds=settings.regenerate_retry_delay)
