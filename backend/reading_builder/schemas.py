from __future__ import annotations

from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_QUESTION_TYPES: List[str] = ["Short Answer", "Main Idea"]

WORDS_BY_LENGTH: Dict[str, int] = {"short": 2000, "medium": 2800, "long": 3500}


class IssueCode(str, Enum):
    MISSING_TITLE = "missing_title"
    TOO_FEW_PARAGRAPHS = "too_few_paragraphs"
    QUESTIONS_MISSING = "questions_missing"
    ANSWER_KEY_MISSING = "answer_key_missing"
    SECTION_ORDER = "section_order"
    TOO_FEW_QUESTIONS = "too_few_questions"
    MULTIPLE_CHOICE_FORBIDDEN = "multiple_choice_forbidden"
    MALFORMED_OPTIONS = "malformed_options"
    OPTIONS_BEFORE_QUESTION = "options_before_question"
    OPTIONS_SAME_LINE = "options_same_line"
    VOCABULARY_OPTIONS = "vocabulary_options"
    TOO_FEW_ANSWERS = "too_few_answers"
    COUNT_MISMATCH = "count_mismatch"


class ValidationStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    paragraphs: int = 0
    total_questions: int = 0
    multiple_choice: int = 0
    vocabulary: int = 0
    reference: int = 0
    sentence_insertion: int = 0
    short_answer: int = 0
    total_answers: int = 0
    without_options: int = 0
    has_title: bool = False
    has_questions: bool = False
    has_answer_key: bool = False
    answers_match: bool = False


class ValidationReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    policy: str
    is_valid: bool
    score: int = Field(ge=0, le=100)
    issues: List[str] = Field(default_factory=list)
    codes: List[IssueCode] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    stats: ValidationStats = Field(default_factory=ValidationStats)


class ParsedPassage(BaseModel):
    title: str
    paragraphs: List[str] = Field(default_factory=list)
    side_box: Optional[str] = None
    questions: Dict[str, List[str]] = Field(default_factory=dict)
    group_titles: Dict[str, str] = Field(default_factory=dict)
    answer_key: List[str] = Field(default_factory=list)


class ParseFailure(BaseModel):
    kind: str
    message: str


class ParseOutcome(BaseModel):
    passage: ParsedPassage
    error: Optional[ParseFailure] = None
    duplicate_markers: List[int] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


class Check(BaseModel):
    id: str
    passed: bool
    note: Optional[str] = None


class Scorecard(BaseModel):
    score: int
    checks: List[Check] = Field(default_factory=list)


class GenerationInput(BaseModel):
    topic: str = Field(min_length=3)
    domain: str = "science/tech/philosophy/urban"
    level: Literal["B2", "C1"] = "C1"
    length: Literal["short", "medium", "long"] = "long"
    words: Optional[int] = Field(default=None, ge=800, le=3000)
    sidebox: bool = False
    question_types: List[str] = Field(default_factory=lambda: list(DEFAULT_QUESTION_TYPES), min_length=1)
    language: Literal["EN"] = "EN"

    @property
    def target_words(self) -> int:
        return self.words or WORDS_BY_LENGTH.get(self.length, 3500)


class GeneratedPassage(BaseModel):
    id: int
    raw: str
    parsed: ParsedPassage
    report: ValidationReport
    scorecard: Scorecard
    retry_count: int = 0
    needs_regeneration: bool = False
    topic_used: str
    domain_used: str
    state: Literal["accepted", "given_up"] = "accepted"
