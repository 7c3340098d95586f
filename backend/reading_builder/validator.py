from __future__ import annotations

import re
from typing import Callable, List, Optional, Tuple

from .document import (
    QuestionBlock,
    count_answer_lines,
    paragraph_markers,
    scan_layout,
    scan_question_block,
)
from .policy import DETAILED_POLICY, POLICIES, SIMPLE_POLICY, ValidationPolicy
from .schemas import IssueCode, ValidationReport, ValidationStats


REFERENCE_PRONOUN = re.compile(r"[\"“](?:these|they|it|their|this|those|which)[\"”]", re.IGNORECASE)
INSERTION_MARKER = re.compile(r"\[[A-D]\]")

_AddIssue = Callable[[IssueCode, str], None]


def get_policy(name: str) -> ValidationPolicy:
    try:
        return POLICIES[name]
    except KeyError:
        raise ValueError(f"policy must be one of {sorted(POLICIES)}") from None


def _check_option_format(block: QuestionBlock, add: _AddIssue) -> int:
    """Flag multiple-choice and vocabulary items whose A)-D) options are missing or misplaced.

    Returns the number of malformed items.
    """
    without_options = 0
    mc_group = block.find_group("multiple choice")
    if mc_group is not None:
        malformed = [item for item in mc_group.items if not item.has_full_options]
        without_options = len(malformed)
        if without_options:
            add(
                IssueCode.MALFORMED_OPTIONS,
                f"{without_options} Multiple Choice questions have format errors (missing or malformed options)",
            )
        if mc_group.misplaced_option_runs:
            add(IssueCode.OPTIONS_BEFORE_QUESTION, "Multiple Choice options appearing BEFORE question text (wrong order)")
            without_options = max(without_options, 1)
        if any(item.crammed for item in mc_group.items):
            add(IssueCode.OPTIONS_SAME_LINE, "Multiple Choice options on same line as question (must be separate lines)")
            without_options = max(without_options, 1)

    vocab_group = block.find_group("vocabulary")
    if vocab_group is not None and vocab_group is not mc_group:
        missing = sum(1 for item in vocab_group.items if not item.has_full_options)
        if missing:
            add(IssueCode.VOCABULARY_OPTIONS, f"{missing} Vocabulary questions missing A/B/C/D options")
            without_options += missing
    return without_options


def validate_passage(raw: str, policy: ValidationPolicy = SIMPLE_POLICY) -> ValidationReport:
    layout = scan_layout(raw)
    block = scan_question_block(layout.question_lines())
    found: List[Tuple[IssueCode, str]] = []
    warnings: List[str] = []

    def add(code: IssueCode, message: str) -> None:
        found.append((code, message))

    has_title = any(line.strip() for line in layout.lines)
    if not has_title:
        add(IssueCode.MISSING_TITLE, "Missing title")

    paragraphs = len(set(paragraph_markers(layout.body_text)))
    if paragraphs < policy.min_paragraphs:
        add(IssueCode.TOO_FEW_PARAGRAPHS, f"Need {policy.min_paragraphs} paragraphs (found {paragraphs})")
    elif policy.max_paragraphs is not None and paragraphs > policy.max_paragraphs:
        warnings.append(f"Too many paragraphs: {paragraphs} (max {policy.max_paragraphs})")

    if not layout.has_questions:
        add(IssueCode.QUESTIONS_MISSING, "Questions section missing")
    if not layout.has_answer_key:
        add(IssueCode.ANSWER_KEY_MISSING, "Answer Key section missing")
    if policy.require_section_order and layout.has_questions and layout.has_answer_key and not layout.sections_in_order:
        add(IssueCode.SECTION_ORDER, "Answer Key appears before the Questions section")

    items = block.items
    total_questions = len(items)
    if policy.forbid_multiple_choice and block.complete_option_runs:
        add(
            IssueCode.MULTIPLE_CHOICE_FORBIDDEN,
            "CRITICAL: Multiple choice options found - only Short Answer and Main Idea questions allowed!",
        )
    without_options = _check_option_format(block, add) if policy.check_option_format else 0
    if layout.has_questions and total_questions < policy.min_questions:
        add(IssueCode.TOO_FEW_QUESTIONS, f"Need {policy.min_questions}+ questions (found {total_questions})")

    total_answers = count_answer_lines(layout.answer_lines())
    answers_match = layout.has_answer_key and abs(total_answers - total_questions) <= policy.answer_tolerance
    if layout.has_answer_key:
        if total_answers < policy.min_answers:
            add(IssueCode.TOO_FEW_ANSWERS, f"Need {policy.min_answers}+ answers (found {total_answers})")
        if not answers_match:
            add(
                IssueCode.COUNT_MISMATCH,
                f"Question count ({total_questions}) doesn't match answer count ({total_answers})",
            )

    multiple_choice = sum(1 for item in items if item.has_full_options)
    vocab_group = block.find_group("vocabulary")
    short_group = block.find_group("short answer")
    questions_text = layout.questions_text
    stats = ValidationStats(
        paragraphs=paragraphs,
        total_questions=total_questions,
        multiple_choice=multiple_choice,
        vocabulary=sum(1 for item in vocab_group.items if item.has_full_options) if vocab_group else 0,
        reference=len(REFERENCE_PRONOUN.findall(questions_text)),
        sentence_insertion=1 if INSERTION_MARKER.search(questions_text) else 0,
        short_answer=len(short_group.items) if short_group else 0,
        total_answers=total_answers,
        without_options=without_options,
        has_title=has_title,
        has_questions=layout.has_questions,
        has_answer_key=layout.has_answer_key,
        answers_match=answers_match,
    )

    score = 100
    score -= policy.issue_penalty * len(found)
    score -= policy.warning_penalty * len(warnings)
    score -= policy.malformed_option_penalty * without_options
    if policy.paragraph_bonus and paragraphs >= policy.paragraph_bonus_at:
        score += policy.paragraph_bonus
    if policy.question_bonus and total_questions >= policy.question_bonus_at:
        score += policy.question_bonus
    if (
        policy.clean_options_bonus
        and without_options == 0
        and multiple_choice >= policy.clean_options_min_multiple_choice
    ):
        score += policy.clean_options_bonus
    if policy.answer_match_bonus and answers_match:
        score += policy.answer_match_bonus
    score = max(0, min(100, score))

    is_valid = (
        not found
        and has_title
        and layout.has_questions
        and layout.has_answer_key
        and total_questions >= policy.min_questions
        and without_options == 0
        and total_answers >= policy.min_answers
    )

    return ValidationReport(
        policy=policy.name,
        is_valid=is_valid,
        score=score,
        issues=[message for _, message in found],
        codes=[code for code, _ in found],
        warnings=warnings,
        stats=stats,
    )


def validate_simple(raw: str) -> ValidationReport:
    return validate_passage(raw, SIMPLE_POLICY)


def validate_detailed(raw: str) -> ValidationReport:
    return validate_passage(raw, DETAILED_POLICY)


def _mark(ok: bool) -> str:
    return "ok" if ok else "FAIL"


def summarize_report(report: ValidationReport, policy: Optional[ValidationPolicy] = None) -> str:
    """Human-readable summary; thresholds come from ``policy`` or the report's named policy."""
    policy = policy or get_policy(report.policy)
    stats = report.stats
    lines: List[str] = [
        f"Validation Score: {report.score}%",
        f"Status: {'VALID - ready to use' if report.is_valid else 'INVALID - will be regenerated'}",
        "",
    ]
    if report.issues:
        lines.append("Critical issues:")
        lines.extend(f"  - {issue}" for issue in report.issues)
        lines.append("")
    if report.warnings:
        lines.append("Warnings:")
        lines.extend(f"  - {warning}" for warning in report.warnings)
        lines.append("")
    lines.append("Content analysis:")
    lines.append(f"  Paragraphs: {stats.paragraphs}")
    lines.append(f"  Total Questions: {stats.total_questions} {_mark(stats.total_questions >= policy.min_questions)}")
    lines.append(f"  Multiple Choice (properly formatted): {stats.multiple_choice}")
    lines.append(f"  MC with format errors: {stats.without_options} {_mark(stats.without_options == 0)}")
    lines.append(f"  Vocabulary: {stats.vocabulary}")
    lines.append(f"  Reference: {stats.reference}")
    lines.append(f"  Short Answer: {stats.short_answer}")
    lines.append(f"  Total Answers: {stats.total_answers} {_mark(stats.answers_match)}")
    return "\n".join(lines)
