from __future__ import annotations

import re
from typing import List

from .document import count_answer_lines, paragraph_markers, scan_layout, scan_question_block
from .schemas import Check, Scorecard


REFERENCE_PRONOUN = re.compile(r"[\"“](?:these|they|it|their|this|those)[\"”]", re.IGNORECASE)
INSERTION_SPOT = re.compile(r"\[[A-D]\]")


def build_scorecard(raw: str) -> Scorecard:
    """Checklist view of a passage: one pass/fail line per check, score = share passed.

    Informational only; the retry gate is the validator.
    """
    layout = scan_layout(raw)
    checks: List[Check] = []

    checks.append(Check(id="title", passed=any(line.strip() for line in layout.lines)))

    paragraphs = len(set(paragraph_markers(layout.body_text)))
    checks.append(Check(id="paragraphCount(12-16)", passed=12 <= paragraphs <= 16, note=f"found={paragraphs}"))

    checks.append(Check(id="hasQuestions", passed=layout.has_questions))
    checks.append(Check(id="hasAnswerKey", passed=layout.has_answer_key))
    checks.append(
        Check(
            id="answerKeyAfterQuestions",
            passed=layout.sections_in_order,
            note=f"Q={layout.questions_at} A={layout.answer_key_at}",
        )
    )

    if layout.has_questions:
        questions = len(scan_question_block(layout.question_lines()).items)
        checks.append(Check(id="questionCount(minimum 20)", passed=questions >= 20, note=f"found={questions}"))
    else:
        checks.append(Check(id="questionCount(minimum 20)", passed=False, note="Questions section not found"))

    answers = count_answer_lines(layout.answer_lines())
    checks.append(Check(id="answerKeyHasContent", passed=answers >= 15, note=f"found={answers} answers"))

    checks.append(Check(id="referencePronounPresent", passed=bool(REFERENCE_PRONOUN.search(raw or ""))))

    spots = INSERTION_SPOT.findall(raw or "")
    checks.append(Check(id="sentenceInsertionSpots", passed=len(set(spots)) >= 3, note=f"found={len(spots)}"))

    block = scan_question_block(layout.question_lines())
    checks.append(Check(id="multipleChoiceOptions(A-D)", passed=block.complete_option_runs > 0))

    score = round(100 * sum(1 for check in checks if check.passed) / len(checks))
    return Scorecard(score=score, checks=checks)
