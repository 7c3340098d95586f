from __future__ import annotations

import pytest

from reading_builder import parser
from reading_builder.parser import PARSE_ERROR_TITLE, PLACEHOLDER_TITLE, parse_generated, parse_passage

from passage_samples import make_passage


TWO_GROUPS = """The Quiet City

(1) Streets are hot.
(2) Trees help.

Questions

A) Short Answer Questions
1. Why are streets hot?
2. What helps?
3. Who plants trees?

B) Main Idea Questions
1. What is the passage about?
2. What does the author suggest?

Answer Key
1. Asphalt.
2. Trees.
"""


def test_paragraphs_are_sorted_by_marker() -> None:
    raw = "Heat\n(3) Third part.\n(1) First part.\n(2) Second part.\nQuestions\n1. Why?"
    passage = parse_generated(raw)

    assert passage.paragraphs == ["(1) First part.", "(2) Second part.", "(3) Third part."]


def test_paragraphs_are_renumbered_consecutively() -> None:
    raw = "Heat\n(2) Alpha.\n(5) Beta.\n(9) Gamma."
    passage = parse_generated(raw)

    assert passage.paragraphs == ["(1) Alpha.", "(2) Beta.", "(3) Gamma."]


def test_duplicate_markers_are_kept_and_reported() -> None:
    raw = "Heat\n(1) One.\n(2) Two a.\n(2) Two b.\n(3) Three."
    outcome = parse_passage(raw)

    assert outcome.ok
    assert outcome.duplicate_markers == [2]
    assert outcome.passage.paragraphs == ["(1) One.", "(2) Two a.", "(3) Two b.", "(4) Three."]


def test_paragraph_text_may_contain_parentheses() -> None:
    raw = "Heat\n(1) Cities (mostly coastal) warm fastest.\n(2) Shade helps."
    passage = parse_generated(raw)

    assert passage.paragraphs[0] == "(1) Cities (mostly coastal) warm fastest."


def test_parsing_is_idempotent() -> None:
    raw = make_passage()

    assert parse_passage(raw) == parse_passage(raw)


@pytest.mark.parametrize(
    ("raw", "title"),
    [
        ("# The Quiet City\n\n(1) Body.", "The Quiet City"),
        ("Title: The Quiet City\n(1) Body.", "The Quiet City"),
        ("## Title: The Quiet City\n(1) Body.", "The Quiet City"),
        ("No markers here at all", PLACEHOLDER_TITLE),
        ("(1) Body only.", PLACEHOLDER_TITLE),
    ],
)
def test_title_extraction(raw: str, title: str) -> None:
    assert parse_generated(raw).title == title


def test_side_box_is_split_from_last_paragraph() -> None:
    raw = "Heat\n(1) One.\n(2) Two.\n\nBox A: Albedo means reflectivity.\n\nQuestions\n1. Why?"
    passage = parse_generated(raw)

    assert passage.side_box == "Albedo means reflectivity."
    assert passage.paragraphs == ["(1) One.", "(2) Two."]


def test_no_side_box() -> None:
    assert parse_generated(make_passage()).side_box is None


def test_question_groups_keyed_by_label() -> None:
    passage = parse_generated(TWO_GROUPS)

    assert passage.questions == {
        "A)": ["1. Why are streets hot?", "2. What helps?", "3. Who plants trees?"],
        "B)": ["1. What is the passage about?", "2. What does the author suggest?"],
    }
    assert passage.group_titles == {"A)": "Short Answer Questions", "B)": "Main Idea Questions"}


def test_questions_without_group_labels_are_not_grouped() -> None:
    assert parse_generated(make_passage()).questions == {}


def test_repeated_group_label_extends_group() -> None:
    raw = "T\n(1) x.\nQuestions\nA) Short Answer\n1. a?\nA) Short Answer\n2. b?\nAnswer Key\n1. a\n2. b"
    passage = parse_generated(raw)

    assert passage.questions == {"A)": ["1. a?", "2. b?"]}


def test_multiple_choice_item_keeps_its_options() -> None:
    raw = "T\n(1) x.\nQuestions\nC) Multiple Choice\n1. Pick?\nA) a\nB) b\nC) c\nD) d\nAnswer Key\n1. A"
    passage = parse_generated(raw)

    assert passage.questions["C)"] == ["1. Pick?\nA) a\nB) b\nC) c\nD) d"]


def test_answer_key_skips_headings_and_separators() -> None:
    raw = "T\n(1) x.\nQuestions\n1. a?\n## Answer Key\n---\n\n### Part A\n1. First.\n2. Second.\n"
    passage = parse_generated(raw)

    assert passage.answer_key == ["1. First.", "2. Second."]


def test_answer_key_falls_back_to_numbered_lines_after_last_mention() -> None:
    raw = "T\n(1) x.\nQuestions\n1. a?\nHere is the answer key for this test\n1. First.\nnote\n2. Second."
    passage = parse_generated(raw)

    assert passage.answer_key == ["1. First.", "2. Second."]


def test_missing_answer_key_gives_empty_list() -> None:
    assert parse_generated("T\n(1) x.\nQuestions\n1. a?").answer_key == []


def test_internal_failure_returns_parse_error_record(monkeypatch: pytest.MonkeyPatch) -> None:
    def explode(raw: str):
        raise RuntimeError("scanner broke")

    monkeypatch.setattr(parser, "scan_layout", explode)
    outcome = parse_passage(make_passage())

    assert not outcome.ok
    assert outcome.passage.title == PARSE_ERROR_TITLE
    assert outcome.passage.paragraphs == []
    assert outcome.error is not None
    assert outcome.error.kind == "RuntimeError"
    assert outcome.error.message == "scanner broke"


def test_inline_box_mention_does_not_cut_paragraphs() -> None:
    raw = make_passage().replace("(4) Paragraph 4 explains", "(4) As Box A: shows, paragraph 4 explains", 1)
    outcome = parse_passage(raw)

    assert len(outcome.passage.paragraphs) == 15
    assert outcome.passage.paragraphs[3].startswith("(4) As Box A: shows")
    assert outcome.passage.side_box is None


def test_side_box_between_paragraphs_keeps_later_paragraphs() -> None:
    raw = "Heat\n(1) One.\n\nBox A: Albedo means reflectivity.\n\n(2) Two.\n(3) Three.\nQuestions\n1. Why?"
    passage = parse_generated(raw)

    assert passage.side_box == "Albedo means reflectivity."
    assert passage.paragraphs == ["(1) One.", "(2) Two.", "(3) Three."]


def test_side_box_stops_at_markdown_heading() -> None:
    raw = "Heat\n(1) One.\nBox A: Terms.\n## Notes\nextra\nQuestions\n1. Why?"

    assert parse_generated(raw).side_box == "Terms."


def test_unlabelled_heading_stays_in_surrounding_group() -> None:
    raw = "T\n(1) x.\nQuestions\nA) Short Answer\n1. a?\nMultiple Choice Questions\n2. b?\nAnswer Key\n1. a\n2. b"
    passage = parse_generated(raw)

    assert passage.questions == {"A)": ["1. a?", "2. b?"]}
    assert passage.group_titles == {"A)": "Short Answer"}
