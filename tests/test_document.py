from __future__ import annotations

from reading_builder.document import (
    count_answer_lines,
    paragraph_markers,
    scan_layout,
    scan_question_block,
)


def test_layout_accepts_markdown_headings_and_plural_answer_keys() -> None:
    raw = "Title\n(1) Body.\n## Questions:\n1. Why?\n### Answer Keys\n1. Because."
    layout = scan_layout(raw)

    assert layout.has_questions and layout.has_answer_key
    assert layout.sections_in_order
    assert layout.question_lines() == ("1. Why?",)
    assert layout.answer_lines() == ("1. Because.",)


def test_heading_words_inside_sentences_are_not_boundaries() -> None:
    raw = "The questions we ask\nThe answer key to success\n(1) Body."
    layout = scan_layout(raw)

    assert not layout.has_questions
    assert not layout.has_answer_key
    assert layout.body_text == raw


def test_answer_key_after_questions_wins_over_earlier_mention() -> None:
    raw = "Answer Key\nTitle\nQuestions\n1. Why?\nAnswer Key\n1. Because."
    layout = scan_layout(raw)

    assert layout.answer_key_at == 4
    assert layout.sections_in_order


def test_paragraph_markers_are_literal() -> None:
    assert paragraph_markers("( 1 ) a (2) b (10) c ( 3) d") == [2, 10]


def test_count_answer_lines_accepts_dot_and_paren() -> None:
    assert count_answer_lines(["1. yes", "2) no", "Notes", "3.no space"]) == 2


def test_options_attach_to_preceding_question() -> None:
    lines = [
        "C) Multiple Choice Questions",
        "1. Which is true?",
        "A) one",
        "B) two",
        "",
        "C) three",
        "D) four",
        "2. Next question?",
    ]
    block = scan_question_block(lines)

    assert [g.label for g in block.groups] == ["C)"]
    first, second = block.groups[0].items
    assert first.has_full_options
    assert first.text.splitlines() == ["1. Which is true?", "A) one", "B) two", "C) three", "D) four"]
    assert second.option_letters == []
    assert block.complete_option_runs == 1


def test_orphan_options_before_a_question_are_misplaced() -> None:
    lines = ["B) Multiple Choice", "A) one", "B) two", "C) three", "D) four", "1. Which is true?"]
    block = scan_question_block(lines)

    group = block.find_group("multiple choice")
    assert group is not None
    assert group.misplaced_option_runs == 1
    assert not group.items[0].has_full_options


def test_single_a_line_is_a_group_label_not_an_option_run() -> None:
    block = scan_question_block(["A) Short Answer Questions", "1. Why?", "B) Main Idea", "1. What?"])

    assert [(g.label, g.title) for g in block.groups] == [("A)", "Short Answer Questions"), ("B)", "Main Idea")]
    assert block.option_runs == []


def test_crammed_options_are_detected() -> None:
    block = scan_question_block(["1. Pick one A) x B) y C) z D) w"])

    assert block.items[0].crammed


def test_unlabelled_heading_opens_a_section() -> None:
    lines = [
        "A) Short Answer Questions",
        "1. Why?",
        "Multiple Choice Questions",
        "2. Which is true?",
        "### Vocabulary in Context",
        "3. What does the word mean?",
    ]
    block = scan_question_block(lines)

    assert [(g.label, g.title) for g in block.groups] == [
        ("A)", "Short Answer Questions"),
        (None, "Multiple Choice Questions"),
        (None, "Vocabulary in Context"),
    ]
    assert [i.number for i in block.find_group("multiple choice").items] == [2]
    assert [i.number for i in block.find_group("vocabulary").items] == [3]
    # The first item is not stretched over the following heading
    assert block.groups[0].items[0].lines == ["1. Why?"]
