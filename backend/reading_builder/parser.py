from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Dict, List, Optional, Tuple

from .document import PARAGRAPH_MARKER, DocumentLayout, scan_layout, scan_question_block
from .schemas import ParsedPassage, ParseFailure, ParseOutcome


logger = logging.getLogger(__name__)

PLACEHOLDER_TITLE = "Untitled"
PARSE_ERROR_TITLE = "Parse Error"

FIRST_MARKER = re.compile(r"\(1\)")
HEADING_PREFIX = re.compile(r"^#+\s*")
TITLE_LABEL = re.compile(r"^title\s*:\s*", re.IGNORECASE)
# Only a label that opens a line starts the side box
SIDE_BOX_LABEL = re.compile(r"^[ \t]*Box A:", re.MULTILINE)
LINE_MARKER = re.compile(r"^[ \t]*\(\d+\)", re.MULTILINE)
HEADING_LINE = re.compile(r"^[ \t]*#{1,6}\s", re.MULTILINE)
MARKDOWN_HEADING = re.compile(r"^#{1,6}\s")
SEPARATOR_LINE = re.compile(r"^[=\-*_]{3,}$")
ANSWER_KEY_MENTION = re.compile(r"answer\s*key", re.IGNORECASE)
NUMBERED_ANSWER = re.compile(r"^\d+[.)]\s+.+")


def _extract_title(raw: str) -> str:
    match = FIRST_MARKER.search(raw)
    if not match:
        return PLACEHOLDER_TITLE
    title = HEADING_PREFIX.sub("", raw[: match.start()].strip())
    title = TITLE_LABEL.sub("", title).strip()
    return title or PLACEHOLDER_TITLE


def _side_box_span(body: str) -> Optional[Tuple[int, int, int]]:
    """(label start, text start, end) of the side box, or None.

    The box runs to the next line that opens with a paragraph marker or a
    markdown heading, else to the end of the body.
    """
    box = SIDE_BOX_LABEL.search(body)
    if not box:
        return None
    end = len(body)
    for pattern in (LINE_MARKER, HEADING_LINE):
        following = pattern.search(body, box.end())
        if following:
            end = min(end, following.start())
    return box.start(), box.end(), end


def _paragraph_spans(body: str) -> List[Tuple[int, str]]:
    box = _side_box_span(body)
    markers = [
        m for m in PARAGRAPH_MARKER.finditer(body)
        if box is None or not box[0] <= m.start() < box[2]
    ]
    spans: List[Tuple[int, str]] = []
    for i, marker in enumerate(markers):
        stop = markers[i + 1].start() if i + 1 < len(markers) else len(body)
        if box is not None and marker.end() <= box[0] < stop:
            stop = box[0]
        spans.append((int(marker.group(1)), body[marker.end() : stop].strip()))
    return spans


def _renumber(spans: List[Tuple[int, str]]) -> List[str]:
    # sorted() is stable, so repeated markers keep their source order
    ordered = sorted(spans, key=lambda span: span[0])
    return [f"({i}) {text}".rstrip() for i, (_, text) in enumerate(ordered, start=1)]


def _extract_side_box(body: str) -> Optional[str]:
    box = _side_box_span(body)
    if box is None:
        return None
    return body[box[1] : box[2]].strip() or None


def _extract_questions(layout: DocumentLayout) -> Tuple[Dict[str, List[str]], Dict[str, str]]:
    block = scan_question_block(layout.question_lines())
    questions: Dict[str, List[str]] = {}
    titles: Dict[str, str] = {}
    current: Optional[str] = None
    for group in block.groups:
        items = [item.text for item in group.items if item.text]
        if group.label is None:
            # Unlabelled section headings stay inside the labelled group around them
            if current is not None:
                questions[current].extend(items)
            continue
        current = group.label
        questions.setdefault(group.label, []).extend(items)
        titles.setdefault(group.label, group.title)
    return questions, titles


def _extract_answer_key(raw: str, layout: DocumentLayout) -> List[str]:
    answers: List[str] = []
    for line in layout.answer_lines():
        text = line.strip()
        if not text or MARKDOWN_HEADING.match(text) or SEPARATOR_LINE.match(text):
            continue
        answers.append(text)
    if answers:
        return answers
    # Heading missing or empty: take numbered lines after the last mention
    mentions = list(ANSWER_KEY_MENTION.finditer(raw))
    if not mentions:
        return []
    tail = raw[mentions[-1].end() :]
    return [line.strip() for line in tail.splitlines() if NUMBERED_ANSWER.match(line.strip())]


def _sentinel() -> ParsedPassage:
    return ParsedPassage(title=PARSE_ERROR_TITLE)


def parse_passage(raw: str) -> ParseOutcome:
    """Extract the structured passage from raw model output.

    Never raises: an internal failure yields the "Parse Error" record together
    with a ``ParseFailure`` so callers can tell an empty passage from one the
    parser could not read.
    """
    try:
        layout = scan_layout(raw)
        body = layout.body_text
        spans = _paragraph_spans(body)
        questions, titles = _extract_questions(layout)
        counts = Counter(number for number, _ in spans)
        passage = ParsedPassage(
            title=_extract_title(raw),
            paragraphs=_renumber(spans),
            side_box=_extract_side_box(body),
            questions=questions,
            group_titles=titles,
            answer_key=_extract_answer_key(raw, layout),
        )
        return ParseOutcome(
            passage=passage,
            duplicate_markers=sorted(number for number, seen in counts.items() if seen > 1),
        )
    except Exception as exc:
        logger.exception("Failed to parse generated passage")
        return ParseOutcome(
            passage=_sentinel(),
            error=ParseFailure(kind=type(exc).__name__, message=str(exc)),
        )


def parse_generated(raw: str) -> ParsedPassage:
    return parse_passage(raw).passage
