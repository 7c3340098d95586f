"""Line-oriented scanner for generated reading passages.

The validator and the parser both read a passage through this module so they
agree on where the sections start and end. A passage is laid out as::

    Title
    (1) paragraph ... (15) paragraph
    [Box A: side box]
    Questions
    A) Group title
    1. question
       A) option ... D) option
    Answer Key
    1. answer
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple


QUESTIONS_HEADING = re.compile(r"^\s*(?:#{1,6}\s*)?questions\s*:?\s*$", re.IGNORECASE)
ANSWER_KEY_HEADING = re.compile(r"^\s*(?:#{1,6}\s*)?answer\s*keys?\s*:?\s*$", re.IGNORECASE)
PARAGRAPH_MARKER = re.compile(r"\((\d+)\)")
NUMBERED_LINE = re.compile(r"^\s*(\d+)\.\s")
ANSWER_LINE = re.compile(r"^\s*\d+[.)]\s")
OPTION_LINE = re.compile(r"^\s*([A-Da-d])\)\s+\S")
GROUP_LABEL = re.compile(r"^\s*([A-Z])\)\s*(.*)$")
# Unlabelled section heading: a markdown heading, or a line opening with a question-type name
SECTION_HEADING = re.compile(
    r"^\s*(?:#{1,6}\s+(.+)|((?:multiple\s*choice|vocabulary|short\s*answer|main\s*idea)\b.*))$",
    re.IGNORECASE,
)
CRAMMED_OPTIONS = re.compile(r"A\).*B\).*C\).*D\)")

OPTION_LETTERS: Tuple[str, ...] = ("A", "B", "C", "D")


@dataclass(frozen=True)
class DocumentLayout:
    lines: Tuple[str, ...]
    questions_at: Optional[int]
    answer_key_at: Optional[int]

    @property
    def has_questions(self) -> bool:
        return self.questions_at is not None

    @property
    def has_answer_key(self) -> bool:
        return self.answer_key_at is not None

    @property
    def sections_in_order(self) -> bool:
        return (
            self.questions_at is not None
            and self.answer_key_at is not None
            and self.answer_key_at > self.questions_at
        )

    def body_lines(self) -> Tuple[str, ...]:
        if self.questions_at is None:
            return self.lines
        return self.lines[: self.questions_at]

    def question_lines(self) -> Tuple[str, ...]:
        if self.questions_at is None:
            return ()
        end = self.answer_key_at if self.sections_in_order else len(self.lines)
        return self.lines[self.questions_at + 1 : end]

    def answer_lines(self) -> Tuple[str, ...]:
        if self.answer_key_at is None:
            return ()
        return self.lines[self.answer_key_at + 1 :]

    @property
    def body_text(self) -> str:
        return "\n".join(self.body_lines())

    @property
    def questions_text(self) -> str:
        return "\n".join(self.question_lines())


def scan_layout(raw: str) -> DocumentLayout:
    lines = tuple((raw or "").splitlines())
    questions_at = next((i for i, line in enumerate(lines) if QUESTIONS_HEADING.match(line)), None)
    answer_key_at: Optional[int] = None
    candidates = [i for i, line in enumerate(lines) if ANSWER_KEY_HEADING.match(line)]
    if candidates:
        after = [i for i in candidates if questions_at is not None and i > questions_at]
        answer_key_at = after[0] if after else candidates[0]
    return DocumentLayout(lines=lines, questions_at=questions_at, answer_key_at=answer_key_at)


def paragraph_markers(text: str) -> List[int]:
    return [int(m.group(1)) for m in PARAGRAPH_MARKER.finditer(text or "")]


def count_answer_lines(lines: Sequence[str]) -> int:
    return sum(1 for line in lines if ANSWER_LINE.match(line))


@dataclass
class QuestionItem:
    number: int
    lines: List[str] = field(default_factory=list)
    option_letters: List[str] = field(default_factory=list)
    crammed: bool = False

    @property
    def has_full_options(self) -> bool:
        return tuple(self.option_letters) == OPTION_LETTERS

    @property
    def first_line(self) -> str:
        return self.lines[0] if self.lines else ""

    @property
    def text(self) -> str:
        return "\n".join(self.lines).strip()


@dataclass
class QuestionGroup:
    label: Optional[str]
    title: str = ""
    items: List[QuestionItem] = field(default_factory=list)
    misplaced_option_runs: int = 0

    def matches(self, keyword: str) -> bool:
        return keyword.lower() in self.title.lower()


@dataclass
class QuestionBlock:
    groups: List[QuestionGroup]
    option_runs: List[Tuple[str, ...]]

    @property
    def items(self) -> List[QuestionItem]:
        return [item for group in self.groups for item in group.items]

    @property
    def complete_option_runs(self) -> int:
        return sum(1 for run in self.option_runs if run == OPTION_LETTERS)

    def find_group(self, keyword: str) -> Optional[QuestionGroup]:
        """First group, labelled or not, whose heading mentions ``keyword``."""
        for group in self.groups:
            if group.title and group.matches(keyword):
                return group
        return None


def _option_runs(lines: Sequence[str], non_blank: Sequence[int]) -> Dict[int, List[int]]:
    """Map the first line index of every A), B), ... run to all line indexes in it.

    Runs span consecutive non-blank lines, must start at A) and need at least
    two letters in order.
    """
    runs: Dict[int, List[int]] = {}
    k = 0
    while k < len(non_blank):
        match = OPTION_LINE.match(lines[non_blank[k]])
        if not match or match.group(1).upper() != "A":
            k += 1
            continue
        members = [non_blank[k]]
        j = k + 1
        while j < len(non_blank) and len(members) < len(OPTION_LETTERS):
            nxt = OPTION_LINE.match(lines[non_blank[j]])
            if not nxt or nxt.group(1).upper() != OPTION_LETTERS[len(members)]:
                break
            members.append(non_blank[j])
            j += 1
        if len(members) >= 2:
            runs[members[0]] = members
            k = j
        else:
            k += 1
    return runs


def scan_question_block(lines: Sequence[str]) -> QuestionBlock:
    non_blank = [i for i, line in enumerate(lines) if line.strip()]
    runs = _option_runs(lines, non_blank)
    in_run = {i for members in runs.values() for i in members}

    groups: List[QuestionGroup] = [QuestionGroup(label=None)]
    option_runs: List[Tuple[str, ...]] = []
    item: Optional[QuestionItem] = None

    for pos, idx in enumerate(non_blank):
        line = lines[idx].strip()
        group = groups[-1]
        if idx in runs:
            members = runs[idx]
            letters = tuple(OPTION_LINE.match(lines[i]).group(1).upper() for i in members)
            option_runs.append(letters)
            if item is not None and not item.option_letters:
                item.option_letters = list(letters)
            else:
                after = pos + len(members)
                if after < len(non_blank) and NUMBERED_LINE.match(lines[non_blank[after]]):
                    group.misplaced_option_runs += 1
            if item is not None:
                item.lines.extend(lines[i].strip() for i in members)
            continue
        if idx in in_run:
            continue
        numbered = NUMBERED_LINE.match(line)
        if numbered:
            item = QuestionItem(number=int(numbered.group(1)), lines=[line])
            item.crammed = bool(CRAMMED_OPTIONS.search(line))
            group.items.append(item)
            continue
        label = GROUP_LABEL.match(line)
        if label:
            groups.append(QuestionGroup(label=f"{label.group(1)})", title=label.group(2).strip()))
            item = None
            continue
        heading = SECTION_HEADING.match(line)
        if heading:
            groups.append(QuestionGroup(label=None, title=(heading.group(1) or heading.group(2)).strip()))
            item = None
            continue
        if item is not None:
            item.lines.append(line)

    if not groups[0].items and not groups[0].misplaced_option_runs:
        groups.pop(0)
    return QuestionBlock(groups=groups, option_runs=option_runs)
