from __future__ import annotations

from typing import Iterable, List

from .schemas import GenerationInput, IssueCode


_ORDINALS = [
    "First", "Second", "Third", "Fourth", "Fifth", "Sixth", "Seventh", "Eighth",
    "Ninth", "Tenth", "Eleventh", "Twelfth", "Thirteenth", "Fourteenth", "Fifteenth",
]


def _paragraph_skeleton() -> str:
    return "\n\n".join(f"({i}) {word} paragraph with 8-12 sentences..." for i, word in enumerate(_ORDINALS, start=1))


def _numbered(start: int, count: int, text: str) -> str:
    return "\n".join(f"{n}. {text}" for n in range(start, start + count))


SYSTEM_PROMPT = (
    "You are creating a C1-level academic reading passage with SHORT ANSWER and MAIN IDEA questions ONLY.\n\n"
    "NO multiple choice questions. NO A/B/C/D options. ONLY questions that require written answers.\n\n"
    "STRUCTURE YOU MUST CREATE:\n\n"
    "Title: [Your title here]\n\n"
    f"{_paragraph_skeleton()}\n\n"
    "Questions\n\n"
    "A) Short Answer Questions\n\n"
    f"{_numbered(1, 18, '[Open question about the passage]')}\n\n"
    "B) Main Idea Questions\n\n"
    f"{_numbered(1, 4, '[Question about the central theme or purpose]')}\n\n"
    "Answer Key\n\n"
    f"{_numbered(1, 22, '[Complete answer based on the passage]')}\n\n"
    "RULES:\n"
    "1. Write 15 paragraphs numbered (1) through (15)\n"
    "2. Each paragraph 8-12 sentences, detailed and academic\n"
    "3. Write 18 Short Answer questions + 4 Main Idea questions = 22 total\n"
    "4. NO multiple choice. NO A/B/C/D options. ONLY open-ended questions.\n"
    "5. Include Answer Key with 22 answers\n"
    "6. Use academic vocabulary and complex ideas"
)


def fill_user_prompt(req: GenerationInput) -> str:
    prompt = (
        f"Create a {req.level}-level academic reading passage:\n\n"
        f"Topic: {req.topic}\n"
        f"Domain: {req.domain}\n"
        f"Target: ~{req.target_words} words total\n\n"
        "Requirements:\n"
        "- Title\n"
        "- 15 paragraphs numbered (1) to (15), each 8-12 sentences long\n"
        f"- Question types: {', '.join(req.question_types)}\n"
        "- 18 Short Answer questions + 4 Main Idea questions\n"
        "- Answer Key with all 22 answers\n"
        "- NO multiple choice options - only open-ended questions\n"
    )
    if req.sidebox:
        prompt += "- After paragraph (15), add a short side box introduced by 'Box A:' summarising key terms\n"
    return prompt + "\nWrite detailed, substantive academic content."


_OPTION_FORMAT = (
    "Every multiple-choice item needs four options A) B) C) D), each on its own line, directly after the question line."
)

_CORRECTIONS = {
    IssueCode.MISSING_TITLE: "Start the passage with a one-line title.",
    IssueCode.TOO_FEW_PARAGRAPHS: "Write exactly 15 paragraphs numbered (1) through (15). Do not skip or merge numbers.",
    IssueCode.QUESTIONS_MISSING: "Put a line containing only the word 'Questions' before the question set.",
    IssueCode.ANSWER_KEY_MISSING: "Put a line containing only 'Answer Key' after the questions, followed by the numbered answers.",
    IssueCode.SECTION_ORDER: "The 'Answer Key' section must come after the 'Questions' section.",
    IssueCode.TOO_FEW_QUESTIONS: "Write at least 20 numbered questions, each line starting with '<number>. '.",
    IssueCode.MULTIPLE_CHOICE_FORBIDDEN: (
        "YOU WROTE MULTIPLE CHOICE OPTIONS (A, B, C, D) IN THE PREVIOUS ATTEMPT! "
        "No multiple-choice options are permitted. Do not write lines like 'A) Option'. "
        "Only write open questions such as '1. What is the main focus?'."
    ),
    IssueCode.MALFORMED_OPTIONS: _OPTION_FORMAT,
    IssueCode.OPTIONS_BEFORE_QUESTION: _OPTION_FORMAT,
    IssueCode.OPTIONS_SAME_LINE: _OPTION_FORMAT,
    IssueCode.VOCABULARY_OPTIONS: "Every vocabulary question needs four options A) B) C) D) on separate lines.",
    IssueCode.TOO_FEW_ANSWERS: "Write one numbered answer per question in the Answer Key (at least 20).",
    IssueCode.COUNT_MISMATCH: "The Answer Key must have exactly one numbered answer for every question.",
}


def corrective_instructions(codes: Iterable[IssueCode], attempt: int) -> str:
    rules: List[str] = []
    for code in codes:
        rule = _CORRECTIONS.get(code)
        if rule and rule not in rules:
            rules.append(rule)
    if not rules:
        rules.append("Follow the required structure exactly.")
    lines = [f"RETRY {attempt}: the previous attempt broke these rules. Fix ALL of them:"]
    lines.extend(f"- {rule}" for rule in rules)
    return "\n".join(lines)


def build_request(req: GenerationInput, codes: Iterable[IssueCode] = (), attempt: int = 0) -> str:
    prompt = fill_user_prompt(req)
    if attempt > 0:
        prompt += "\n\n" + corrective_instructions(codes, attempt)
    return prompt
