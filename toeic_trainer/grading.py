"""Multiple-choice answer checking."""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field

from toeic_trainer.models import Question

_LETTER_PREFIX = re.compile(r"^\(([A-Za-z])\)")


def extract_choice(raw: str) -> str:
    """Letter token of an option: "(B) To order supplies" gives "B", else the first character."""
    raw = raw.strip()
    m = _LETTER_PREFIX.match(raw)
    if m:
        return m.group(1)
    return raw[:1]


def answer_key(question: Question) -> str | None:
    """Canonical token of the single option the key refers to.

    The key may be a letter ("A", "(A)") or the full option text. ``None``
    when it matches no option or more than one.
    """
    key = question.answer.strip()
    token = extract_choice(key)
    matches = [
        opt for opt in question.options
        if opt.strip() == key or (len(key) <= 3 and extract_choice(opt) == token)
    ]
    if len(matches) != 1:
        return None
    return extract_choice(matches[0])


@dataclass
class GradeResult:
    score: int | None  # None when there is nothing to grade
    verdicts: dict[int, bool] = field(default_factory=dict)
    correct: int = 0
    total: int = 0

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "correct": self.correct,
            "total": self.total,
            "verdicts": {str(k): v for k, v in self.verdicts.items()},
        }


def grade(questions: list[Question], selections: dict[int, str]) -> GradeResult:
    verdicts: dict[int, bool] = {}
    for q in questions:
        key = answer_key(q)
        chosen = selections.get(q.id)
        verdicts[q.id] = key is not None and chosen == key
    total = len(questions)
    correct = sum(verdicts.values())
    if total == 0:
        return GradeResult(score=None)
    # Half rounds up.
    score = math.floor(100 * correct / total + 0.5)
    return GradeResult(score=score, verdicts=verdicts, correct=correct, total=total)


class AnswerSheet:
    """Selections for one artifact. Checking is a one-way gate."""

    def __init__(self, questions: list[Question]):
        self.questions = list(questions)
        self.selections: dict[int, str] = {}
        self.result: GradeResult | None = None

    @property
    def checked(self) -> bool:
        return self.result is not None

    def select(self, question_id: int, raw_option: str) -> str:
        token = extract_choice(raw_option)
        if not self.checked:
            self.selections[question_id] = token
        return self.selections.get(question_id, token)

    def check(self) -> GradeResult:
        if self.result is None:
            self.result = grade(self.questions, self.selections)
        return self.result
