import logging
import os
import random
from functools import lru_cache
from typing import Iterable, Optional

import yaml
from pydantic import ValidationError

from ieee_quiz.config import get_settings
from ieee_quiz.models import PublicQuestion, Question

logger = logging.getLogger(__name__)

DEFAULT_BANK_PATH = os.path.join(os.path.dirname(__file__), "questions.yaml")


class QuestionBank:
    """Fixed, ordered set of questions. Never mutated after construction."""

    def __init__(self, questions: Iterable[Question]):
        self._questions = tuple(questions)
        self._by_id = {}
        for q in self._questions:
            if q.id in self._by_id:
                raise ValueError(f"Duplicate question id {q.id}")
            self._by_id[q.id] = q

    @property
    def total(self) -> int:
        return len(self._questions)

    @property
    def questions(self) -> tuple[Question, ...]:
        return self._questions

    def get(self, question_id: int) -> Optional[Question]:
        return self._by_id.get(question_id)

    def questions_for_attempt(self, rng: random.Random) -> list[PublicQuestion]:
        """All questions in a fresh random order, with the correct index stripped."""
        shuffled = rng.sample(self._questions, len(self._questions))
        return [
            PublicQuestion(id=q.id, question=q.text, options=list(q.options), points=q.points)
            for q in shuffled
        ]


def load_question_bank(path: str) -> QuestionBank:
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    raw_questions = data.get("questions")
    if not raw_questions:
        raise ValueError(f"No questions found in {path}")

    questions = []
    for i, raw in enumerate(raw_questions):
        try:
            questions.append(Question.model_validate(raw))
        except ValidationError as e:
            raise ValueError(f"Question {i+1} in {path} is invalid: {e}") from e

    bank = QuestionBank(questions)
    logger.info("Loaded %d questions from %s", bank.total, path)
    return bank


@lru_cache
def get_question_bank() -> QuestionBank:
    return load_question_bank(get_settings().question_bank_path or DEFAULT_BANK_PATH)
