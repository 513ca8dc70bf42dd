"""Trivia question sources.

A provider exposes ``fetch_question() -> Question`` and raises
``ProviderFailure`` when it cannot produce one. Providers never fall back to
made-up data.
"""

from __future__ import annotations

import http.client
import json
import logging
import random
import urllib.error
import urllib.request
from pathlib import Path
from typing import Protocol

from .errors import ProviderFailure
from .models import Question

logger = logging.getLogger(__name__)


class QuestionProvider(Protocol):
    def fetch_question(self) -> Question: ...


def _build_question(question: str, correct: str, incorrect: list[str], rng: random.Random) -> Question:
    answers = [correct, *incorrect]
    rng.shuffle(answers)
    return Question(question=question, candidate_answers=tuple(answers), correct_answer=correct)


class OpenTriviaProvider:
    """Open Trivia DB (``https://opentdb.com``) over HTTP."""

    def __init__(self, url: str, timeout_sec: float = 5.0, rng: random.Random | None = None) -> None:
        self.url = url
        self.timeout_sec = timeout_sec
        self._rng = rng or random.Random()

    def fetch_question(self) -> Question:
        try:
            with urllib.request.urlopen(self.url, timeout=self.timeout_sec) as resp:
                data = json.loads(resp.read().decode("utf-8"))
        except (urllib.error.URLError, http.client.HTTPException, TimeoutError, OSError) as exc:
            logger.warning("question provider request failed: %s", exc)
            raise ProviderFailure("Could not reach the question service. Try again.") from exc
        except ValueError as exc:
            logger.warning("question provider returned invalid JSON: %s", exc)
            raise ProviderFailure("The question service sent an unreadable reply.") from exc

        return self._parse(data)

    def _parse(self, data) -> Question:
        if not isinstance(data, dict) or data.get("response_code") != 0:
            code = data.get("response_code") if isinstance(data, dict) else None
            logger.warning("question provider response_code=%r", code)
            raise ProviderFailure("The question service has no question right now.")

        results = data.get("results")
        if not isinstance(results, list) or not results:
            raise ProviderFailure("The question service has no question right now.")

        try:
            item = results[0]
            question = str(item["question"])
            correct = str(item["correct_answer"])
            incorrect = [str(a) for a in item.get("incorrect_answers", [])]
        except (KeyError, TypeError, AttributeError) as exc:
            raise ProviderFailure("The question service sent an incomplete question.") from exc

        return _build_question(question, correct, incorrect, self._rng)


class StaticQuestionProvider:
    """Cycles through a fixed list of questions, e.g. loaded from a JSON file."""

    def __init__(self, questions: list[Question], rng: random.Random | None = None) -> None:
        self._questions = list(questions)
        self._rng = rng or random.Random()
        self._next = 0

    @classmethod
    def from_file(cls, path: str | Path, rng: random.Random | None = None) -> "StaticQuestionProvider":
        """Load ``[{"question", "correct_answer", "incorrect_answers"}, ...]``."""
        rng = rng or random.Random()
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        questions = [
            _build_question(
                str(item["question"]),
                str(item["correct_answer"]),
                [str(a) for a in item.get("incorrect_answers", [])],
                rng,
            )
            for item in raw
        ]
        return cls(questions, rng=rng)

    def fetch_question(self) -> Question:
        if not self._questions:
            raise ProviderFailure("No questions are configured.")
        question = self._questions[self._next % len(self._questions)]
        self._next += 1
        return question
