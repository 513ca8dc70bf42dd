from __future__ import annotations

import logging
from dataclasses import replace
from threading import RLock
from typing import Callable

from .errors import NoActiveRound, ProviderFailure, TriviaError
from .models import Round, RoundStatus, normalize_room, now_ms
from .questions import QuestionProvider

logger = logging.getLogger(__name__)


class RoundStateMachine:
    """Per-room trivia rounds, keyed by room name.

    idle -> question_posted -> (answers) -> revealed -> question_posted ...

    Round records are immutable and swapped whole under the lock, so readers
    never see a half-built round. The provider is called outside any lock.
    Callers that publish a round change hold ``room_lock(room)`` across the
    change and its broadcast, so clients see changes in the order they were
    stored.
    """

    def __init__(self, provider: QuestionProvider) -> None:
        self._lock = RLock()
        self._rounds: dict[str, Round] = {}
        self._room_locks: dict[str, RLock] = {}
        self.provider = provider

    def room_lock(self, room: str) -> RLock:
        room_key = normalize_room(room)
        with self._lock:
            lock = self._room_locks.get(room_key)
            if lock is None:
                lock = self._room_locks[room_key] = RLock()
            return lock

    def post_question(
        self,
        room: str,
        posted_by: str = "",
        on_posted: Callable[[Round], None] | None = None,
    ) -> Round:
        room_key = normalize_room(room)
        try:
            question = self.provider.fetch_question()
        except TriviaError:
            raise
        except Exception as exc:
            logger.warning("question provider failed for room %r: %r", room_key, exc)
            raise ProviderFailure("The question service failed. Try again.") from exc

        new_round = Round(
            room=room_key,
            status="question_posted",
            question=question.question,
            candidate_answers=tuple(question.candidate_answers),
            correct_answer=question.correct_answer,
            posted_at_ms=now_ms(),
            posted_by=posted_by,
            round_over=False,
        )
        with self.room_lock(room_key):
            with self._lock:
                self._rounds[room_key] = new_round
            if on_posted is not None:
                on_posted(new_round)

        logger.info("question posted in room %r by %r", room_key, posted_by)
        return new_round

    def record_answer_submission(self, room: str) -> bool:
        room_key = normalize_room(room)
        with self._lock:
            current = self._rounds.get(room_key)
            if current is None:
                raise NoActiveRound(room_key)
            if not current.round_over:
                current = replace(current, round_over=True)
                self._rounds[room_key] = current
            return current.round_over

    def get_correct_answer(self, room: str) -> str:
        room_key = normalize_room(room)
        with self._lock:
            current = self._rounds.get(room_key)
            if current is None:
                raise NoActiveRound(room_key)
            if current.status != "revealed":
                self._rounds[room_key] = replace(current, status="revealed")

        logger.info("answer revealed in room %r", room_key)
        return current.correct_answer

    def get_round(self, room: str) -> Round | None:
        with self._lock:
            return self._rounds.get(normalize_room(room))

    def status(self, room: str) -> RoundStatus:
        current = self.get_round(room)
        return current.status if current else "idle"


def round_public_state(current: Round | None) -> dict:
    if current is None:
        return {"status": "idle"}

    payload = {
        "status": current.status,
        "question": current.question,
        "answers": list(current.candidate_answers),
        "roundOver": current.round_over,
        "postedAt": current.posted_at_ms,
        "postedBy": current.posted_by,
    }
    # Do NOT expose the answer before it is revealed.
    if current.status == "revealed":
        payload["correctAnswer"] = current.correct_answer
    return payload
