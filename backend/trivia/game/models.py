from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Literal


RoundStatus = Literal["idle", "question_posted", "revealed"]


def now_ms() -> int:
    return int(time.time() * 1000)


def normalize_name(name: str) -> str:
    return name.strip().lower()


def normalize_room(room: str) -> str:
    return room.strip().lower()


@dataclass(frozen=True)
class Player:
    connection_id: str
    display_name: str
    room: str

    @property
    def name_key(self) -> str:
        return normalize_name(self.display_name)


@dataclass(frozen=True)
class Question:
    question: str
    candidate_answers: tuple[str, ...]
    correct_answer: str


@dataclass(frozen=True)
class Round:
    room: str
    status: RoundStatus = "idle"
    question: str = ""
    candidate_answers: tuple[str, ...] = field(default_factory=tuple)
    correct_answer: str = ""
    posted_at_ms: int | None = None
    posted_by: str = ""
    round_over: bool = False
