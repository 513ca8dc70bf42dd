"""Session coordination: client events in, room broadcasts out.

The coordinator never talks to Socket.IO directly. It resolves the acting
player, runs the domain operation, broadcasts one resulting event through the
injected transport and returns a ``Result`` that the transport adapter turns
into the request's acknowledgment.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Protocol

from ..realtime import events
from .errors import InvalidPayload, TriviaError
from .messages import ADMIN_NAME, format_message
from .models import Player, normalize_room
from .players import PlayerRegistry
from .rounds import RoundStateMachine, round_public_state

logger = logging.getLogger(__name__)


class Transport(Protocol):
    def broadcast_to_room(self, room: str, event: str, payload: Any) -> None: ...

    def broadcast_to_room_except(self, connection_id: str, room: str, event: str, payload: Any) -> None: ...

    def send_to_connection(self, connection_id: str, event: str, payload: Any) -> None: ...

    def add_to_room(self, connection_id: str, room: str) -> None: ...

    def remove_from_room(self, connection_id: str, room: str) -> None: ...


@dataclass(frozen=True)
class Result:
    value: Any = None
    error: TriviaError | None = None

    @classmethod
    def success(cls, value: Any = None) -> "Result":
        return cls(value=value)

    @classmethod
    def failure(cls, error: TriviaError) -> "Result":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def ack(self) -> str | None:
        """Acknowledgment payload: nothing on success, the message on failure."""
        return None if self.error is None else self.error.message


def _required_text(text: Any, what: str) -> str:
    if isinstance(text, dict):
        text = text.get("text")
    if not isinstance(text, str) or not text.strip():
        raise InvalidPayload(f"{what} must not be empty.")
    return text


class SessionCoordinator:
    def __init__(self, players: PlayerRegistry, rounds: RoundStateMachine, transport: Transport) -> None:
        self.players = players
        self.rounds = rounds
        self.transport = transport

    def _run(self, action: str, connection_id: str, fn: Callable[[], Any]) -> Result:
        try:
            return Result.success(fn())
        except TriviaError as exc:
            logger.info("%s rejected for %s: %s (%s)", action, connection_id, exc.message, exc.code)
            return Result.failure(exc)

    def _broadcast_membership(self, room: str) -> None:
        self.transport.broadcast_to_room(
            room,
            events.ROOM,
            {"room": room, "players": self.players.list_players(room)},
        )

    def join(self, connection_id: str, data: Any) -> Result:
        def _join() -> Player:
            payload = data if isinstance(data, dict) else {}
            name = payload.get("playerName")
            room = payload.get("room")
            if not isinstance(name, str) or not isinstance(room, str):
                raise InvalidPayload("Player name and room are required.")

            player = self.players.add_player(connection_id, name, room)

            self.transport.add_to_room(connection_id, player.room)
            self.transport.send_to_connection(
                connection_id, events.MESSAGE, format_message(ADMIN_NAME, "Welcome!")
            )
            self.transport.broadcast_to_room_except(
                connection_id,
                player.room,
                events.MESSAGE,
                format_message(ADMIN_NAME, f"{player.display_name} has joined the game!"),
            )
            self._broadcast_membership(player.room)
            return player

        return self._run("join", connection_id, _join)

    def send_message(self, connection_id: str, text: Any) -> Result:
        def _send() -> dict:
            player = self.players.get_player(connection_id)
            message = format_message(player.display_name, _required_text(text, "Message"))
            self.transport.broadcast_to_room(player.room, events.MESSAGE, message)
            return message

        return self._run("sendMessage", connection_id, _send)

    def get_question(self, connection_id: str) -> Result:
        def _question() -> dict:
            player = self.players.get_player(connection_id)
            sent: dict = {}

            def _publish(new_round) -> None:
                sent.update(
                    playerName=player.display_name,
                    question=new_round.question,
                    answers=list(new_round.candidate_answers),
                    createdAt=new_round.posted_at_ms,
                )
                # The asker may have left while the provider was busy; the
                # room still gets the question, even if it is now empty.
                self.transport.broadcast_to_room(player.room, events.QUESTION, dict(sent))

            self.rounds.post_question(player.room, posted_by=player.display_name, on_posted=_publish)
            return sent

        return self._run("getQuestion", connection_id, _question)

    def send_answer(self, connection_id: str, text: Any) -> Result:
        def _answer() -> dict:
            player = self.players.get_player(connection_id)
            answer = _required_text(text, "Answer")
            with self.rounds.room_lock(player.room):
                round_over = self.rounds.record_answer_submission(player.room)
                payload = {**format_message(player.display_name, answer), "isRoundOver": round_over}
                self.transport.broadcast_to_room(player.room, events.ANSWER, payload)
            return payload

        return self._run("sendAnswer", connection_id, _answer)

    def get_answer(self, connection_id: str) -> Result:
        def _reveal() -> dict:
            player = self.players.get_player(connection_id)
            with self.rounds.room_lock(player.room):
                correct = self.rounds.get_correct_answer(player.room)
                payload = format_message(player.display_name, correct)
                self.transport.broadcast_to_room(player.room, events.CORRECT_ANSWER, payload)
            return payload

        return self._run("getAnswer", connection_id, _reveal)

    def leave(self, connection_id: str) -> Result:
        def _leave() -> Player:
            player = self.players.get_player(connection_id)
            self._depart(connection_id)
            self.transport.remove_from_room(connection_id, player.room)
            return player

        return self._run("leave", connection_id, _leave)

    def disconnect(self, connection_id: str) -> Player | None:
        return self._depart(connection_id)

    def _depart(self, connection_id: str) -> Player | None:
        player = self.players.remove_player(connection_id)
        if player is None:
            return None

        self.transport.broadcast_to_room_except(
            connection_id,
            player.room,
            events.MESSAGE,
            format_message(ADMIN_NAME, f"{player.display_name} has left!"),
        )
        self.transport.broadcast_to_room_except(
            connection_id,
            player.room,
            events.ROOM,
            {"room": player.room, "players": self.players.list_players(player.room)},
        )
        return player

    def room_public_state(self, room: str) -> dict | None:
        room_key = normalize_room(room or "")
        current = self.rounds.get_round(room_key)
        if current is None and not self.players.has_room(room_key):
            return None
        return {
            "room": room_key,
            "players": self.players.list_players(room_key),
            "round": round_public_state(current),
        }
