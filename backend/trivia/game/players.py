from __future__ import annotations

import logging
from threading import RLock

from .errors import DuplicateName, InvalidPayload, NotFound
from .models import Player, normalize_name, normalize_room

logger = logging.getLogger(__name__)


def _validate_name(name: str, max_length: int) -> bool:
    if not name or len(name) > max_length:
        return False
    # Avoid obvious HTML/script injection.
    if "<" in name or ">" in name:
        return False
    return name.isprintable()


class PlayerRegistry:
    """Which live connection is which player, in which room.

    Display names are unique per room, compared case-insensitively after
    trimming. Every operation is a single critical section.
    """

    def __init__(self, name_max_length: int = 20, room_max_length: int = 32) -> None:
        self._lock = RLock()
        self._players: dict[str, Player] = {}
        self._name_index: dict[tuple[str, str], str] = {}
        self.name_max_length = name_max_length
        self.room_max_length = room_max_length

    def add_player(self, connection_id: str, display_name: str, room: str) -> Player:
        name = (display_name or "").strip()
        room_key = normalize_room(room or "")

        if not name or not room_key:
            raise InvalidPayload("Player name and room are required.")
        if not _validate_name(name, self.name_max_length):
            raise InvalidPayload(f"Player name must be 1-{self.name_max_length} characters without < or >.")
        if not _validate_name(room_key, self.room_max_length):
            raise InvalidPayload(f"Room name must be 1-{self.room_max_length} characters without < or >.")

        with self._lock:
            existing = self._players.get(connection_id)
            if existing is not None:
                raise InvalidPayload(f'Already joined room "{existing.room}".')

            key = (room_key, normalize_name(name))
            if key in self._name_index:
                raise DuplicateName(name, room_key)

            player = Player(connection_id=connection_id, display_name=name, room=room_key)
            self._players[connection_id] = player
            self._name_index[key] = connection_id

        logger.info("player %r joined room %r (%s)", name, room_key, connection_id)
        return player

    def get_player(self, connection_id: str) -> Player:
        with self._lock:
            player = self._players.get(connection_id)
        if player is None:
            raise NotFound(connection_id)
        return player

    def remove_player(self, connection_id: str) -> Player | None:
        with self._lock:
            player = self._players.pop(connection_id, None)
            if player is None:
                return None
            key = (player.room, player.name_key)
            if self._name_index.get(key) == connection_id:
                del self._name_index[key]

        logger.info("player %r left room %r (%s)", player.display_name, player.room, connection_id)
        return player

    def list_players(self, room: str) -> list[dict]:
        room_key = normalize_room(room or "")
        with self._lock:
            return [{"playerName": p.display_name} for p in self._players.values() if p.room == room_key]

    def has_room(self, room: str) -> bool:
        room_key = normalize_room(room or "")
        with self._lock:
            return any(p.room == room_key for p in self._players.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._players)
