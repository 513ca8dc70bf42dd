"""Domain errors surfaced to the requesting client through the acknowledgment."""

from __future__ import annotations


class TriviaError(Exception):
    code = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidPayload(TriviaError):
    code = "invalid_payload"


class DuplicateName(TriviaError):
    code = "duplicate_name"

    def __init__(self, display_name: str, room: str) -> None:
        super().__init__(f'The name "{display_name}" is already in use in room "{room}".')
        self.display_name = display_name
        self.room = room


class NotFound(TriviaError):
    code = "not_found"

    def __init__(self, connection_id: str) -> None:
        super().__init__("Player not found. Join a room first.")
        self.connection_id = connection_id


class NoActiveRound(TriviaError):
    code = "no_active_round"

    def __init__(self, room: str) -> None:
        super().__init__("No question has been asked in this room yet.")
        self.room = room


class ProviderFailure(TriviaError):
    code = "provider_failure"
