from __future__ import annotations

from .models import now_ms

ADMIN_NAME = "Admin"


def format_message(player_name: str, text: str, created_at_ms: int | None = None) -> dict:
    return {
        "playerName": player_name,
        "text": text,
        "createdAt": created_at_ms if created_at_ms is not None else now_ms(),
    }
