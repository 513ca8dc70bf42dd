from __future__ import annotations

import logging
from typing import Any

from flask import current_app, request
from flask_socketio import SocketIO, join_room, leave_room

from ..game.service import SessionCoordinator
from ..utils.ip import get_client_ip
from . import events

logger = logging.getLogger(__name__)


class SocketIOTransport:
    """Room broadcasts on top of Flask-SocketIO's default namespace."""

    def __init__(self, socketio: SocketIO, namespace: str = "/") -> None:
        self.socketio = socketio
        self.namespace = namespace

    def broadcast_to_room(self, room: str, event: str, payload: Any) -> None:
        self.socketio.emit(event, payload, to=room, namespace=self.namespace)

    def broadcast_to_room_except(self, connection_id: str, room: str, event: str, payload: Any) -> None:
        self.socketio.emit(event, payload, to=room, skip_sid=connection_id, namespace=self.namespace)

    def send_to_connection(self, connection_id: str, event: str, payload: Any) -> None:
        self.socketio.emit(event, payload, to=connection_id, namespace=self.namespace)

    def add_to_room(self, connection_id: str, room: str) -> None:
        join_room(room, sid=connection_id, namespace=self.namespace)

    def remove_from_room(self, connection_id: str, room: str) -> None:
        leave_room(room, sid=connection_id, namespace=self.namespace)


def register_socketio_handlers(socketio: SocketIO, coordinator: SessionCoordinator) -> None:
    # Returning from a handler acknowledges the request: None on success,
    # an error message otherwise.

    @socketio.on(events.CONNECT)
    def on_connect(auth=None):
        trust = current_app.config.get("TRUST_PROXY_HEADERS", False)
        logger.info("connection %s from %s", request.sid, get_client_ip(request, trust_proxy_headers=trust))

    @socketio.on(events.JOIN)
    def on_join(data=None):
        return coordinator.join(request.sid, data).ack()

    @socketio.on(events.SEND_MESSAGE)
    def on_send_message(text=None):
        return coordinator.send_message(request.sid, text).ack()

    @socketio.on(events.GET_QUESTION)
    def on_get_question(data=None):
        return coordinator.get_question(request.sid).ack()

    @socketio.on(events.SEND_ANSWER)
    def on_send_answer(text=None):
        return coordinator.send_answer(request.sid, text).ack()

    @socketio.on(events.GET_ANSWER)
    def on_get_answer(data=None):
        return coordinator.get_answer(request.sid).ack()

    @socketio.on(events.LEAVE)
    def on_leave(data=None):
        return coordinator.leave(request.sid).ack()

    @socketio.on(events.DISCONNECT)
    def on_disconnect(*args):
        player = coordinator.disconnect(request.sid)
        if player is None:
            logger.info("connection %s closed", request.sid)
