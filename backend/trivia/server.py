from __future__ import annotations

import logging
import sys

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .game.players import PlayerRegistry
from .game.questions import OpenTriviaProvider, QuestionProvider, StaticQuestionProvider
from .game.rounds import RoundStateMachine
from .game.service import SessionCoordinator
from .realtime.handlers import SocketIOTransport, register_socketio_handlers
from .routes.health import bp as health_bp
from .routes.rooms import bp as rooms_bp
from .utils.logging_config import configure_logging

logger = logging.getLogger(__name__)


def build_question_provider(config) -> QuestionProvider:
    questions_file = config.get("QUESTIONS_FILE", "")
    if questions_file:
        logger.info("loading questions from %s", questions_file)
        return StaticQuestionProvider.from_file(questions_file)
    return OpenTriviaProvider(
        url=config["QUESTION_API_URL"],
        timeout_sec=config.get("QUESTION_TIMEOUT_SEC", 5.0),
    )


def create_app(
    config_class=Config,
    question_provider: QuestionProvider | None = None,
) -> tuple[Flask, SocketIO]:
    app = Flask(__name__)
    app.config.from_object(config_class)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    if app.config.get("TRUST_PROXY_HEADERS", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    cors_origins = app.config.get("CORS_ORIGINS", "*")
    CORS(app, resources={r"/api/*": {"origins": cors_origins}})

    async_mode = app.config.get("SOCKETIO_ASYNC_MODE", "")
    if not async_mode:
        # Default choice:
        # - Windows: threading (eventlet has known compatibility issues on newer Python)
        # - Python >= 3.13: threading (safer default)
        # - Otherwise: eventlet
        if sys.platform.startswith("win") or sys.version_info >= (3, 13):
            async_mode = "threading"
        else:
            async_mode = "eventlet"

    socketio = SocketIO(
        app,
        cors_allowed_origins=cors_origins,
        async_mode=async_mode,
    )

    players = PlayerRegistry(
        name_max_length=app.config.get("NAME_MAX_LENGTH", 20),
        room_max_length=app.config.get("ROOM_MAX_LENGTH", 32),
    )
    rounds = RoundStateMachine(question_provider or build_question_provider(app.config))
    coordinator = SessionCoordinator(players, rounds, SocketIOTransport(socketio))
    app.extensions["trivia"] = coordinator

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(rooms_bp, url_prefix="/api")

    register_socketio_handlers(socketio, coordinator)

    logger.info("trivia server ready (async_mode=%s)", async_mode)
    return app, socketio
