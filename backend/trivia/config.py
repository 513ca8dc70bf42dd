import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    # Socket.IO (empty means pick per platform)
    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Questions
    QUESTION_API_URL = os.environ.get(
        "QUESTION_API_URL", "https://opentdb.com/api.php?amount=1&type=multiple"
    )
    QUESTION_TIMEOUT_SEC = float(os.environ.get("QUESTION_TIMEOUT_SEC", "5"))
    QUESTIONS_FILE = os.environ.get("QUESTIONS_FILE", "")

    # Players
    NAME_MAX_LENGTH = int(os.environ.get("NAME_MAX_LENGTH", "20"))
    ROOM_MAX_LENGTH = int(os.environ.get("ROOM_MAX_LENGTH", "32"))
