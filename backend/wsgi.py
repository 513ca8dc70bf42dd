try:
    from backend.trivia.server import create_app
except ImportError:  # pragma: no cover
    from trivia.server import create_app

app, socketio = create_app()
