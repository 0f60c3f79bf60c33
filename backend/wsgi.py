try:
    from backend.brushrush.server import create_app
except ImportError:  # pragma: no cover
    from brushrush.server import create_app

app, socketio = create_app()
