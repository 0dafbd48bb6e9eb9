import logging

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from dice_duel.config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config, media_provider=None):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(getattr(logging, str(flask_app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO))

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One engine (and registry) per app; handlers reach it through current_app
    from dice_duel.services.sessions import NullMediaProvider, SessionEngine, SessionRegistry
    registry = SessionRegistry(
        code_length=flask_app.config.get('SESSION_CODE_LENGTH', 6),
        max_attempts=flask_app.config.get('SESSION_CODE_ATTEMPTS', 32),
    )
    flask_app.extensions['dice_duel'] = SessionEngine(
        registry,
        notify_opponent_left=flask_app.config.get('NOTIFY_OPPONENT_LEFT', False),
        logger=flask_app.logger,
    )
    flask_app.extensions['dice_duel_media'] = media_provider or NullMediaProvider()

    # Import and register blueprints here
    from dice_duel.main import main
    flask_app.register_blueprint(main)

    from dice_duel.api.sessions import sessions
    flask_app.register_blueprint(sessions, url_prefix='/api/sessions')

    # Register Socket.IO event handlers
    # Importing here ensures the handlers bind to the initialized socketio instance
    from dice_duel.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'))

    return flask_app
