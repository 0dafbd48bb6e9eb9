import os


def _env_flag(name, default='0'):
    return os.environ.get(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma separated list of browser origins allowed to talk to the server
    CORS_ORIGINS = [
        o.strip()
        for o in os.environ.get('CORS_ORIGINS', 'http://localhost:5173,http://127.0.0.1:5173').split(',')
        if o.strip()
    ]
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # Session codes: length and how many collisions to tolerate before giving up
    SESSION_CODE_LENGTH = int(os.environ.get('SESSION_CODE_LENGTH', '6'))
    SESSION_CODE_ATTEMPTS = int(os.environ.get('SESSION_CODE_ATTEMPTS', '32'))
    # Tell the remaining player when their opponent leaves. Off by default.
    NOTIFY_OPPONENT_LEFT = _env_flag('NOTIFY_OPPONENT_LEFT')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
