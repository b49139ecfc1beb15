import os

_PRODUCTION = os.environ.get('FLASK_ENV') == 'production'


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma-separated list; '*' allows any origin
    CORS_ORIGINS = [o.strip() for o in os.environ.get('CORS_ORIGINS', '*').split(',') if o.strip()]
    # Socket.IO namespace the game protocol lives on
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    # Length of the random part of generated room ids
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '9'))
    HOST = os.environ.get('HOST') or ('0.0.0.0' if _PRODUCTION else 'localhost')
    PORT = int(os.environ.get('PORT', '3000'))
