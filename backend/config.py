import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma separated list of origins allowed to open the Socket.IO channel
    CORS_ORIGINS = [o.strip() for o in os.environ.get(
        'CORS_ORIGINS',
        'http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173',
    ).split(',') if o.strip()]
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # Reply notYourTurn to out-of-turn movers instead of dropping silently
    NOTIFY_OUT_OF_TURN = os.environ.get('NOTIFY_OUT_OF_TURN', '0').lower() in ('1', 'true', 'yes')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Length of the random suffix in generated room ids
    ROOM_ID_LENGTH = int(os.environ.get('ROOM_ID_LENGTH', '8'))
