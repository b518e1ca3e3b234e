from flask import current_app, request
from flask_socketio import emit, join_room, leave_room

from chessnd import socketio
from chessnd.models import channel_for
from chessnd.services import arbiter, matchmaking, recovery
from chessnd.services.outbox import Outbox


def handle_connect(auth=None):
    with _registry().dispatch():
        _connections().open(_get_sid())
    current_app.logger.info(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    sid = _get_sid()
    with _registry().dispatch():
        conn = _connections().close(sid)
        if conn is None:
            return
        outbox = Outbox()
        session = recovery.on_disconnect(_registry(), conn, outbox, _connections())
        _flush(outbox)
        _close_if_evicted(session)
    current_app.logger.info(f"[disconnect] sid={sid} room={session.id if session else None} reason={reason}")


def handle_join_room_by_name(data):
    data = data if isinstance(data, dict) else {}
    room_id = data.get('roomId')
    if not room_id or not isinstance(room_id, str):
        emit('error', {'message': 'roomId is required'})
        return
    display_name = data.get('displayName') or data.get('playerName')

    registry = _registry()
    with registry.dispatch():
        conn = _connections().open(_get_sid())
        outbox = Outbox()
        previous = conn.session_id
        released = None
        if previous and previous != room_id:
            released = recovery.on_disconnect(registry, conn, outbox, _connections())
        session = matchmaking.join_by_name(registry, _connections(), conn, room_id, display_name, outbox)
        _rebind_channel(previous, session.id)
        _flush(outbox)
        _close_if_evicted(released)


def handle_join_random(data=None):
    registry = _registry()
    with registry.dispatch():
        conn = _connections().open(_get_sid())
        outbox = Outbox()
        previous = conn.session_id
        released = None
        if previous:
            released = recovery.on_disconnect(registry, conn, outbox, _connections())
        session = matchmaking.join_random(
            registry, _connections(), conn, outbox,
            room_id_length=int(current_app.config.get('ROOM_ID_LENGTH', 8)),
        )
        _rebind_channel(previous, session.id)
        _flush(outbox)
        _close_if_evicted(released)


def handle_move(data):
    registry = _registry()
    with registry.dispatch():
        conn = _connections().get(_get_sid())
        if conn is None:
            return
        outbox = Outbox()
        arbiter.submit_move(
            registry, conn, data, outbox,
            notify_out_of_turn=bool(current_app.config.get('NOTIFY_OUT_OF_TURN')),
        )
        _flush(outbox)


def handle_reload(data):
    # Legacy clients send the stale id bare
    stale_id = data.get('staleConnectionId') if isinstance(data, dict) else data
    registry = _registry()
    with registry.dispatch():
        conn = _connections().get(_get_sid())
        if conn is None:
            return
        outbox = Outbox()
        recovery.on_reload(registry, _connections(), conn, stale_id, outbox)
        _flush(outbox)


def handle_ping(data=None):
    emit('pong', data or {})


def handle_error(exc):
    current_app.logger.exception(f"[socket-error] sid={_get_sid()} event failed: {exc}")


# ---- Gateway helpers ----

def _registry():
    return current_app.extensions['chessnd.registry']

def _connections():
    return current_app.extensions['chessnd.connections']

def _namespace() -> str:
    return current_app.config.get('SOCKETIO_NAMESPACE', '/')

def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore

def _rebind_channel(previous, room_id) -> None:
    if previous == room_id:
        return
    if previous:
        leave_room(channel_for(previous))
    join_room(channel_for(room_id))

def _close_if_evicted(session) -> None:
    # Drop leftover spectators from the channel of a room that no longer exists
    if session is None or session.id in _registry():
        return
    socketio.close_room(session.channel, namespace=_namespace())

def _flush(outbox: Outbox) -> None:
    namespace = _namespace()
    for emission in outbox:
        socketio.emit(emission.event, emission.data, to=emission.to,
                      namespace=namespace, skip_sid=emission.skip_sid)


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on the configured namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('joinRoomByName', handle_join_room_by_name, namespace=namespace)
    socketio.on_event('joinRandom', handle_join_random, namespace=namespace)
    socketio.on_event('move', handle_move, namespace=namespace)
    socketio.on_event('reload', handle_reload, namespace=namespace)
    socketio.on_event('ping', handle_ping, namespace=namespace)
    socketio.on_error(namespace)(handle_error)
