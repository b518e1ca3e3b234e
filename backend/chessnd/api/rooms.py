from flask import Blueprint, current_app, jsonify

from chessnd.models import generate_room_id

rooms = Blueprint('rooms', __name__)


def _registry():
    return current_app.extensions['chessnd.registry']


@rooms.route('/create', methods=['POST'])
def create_room():
    """
    Hands out a fresh room id for a lobby "new game". The session itself is
    created when the first player joins it over the socket.
    """
    registry = _registry()
    with registry.dispatch():
        room_id = generate_room_id(lambda rid: rid in registry, int(current_app.config.get('ROOM_ID_LENGTH', 8)))
    current_app.logger.info(f"[room-id] issued {room_id}")
    return jsonify({'room_id': room_id}), 201


@rooms.route('/open', methods=['GET'])
def open_rooms():
    registry = _registry()
    with registry.dispatch():
        room_ids = [session.id for session in registry if session.has_vacancy()]
    return jsonify({'rooms': room_ids})


@rooms.route('/<string:room_id>/state', methods=['GET'])
def room_state(room_id):
    registry = _registry()
    with registry.dispatch():
        session = registry.get(room_id)
        if session is None:
            return jsonify({'error': 'Room not found'}), 404
        spectators = current_app.extensions['chessnd.connections'].spectators_of(room_id)
        return jsonify(session.to_dict(spectators=spectators))
