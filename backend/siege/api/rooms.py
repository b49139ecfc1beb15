from flask import Blueprint, jsonify

from siege import rooms
from siege.errors import RoomNotFoundError

api_rooms = Blueprint('api_rooms', __name__)


@api_rooms.route('', methods=['GET'])
def list_rooms():
    """
    Returns a summary of every live room, for lobby screens and debugging.
    """
    return jsonify([room.summary() for room in rooms.rooms()]), 200


@api_rooms.route('/<string:room_id>/state', methods=['GET'])
def get_room_state(room_id):
    """
    Returns the full state of a room: board, turn, players and history.
    """
    try:
        room = rooms.get(room_id)
    except RoomNotFoundError:
        return jsonify({'error': 'Room not found'}), 404
    return jsonify(room.to_dict()), 200
