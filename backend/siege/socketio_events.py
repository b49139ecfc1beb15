from datetime import datetime, timezone

from flask import current_app, request
from flask_socketio import emit, join_room

from siege import rooms, socketio
from siege.errors import InvalidPayloadError, RoomNotFoundError
from siege.services.games import GameRoom, Seat


def _get_sid() -> str:
    # request.sid exists in a Socket.IO context
    return request.sid  # type: ignore


def _room_id(data) -> str:
    """joinRoom sends a bare id; every other event sends {'roomId': ...}."""
    if isinstance(data, str) and data:
        return data
    room_id = data.get('roomId') if isinstance(data, dict) else None
    if not room_id or not isinstance(room_id, str):
        raise InvalidPayloadError('roomId is required')
    return room_id


def _coords(data):
    if not isinstance(data, dict):
        raise InvalidPayloadError('move coordinates are required')
    coords = []
    for key in ('fromRow', 'fromCol', 'toRow', 'toCol'):
        value = data.get(key)
        # JSON numbers only: bools, floats and numeric strings are refused
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidPayloadError(f'{key} must be an integer')
        coords.append(value)
    return coords


def _seat_payload(seat: Seat) -> dict:
    snapshot = seat.room.snapshot()
    payload = {
        'roomId': seat.room.id,
        'role': seat.role,
        'board': snapshot['board'],
        'currentPlayer': snapshot['currentPlayer'],
    }
    if seat.waiting:
        payload['waiting'] = True
    return payload


def _announce_start(room: GameRoom) -> None:
    snapshot = room.snapshot()
    room.broadcast('gameStart', {
        'board': snapshot['board'],
        'currentPlayer': snapshot['currentPlayer'],
    })
    current_app.logger.info(f"[game-start] room={room.id}")


def _lookup(data):
    """Resolve the room named in ``data``, replying with an error if it is unknown."""
    try:
        return rooms.get(_room_id(data))
    except InvalidPayloadError as exc:
        emit('error', {'message': str(exc)})
    except RoomNotFoundError as exc:
        emit('error', {'message': 'Room not found', 'roomId': exc.room_id})
    return None


def _lookup_quietly(data):
    """Like _lookup, but unknown rooms are ignored without a reply."""
    try:
        return rooms.get(_room_id(data))
    except InvalidPayloadError as exc:
        emit('error', {'message': str(exc)})
    except RoomNotFoundError:
        pass
    return None


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")
    emit('connected', {'playerId': _get_sid()})


def handle_disconnect(reason=None):
    sid = _get_sid()
    departure = rooms.disconnect(sid)
    current_app.logger.info(f"[disconnect] sid={sid} reason={reason}")
    if departure is None:
        return
    departure.room.broadcast('playerDisconnected', {'playerId': departure.player_id})
    if departure.evicted:
        current_app.logger.info(f"[evict] room={departure.room.id} remaining={len(rooms)}")


def handle_quick_match(data=None):
    sid = _get_sid()
    seat = rooms.quick_match(sid)
    join_room(seat.room.id)
    emit('joinedRoom', _seat_payload(seat))
    current_app.logger.info(f"[quick-match] sid={sid} room={seat.room.id} role={seat.role} started={seat.started}")
    if seat.started:
        _announce_start(seat.room)


def handle_create_room(data=None):
    sid = _get_sid()
    seat = rooms.create_room(sid)
    join_room(seat.room.id)
    payload = _seat_payload(seat)
    payload.pop('waiting', None)
    emit('roomCreated', payload)
    current_app.logger.info(f"[create-room] sid={sid} room={seat.room.id}")


def handle_join_room(data):
    sid = _get_sid()
    try:
        seat = rooms.join_room(_room_id(data), sid)
    except InvalidPayloadError as exc:
        emit('error', {'message': str(exc)})
        return
    except RoomNotFoundError as exc:
        emit('error', {'message': 'Room not found', 'roomId': exc.room_id})
        return

    join_room(seat.room.id)
    current_app.logger.info(f"[join-room] sid={sid} room={seat.room.id} role={seat.role}")
    if seat.is_spectator:
        # The room already sent the spectatorMode snapshot
        return
    emit('joinedRoom', _seat_payload(seat))
    if seat.started:
        _announce_start(seat.room)


def handle_make_move(data):
    room = _lookup(data)
    if room is None:
        return
    sid = _get_sid()
    player = room.player_for_sid(sid)
    if player is None:
        emit('error', {'message': 'You are not a player in this room'})
        return
    try:
        from_row, from_col, to_row, to_col = _coords(data)
    except InvalidPayloadError as exc:
        emit('error', {'message': str(exc)})
        return

    result = room.make_move(from_row, from_col, to_row, to_col, player.role)
    if not result['success']:
        current_app.logger.debug(
            f"[move-rejected] room={room.id} role={player.role} "
            f"from=({from_row},{from_col}) to=({to_row},{to_col}) error={result['error']}"
        )
        emit('moveError', result)
        return

    room.broadcast('moveUpdate', result)
    status = result['gameStatus']
    if status['finished']:
        current_app.logger.info(f"[game-over] room={room.id} winner={status['winner']}")


def handle_request_undo(data):
    room = _lookup_quietly(data)
    if room is None:
        return
    sid = _get_sid()
    opponent = room.request_undo(sid)
    if opponent is None:
        return
    requester = room.player_for_sid(sid)
    room.send(opponent.sid, 'undoRequest', {'from': requester.player_id if requester else sid})
    current_app.logger.info(f"[undo-request] room={room.id} sid={sid}")


def handle_accept_undo(data):
    room = _lookup_quietly(data)
    if room is None:
        return
    undone = room.accept_undo(_get_sid())
    if undone is None:
        return
    snapshot = room.snapshot()
    room.broadcast('undoExecuted', {
        'board': snapshot['board'],
        'currentPlayer': snapshot['currentPlayer'],
    })
    current_app.logger.info(f"[undo] room={room.id} moves={len(snapshot['moveHistory'])}")


def handle_reconnect(data):
    room = _lookup(data)
    if room is None:
        return
    player_id = data.get('playerId') if isinstance(data, dict) else None
    if not player_id:
        return
    sid = _get_sid()
    role = room.reconnect_player(player_id, sid)
    if role is None:
        # Unknown or still-connected player ids get no reply
        return

    join_room(room.id)
    snapshot = room.snapshot()
    emit('reconnected', {
        'roomId': room.id,
        'role': role,
        'board': snapshot['board'],
        'currentPlayer': snapshot['currentPlayer'],
        'moveHistory': snapshot['moveHistory'],
    })
    room.broadcast('playerReconnected', {'playerId': player_id})
    current_app.logger.info(f"[reconnect] room={room.id} player={player_id} sid={sid} role={role}")


def handle_send_message(data):
    room = _lookup_quietly(data)
    if room is None:
        return
    sid = _get_sid()
    player = room.player_for_sid(sid)
    room.broadcast('newMessage', {
        'from': player.player_id if player else sid,
        'message': data.get('message') if isinstance(data, dict) else None,
        'timestamp': datetime.now(timezone.utc).isoformat(),
    })


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on ``namespace``."""
    handlers = {
        'connect': handle_connect,
        'disconnect': handle_disconnect,
        'quickMatch': handle_quick_match,
        'createRoom': handle_create_room,
        'joinRoom': handle_join_room,
        'makeMove': handle_make_move,
        'requestUndo': handle_request_undo,
        'acceptUndo': handle_accept_undo,
        'reconnect': handle_reconnect,
        'sendMessage': handle_send_message,
    }
    for event, handler in handlers.items():
        socketio.on_event(event, handler, namespace=namespace)
