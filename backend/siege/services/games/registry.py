import random
import string
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional

from siege.errors import RoomNotFoundError
from siege.models import PLAYING, WAITING
from .room import GameRoom, SPECTATOR

QUICK_MATCH_PREFIX = 'room_'
PRIVATE_PREFIX = 'private_'


@dataclass
class Seat:
    """Where a connection ended up after quick match, create or join."""
    room: GameRoom
    role: str
    started: bool = False

    @property
    def is_spectator(self) -> bool:
        return self.role == SPECTATOR

    @property
    def waiting(self) -> bool:
        return len(self.room.players) < 2


@dataclass
class Departure:
    room: GameRoom
    player_id: str
    evicted: bool


def generate_room_id(prefix: str, taken, length: int = 9) -> str:
    """Generate a room id that is not already in ``taken``."""
    alphabet = string.ascii_lowercase + string.digits
    while True:
        room_id = prefix + ''.join(random.choices(alphabet, k=length))
        if room_id not in taken:
            return room_id


def _noop_emit(event, payload, sid):
    pass


class RoomRegistry:
    """Process-wide room-id -> GameRoom mapping plus the quick-match slot.

    Both the mapping and the pending quick-match id are only touched while
    holding ``self._lock``. Room locks are always taken after it, never
    before.
    """

    def __init__(self, emit=None, code_length: int = 9):
        self._lock = threading.Lock()
        self._rooms: Dict[str, GameRoom] = {}
        self._pending_id: Optional[str] = None
        self._emit = emit or _noop_emit
        self.code_length = code_length

    def init_app(self, app, emit=None):
        self.code_length = int(app.config.get('ROOM_CODE_LENGTH', 9))
        if emit is not None:
            self._emit = emit
        self.clear()
        app.extensions['siege.rooms'] = self

    def clear(self) -> None:
        with self._lock:
            self._rooms.clear()
            self._pending_id = None

    # ---- lookup ----

    def get(self, room_id) -> GameRoom:
        with self._lock:
            room = self._rooms.get(room_id)
        if room is None:
            raise RoomNotFoundError(room_id)
        return room

    def rooms(self) -> List[GameRoom]:
        with self._lock:
            return list(self._rooms.values())

    @property
    def pending_room(self) -> Optional[GameRoom]:
        with self._lock:
            return self._rooms.get(self._pending_id) if self._pending_id else None

    def __contains__(self, room_id) -> bool:
        with self._lock:
            return room_id in self._rooms

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    # ---- seating ----

    def _new_room(self, prefix: str) -> GameRoom:
        room_id = generate_room_id(prefix, self._rooms, self.code_length)
        room = GameRoom(room_id, self._emit)
        self._rooms[room_id] = room
        return room

    def quick_match(self, sid: str) -> Seat:
        with self._lock:
            pending = self._rooms.get(self._pending_id) if self._pending_id else None
            if pending is not None and len(pending.players) == 1:
                if pending.players[0].sid == sid:
                    return Seat(pending, pending.players[0].role)
                role = pending.add_player(sid)
                self._pending_id = None
                return Seat(pending, role, started=pending.state == PLAYING)

            room = self._new_room(QUICK_MATCH_PREFIX)
            role = room.add_player(sid)
            self._pending_id = room.id
            return Seat(room, role)

    def create_room(self, sid: str) -> Seat:
        with self._lock:
            room = self._new_room(PRIVATE_PREFIX)
            return Seat(room, room.add_player(sid))

    def join_room(self, room_id, sid: str) -> Seat:
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None:
                raise RoomNotFoundError(room_id)
            seated = room.player_for_sid(sid)
            if seated is not None:
                return Seat(room, seated.role)
            was_playing = room.state != WAITING
            role = room.add_player(sid)
            if room.id == self._pending_id and len(room.players) >= 2:
                self._pending_id = None
            started = role != SPECTATOR and not was_playing and room.state == PLAYING
            return Seat(room, role, started=started)

    # ---- cleanup ----

    def disconnect(self, sid: str) -> Optional[Departure]:
        """Forget ``sid`` everywhere it appears.

        The first room holding ``sid`` as a connected player keeps the slot
        but marks it disconnected. Spectator entries are dropped from every
        room. Rooms left with no connected player and no spectator are
        evicted.
        """
        departure = None
        with self._lock:
            for room_id, room in list(self._rooms.items()):
                with room.lock:
                    slot = room.player_for_sid(sid) if departure is None else None
                    if slot is not None:
                        room.remove_player(sid)
                        departure = Departure(room, slot.player_id, evicted=False)
                    elif room.has_spectator(sid):
                        room.remove_player(sid)
                    else:
                        continue
                    if room.is_empty():
                        self._evict(room_id)
                        if departure is not None and departure.room is room:
                            departure.evicted = True

            pending = self._rooms.get(self._pending_id) if self._pending_id else None
            if pending is not None and len(pending.players) == 1 and pending.players[0].sid == sid:
                self._pending_id = None
        return departure

    def _evict(self, room_id: str) -> None:
        self._rooms.pop(room_id, None)
        if self._pending_id == room_id:
            self._pending_id = None
