import threading
from typing import Callable, List, Optional

from siege.models import (
    ATTACKER,
    DEFENDER,
    FINISHED,
    PLAYING,
    WAITING,
    MoveRecord,
    PlayerSlot,
    Spectator,
)
from . import rules

# Returned by add_player when the room is full and the caller became a spectator
SPECTATOR = 'spectator'

Emitter = Callable[[str, dict, str], None]


class GameRoom:
    """One board, two player slots, any number of spectators.

    The room never holds socket objects. Every outbound message goes
    through ``emit(event, payload, sid)``, supplied by the transport.
    All public methods take the room lock, so two connections in the same
    room cannot interleave a move with an undo or a disconnect.
    """

    def __init__(self, room_id: str, emit: Emitter):
        self.id = room_id
        self._emit = emit
        self.lock = threading.RLock()
        self.board = rules.initial_board()
        self.players: List[PlayerSlot] = []
        self.spectators: List[Spectator] = []
        self.move_history: List[MoveRecord] = []
        self.current_player = ATTACKER
        self.state = WAITING
        self.undo_requested_by: Optional[str] = None

    # ---- membership ----

    def add_player(self, sid: str) -> str:
        """Seat ``sid`` as the next player, or as a spectator once both slots are taken.

        A spectator gets the current snapshot right away; asking again only
        re-sends it.
        """
        with self.lock:
            if len(self.players) < 2:
                role = ATTACKER if not self.players else DEFENDER
                self.players.append(PlayerSlot(player_id=sid, sid=sid, role=role))
                if len(self.players) == 2:
                    self.state = PLAYING
                return role

            if not self.has_spectator(sid):
                self.spectators.append(Spectator(sid))
            snapshot = self.snapshot()
        self._emit('spectatorMode', snapshot, sid)
        return SPECTATOR

    def remove_player(self, sid: str) -> bool:
        """Mark the player using ``sid`` as disconnected.

        The slot is kept so the player can reconnect later. Returns True
        when ``sid`` belonged to a player; a matching spectator is dropped
        and False is returned.
        """
        with self.lock:
            self.spectators = [s for s in self.spectators if s.sid != sid]
            slot = self.player_for_sid(sid)
            if slot is None:
                return False
            slot.connected = False
            if self.undo_requested_by == sid:
                self.undo_requested_by = None
            return True

    def reconnect_player(self, player_id: str, new_sid: str) -> Optional[str]:
        with self.lock:
            for slot in self.players:
                if slot.player_id == player_id and not slot.connected:
                    slot.sid = new_sid
                    slot.connected = True
                    return slot.role
            return None

    def player_for_sid(self, sid: str) -> Optional[PlayerSlot]:
        for slot in self.players:
            if slot.sid == sid and slot.connected:
                return slot
        return None

    def has_spectator(self, sid: str) -> bool:
        return any(s.sid == sid for s in self.spectators)

    def opponent_of(self, sid: str) -> Optional[PlayerSlot]:
        for slot in self.players:
            if slot.sid != sid:
                return slot
        return None

    def is_empty(self) -> bool:
        with self.lock:
            return all(not p.connected for p in self.players) and not self.spectators

    # ---- play ----

    def make_move(self, from_row: int, from_col: int, to_row: int, to_col: int, role: str) -> dict:
        with self.lock:
            if role != self.current_player:
                return {'success': False, 'error': 'Not your turn'}
            if not rules.is_legal_move(self.board, from_row, from_col, to_row, to_col):
                return {'success': False, 'error': 'Invalid move'}

            record = rules.apply_move(self.board, from_row, from_col, to_row, to_col)
            self.move_history.append(record)
            self.current_player = rules.other_role(self.current_player)
            self.undo_requested_by = None

            status = rules.check_terminal(self.board)
            if status['finished']:
                self.state = FINISHED

            return {
                'success': True,
                'board': rules.copy_board(self.board),
                'currentPlayer': self.current_player,
                'move': record.to_dict(),
                'gameStatus': status,
            }

    def request_undo(self, sid: str) -> Optional[PlayerSlot]:
        """Record an undo request from ``sid``.

        Returns the opponent's slot when the request should be relayed to
        them, or None when there is nothing to undo, the requester is not a
        player, or the opponent is offline.
        """
        with self.lock:
            if not self.move_history or self.player_for_sid(sid) is None:
                return None
            self.undo_requested_by = sid
            opponent = self.opponent_of(sid)
            if opponent is None or not opponent.connected:
                return None
            return opponent

    def accept_undo(self, sid: str) -> Optional[MoveRecord]:
        """Pop and invert the last move if the opponent asked for it.

        Returns the undone record, or None when nothing changed.
        """
        with self.lock:
            if not self.move_history:
                return None
            requester = self.undo_requested_by
            if requester is None or requester == sid or self.player_for_sid(sid) is None:
                return None

            record = self.move_history.pop()
            rules.revert_move(self.board, record)
            self.current_player = rules.other_role(self.current_player)
            self.undo_requested_by = None
            return record

    # ---- fan-out ----

    def send(self, sid: str, event: str, payload: dict) -> None:
        self._emit(event, payload, sid)

    def broadcast(self, event: str, payload: dict) -> None:
        with self.lock:
            targets = [p.sid for p in self.players if p.connected]
            targets.extend(s.sid for s in self.spectators)
        for sid in targets:
            self._emit(event, payload, sid)

    # ---- views ----

    def snapshot(self) -> dict:
        with self.lock:
            return {
                'board': rules.copy_board(self.board),
                'currentPlayer': self.current_player,
                'moveHistory': [m.to_dict() for m in self.move_history],
            }

    def to_dict(self) -> dict:
        with self.lock:
            data = self.snapshot()
            data.update({
                'roomId': self.id,
                'state': self.state,
                'players': [p.to_dict() for p in self.players],
                'spectators': len(self.spectators),
                'gameStatus': rules.check_terminal(self.board),
            })
            return data

    def summary(self) -> dict:
        with self.lock:
            return {
                'roomId': self.id,
                'state': self.state,
                'players': len(self.players),
                'spectators': len(self.spectators),
                'moves': len(self.move_history),
            }
