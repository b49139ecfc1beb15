from dataclasses import dataclass
from typing import Optional

ATTACKER = 'attacker'
DEFENDER = 'defender'
ROLES = (ATTACKER, DEFENDER)

# Lifecycle states of a game room
WAITING = 'waiting'
PLAYING = 'playing'
FINISHED = 'finished'


@dataclass
class Capture:
    row: int
    col: int
    piece: str

    def to_dict(self):
        return {'row': self.row, 'col': self.col, 'piece': self.piece}


@dataclass
class MoveRecord:
    from_row: int
    from_col: int
    to_row: int
    to_col: int
    piece: str
    captured: Optional[Capture] = None

    def to_dict(self):
        return {
            'from': {'row': self.from_row, 'col': self.from_col},
            'to': {'row': self.to_row, 'col': self.to_col},
            'piece': self.piece,
            'captured': self.captured.to_dict() if self.captured else None,
        }


@dataclass
class PlayerSlot:
    # player_id is the sid the player first joined with and never changes;
    # sid is the live connection handle, rebound on reconnect.
    player_id: str
    sid: str
    role: str
    connected: bool = True

    def to_dict(self):
        return {
            'playerId': self.player_id,
            'role': self.role,
            'connected': self.connected,
        }


@dataclass
class Spectator:
    sid: str

    def to_dict(self):
        return {'id': self.sid}
