"""Game domain services: board rules, rooms and the room registry.

This package contains pure(ish) domain logic that is imported by socket
handlers and HTTP routes, keeping transport concerns separated from core
game mechanics.
"""

from .registry import Departure, RoomRegistry, Seat
from .room import SPECTATOR, GameRoom

__all__ = ['Departure', 'GameRoom', 'RoomRegistry', 'SPECTATOR', 'Seat']
