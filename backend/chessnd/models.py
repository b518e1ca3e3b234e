from dataclasses import dataclass, field
from typing import Callable, Dict, Optional
import random
import string

from chessnd.services.engine import RulesEngine

WHITE = 'white'
BLACK = 'black'
SEATS = (WHITE, BLACK)
SPECTATOR = 'spectator'
UNASSIGNED = 'unassigned'

# Seat name <-> engine colour code ('w' / 'b')
SEAT_CODES = {WHITE: 'w', BLACK: 'b'}
CODE_SEATS = {code: seat for seat, code in SEAT_CODES.items()}

STATUS_ACTIVE = 'active'
STATUS_TERMINATED = 'terminated'
STATUS_EMPTY = 'empty'


@dataclass
class Session:
    """Authoritative state of one room."""

    id: str
    engine: RulesEngine = field(default_factory=RulesEngine)
    seats: Dict[str, Optional[str]] = field(default_factory=lambda: {WHITE: None, BLACK: None})
    turn: str = 'w'
    status: str = STATUS_ACTIVE

    def __post_init__(self):
        self.turn = self.engine.current_mover()

    @property
    def channel(self) -> str:
        return channel_for(self.id)

    def seat_of(self, connection_id: str) -> Optional[str]:
        for seat in SEATS:
            if self.seats.get(seat) == connection_id:
                return seat
        return None

    def vacant_seats(self):
        return [seat for seat in SEATS if not self.seats.get(seat)]

    def has_vacancy(self) -> bool:
        return bool(self.vacant_seats())

    def is_empty(self) -> bool:
        return len(self.vacant_seats()) == len(SEATS)

    def sync_turn(self) -> str:
        self.turn = self.engine.current_mover()
        return self.turn

    def reset(self) -> None:
        """Fresh game on the same seats."""
        self.engine = RulesEngine()
        self.status = STATUS_ACTIVE
        self.sync_turn()

    def to_dict(self, spectators: int = 0):
        return {
            'id': self.id,
            'fen': self.engine.fen(),
            'turn': self.turn,
            'status': self.status,
            'seats': {seat: self.seats.get(seat) for seat in SEATS},
            'spectators': spectators,
        }


@dataclass
class Connection:
    """One participant's live channel. Lives only as long as the socket does."""

    id: str
    session_id: Optional[str] = None
    role: str = UNASSIGNED
    display_name: Optional[str] = None

    @property
    def info(self) -> str:
        return self.display_name or self.id

    def bind(self, session_id: str, role: str) -> None:
        self.session_id = session_id
        self.role = role

    def unbind(self) -> None:
        self.session_id = None
        self.role = UNASSIGNED


def channel_for(room_id: str) -> str:
    return f"room:{room_id}"


def generate_room_id(exists: Callable[[str], bool], length=8):
    """Generate a room id not yet known to the registry."""
    alphabet = string.ascii_lowercase + string.digits
    while True:
        room_id = 'room-' + ''.join(random.choices(alphabet, k=length))
        if not exists(room_id):
            return room_id
