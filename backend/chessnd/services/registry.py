from contextlib import contextmanager
from typing import Dict, Iterator, Optional
import logging
import threading

from chessnd.models import Connection, Session, SPECTATOR, STATUS_EMPTY

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Process-wide room id -> Session mapping.

    Every mutation happens inside ``dispatch()``; holding it for the whole of
    a handler serializes inbound events in arrival order.
    """

    def __init__(self):
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.RLock()

    @contextmanager
    def dispatch(self) -> Iterator[None]:
        with self._lock:
            yield

    def get(self, room_id: Optional[str]) -> Optional[Session]:
        if room_id is None:
            return None
        return self._sessions.get(room_id)

    def get_or_create(self, room_id: str) -> Session:
        session = self._sessions.get(room_id)
        if session is None:
            session = Session(id=room_id)
            self._sessions[room_id] = session
            logger.info(f"[session-create] room={room_id}")
        return session

    def find_open_session(self) -> Optional[Session]:
        for session in self._sessions.values():
            if session.has_vacancy():
                return session
        return None

    def remove(self, room_id: str) -> None:
        session = self._sessions.pop(room_id, None)
        if session is not None:
            session.status = STATUS_EMPTY
            logger.info(f"[evict] room={room_id}")

    def __contains__(self, room_id) -> bool:
        return room_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self):
        return iter(list(self._sessions.values()))


class ConnectionTable:
    """Live connections keyed by connection id."""

    def __init__(self):
        self._connections: Dict[str, Connection] = {}

    def open(self, connection_id: str) -> Connection:
        conn = self._connections.get(connection_id)
        if conn is None:
            conn = Connection(id=connection_id)
            self._connections[connection_id] = conn
        return conn

    def get(self, connection_id: str) -> Optional[Connection]:
        return self._connections.get(connection_id)

    def close(self, connection_id: str) -> Optional[Connection]:
        return self._connections.pop(connection_id, None)

    def bound_to(self, room_id: str):
        return [c for c in self._connections.values() if c.session_id == room_id]

    def spectators_of(self, room_id: str) -> int:
        return sum(1 for c in self._connections.values() if c.session_id == room_id and c.role == SPECTATOR)
