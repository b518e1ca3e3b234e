"""Connection loss and seat reclaim.

A seated player leaving resets the board for whoever remains; a room with
no seated player left is evicted before the handler returns.
"""

from typing import Optional
import logging

from chessnd.models import BLACK, SEATS, SPECTATOR, WHITE, Connection, Session
from chessnd.services.outbox import Outbox
from chessnd.services.registry import ConnectionTable, SessionRegistry

logger = logging.getLogger(__name__)


def on_disconnect(registry: SessionRegistry, conn: Connection, outbox: Outbox,
                  connections: Optional[ConnectionTable] = None) -> Optional[Session]:
    """Release the connection's binding. Returns the session it was bound to, if any."""
    session = registry.get(conn.session_id)
    conn.unbind()
    if session is None:
        return None

    outbox.broadcast('playerDisconnected', conn.id, session)

    vacated = []
    for seat in SEATS:
        if session.seats.get(seat) == conn.id:
            session.seats[seat] = None
            vacated.append(seat)

    if vacated:
        session.reset()
        outbox.broadcast('resetBoard', session.engine.fen(), session, skip_sid=conn.id)
        outbox.broadcast('turn', session.turn, session, skip_sid=conn.id)
        logger.info(f"[reset] room={session.id} sid={conn.id} vacated={','.join(vacated)}")

    if session.is_empty():
        registry.remove(session.id)
        # Spectators left behind must not follow a later room of the same name
        if connections is not None:
            for leftover in connections.bound_to(session.id):
                leftover.unbind()
    return session


def on_reload(registry: SessionRegistry, connections: ConnectionTable, conn: Connection,
              stale_id: Optional[str], outbox: Outbox) -> bool:
    """Promote the requester to white when the stale id holds black."""
    session = registry.get(conn.session_id)
    if session is None or not stale_id:
        return False
    if session.seats.get(BLACK) != stale_id:
        return False

    displaced = session.seats.get(WHITE)
    session.seats[BLACK] = None
    previous = session.seat_of(conn.id)
    if previous:
        session.seats[previous] = None
    session.seats[WHITE] = conn.id
    conn.bind(session.id, WHITE)

    for lost_id in (stale_id, displaced):
        lost = connections.get(lost_id) if lost_id else None
        if lost is not None and lost is not conn and lost.session_id == session.id:
            lost.role = SPECTATOR
    outbox.send('playerRole', 'w', conn.id)
    logger.info(f"[reload] room={session.id} sid={conn.id} reclaimed from={stale_id} displaced={displaced}")
    return True
