"""Resolve joining connections to a session and a seat."""

from typing import Optional
import logging

from chessnd.models import BLACK, SEAT_CODES, SPECTATOR, WHITE, Connection, Session, generate_room_id
from chessnd.services.outbox import Outbox
from chessnd.services.registry import ConnectionTable, SessionRegistry

logger = logging.getLogger(__name__)


def join_by_name(registry: SessionRegistry, connections: ConnectionTable, conn: Connection,
                 room_id: str, display_name: Optional[str], outbox: Outbox) -> Session:
    session = registry.get_or_create(room_id)
    if display_name:
        conn.display_name = display_name
    return _join(session, connections, conn, outbox)


def join_random(registry: SessionRegistry, connections: ConnectionTable, conn: Connection,
                outbox: Outbox, room_id_length: int = 8) -> Session:
    session = registry.find_open_session()
    if session is None:
        session = registry.get_or_create(generate_room_id(lambda rid: rid in registry, room_id_length))
    return _join(session, connections, conn, outbox)


def assign_seat(session: Session, conn: Connection, outbox: Outbox) -> str:
    """White first, then black, otherwise spectate."""
    for seat in (WHITE, BLACK):
        if not session.seats.get(seat):
            session.seats[seat] = conn.id
            conn.bind(session.id, seat)
            outbox.send('playerColor', seat, conn.id)
            outbox.send('playerRole', SEAT_CODES[seat], conn.id)
            return seat
    conn.bind(session.id, SPECTATOR)
    outbox.send('full', 'Game is full', conn.id)
    outbox.send('playerRole', SPECTATOR, conn.id)
    return SPECTATOR


def _join(session: Session, connections: ConnectionTable, conn: Connection, outbox: Outbox) -> Session:
    seat = session.seat_of(conn.id)
    if conn.session_id == session.id and (seat or not session.has_vacancy()):
        # Already bound here and nothing to upgrade to: resync only.
        if seat:
            outbox.send('playerColor', seat, conn.id)
            outbox.send('playerRole', SEAT_CODES[seat], conn.id)
        else:
            outbox.send('playerRole', SPECTATOR, conn.id)
        outbox.send('boardState', session.engine.fen(), conn.id)
        return session

    # Tell seated peers about the newcomer and the newcomer about them
    for peer_seat in (WHITE, BLACK):
        peer_id = session.seats.get(peer_seat)
        if not peer_id:
            continue
        peer = connections.get(peer_id)
        outbox.send('connected', peer.info if peer else peer_id, conn.id)
        outbox.send('connected', conn.info, peer_id)

    role = assign_seat(session, conn, outbox)
    outbox.send('boardState', session.engine.fen(), conn.id)
    logger.info(f"[join] room={session.id} sid={conn.id} role={role}")
    return session
