from typing import Any
import logging

from chessnd.models import SEAT_CODES, STATUS_TERMINATED, Connection
from chessnd.services.engine import MoveApplied, MoveFault
from chessnd.services.outbox import Outbox
from chessnd.services.registry import SessionRegistry
from chessnd.services.termination import announce_termination

logger = logging.getLogger(__name__)


def submit_move(registry: SessionRegistry, conn: Connection, candidate: Any, outbox: Outbox,
                notify_out_of_turn: bool = False) -> bool:
    """Validate, apply and relay one move. Returns True if the move was applied.

    Either the move is applied and broadcast to the whole room, or nothing
    about the session changes.
    """
    session = registry.get(conn.session_id)
    if session is None:
        return False

    if SEAT_CODES.get(conn.role) != session.turn or session.seats.get(conn.role) != conn.id:
        logger.info(f"[move-drop] room={session.id} sid={conn.id} role={conn.role} turn={session.turn}")
        if notify_out_of_turn:
            outbox.send('notYourTurn', {
                'move': candidate,
                'turn': session.turn,
                'message': 'Not your turn',
            }, conn.id)
        return False

    if session.status == STATUS_TERMINATED:
        outbox.send('invalidMove', {
            'move': candidate,
            'fen': session.engine.fen(),
            'message': 'Game is over',
        }, conn.id)
        return False

    result = session.engine.apply_move(candidate)
    if not isinstance(result, MoveApplied):
        if isinstance(result, MoveFault):
            logger.warning(f"[engine-fault] room={session.id} sid={conn.id} move={candidate!r} reason={result.reason}")
        outbox.send('invalidMove', {
            'move': candidate,
            'fen': session.engine.fen(),
            'message': result.reason,
        }, conn.id)
        return False

    session.sync_turn()
    outbox.broadcast('move', result.move, session)
    outbox.broadcast('turn', session.turn, session)
    outbox.broadcast('boardState', session.engine.fen(), session)
    logger.info(f"[move] room={session.id} sid={conn.id} san={result.move['san']} turn={session.turn}")
    announce_termination(session, outbox)
    return True
