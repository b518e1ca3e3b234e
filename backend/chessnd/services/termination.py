from typing import Any, Dict, Optional
import logging

from chessnd.models import CODE_SEATS, STATUS_TERMINATED, Session
from chessnd.services.engine import RulesEngine
from chessnd.services.outbox import Outbox

logger = logging.getLogger(__name__)

# 50 full moves without capture or pawn advance
FIFTY_MOVE_HALFMOVES = 100


def detect_termination(engine: RulesEngine) -> Optional[Dict[str, Any]]:
    """Return the gameEnd payload for the first terminal condition, in priority order."""
    if engine.is_checkmate():
        # The side to move is mated; the other side delivered it
        loser = engine.current_mover()
        winner = CODE_SEATS['b' if loser == 'w' else 'w']
        return {'result': 'checkmate', 'winner': winner, 'reason': 'Checkmate'}
    if engine.is_stalemate():
        return _draw('Stalemate')
    if engine.has_insufficient_material():
        return _draw('Insufficient material')
    if engine.is_threefold_repetition():
        return _draw('Threefold repetition')
    if engine.halfmove_clock() >= FIFTY_MOVE_HALFMOVES:
        return _draw('50-move rule')
    return None


def announce_termination(session: Session, outbox: Outbox) -> Optional[Dict[str, Any]]:
    """Broadcast at most one gameEnd for the move just applied."""
    ending = detect_termination(session.engine)
    if ending is None:
        return None
    session.status = STATUS_TERMINATED
    outbox.broadcast('gameEnd', ending, session)
    logger.info(f"[game-end] room={session.id} result={ending['result']} reason={ending['reason']}")
    return ending


def _draw(reason: str) -> Dict[str, Any]:
    return {'result': 'draw', 'winner': None, 'reason': reason}
