import pytest

from chessnd.models import Session
from chessnd.services.engine import RulesEngine
from chessnd.services.outbox import Outbox
from chessnd.services.termination import announce_termination, detect_termination


class StubEngine:
    def __init__(self, mover='w', checkmate=False, stalemate=False, insufficient=False,
                 threefold=False, halfmoves=0):
        self.mover = mover
        self.flags = (checkmate, stalemate, insufficient, threefold)
        self.halfmoves = halfmoves

    def current_mover(self):
        return self.mover

    def is_checkmate(self):
        return self.flags[0]

    def is_stalemate(self):
        return self.flags[1]

    def has_insufficient_material(self):
        return self.flags[2]

    def is_threefold_repetition(self):
        return self.flags[3]

    def halfmove_clock(self):
        return self.halfmoves


@pytest.mark.parametrize('fen, expected', [
    ('7k/5Q2/6K1/8/8/8/8/8 b - - 0 1', 'Stalemate'),
    ('8/8/8/4k3/8/8/8/4K3 w - - 0 1', 'Insufficient material'),
    ('4k3/8/8/8/8/8/8/R3K3 w - - 100 80', '50-move rule'),
])
def test_draws_from_positions(fen, expected):
    assert detect_termination(RulesEngine(fen)) == {'result': 'draw', 'winner': None, 'reason': expected}


def test_fifty_move_threshold_is_inclusive():
    assert detect_termination(RulesEngine('4k3/8/8/8/8/8/8/R3K3 w - - 99 80')) is None


def test_threefold_repetition():
    engine = RulesEngine()
    for uci in ['g1f3', 'g8f6', 'f3g1', 'f6g8'] * 2:
        engine.apply_move(uci)
    assert detect_termination(engine)['reason'] == 'Threefold repetition'


def test_checkmate_winner_is_side_not_to_move():
    engine = RulesEngine()
    for uci in ['f2f3', 'e7e5', 'g2g4', 'd8h4']:
        engine.apply_move(uci)
    assert detect_termination(engine) == {'result': 'checkmate', 'winner': 'black', 'reason': 'Checkmate'}

    assert detect_termination(StubEngine(mover='b', checkmate=True))['winner'] == 'white'


def test_priority_order():
    everything = StubEngine(checkmate=True, stalemate=True, insufficient=True, threefold=True, halfmoves=120)
    assert detect_termination(everything)['reason'] == 'Checkmate'
    assert detect_termination(StubEngine(stalemate=True, insufficient=True))['reason'] == 'Stalemate'
    assert detect_termination(StubEngine(insufficient=True, threefold=True))['reason'] == 'Insufficient material'
    assert detect_termination(StubEngine(threefold=True, halfmoves=100))['reason'] == 'Threefold repetition'
    assert detect_termination(StubEngine()) is None


def test_announce_broadcasts_single_event_and_marks_session():
    session = Session(id='x', engine=RulesEngine('7k/5Q2/6K1/8/8/8/8/8 b - - 0 1'))
    outbox = Outbox()
    ending = announce_termination(session, outbox)
    assert ending['reason'] == 'Stalemate'
    assert [(e.event, e.to) for e in outbox] == [('gameEnd', 'room:x')]
    assert session.status == 'terminated'


def test_announce_is_silent_for_ongoing_game():
    session = Session(id='x')
    outbox = Outbox()
    assert announce_termination(session, outbox) is None
    assert len(outbox) == 0
    assert session.status == 'active'
