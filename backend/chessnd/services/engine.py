"""Rules engine adapter over python-chess.

Move application reports its outcome as a value instead of raising, so
callers can tell an illegal move from an internal engine fault.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union
import logging

import chess

logger = logging.getLogger(__name__)

PROMO_MAP = {'q': chess.QUEEN, 'r': chess.ROOK, 'b': chess.BISHOP, 'n': chess.KNIGHT}


@dataclass(frozen=True)
class MoveApplied:
    move: Dict[str, Any]


@dataclass(frozen=True)
class MoveRejected:
    reason: str


@dataclass(frozen=True)
class MoveFault:
    reason: str


MoveResult = Union[MoveApplied, MoveRejected, MoveFault]


class RulesEngine:
    """One game instance. Owned exclusively by its session."""

    def __init__(self, fen: Optional[str] = None):
        self.board = chess.Board(fen) if fen else chess.Board()

    def load_position(self, fen: str) -> None:
        self.board = chess.Board(fen)

    def fen(self) -> str:
        return self.board.fen()

    def board_grid(self) -> List[List[Optional[Tuple[str, str]]]]:
        grid = []
        for rank in range(7, -1, -1):
            row = []
            for file_idx in range(8):
                piece = self.board.piece_at(chess.square(file_idx, rank))
                if piece is None:
                    row.append(None)
                else:
                    row.append((piece.symbol().lower(), 'w' if piece.color == chess.WHITE else 'b'))
            grid.append(row)
        return grid

    def current_mover(self) -> str:
        return 'w' if self.board.turn == chess.WHITE else 'b'

    def is_checkmate(self) -> bool:
        return self.board.is_checkmate()

    def is_stalemate(self) -> bool:
        return self.board.is_stalemate()

    def has_insufficient_material(self) -> bool:
        return self.board.is_insufficient_material()

    def is_threefold_repetition(self) -> bool:
        return self.board.is_repetition(3)

    def halfmove_clock(self) -> int:
        return self.board.halfmove_clock

    def apply_move(self, candidate: Any) -> MoveResult:
        try:
            move = self._resolve(candidate)
        except ValueError as exc:
            return MoveRejected(str(exc))
        except Exception as exc:
            logger.exception(f"[engine-fault] resolving candidate={candidate!r}")
            return MoveFault(f"Invalid move (engine error: {exc})")

        try:
            san = self.board.san(move)
            self.board.push(move)
        except Exception as exc:
            logger.exception(f"[engine-fault] applying move={move.uci()}")
            return MoveFault(f"Invalid move (engine error: {exc})")

        applied = {
            'from': chess.square_name(move.from_square),
            'to': chess.square_name(move.to_square),
            'san': san,
        }
        if move.promotion:
            applied['promotion'] = chess.piece_symbol(move.promotion)
        return MoveApplied(applied)

    def _resolve(self, candidate: Any) -> chess.Move:
        if isinstance(candidate, str):
            return self._resolve_text(candidate.strip())
        if not isinstance(candidate, dict):
            raise ValueError('Invalid move')

        from_sq = str(candidate.get('from') or '').lower()
        to_sq = str(candidate.get('to') or '').lower()
        try:
            from_idx, to_idx = chess.parse_square(from_sq), chess.parse_square(to_sq)
        except ValueError:
            raise ValueError(f"Invalid move format: {from_sq}{to_sq}")

        promotion = None
        if self._is_promotion(from_idx, to_idx):
            promo = str(candidate.get('promotion') or 'q').lower()
            if promo not in PROMO_MAP:
                raise ValueError(f"Invalid promotion piece: {promo}")
            promotion = PROMO_MAP[promo]

        move = chess.Move(from_idx, to_idx, promotion=promotion)
        if move not in self.board.legal_moves:
            raise ValueError('Invalid move')
        return move

    def _resolve_text(self, text: str) -> chess.Move:
        try:
            move = chess.Move.from_uci(text.lower())
        except ValueError:
            move = None
        if move and move in self.board.legal_moves:
            return move
        try:
            move = self.board.parse_san(text)
        except ValueError:
            raise ValueError('Invalid move')
        # parse_san hands back Move.null() for "--", "0000" and friends
        if not move or move not in self.board.legal_moves:
            raise ValueError('Invalid move')
        return move

    def _is_promotion(self, from_idx: int, to_idx: int) -> bool:
        piece = self.board.piece_at(from_idx)
        if piece is None or piece.piece_type != chess.PAWN:
            return False
        return chess.square_rank(to_idx) in (0, 7)
