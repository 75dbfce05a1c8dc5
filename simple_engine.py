"""One-ply greedy move selector for the computer side."""

import random
from typing import Dict, List, Optional

import chess

import chess_logic
from board import Board
from chess_logic import Move

PIECE_VALUES: Dict[int, int] = {
    chess.PAWN: 10,
    chess.KNIGHT: 30,
    chess.BISHOP: 30,
    chess.ROOK: 50,
    chess.QUEEN: 90,
    chess.KING: 900,
}


class SimpleEngine:
    """Takes the most valuable piece on offer, otherwise plays a random legal move."""

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None) -> None:
        self._rng = rng if rng is not None else random.Random(seed)

    def select_move(self, board: Board, color: chess.Color) -> Optional[Move]:
        legal_moves = chess_logic.get_legal_moves(board, color)
        if not legal_moves:
            return None

        best_move = self._best_capture(board, legal_moves)
        if best_move is None:
            best_move = self._rng.choice(legal_moves)
        return best_move

    def _best_capture(self, board: Board, legal_moves: List[Move]) -> Optional[Move]:
        best_move: Optional[Move] = None
        best_value = 0
        for move in legal_moves:
            value = self._capture_value(board, move)
            # Strictly greater keeps the first move found on ties.
            if value > best_value:
                best_value = value
                best_move = move
        return best_move

    def _capture_value(self, board: Board, move: Move) -> int:
        captured_piece = board.get(move.to_square)
        if captured_piece is None:
            return 0
        return PIECE_VALUES.get(captured_piece.piece_type, 0)
