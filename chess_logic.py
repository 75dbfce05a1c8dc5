from enum import Enum
from typing import Iterable, List, NamedTuple, Optional

import chess

from board import SQUARES, Board, Square, square_name, to_chess_square
from movement import PROMOTION_ROW, is_geometrically_valid


class Move(NamedTuple):
    from_square: Square
    to_square: Square
    promotion: Optional[chess.PieceType] = None

    def to_chess_move(self) -> chess.Move:
        return chess.Move(
            to_chess_square(self.from_square),
            to_chess_square(self.to_square),
            promotion=self.promotion,
        )

    def uci(self) -> str:
        return self.to_chess_move().uci()

    def __str__(self) -> str:
        return f"{square_name(self.from_square)}{square_name(self.to_square)}"


class GameStatus(Enum):
    NONE = "none"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"


def is_square_attacked(board: Board, square: Square, by_color: chess.Color) -> bool:
    """Attack scan using geometry and occupancy only.

    Must not call :func:`is_valid_move`: that function asks this one about
    king safety, so the two would recurse into each other.
    """
    for attacker_square, piece in board.pieces(by_color):
        if is_geometrically_valid(attacker_square, square, piece, board):
            return True
    return False


def is_in_check(board: Board, color: chess.Color) -> bool:
    king_square = board.find_king(color)
    if king_square is None:
        return False
    return is_square_attacked(board, king_square, not color)


def is_valid_move(board: Board, turn: chess.Color, move: Move) -> bool:
    from_square, to_square = move.from_square, move.to_square
    if from_square == to_square:
        return False

    piece = board.get(from_square)
    if piece is None or piece.color != turn:
        return False

    target = board.get(to_square)
    if target is not None and target.color == turn:
        return False

    if not is_geometrically_valid(from_square, to_square, piece, board):
        return False

    # King safety is tested on a scratch copy which is then dropped.
    scratch = board.clone()
    scratch.set(to_square, piece)
    scratch.set(from_square, None)
    king_square = scratch.find_king(turn)
    if king_square is None:
        return False
    return not is_square_attacked(scratch, king_square, not turn)


def _candidate_moves(board: Board, color: chess.Color) -> Iterable[Move]:
    for from_square, _ in board.pieces(color):
        for to_square in SQUARES:
            yield Move(from_square, to_square)


def get_legal_moves(board: Board, color: chess.Color) -> List[Move]:
    """All legal moves for ``color``, sources and destinations in row-major order."""
    return [move for move in _candidate_moves(board, color) if is_valid_move(board, color, move)]


def has_legal_move(board: Board, color: chess.Color) -> bool:
    return any(is_valid_move(board, color, move) for move in _candidate_moves(board, color))


def get_legal_destinations(board: Board, turn: chess.Color, square: Square) -> List[Square]:
    return [
        to_square
        for to_square in SQUARES
        if is_valid_move(board, turn, Move(square, to_square))
    ]


def is_checkmate(board: Board, color: chess.Color) -> bool:
    king_square = board.find_king(color)
    if king_square is None or not is_square_attacked(board, king_square, not color):
        return False
    return not has_legal_move(board, color)


def is_stalemate(board: Board, color: chess.Color) -> bool:
    king_square = board.find_king(color)
    if king_square is None or is_square_attacked(board, king_square, not color):
        return False
    return not has_legal_move(board, color)


def get_game_status(board: Board, color: chess.Color) -> GameStatus:
    in_check = is_in_check(board, color)
    if has_legal_move(board, color):
        return GameStatus.CHECK if in_check else GameStatus.NONE
    if board.find_king(color) is None:
        return GameStatus.NONE
    return GameStatus.CHECKMATE if in_check else GameStatus.STALEMATE


def get_game_result(board: Board, color: chess.Color) -> str:
    status = get_game_status(board, color)
    return {
        GameStatus.CHECKMATE: "Checkmate",
        GameStatus.STALEMATE: "Stalemate",
        GameStatus.CHECK: "Check",
    }.get(status, "Game in progress")


def is_promotion(piece: chess.Piece, to_square: Square) -> bool:
    return piece.piece_type == chess.PAWN and to_square[0] == PROMOTION_ROW[piece.color]


def make_move(board: Board, move: Move) -> Move:
    """Apply ``move`` in place and return it with any promotion filled in.

    Pawns reaching the far row always become queens. Legality is the caller's
    concern.
    """
    piece = board.get(move.from_square)
    promotion = None
    if piece is not None and is_promotion(piece, move.to_square):
        promotion = chess.QUEEN
        piece = chess.Piece(chess.QUEEN, piece.color)
    board.set(move.to_square, piece)
    board.set(move.from_square, None)
    return Move(move.from_square, move.to_square, promotion)


def export_board_fen(board: Board, turn: chess.Color) -> str:
    return board.to_chess_board(turn).fen()


def export_move_history_uci(moves: Iterable[Move]) -> str:
    return " ".join(move.uci() for move in moves)


def export_move_history_san(initial: Board, turn: chess.Color, moves: Iterable[Move]) -> str:
    """Replay ``moves`` from ``initial`` on a python-chess board to name them in SAN."""
    replay = initial.to_chess_board(turn)
    moves_san = []
    for move in moves:
        chess_move = move.to_chess_move()
        moves_san.append(replay.san(chess_move))
        replay.push(chess_move)
    return " ".join(moves_san)
