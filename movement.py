"""Per-piece movement geometry, ignoring king safety.

Every predicate here looks only at the two squares, the moving piece and the
occupancy of the board. Whose turn it is never matters.
"""

from typing import Callable, Dict

import chess

from board import Board, Square

PAWN_DIRECTION: Dict[chess.Color, int] = {chess.WHITE: -1, chess.BLACK: 1}
PAWN_START_ROW: Dict[chess.Color, int] = {chess.WHITE: 6, chess.BLACK: 1}
PROMOTION_ROW: Dict[chess.Color, int] = {chess.WHITE: 0, chess.BLACK: 7}


def _step(delta: int) -> int:
    return (delta > 0) - (delta < 0)


def is_path_clear(from_square: Square, to_square: Square, board: Board) -> bool:
    """True when every square strictly between two aligned squares is empty.

    Only defined for squares sharing a row, a column or a diagonal.
    """
    row_step = _step(to_square[0] - from_square[0])
    col_step = _step(to_square[1] - from_square[1])
    row, col = from_square[0] + row_step, from_square[1] + col_step
    while (row, col) != to_square:
        if board.get((row, col)) is not None:
            return False
        row += row_step
        col += col_step
    return True


def is_valid_pawn_move(from_square: Square, to_square: Square, piece: chess.Piece, board: Board) -> bool:
    direction = PAWN_DIRECTION[piece.color]
    row_delta = to_square[0] - from_square[0]
    col_delta = to_square[1] - from_square[1]
    target = board.get(to_square)

    if col_delta == 0:
        if row_delta == direction:
            return target is None
        if row_delta == 2 * direction and from_square[0] == PAWN_START_ROW[piece.color]:
            between = (from_square[0] + direction, from_square[1])
            return target is None and board.get(between) is None
        return False

    # Diagonal steps only capture; no en passant.
    return abs(col_delta) == 1 and row_delta == direction and target is not None


def is_valid_rook_move(from_square: Square, to_square: Square, piece: chess.Piece, board: Board) -> bool:
    same_row = from_square[0] == to_square[0]
    same_col = from_square[1] == to_square[1]
    if same_row == same_col:
        return False
    return is_path_clear(from_square, to_square, board)


def is_valid_knight_move(from_square: Square, to_square: Square, piece: chess.Piece, board: Board) -> bool:
    row_diff = abs(to_square[0] - from_square[0])
    col_diff = abs(to_square[1] - from_square[1])
    return (row_diff, col_diff) in ((1, 2), (2, 1))


def is_valid_bishop_move(from_square: Square, to_square: Square, piece: chess.Piece, board: Board) -> bool:
    row_diff = abs(to_square[0] - from_square[0])
    col_diff = abs(to_square[1] - from_square[1])
    if row_diff == 0 or row_diff != col_diff:
        return False
    return is_path_clear(from_square, to_square, board)


def is_valid_queen_move(from_square: Square, to_square: Square, piece: chess.Piece, board: Board) -> bool:
    return is_valid_rook_move(from_square, to_square, piece, board) or is_valid_bishop_move(
        from_square, to_square, piece, board
    )


def is_valid_king_move(from_square: Square, to_square: Square, piece: chess.Piece, board: Board) -> bool:
    # No castling.
    row_diff = abs(to_square[0] - from_square[0])
    col_diff = abs(to_square[1] - from_square[1])
    return row_diff <= 1 and col_diff <= 1 and (row_diff, col_diff) != (0, 0)


MoveRule = Callable[[Square, Square, chess.Piece, Board], bool]

MOVE_RULES: Dict[chess.PieceType, MoveRule] = {
    chess.PAWN: is_valid_pawn_move,
    chess.KNIGHT: is_valid_knight_move,
    chess.BISHOP: is_valid_bishop_move,
    chess.ROOK: is_valid_rook_move,
    chess.QUEEN: is_valid_queen_move,
    chess.KING: is_valid_king_move,
}


def is_geometrically_valid(from_square: Square, to_square: Square, piece: chess.Piece, board: Board) -> bool:
    if from_square == to_square:
        return False
    rule = MOVE_RULES.get(piece.piece_type)
    if rule is None:
        return False
    return rule(from_square, to_square, piece, board)
