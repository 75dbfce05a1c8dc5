"""Board model: an 8x8 grid of optional python-chess pieces addressed by (row, col)."""

from typing import Iterator, List, Optional, Sequence, Tuple

import chess

# (row, col); row 0 is black's back rank (rank 8), col 0 is the a-file.
Square = Tuple[int, int]
Placement = Tuple[Tuple[Optional[chess.Piece], ...], ...]

BOARD_SIZE = 8
SQUARES: Tuple[Square, ...] = tuple(
    (row, col) for row in range(BOARD_SIZE) for col in range(BOARD_SIZE)
)

BACK_RANK = (
    chess.ROOK,
    chess.KNIGHT,
    chess.BISHOP,
    chess.QUEEN,
    chess.KING,
    chess.BISHOP,
    chess.KNIGHT,
    chess.ROOK,
)


def is_on_board(square: Square) -> bool:
    row, col = square
    return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE


def to_chess_square(square: Square) -> chess.Square:
    row, col = square
    return chess.square(col, BOARD_SIZE - 1 - row)


def from_chess_square(chess_square: chess.Square) -> Square:
    return (BOARD_SIZE - 1 - chess.square_rank(chess_square), chess.square_file(chess_square))


def square_name(square: Square) -> str:
    return chess.square_name(to_chess_square(square))


def parse_square(name: str) -> Square:
    return from_chess_square(chess.parse_square(name))


class Board:
    """Plain piece storage. Bounds and occupancy rules belong to the caller."""

    def __init__(self, grid: Optional[List[List[Optional[chess.Piece]]]] = None) -> None:
        if grid is None:
            grid = [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]
        self._grid = grid

    @classmethod
    def empty(cls) -> "Board":
        return cls()

    @classmethod
    def initial(cls) -> "Board":
        board = cls()
        for col, piece_type in enumerate(BACK_RANK):
            board.set((0, col), chess.Piece(piece_type, chess.BLACK))
            board.set((1, col), chess.Piece(chess.PAWN, chess.BLACK))
            board.set((6, col), chess.Piece(chess.PAWN, chess.WHITE))
            board.set((7, col), chess.Piece(piece_type, chess.WHITE))
        return board

    @classmethod
    def from_fen(cls, fen: str) -> "Board":
        """Build a board from a FEN string; only the piece-placement field is read.

        Raises ``ValueError`` when python-chess rejects the placement.
        """
        fields = fen.split()
        if not fields:
            raise ValueError("empty FEN")
        placement = chess.BaseBoard(fields[0])
        board = cls()
        for chess_square, piece in placement.piece_map().items():
            board.set(from_chess_square(chess_square), piece)
        return board

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[Optional[chess.Piece]]]) -> "Board":
        return cls([list(row) for row in rows])

    def get(self, square: Square) -> Optional[chess.Piece]:
        row, col = square
        return self._grid[row][col]

    def set(self, square: Square, piece: Optional[chess.Piece]) -> None:
        row, col = square
        self._grid[row][col] = piece

    def clone(self) -> "Board":
        return Board([list(row) for row in self._grid])

    def rows(self) -> Placement:
        return tuple(tuple(row) for row in self._grid)

    def pieces(self, color: Optional[chess.Color] = None) -> Iterator[Tuple[Square, chess.Piece]]:
        """Yield occupied squares in row-major order, optionally for one color."""
        for square in SQUARES:
            piece = self.get(square)
            if piece is None:
                continue
            if color is None or piece.color == color:
                yield square, piece

    def find_king(self, color: chess.Color) -> Optional[Square]:
        for square, piece in self.pieces(color):
            if piece.piece_type == chess.KING:
                return square
        return None

    def to_chess_board(self, turn: chess.Color = chess.WHITE) -> chess.Board:
        # No castling rights and no en-passant square: neither rule exists here.
        chess_board = chess.Board(None)
        for square, piece in self.pieces():
            chess_board.set_piece_at(to_chess_square(square), piece)
        chess_board.turn = turn
        return chess_board

    def board_fen(self) -> str:
        return self.to_chess_board().board_fen()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._grid == other._grid

    def __repr__(self) -> str:
        return f"Board('{self.board_fen()}')"

    def __str__(self) -> str:
        lines = []
        for row in self._grid:
            lines.append(" ".join(piece.symbol() if piece else "." for piece in row))
        return "\n".join(lines)
