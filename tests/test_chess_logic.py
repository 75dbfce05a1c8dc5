import random

import chess
import pytest

import chess_logic
from board import SQUARES, Board, from_chess_square, parse_square
from chess_logic import GameStatus, Move


def _move(uci: str) -> Move:
    return Move(parse_square(uci[:2]), parse_square(uci[2:4]))


def _play(board: Board, *ucis: str) -> Board:
    turn = chess.WHITE
    for uci in ucis:
        move = _move(uci)
        assert chess_logic.is_valid_move(board, turn, move), uci
        chess_logic.make_move(board, move)
        turn = not turn
    return board


def test_e2e4_is_legal_from_the_initial_position() -> None:
    board = Board.initial()
    move = Move((6, 4), (4, 4))
    assert chess_logic.is_valid_move(board, chess.WHITE, move) is True
    played = chess_logic.make_move(board, move)
    assert played == move
    assert board.get((4, 4)) == chess.Piece(chess.PAWN, chess.WHITE)
    assert board.get((6, 4)) is None


def test_moves_are_only_legal_for_the_side_to_move() -> None:
    board = Board.initial()
    assert chess_logic.is_valid_move(board, chess.BLACK, _move("e2e4")) is False
    assert chess_logic.is_valid_move(board, chess.WHITE, _move("e7e5")) is False
    assert chess_logic.is_valid_move(board, chess.WHITE, _move("e3e4")) is False


def test_same_side_destination_is_always_rejected() -> None:
    board = Board.initial()
    for color in chess.COLORS:
        own_squares = [square for square, _ in board.pieces(color)]
        for from_square in own_squares:
            for to_square in own_squares:
                assert not chess_logic.is_valid_move(board, color, Move(from_square, to_square))


def test_initial_position_has_twenty_moves_each() -> None:
    board = Board.initial()
    assert len(chess_logic.get_legal_moves(board, chess.WHITE)) == 20
    assert len(chess_logic.get_legal_moves(board, chess.BLACK)) == 20


def test_legal_moves_come_in_row_major_order() -> None:
    moves = chess_logic.get_legal_moves(Board.initial(), chess.WHITE)
    keys = [(move.from_square, move.to_square) for move in moves]
    assert keys == sorted(keys)
    assert chess_logic.get_legal_destinations(Board.initial(), chess.WHITE, (7, 6)) == [(5, 5), (5, 7)]


def test_king_cannot_step_onto_square_covered_by_rook() -> None:
    # Black rook on d8 covers the whole d-file.
    board = Board.from_fen("3r3k/8/8/8/8/8/8/4K3 w - - 0 1")
    assert not chess_logic.is_valid_move(board, chess.WHITE, _move("e1d1"))
    assert not chess_logic.is_valid_move(board, chess.WHITE, _move("e1d2"))
    assert chess_logic.is_valid_move(board, chess.WHITE, _move("e1f1"))
    assert chess_logic.is_valid_move(board, chess.WHITE, _move("e1e2"))


def test_pinned_piece_cannot_leave_the_pin_line() -> None:
    board = Board.from_fen("k3r3/8/8/8/8/8/4R3/4K3 w - - 0 1")
    assert not chess_logic.is_valid_move(board, chess.WHITE, _move("e2a2"))
    assert chess_logic.is_valid_move(board, chess.WHITE, _move("e2e5"))
    assert chess_logic.is_valid_move(board, chess.WHITE, _move("e2e8"))


def test_move_that_leaves_king_in_check_is_never_legal() -> None:
    board = Board.from_fen("4k3/8/8/8/8/8/3P4/r3K3 w - - 0 1")
    assert chess_logic.is_in_check(board, chess.WHITE)
    # Only moves that resolve the check survive.
    legal = chess_logic.get_legal_moves(board, chess.WHITE)
    assert legal
    for move in legal:
        scratch = board.clone()
        chess_logic.make_move(scratch, move)
        assert not chess_logic.is_in_check(scratch, chess.WHITE)
    assert not chess_logic.is_valid_move(board, chess.WHITE, _move("d2d3"))


def test_pinned_attacker_still_gives_check() -> None:
    # The black knight is pinned to its own king, yet it still attacks d4.
    board = Board.from_fen("4k3/8/4n3/8/3K4/8/8/4R3 w - - 0 1")
    assert chess_logic.is_square_attacked(board, parse_square("d4"), chess.BLACK)
    assert chess_logic.is_in_check(board, chess.WHITE)
    assert not chess_logic.is_valid_move(board, chess.BLACK, _move("e6c5"))


def test_pawn_attacks_diagonally_but_not_forward() -> None:
    board = Board.from_fen("4k3/8/8/8/3p4/4K3/8/8 w - - 0 1")
    assert chess_logic.is_in_check(board, chess.WHITE)
    board = Board.from_fen("4k3/8/8/8/4p3/4K3/8/8 w - - 0 1")
    assert not chess_logic.is_in_check(board, chess.WHITE)


def test_back_rank_checkmate_of_black() -> None:
    board = Board.from_fen("R6k/6pp/8/8/8/8/8/4K3 b - - 0 1")
    assert chess_logic.is_in_check(board, chess.BLACK)
    assert chess_logic.is_checkmate(board, chess.BLACK) is True
    assert chess_logic.is_stalemate(board, chess.BLACK) is False
    assert chess_logic.get_game_status(board, chess.BLACK) is GameStatus.CHECKMATE
    assert chess_logic.get_legal_moves(board, chess.BLACK) == []


def test_fools_mate() -> None:
    board = _play(Board.initial(), "f2f3", "e7e5", "g2g4", "d8h4")
    assert chess_logic.is_checkmate(board, chess.WHITE) is True
    assert chess_logic.get_game_result(board, chess.WHITE) == "Checkmate"


def test_stalemate_detection() -> None:
    board = Board.from_fen("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
    assert chess_logic.is_stalemate(board, chess.BLACK) is True
    assert chess_logic.is_checkmate(board, chess.BLACK) is False
    assert chess_logic.get_game_status(board, chess.BLACK) is GameStatus.STALEMATE
    assert chess_logic.get_game_result(board, chess.BLACK) == "Stalemate"


def test_check_status() -> None:
    board = Board.from_fen("4k3/8/4R3/8/8/8/8/4K3 b - - 0 1")
    assert chess_logic.get_game_status(board, chess.BLACK) is GameStatus.CHECK
    assert chess_logic.get_game_result(board, chess.BLACK) == "Check"
    assert chess_logic.get_game_result(Board.initial(), chess.WHITE) == "Game in progress"


def test_missing_king_is_neither_mate_nor_stalemate() -> None:
    board = Board.from_fen("8/8/8/8/8/8/4P3/4K3 w - - 0 1")
    assert chess_logic.is_checkmate(board, chess.BLACK) is False
    assert chess_logic.is_stalemate(board, chess.BLACK) is False
    assert chess_logic.is_in_check(board, chess.BLACK) is False

    kingless = Board.from_fen("8/8/8/8/8/8/4P3/8 w - - 0 1")
    assert chess_logic.get_legal_moves(kingless, chess.WHITE) == []
    assert chess_logic.get_game_status(kingless, chess.WHITE) is GameStatus.NONE


@pytest.mark.parametrize(
    ("fen", "uci", "expected"),
    [
        ("4k3/P7/8/8/8/8/8/4K3 w - - 0 1", "a7a8", chess.Piece(chess.QUEEN, chess.WHITE)),
        ("4k3/8/8/8/8/8/7p/K7 b - - 0 1", "h2h1", chess.Piece(chess.QUEEN, chess.BLACK)),
    ],
)
def test_pawns_auto_promote_to_queen(fen, uci, expected) -> None:
    board = Board.from_fen(fen)
    played = chess_logic.make_move(board, _move(uci))
    assert played.promotion == chess.QUEEN
    assert played.uci() == uci + "q"
    assert board.get(played.to_square) == expected


def test_non_promotion_move_has_no_promotion() -> None:
    played = chess_logic.make_move(Board.initial(), _move("e2e4"))
    assert played.promotion is None
    assert played.uci() == "e2e4"
    assert str(played) == "e2e4"


def test_exports() -> None:
    initial = Board.initial()
    board = initial.clone()
    moves = []
    turn = chess.WHITE
    for uci in ("e2e4", "e7e5", "g1f3"):
        moves.append(chess_logic.make_move(board, _move(uci)))
        turn = not turn

    assert chess_logic.export_board_fen(initial, chess.WHITE) == (
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w - - 0 1"
    )
    assert chess_logic.export_board_fen(board, turn).startswith(
        "rnbqkbnr/pppp1ppp/8/4p3/4P3/5N2/PPPP1PPP/RNBQKB1R b"
    )
    assert chess_logic.export_move_history_uci(moves) == "e2e4 e7e5 g1f3"
    assert chess_logic.export_move_history_san(initial, chess.WHITE, moves) == "e4 e5 Nf3"


def _python_chess_moves(board: Board, turn: chess.Color):
    reference = board.to_chess_board(turn)
    return reference, {
        (from_chess_square(move.from_square), from_chess_square(move.to_square))
        for move in reference.legal_moves
    }


@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_move_generation_agrees_with_python_chess(seed) -> None:
    rng = random.Random(seed)
    board = Board.initial()
    turn = chess.WHITE

    for _ in range(40):
        ours = chess_logic.get_legal_moves(board, turn)
        reference, expected = _python_chess_moves(board, turn)
        assert {(move.from_square, move.to_square) for move in ours} == expected

        assert chess_logic.is_in_check(board, turn) == reference.is_check()
        assert chess_logic.is_checkmate(board, turn) == reference.is_checkmate()
        assert chess_logic.is_stalemate(board, turn) == reference.is_stalemate()
        assert not (chess_logic.is_checkmate(board, turn) and chess_logic.is_stalemate(board, turn))

        if not ours:
            break
        chess_logic.make_move(board, rng.choice(ours))
        turn = not turn


def test_every_square_pair_checked_for_empty_source() -> None:
    board = Board.empty()
    board.set((7, 4), chess.Piece(chess.KING, chess.WHITE))
    for square in SQUARES:
        assert not chess_logic.is_valid_move(board, chess.WHITE, Move((4, 4), square))
