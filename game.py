"""Turn and history control for a single game session."""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

import chess

import chess_logic
import utils
from board import Board, Placement, Square, square_name
from chess_logic import GameStatus, Move
from simple_engine import SimpleEngine
from utils import ReportingLevel

Scheduler = Callable[[int, Callable[[], None]], None]

DEFAULT_AI_DELAY_MS = 500

MESSAGE_GAME_STARTED = "Game Started"
MESSAGE_INVALID_MOVE = "Invalid move!"
MESSAGE_SELECT_OWN_PIECE = "Select one of your pieces."
MESSAGE_GAME_OVER = "The game is over."
MESSAGE_AI_THINKING = "Computer is thinking..."
MESSAGE_KING_MISSING = "Error: King not found!"
MESSAGE_STALEMATE = "STALEMATE! It's a draw."
MESSAGE_UNDONE = "Move undone."
MESSAGE_NOTHING_TO_UNDO = "No moves to undo."
MESSAGE_REDONE = "Move redone."
MESSAGE_NOTHING_TO_REDO = "No moves to redo."


@dataclass(frozen=True)
class GameState:
    """Immutable snapshot of a position as it stood after a move."""

    placement: Placement
    turn: chess.Color
    status: GameStatus = GameStatus.NONE
    game_over: bool = False
    last_move: Optional[Move] = None

    @classmethod
    def capture(
        cls,
        board: Board,
        turn: chess.Color,
        status: GameStatus = GameStatus.NONE,
        game_over: bool = False,
        last_move: Optional[Move] = None,
    ) -> GameState:
        return cls(board.rows(), turn, status, game_over, last_move)

    def board(self) -> Board:
        return Board.from_rows(self.placement)


class History:
    """Linear undo/redo stacks. ``past`` never drops below the initial state."""

    def __init__(self, initial: GameState) -> None:
        self.past: List[GameState] = [initial]
        self.future: List[GameState] = []

    @property
    def initial(self) -> GameState:
        return self.past[0]

    @property
    def current(self) -> GameState:
        return self.past[-1]

    def push(self, state: GameState) -> None:
        self.past.append(state)
        self.future.clear()

    def can_undo(self) -> bool:
        return len(self.past) > 1

    def can_redo(self) -> bool:
        return bool(self.future)

    def undo(self) -> Optional[GameState]:
        if not self.can_undo():
            return None
        self.future.append(self.past.pop())
        return self.past[-1]

    def redo(self) -> Optional[GameState]:
        if not self.can_redo():
            return None
        state = self.future.pop()
        self.past.append(state)
        return state

    def moves(self) -> List[Move]:
        return [state.last_move for state in self.past[1:] if state.last_move is not None]


class ClickOutcome(Enum):
    SELECTED = "selected"
    DESELECTED = "deselected"
    MOVED = "moved"
    INVALID = "invalid"
    IGNORED = "ignored"


class GameSession:
    """Owns the live board and its history, and drives turns for one game.

    The presentation layer only reads from the session and forwards clicks and
    button presses to it. When a computer opponent is configured and a
    ``scheduler`` is given, the computer's reply is requested through
    ``scheduler(delay_ms, callback)`` after each move that hands it the turn.
    Without a scheduler the caller decides when to call :meth:`play_ai_move`.
    """

    def __init__(
        self,
        board: Optional[Board] = None,
        turn: chess.Color = chess.WHITE,
        *,
        ai_color: Optional[chess.Color] = chess.BLACK,
        engine: Optional[SimpleEngine] = None,
        scheduler: Optional[Scheduler] = None,
        ai_delay_ms: int = DEFAULT_AI_DELAY_MS,
        reporting_level: ReportingLevel = ReportingLevel.QUIET,
    ) -> None:
        self.ai_color = ai_color
        self.engine = engine if engine is not None else SimpleEngine()
        self.scheduler = scheduler
        self.ai_delay_ms = ai_delay_ms
        self.reporting_level = reporting_level
        self._generation = 0
        self._ai_pending = False
        self.new_game(board, turn)

    @classmethod
    def from_fen(cls, fen: str, **kwargs: Any) -> GameSession:
        """Start from a full FEN; raises ``ValueError`` if python-chess rejects it."""
        turn = chess.Board(fen).turn
        return cls(Board.from_fen(fen), turn, **kwargs)

    # --- lifecycle -----------------------------------------------------

    def new_game(self, board: Optional[Board] = None, turn: chess.Color = chess.WHITE) -> None:
        self._generation += 1
        self._ai_pending = False
        self.board = board.clone() if board is not None else Board.initial()
        self.turn = turn
        self.selected_square: Optional[Square] = None
        self.last_move: Optional[Move] = None
        self.status, self.game_over, result_message = self._evaluate_position()
        self.history = History(self._snapshot())
        self.message = result_message or MESSAGE_GAME_STARTED
        self._log(f"New game, {self.turn_text()}")
        self._maybe_schedule_ai()

    # --- queries -------------------------------------------------------

    @property
    def ai_pending(self) -> bool:
        return self._ai_pending

    @property
    def ai_to_move(self) -> bool:
        return self.ai_color is not None and self.turn == self.ai_color and not self.game_over

    @property
    def in_check(self) -> bool:
        return self.status in (GameStatus.CHECK, GameStatus.CHECKMATE)

    def turn_text(self) -> str:
        return f"{utils.color_name(self.turn)}'s turn"

    def legal_destinations(self, square: Square) -> List[Square]:
        if self.game_over:
            return []
        return chess_logic.get_legal_destinations(self.board, self.turn, square)

    # --- input ---------------------------------------------------------

    def click(self, square: Square) -> ClickOutcome:
        if self.game_over:
            return ClickOutcome.IGNORED
        if self._ai_pending:
            self.message = MESSAGE_AI_THINKING
            return ClickOutcome.IGNORED

        piece = self.board.get(square)
        own_piece = piece is not None and piece.color == self.turn

        if self.selected_square is None:
            if own_piece:
                return self._select(square)
            self.message = MESSAGE_SELECT_OWN_PIECE
            return ClickOutcome.INVALID

        if square == self.selected_square:
            self.selected_square = None
            self.message = ""
            self._log(f"{square_name(square)} Unselected", ReportingLevel.VERBOSE)
            return ClickOutcome.DESELECTED

        # A legal move never lands on an own piece, so this is always a reselection.
        if own_piece:
            return self._select(square)

        if self.apply_move(Move(self.selected_square, square)):
            return ClickOutcome.MOVED

        self.selected_square = None
        self.message = MESSAGE_INVALID_MOVE
        return ClickOutcome.INVALID

    def _select(self, square: Square) -> ClickOutcome:
        self.selected_square = square
        self.message = ""
        self._log(f"{square_name(square)} Selected", ReportingLevel.VERBOSE)
        return ClickOutcome.SELECTED

    def apply_move(self, move: Move) -> bool:
        """Play ``move`` for the side to move; ``False`` leaves the game untouched."""
        if self.game_over:
            self.message = MESSAGE_GAME_OVER
            return False
        if not chess_logic.is_valid_move(self.board, self.turn, move):
            self.message = MESSAGE_INVALID_MOVE
            self._log(f"{move} {utils.color_text('Invalid Move', '31')} attempted by {utils.color_name(self.turn)}")
            return False

        mover = self.turn
        played = chess_logic.make_move(self.board, move)
        self._log(f"{played.uci()} {utils.color_text('Valid Move', '32')} by {utils.color_name(mover)}")

        self.selected_square = None
        self.last_move = played
        self.turn = not mover
        self.status, self.game_over, result_message = self._evaluate_position()
        self.message = result_message
        self.history.push(self._snapshot())
        if result_message:
            self._log(result_message)

        self._maybe_schedule_ai()
        return True

    # --- history -------------------------------------------------------

    def undo(self) -> bool:
        if self._ai_pending:
            self.message = MESSAGE_AI_THINKING
            return False
        state = self.history.undo()
        if state is None:
            self.message = MESSAGE_NOTHING_TO_UNDO
            self._log(MESSAGE_NOTHING_TO_UNDO, ReportingLevel.VERBOSE)
            return False
        self._restore(state)
        self.message = MESSAGE_UNDONE
        self._log(f"{MESSAGE_UNDONE} {self.turn_text()}")
        return True

    def redo(self) -> bool:
        if self._ai_pending:
            self.message = MESSAGE_AI_THINKING
            return False
        state = self.history.redo()
        if state is None:
            self.message = MESSAGE_NOTHING_TO_REDO
            self._log(MESSAGE_NOTHING_TO_REDO, ReportingLevel.VERBOSE)
            return False
        self._restore(state)
        self.message = MESSAGE_REDONE
        self._log(f"{MESSAGE_REDONE} {self.turn_text()}")
        return True

    def _restore(self, state: GameState) -> None:
        self.board = state.board()
        self.turn = state.turn
        self.status = state.status
        self.game_over = state.game_over
        self.last_move = state.last_move
        self.selected_square = None

    # --- computer opponent ---------------------------------------------

    def attach_scheduler(self, scheduler: Optional[Scheduler]) -> None:
        self.scheduler = scheduler
        self._maybe_schedule_ai()

    def play_ai_move(self) -> Optional[Move]:
        """Let the engine move for the automated side. Returns the move played."""
        if not self.ai_to_move:
            return None
        move = self.engine.select_move(self.board, self.turn)
        if move is None:
            return None
        if not self.apply_move(move):
            return None
        return self.last_move

    def _maybe_schedule_ai(self) -> None:
        if self.scheduler is None or self._ai_pending or not self.ai_to_move:
            return
        self._ai_pending = True
        generation = self._generation
        self.scheduler(self.ai_delay_ms, lambda: self._run_scheduled_ai(generation))

    def _run_scheduled_ai(self, generation: int) -> None:
        # Callbacks left over from an earlier game are never cancelled, only ignored.
        if generation != self._generation:
            return
        self._ai_pending = False
        self.play_ai_move()

    # --- export --------------------------------------------------------

    def export_game(self) -> Dict[str, str]:
        initial = self.history.initial
        moves = self.history.moves()
        return {
            "export-time": time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(time.time())),
            "fen-init": chess_logic.export_board_fen(initial.board(), initial.turn),
            "fen-final": chess_logic.export_board_fen(self.board, self.turn),
            "san": chess_logic.export_move_history_san(initial.board(), initial.turn, moves),
            "uci": chess_logic.export_move_history_uci(moves),
        }

    # --- internals -----------------------------------------------------

    def _evaluate_position(self) -> Tuple[GameStatus, bool, str]:
        if self.board.find_king(self.turn) is None:
            return GameStatus.NONE, True, MESSAGE_KING_MISSING

        status = chess_logic.get_game_status(self.board, self.turn)
        if status is GameStatus.CHECKMATE:
            return status, True, f"CHECKMATE! {utils.color_name(not self.turn)} Wins!"
        if status is GameStatus.STALEMATE:
            return status, True, MESSAGE_STALEMATE
        if status is GameStatus.CHECK:
            return status, False, f"{utils.color_name(self.turn)} King is in CHECK!"
        return status, False, ""

    def _snapshot(self) -> GameState:
        return GameState.capture(self.board, self.turn, self.status, self.game_over, self.last_move)

    def _log(self, message: str, level: ReportingLevel = ReportingLevel.BASIC) -> None:
        if self.reporting_level < level:
            return
        if level >= ReportingLevel.VERBOSE:
            print(utils.debug_text(message))
        else:
            print(utils.info_text(message))
