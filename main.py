# MAIN
import argparse
import sys
from typing import Dict, Optional

import chess

try:  # pragma: no cover - optional dependency for GUI mode
    from PySide6.QtWidgets import QApplication
except ImportError:  # pragma: no cover
    QApplication = None  # type: ignore[assignment]

from game import DEFAULT_AI_DELAY_MS, GameSession
from simple_engine import SimpleEngine
from utils import ReportingLevel, color_name, info_text

AI_COLOR_CHOICES: Dict[str, Optional[chess.Color]] = {
    "white": chess.WHITE,
    "black": chess.BLACK,
    "none": None,
}
DEFAULT_MAX_PLIES = 200


def parse_args(argv=None):
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "-fen", help="Set the initial board state to the given FEN string"
    )
    parser.add_argument("-dev", action="store_true", help="Enable debug mode")
    parser.add_argument(
        "--ai-color",
        choices=sorted(AI_COLOR_CHOICES),
        default="black",
        help="Side played by the computer ('none' for two human players)",
    )
    parser.add_argument(
        "--ai-delay",
        type=int,
        default=DEFAULT_AI_DELAY_MS,
        help="Milliseconds to wait before the computer replies",
    )
    parser.add_argument("--seed", type=int, help="Seed for the computer's random choices")
    parser.add_argument(
        "--self-play",
        action="store_true",
        help="Run headless computer-vs-computer play and exit instead of launching the GUI",
    )
    parser.add_argument(
        "--self-play-quiet",
        action="store_true",
        help="Reduce console logging while running headless self-play",
    )
    parser.add_argument(
        "--max-plies",
        type=int,
        default=DEFAULT_MAX_PLIES,
        help="Stop headless self-play after this many plies",
    )
    return parser.parse_args(argv)


def build_session(args, **kwargs) -> GameSession:
    if args.fen:
        return GameSession.from_fen(args.fen, **kwargs)
    return GameSession(**kwargs)


def run_headless_self_play(args) -> GameSession:
    quiet = bool(args.self_play_quiet)
    reporting_level = ReportingLevel.QUIET if quiet else ReportingLevel.BASIC
    seed = args.seed
    engines = {
        chess.WHITE: SimpleEngine(seed=seed),
        chess.BLACK: SimpleEngine(seed=None if seed is None else seed + 1),
    }
    session = build_session(args, ai_color=None, reporting_level=reporting_level)

    plies = 0
    while not session.game_over and plies < args.max_plies:
        engine = engines[session.turn]
        move = engine.select_move(session.board, session.turn)
        if move is None:
            break
        session.apply_move(move)
        plies += 1

    if not quiet:
        if session.game_over:
            print(info_text(f"Game Over: {session.message}"))
        else:
            print(info_text(f"Self-play stopped after {plies} plies, {color_name(session.turn)} to move"))
        print(info_text(f"UCI: {session.export_game()['uci']}"))
    return session


def main(argv=None):
    args = parse_args(argv)

    if args.self_play:
        run_headless_self_play(args)
        return

    if QApplication is None:
        raise ImportError("PySide6 is required for GUI mode; install PySide6 or use --self-play.")

    from gui import ChessGUI  # Local import to avoid PySide requirement for headless use

    reporting_level = ReportingLevel.VERBOSE if args.dev else ReportingLevel.BASIC
    app = QApplication(sys.argv)

    session = build_session(
        args,
        ai_color=AI_COLOR_CHOICES[args.ai_color],
        engine=SimpleEngine(seed=args.seed),
        ai_delay_ms=args.ai_delay,
        reporting_level=reporting_level,
    )
    gui = ChessGUI(session, dev=args.dev, reporting_level=reporting_level)
    gui.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
