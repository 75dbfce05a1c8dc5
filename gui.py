# GUI
import json
import os
from typing import Callable, Dict, Optional

from PySide6.QtCore import Qt, QSize, QTimer
from PySide6.QtGui import QFont, QColor, QPalette
from PySide6.QtWidgets import (
    QApplication,
    QMainWindow,
    QWidget,
    QGridLayout,
    QPushButton,
    QLabel,
    QVBoxLayout,
    QMessageBox,
    QHBoxLayout,
)

import utils
from board import SQUARES, Square, square_name
from game import GameSession
from utils import ReportingLevel

GAMESTATES_FOLDER = "gamestates"


def center_on_screen(window):
    screen = QApplication.primaryScreen()
    if screen is None:
        return
    screen_geometry = screen.geometry()
    window_size = window.size()
    x = (screen_geometry.width() - window_size.width()) // 2 + screen_geometry.left()
    y = (screen_geometry.height() - window_size.height()) // 2 + screen_geometry.top()
    window.move(x, y)


class ChessGUI(QMainWindow):
    """Renders a :class:`GameSession` and forwards clicks to it."""

    def __init__(
        self,
        session: GameSession,
        dev=False,
        reporting_level: ReportingLevel = ReportingLevel.BASIC,
    ):
        super().__init__()
        self.session = session
        self.dev = dev
        self.reporting_level = reporting_level
        self.square_font = QFont("Segoe UI Symbol", 28)
        self.control_button_font = QFont("Segoe UI", 11)
        self.squares: Dict[Square, QPushButton] = {}
        self.control_buttons: Dict[str, QPushButton] = {}
        self._game_over_announced = False
        self.apply_theme()
        print(utils.info_text("Starting Game..."))

        if self.dev:
            print(utils.debug_text("Debug Mode ENABLED"))
            print(utils.debug_text(f"Reporting Level {self.reporting_level.name}"))
        self.init_ui()
        self.session.attach_scheduler(self.schedule)

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> None:
        def run():
            callback()
            self.update_board()

        QTimer.singleShot(delay_ms, run)

    def apply_theme(self):
        app = QApplication.instance()
        if app and app.style().objectName().lower() != "fusion":
            QApplication.setStyle("Fusion")

        palette = QPalette()
        palette.setColor(QPalette.Window, QColor("#1c1f24"))
        palette.setColor(QPalette.WindowText, QColor("#f5f7fb"))
        palette.setColor(QPalette.Base, QColor("#1c1f24"))
        palette.setColor(QPalette.Text, QColor("#f5f7fb"))
        palette.setColor(QPalette.Button, QColor("#2b3038"))
        palette.setColor(QPalette.ButtonText, QColor("#f5f7fb"))
        palette.setColor(QPalette.Highlight, QColor("#5865f2"))

        if app:
            app.setPalette(palette)

        self.setStyleSheet(
            """
            QMainWindow { background-color: #1c1f24; }
            QLabel#turnIndicator { font-size: 18px; font-weight: 600; }
            QLabel#infoIndicator { color: #b0b7c3; font-size: 12px; }
            QWidget#boardContainer {
                background-color: #171a1f;
                border-radius: 12px;
                padding: 6px;
            }
            QPushButton[panel="control"] {
                background-color: #2d333c;
                color: #f5f7fb;
                border: 1px solid #3a414d;
                border-radius: 8px;
                padding: 6px 10px;
            }
            """
        )

    def style_control_button(self, button):
        button.setProperty("panel", "control")
        button.setFont(self.control_button_font)
        button.setCursor(Qt.PointingHandCursor)
        button.setFocusPolicy(Qt.NoFocus)
        button.setMinimumWidth(72)
        button.style().unpolish(button)
        button.style().polish(button)

    def init_ui(self):
        self.setWindowTitle("Chess")
        self.setMinimumSize(450, 560)

        central_widget = QWidget(self)
        self.setCentralWidget(central_widget)
        main_layout = QVBoxLayout(central_widget)
        main_layout.setContentsMargins(8, 8, 8, 8)
        main_layout.setSpacing(6)

        self.turn_indicator = QLabel(self.session.turn_text())
        self.turn_indicator.setObjectName("turnIndicator")
        self.turn_indicator.setAlignment(Qt.AlignCenter)
        self.turn_indicator.setFont(QFont("Segoe UI Semibold", 20))
        main_layout.addWidget(self.turn_indicator)

        self.info_indicator = QLabel(self.session.message)
        self.info_indicator.setObjectName("infoIndicator")
        self.info_indicator.setAlignment(Qt.AlignCenter)
        self.info_indicator.setFont(QFont("Segoe UI", 11))
        main_layout.addWidget(self.info_indicator)

        board_widget = QWidget()
        board_widget.setObjectName("boardContainer")
        grid_layout = QGridLayout(board_widget)
        grid_layout.setContentsMargins(0, 0, 0, 0)
        grid_layout.setSpacing(0)
        main_layout.addWidget(board_widget)

        label_font = QFont("Segoe UI", 11)
        label_font.setBold(True)
        label_style = "color: #d5d9e3;"
        files = "abcdefgh"

        for i in range(8):
            file_label = QLabel(files[i])
            file_label.setAlignment(Qt.AlignCenter)
            file_label.setFont(label_font)
            file_label.setStyleSheet(label_style)
            grid_layout.addWidget(file_label, 8, i + 1)

            rank_label = QLabel(str(8 - i))
            rank_label.setAlignment(Qt.AlignCenter)
            rank_label.setFont(label_font)
            rank_label.setStyleSheet(label_style)
            grid_layout.addWidget(rank_label, i, 0)

        for row, col in SQUARES:
            button = QPushButton("")
            button.setFixedSize(QSize(48, 48))
            button.setFont(self.square_font)
            button.setCursor(Qt.PointingHandCursor)
            button.setFocusPolicy(Qt.NoFocus)
            button.clicked.connect(self.on_square_clicked)
            grid_layout.addWidget(button, row, col + 1)
            self.squares[(row, col)] = button

        button_layout = QHBoxLayout()
        button_layout.setSpacing(10)
        button_layout.setContentsMargins(0, 12, 0, 0)
        main_layout.addLayout(button_layout)

        for label, handler in (
            ("New Game", self.reset_game),
            ("Undo", self.undo_move),
            ("Redo", self.redo_move),
            ("Export", self.export_game),
        ):
            button = QPushButton(label)
            button.clicked.connect(handler)
            self.style_control_button(button)
            button_layout.addWidget(button)
            self.control_buttons[label] = button
        button_layout.addStretch(1)

        self.update_board()
        center_on_screen(self)

    def update_board(self):
        session = self.session
        highlighted = (
            set(session.legal_destinations(session.selected_square))
            if session.selected_square is not None
            else set()
        )
        last_moved = (
            {session.last_move.from_square, session.last_move.to_square}
            if session.last_move is not None
            else set()
        )

        for square, button in self.squares.items():
            piece = session.board.get(square)
            button.setText(utils.get_piece_unicode(piece) if piece else "")
            button.setStyleSheet(
                self.get_square_style(square, highlighted=highlighted, last_moved=last_moved)
            )

        self.turn_indicator.setText(session.turn_text())
        self.info_indicator.setText(session.message)

        if session.game_over and not self._game_over_announced:
            self._game_over_announced = True
            print(utils.info_text(f"Game Over: {session.message}"))
            QMessageBox.information(self, "Game Over", session.message)
        elif not session.game_over:
            self._game_over_announced = False

    def get_square_style(self, square, highlighted=(), last_moved=()):
        square_style = {
            "light_square": "#d2b48c",
            "dark_square": "#8e6336",
            "selected_color": "#4f6f52",
            "highlight_color": "#9fbf7a",
            "prev_moved_color": "#6b8f71",
            "attacked_color": "#d75d5d",
        }

        row, col = square
        is_light = (row + col) % 2 == 0
        square_color = (
            square_style["light_square"] if is_light else square_style["dark_square"]
        )
        piece = self.session.board.get(square)
        text_color = "#2b2626"
        if piece:
            text_color = "#f9f6f2" if piece.color else "#2b2626"

        if square == self.session.selected_square:
            square_color = square_style["selected_color"]
        elif square in highlighted:
            square_color = square_style["highlight_color"]
        elif (
            self.session.in_check
            and square == self.session.board.find_king(self.session.turn)
        ):
            square_color = square_style["attacked_color"]
        elif square in last_moved:
            square_color = square_style["prev_moved_color"]

        return (
            f"background-color: {square_color}; color: {text_color}; "
            f"border-radius: 10px; border: 1px solid rgba(0, 0, 0, 0.2);"
        )

    def on_square_clicked(self):
        clicked_button = self.sender()
        clicked_square = next(
            square
            for square, button in self.squares.items()
            if button == clicked_button
        )
        outcome = self.session.click(clicked_square)
        if self.dev and self.reporting_level >= ReportingLevel.VERBOSE:
            print(utils.debug_text(f"{square_name(clicked_square)} -> {outcome.value}"))
        self.update_board()

    def reset_game(self):
        print(utils.info_text("Resetting game..."))
        self.session.new_game()
        self._game_over_announced = False
        self.update_board()

    def undo_move(self):
        self.session.undo()
        self.update_board()

    def redo_move(self):
        self.session.redo()
        self.update_board()

    def export_game(self) -> Optional[str]:
        print(utils.info_text("---EXPORTING GAME---"))
        game_state = self.session.export_game()

        if not os.path.exists(GAMESTATES_FOLDER):
            os.makedirs(GAMESTATES_FOLDER)

        stamp = game_state["export-time"].replace(":", "-")
        filename = f"{GAMESTATES_FOLDER}/chess_game_{stamp}.json"
        with open(filename, "w") as outfile:
            outfile.write(json.dumps(game_state))

        print(utils.info_text(f"FEN: {game_state['fen-final']}"))
        print(utils.info_text(f"SAN: {game_state['san']}"))
        print(utils.info_text(f"UCI: {game_state['uci']}"))
        return filename
