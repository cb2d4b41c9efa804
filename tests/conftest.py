"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.

Boards are written as the piece placement part of a FEN string: first rank in the string is row 0 (rank 8, black's side).
"""

from typing import Callable, Literal

import pytest

from chessbattle.chess.board import Board
from chessbattle.chess.pieces import PIECE_TO_FEN
from chessbattle.core.config import Difficulty
from chessbattle.core.shared_types import Color, PieceType

STARTING_POSITION_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"
EMPTY_FEN = "/".join(["8"] * 8)

# black king h8 is attacked by the queen on g7, which is protected by the white king on f6
BLACK_CHECKMATED_FEN = "/".join(["7k", "6Q1", "5K2", "8", "8", "8", "8", "8"])
# mirror image: white king h1 mated by the queen on g2, protected by the black king on f3
WHITE_CHECKMATED_FEN = "/".join(["8", "8", "8", "8", "8", "5k2", "6q1", "7K"])
# black king a8 is not attacked, but every square around it is covered by the queen on c7
BLACK_STALEMATED_FEN = "/".join(["k7", "2Q5", "8", "8", "8", "8", "8", "7K"])

PieceColors = Literal[Color.WHITE, Color.BLACK]


@pytest.fixture
def starting_board() -> Board:
    return Board.starting_position()


@pytest.fixture
def kings_only_board() -> Board:
    """
    Create a board with only kings on their canonical starting squares.
    Because legality involves inferring if a king is under attack, most positions want both kings on the board.
    """
    return Board.from_fen("/".join(["4k3", "8", "8", "8", "8", "8", "8", "4K3"]))


@pytest.fixture
def board_with_single_piece() -> Callable[[PieceType, PieceColors, str], Board]:
    """Call the inner function that will be returned with the desired piece type, color, and square"""

    def _create_board(
        piece_type: PieceType,
        color: PieceColors,
        square_name: str = "d4",
    ) -> Board:
        if color == Color.WHITE:
            fen_char = PIECE_TO_FEN[piece_type].upper()
        else:
            fen_char = PIECE_TO_FEN[piece_type].lower()

        file_idx = ord(square_name[0]) - ord("a")
        row_idx = 8 - int(square_name[1])

        fen_rows = ["8"] * 8
        before = str(file_idx) if file_idx else ""
        after = str(7 - file_idx) if 7 - file_idx else ""
        fen_rows[row_idx] = f"{before}{fen_char}{after}"
        return Board.from_fen("/".join(fen_rows))

    return _create_board


@pytest.fixture
def no_randomness() -> Difficulty:
    """Shallow, fully deterministic computer opponent (keeps tests fast)"""
    return Difficulty(name="Test", search_depth=1, randomness=0.0)


@pytest.fixture
def black_checkmated_board() -> Board:
    return Board.from_fen(BLACK_CHECKMATED_FEN)


@pytest.fixture
def white_checkmated_board() -> Board:
    return Board.from_fen(WHITE_CHECKMATED_FEN)


@pytest.fixture
def black_stalemated_board() -> Board:
    return Board.from_fen(BLACK_STALEMATED_FEN)
