"""
The calls a presentation layer makes into the core.

Each takes a board value and returns a new value, nothing is kept between calls.
"""

import random
from typing import Optional

from chessbattle.chess.board import Board
from chessbattle.chess.moves import Move
from chessbattle.chess.rules import classify, legal_destinations
from chessbattle.chess.square import Square
from chessbattle.core.config import Difficulty
from chessbattle.core.shared_types import Color
from chessbattle.engine.search import select_move

__all__ = [
    "apply_move",
    "classify",
    "computer_move",
    "initial_board",
    "legal_destinations",
]


def initial_board() -> Board:
    return Board.starting_position()


def apply_move(board: Board, from_square: Square, to_square: Square) -> tuple[Board, Move]:
    """
    Raises InvalidMoveSourceError if from_square is empty, OffBoardSquareError if either square is off the board.
    `board` itself is never changed.
    """
    return board.move_piece(from_square, to_square)


def computer_move(
    board: Board,
    color: Color,
    difficulty: Difficulty,
    rng: Optional[random.Random] = None,
) -> Optional[Move]:
    """
    The move the computer picks for `color`, as a record (piece moved, piece captured) that is not applied yet:
    hand its squares to `apply_move` to play it.

    None only if `color` has no legal move, i.e. the game is already over.
    """
    choice = select_move(board, color, difficulty, rng=rng)
    if choice is None:
        return None
    _, move = board.move_piece(*choice)
    return move
