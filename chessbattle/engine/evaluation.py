"""
Static position evaluation
----

`evaluate(board, color)` scores a board from the point of view of `color`: higher is better for `color`.
It is called at every leaf of the search tree and keeps no memory between calls.

Components (all additive, in pawn units):

* material: piece points, positive for `color`'s pieces, negative for the opponent's
* centre control: +/- 0.3 for every piece standing on d4, e4, d5, e5
* doubled pawns: -0.2 for every extra pawn on a file, counted against whoever owns them
* check: -0.5 if `color` is in check, +0.5 if the opponent is
"""

from chessbattle.chess.board import Board
from chessbattle.chess.rules import is_in_check
from chessbattle.chess.square import BOARD_DIMENSIONS, Square
from chessbattle.core.shared_types import Color, PieceType

CENTER_SQUARES: tuple[Square, ...] = (
    Square(3, 3),
    Square(3, 4),
    Square(4, 3),
    Square(4, 4),
)
CENTER_CONTROL_BONUS = 0.3
DOUBLED_PAWN_PENALTY = 0.2
CHECK_BONUS = 0.5


def material_score(board: Board, color: Color) -> float:
    material = board.count_material()
    return material[color] - material[color.opponent]


def center_control_score(board: Board, color: Color) -> float:
    score = 0.0
    for square in CENTER_SQUARES:
        piece = board.piece(square)
        if piece is None:
            continue
        score += CENTER_CONTROL_BONUS if piece.color == color else -CENTER_CONTROL_BONUS
    return score


def doubled_pawn_penalty(board: Board, color: Color) -> float:
    """Penalty owed by `color` for its own doubled pawns (always >= 0)."""
    penalty = 0.0
    for col in range(BOARD_DIMENSIONS[1]):
        pawns_on_file = sum(
            1
            for row in range(BOARD_DIMENSIONS[0])
            if (piece := board.piece(Square(row, col))) is not None
            and piece.type == PieceType.PAWN
            and piece.color == color
        )
        if pawns_on_file > 1:
            penalty += DOUBLED_PAWN_PENALTY * (pawns_on_file - 1)
    return penalty


def pawn_structure_score(board: Board, color: Color) -> float:
    return doubled_pawn_penalty(board, color.opponent) - doubled_pawn_penalty(board, color)


def check_score(board: Board, color: Color) -> float:
    score = 0.0
    if is_in_check(board, color):
        score -= CHECK_BONUS
    if is_in_check(board, color.opponent):
        score += CHECK_BONUS
    return score


def evaluate(board: Board, color: Color) -> float:
    return (
        material_score(board, color)
        + center_control_score(board, color)
        + pawn_structure_score(board, color)
        + check_score(board, color)
    )
