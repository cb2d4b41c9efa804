"""
Legal moves and the state of the game
----

Two generators live side by side:

* `candidate_destinations` (moves.py): raw movement rules. The attack scan (`is_square_attacked`) applies the same
  rules in reverse, so check detection never consults the legality filter.
* `legal_destinations` (here): the raw rules minus every move that leaves your own king attacked.

Check detection only ever uses the raw movement rules, the legality filter depends on check detection. Keeping
them apart is what stops the two from calling each other forever.
"""

from chessbattle.chess.board import Board
from chessbattle.chess.moves import candidate_destinations, is_square_attacked
from chessbattle.chess.square import Square
from chessbattle.core.shared_types import Color, GameStatus

MoveSquares = tuple[Square, Square]


# --- CHECK DETECTION ---
def is_in_check(board: Board, color: Color) -> bool:
    """
    Is the king of `color` among the squares the opponent's pieces can reach?

    A board without that king is reported as not in check.
    """
    king_square = board.find_king(color)
    if king_square is None:
        return False
    return is_square_attacked(board, king_square, color.opponent)


# --- LEGAL MOVES ---
def _is_putting_yourself_in_check(board: Board, from_square: Square, to_square: Square) -> bool:
    """Return True if the move leaves your own king attacked

    plan:
    1. make the candidate move (on a new board, the original is never touched)
    2. determine if your king is in check on the new board
    """
    player_color = board.piece(from_square).color  # type: ignore[union-attr]
    board_after_move, _ = board.move_piece(from_square, to_square)
    return is_in_check(board_after_move, player_color)


def legal_destinations(board: Board, from_square: Square) -> list[Square]:
    """
    Squares the piece on from_square may legally move to
    ----

    1. generate candidate destinations, using the basic movement rules for the piece
    2. remove the ones that would put (or leave) you in check

    An empty square has no destinations.
    """
    if board.piece(from_square) is None:
        return []
    return [
        to_square
        for to_square in candidate_destinations(board, from_square)
        if not _is_putting_yourself_in_check(board, from_square, to_square)
    ]


def legal_moves(board: Board, color: Color) -> list[MoveSquares]:
    """All legal (from, to) pairs for the player with the 'color' pieces, row by row across the board."""
    return [
        (from_square, to_square)
        for from_square in board.locate_color(color)
        for to_square in legal_destinations(board, from_square)
    ]


def has_legal_move(board: Board, color: Color) -> bool:
    return any(legal_destinations(board, square) for square in board.locate_color(color))


# --- CHECKS FOR ENDING THE GAME ---
def is_checkmate(board: Board, color: Color) -> bool:
    return is_in_check(board, color) and not has_legal_move(board, color)


def is_stalemate(board: Board, color: Color) -> bool:
    return not is_in_check(board, color) and not has_legal_move(board, color)


def classify(board: Board, color_to_move: Color) -> GameStatus:
    """
    Status of the game with `color_to_move` to play.

    NOTE: checkmate implies check, so the order of these tests matters.
    """
    in_check = is_in_check(board, color_to_move)
    can_move = has_legal_move(board, color_to_move)
    if in_check and not can_move:
        return GameStatus.CHECKMATE
    if not can_move:
        return GameStatus.STALEMATE
    if in_check:
        return GameStatus.CHECK
    return GameStatus.PLAYING
