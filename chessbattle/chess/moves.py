"""
Geometry/Base movement and capturing rules

Key idea: Use strategy pattern to define the pseudo-legal destination sets for each piece type.

Nothing in this module knows about check. Legality (not leaving your own king attacked) is filtered later in rules.py,
and the attack scan used for check detection mirrors these raw rules, looking outwards from the attacked square.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from chessbattle.chess.pieces import Piece
from chessbattle.chess.square import BOARD_DIMENSIONS, Square
from chessbattle.core.shared_types import Color, PieceType


class Board(Protocol):
    """Just the parts the movement strategies need"""

    def piece(self, square: Square) -> Optional[Piece]: ...


Vector = tuple[int, int]


@dataclass(frozen=True)
class Move:
    """Record of a move that has been made. Never edited once committed to the history."""

    from_square: Square
    to_square: Square
    piece: Piece
    captured_piece: Optional[Piece] = None

    @property
    def is_capture(self) -> bool:
        return self.captured_piece is not None

    def to_uci(self) -> str:
        """
        Universal Chess Interface notation: <from_square><to_square>

        ex. "e2e4": move the piece that was on e2 to e4
        """
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}"


# --- DIRECTIONS (d_row, d_col) ---
STRAIGHTS: list[Vector] = [(0, 1), (0, -1), (1, 0), (-1, 0)]
DIAGONALS: list[Vector] = [(1, 1), (1, -1), (-1, 1), (-1, -1)]
KNIGHT_DELTAS: list[Vector] = [
    (-2, -1),
    (-2, 1),
    (-1, -2),
    (-1, 2),
    (1, -2),
    (1, 2),
    (2, -1),
    (2, 1),
]
KING_DELTAS: list[Vector] = [
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, -1),
    (0, 1),
    (1, -1),
    (1, 0),
    (1, 1),
]


def pawn_direction(color: Color) -> int:
    """White moves UP the board (towards row 0), black moves DOWN"""
    return -1 if color == Color.WHITE else 1


def pawn_starting_row(color: Color) -> int:
    return BOARD_DIMENSIONS[0] - 2 if color == Color.WHITE else 1


# --- MOVEMENT RULES ---
def raycasting_move(square: Square, board: Board, directions: list[Vector]) -> list[Square]:
    """
    Raycasting algorithm
    -----

    ---
    The main trick we use to check the 'line of sight of a piece'.
    We define move directions and move along them until we hit another piece or
    the edge of the board.
    """
    moving_piece = board.piece(square)
    if moving_piece is None:
        return []

    destinations: list[Square] = []
    for d_row, d_col in directions:
        target_square = square
        while True:
            target_square = target_square.offset(d_row, d_col)
            if not target_square.is_within_bounds():
                break

            occupant = board.piece(target_square)
            if occupant is not None:
                # only need to add the first occupied square found if it is the opponent's: then it can be captured.
                if occupant.color != moving_piece.color:
                    destinations.append(target_square)
                break

            destinations.append(target_square)
    return destinations


def single_step_move(square: Square, board: Board, deltas: list[Vector]) -> list[Square]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that just can move a single step along a direction"""
    moving_piece = board.piece(square)
    if moving_piece is None:
        return []

    destinations: list[Square] = []
    for d_row, d_col in deltas:
        target_square = square.offset(d_row, d_col)
        if not target_square.is_within_bounds():
            continue

        occupant = board.piece(target_square)
        if occupant is None or occupant.color != moving_piece.color:
            destinations.append(target_square)

    return destinations


def candidate_pawn_moves(square: Square, board: Board) -> list[Square]:
    """
    A pawn:
    - moves by a single square forward, only onto an empty square.
    - It can move by two from its starting row, if both squares are empty
    - takes diagonally forward, only onto an opponent's piece

    NOTE: En passant and promotion are not part of the rules played here.
    """
    pawn = board.piece(square)
    if pawn is None:
        return []

    destinations: list[Square] = []
    direction = pawn_direction(pawn.color)

    one_step = square.offset(direction, 0)
    if one_step.is_within_bounds() and board.piece(one_step) is None:
        destinations.append(one_step)

        two_steps = square.offset(2 * direction, 0)
        if (
            square.row == pawn_starting_row(pawn.color)
            and two_steps.is_within_bounds()
            and board.piece(two_steps) is None
        ):
            destinations.append(two_steps)

    for d_col in (-1, 1):
        target_square = square.offset(direction, d_col)
        if not target_square.is_within_bounds():
            continue
        occupant = board.piece(target_square)
        if occupant is not None and occupant.color != pawn.color:
            destinations.append(target_square)
    return destinations


def candidate_knight_moves(square: Square, board: Board) -> list[Square]:
    """Knights always move such that |delta_row| + |delta_col| = 3"""
    return single_step_move(square, board, KNIGHT_DELTAS)


def candidate_bishop_moves(square: Square, board: Board) -> list[Square]:
    """Bishops move diagonally: |delta_row| = |delta_col|"""
    return raycasting_move(square, board, DIAGONALS)


def candidate_rook_moves(square: Square, board: Board) -> list[Square]:
    """Rooks move either horizontally or vertically"""
    return raycasting_move(square, board, STRAIGHTS)


def candidate_queen_moves(square: Square, board: Board) -> list[Square]:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    horizontal_and_vertical_moves = candidate_rook_moves(square, board)
    diagonal_moves = candidate_bishop_moves(square, board)
    return horizontal_and_vertical_moves + diagonal_moves


def candidate_king_moves(square: Square, board: Board) -> list[Square]:
    """
    The king can move by a single square at the time. (Castling is not played.)
    """
    return single_step_move(square, board, KING_DELTAS)


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Square, Board], list[Square]]
MOVEMENT_RULES: dict[PieceType, CandidateMovesFn] = {
    PieceType.PAWN: candidate_pawn_moves,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: candidate_king_moves,
}


def candidate_destinations(board: Board, square: Square) -> list[Square]:
    """
    Pseudo-legal destinations of whatever stands on the square (empty list for an empty square).

    Unfiltered: may leave the mover's own king under attack. This is the generator used by the attack scan.
    """
    piece = board.piece(square)
    if piece is None:
        return []
    movement_rule = MOVEMENT_RULES[piece.type]
    return movement_rule(square, board)


# --- ATTACK RULES ---
def raycasting_attack(
    square: Square,
    by_color: Color,
    by_piece_types: tuple[PieceType, ...],
    board: Board,
    directions: list[Vector],
) -> bool:
    """
    Raycasting algorithm for attacks
    ---

    Where `raycasting_move()` answers "what is the line-of-sight of the piece standing on the square?", this answers
    "is the square in the line-of-sight of a piece of `by_color` that slides along these directions?"

    Walk outwards from the square itself. The first occupied square on each ray decides: either it holds one of the
    sliders looked for, or it blocks everything behind it.
    """
    for d_row, d_col in directions:
        target_square = square
        while True:
            target_square = target_square.offset(d_row, d_col)
            if not target_square.is_within_bounds():
                break

            occupant = board.piece(target_square)
            if occupant is not None:
                if occupant.color == by_color and occupant.type in by_piece_types:
                    return True
                break
    return False


def single_step_attack(
    square: Square,
    by_color: Color,
    by_piece_type: PieceType,
    board: Board,
    deltas: list[Vector],
) -> bool:
    """Is there a piece of `by_color` and `by_piece_type` a single step away along one of the deltas?"""
    for d_row, d_col in deltas:
        target_square = square.offset(d_row, d_col)
        if not target_square.is_within_bounds():
            continue

        occupant = board.piece(target_square)
        if occupant is not None and occupant.color == by_color and occupant.type == by_piece_type:
            return True
    return False


def is_attacked_by_pawn(square: Square, by_color: Color, board: Board) -> bool:
    """
    Pawns take diagonally forward
    ----

    NOTE: Pawn moves are not symmetric. A white pawn (moving UP the board) that takes on the square stands one row
    DOWN from it, so the deltas point opposite to the pawn's direction.
    """
    behind = -pawn_direction(by_color)
    return single_step_attack(square, by_color, PieceType.PAWN, board, [(behind, -1), (behind, 1)])


def is_attacked_by_knight(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KNIGHT, board, KNIGHT_DELTAS)


def is_attacked_along_diagonals(square: Square, by_color: Color, board: Board) -> bool:
    """Bishops and the queen"""
    return raycasting_attack(
        square, by_color, (PieceType.BISHOP, PieceType.QUEEN), board, DIAGONALS
    )


def is_attacked_along_straights(square: Square, by_color: Color, board: Board) -> bool:
    """Rooks and the queen"""
    return raycasting_attack(
        square, by_color, (PieceType.ROOK, PieceType.QUEEN), board, STRAIGHTS
    )


def is_attacked_by_king(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KING, board, KING_DELTAS)


# --- STRATEGY PATTERN: ATTACKING RULES ---
IsAttackedFn = Callable[[Square, Color, Board], bool]
ATTACK_RULES: list[IsAttackedFn] = [
    is_attacked_by_pawn,
    is_attacked_by_knight,
    is_attacked_along_diagonals,
    is_attacked_along_straights,
    is_attacked_by_king,
]


def is_square_attacked(board: Board, square: Square, by_color: Color) -> bool:
    """
    Attack scan
    ---

    Could a piece of `by_color` take on the square under the pseudo-legal rules?
    For a square holding a piece of the other color (the king, when testing for check) this is the same answer as
    generating every destination of `by_color` and looking the square up, but it scans outwards from the square and
    stops at the first attacker found.
    """
    return any(is_attacked(square, by_color, board) for is_attacked in ATTACK_RULES)
