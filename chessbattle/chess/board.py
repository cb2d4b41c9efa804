"""The Game board holds the configuration of pieces on the board.

Boards are values: every operation that changes the configuration returns a new Board, so a board handed to
the search tree (or kept for undo) can never be changed by a later move.
"""

from dataclasses import dataclass
from typing import Optional, Self

from chessbattle.chess.moves import Move
from chessbattle.chess.pieces import FEN_TO_PIECE, Piece
from chessbattle.chess.square import BOARD_DIMENSIONS, Square
from chessbattle.core.exceptions import (
    IllegalMoveError,
    InvalidFENError,
    InvalidMoveSourceError,
    OffBoardSquareError,
)
from chessbattle.core.shared_types import Color, PieceType

STARTING_POSITION_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"

Grid = tuple[tuple[Optional[Piece], ...], ...]


def empty_grid() -> Grid:
    return tuple((None,) * BOARD_DIMENSIONS[1] for _ in range(BOARD_DIMENSIONS[0]))


@dataclass(frozen=True)
class Board:
    grid: Grid

    @classmethod
    def empty(cls) -> Self:
        return cls(empty_grid())

    @classmethod
    def starting_position(cls) -> Self:
        """Standard setup: black on rows 0-1, white on rows 6-7, back rank R N B Q K B N R for both colors."""
        return cls.from_fen(STARTING_POSITION_FEN)

    @classmethod
    def from_fen(cls, fen_str: str) -> Self:
        """Construct a board using the piece placement part of a FEN string.

        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on the 8th rank (row 0), starting with rook on a8, knight on b8, etc.
        * pawns cover 7th rank entirely
        * ranks 6 through 3 have 8 consecutive empty squares
        * rank 2 are the white pawns (capital letters)
        * 1st rank (row 7) are the white pieces.
        """
        fen_by_rows = fen_str.split("/")
        if len(fen_by_rows) != BOARD_DIMENSIONS[0]:
            raise InvalidFENError(
                f"Expected {BOARD_DIMENSIONS[0]} ranks separated by '/', got {len(fen_by_rows)}: {fen_str!r}"
            )

        rows: list[tuple[Optional[Piece], ...]] = []
        for fen_one_row in fen_by_rows:
            row: list[Optional[Piece]] = []
            for character in fen_one_row:
                if character.isdigit():
                    # A number denotes the amount of empty squares after each other
                    row.extend([None] * int(character))
                elif character.lower() in FEN_TO_PIECE:
                    row.append(Piece.from_fen(character))
                else:
                    raise InvalidFENError(
                        f"Unknown piece character {character!r} in {fen_str!r}"
                    )
            if len(row) != BOARD_DIMENSIONS[1]:
                raise InvalidFENError(
                    f"Rank {fen_one_row!r} does not describe {BOARD_DIMENSIONS[1]} squares"
                )
            rows.append(tuple(row))
        return cls(tuple(rows))

    def to_fen(self) -> str:
        """Ranks are separated by slashes in FEN string."""
        return "/".join(self._row_to_fen(row) for row in self.grid)

    def _row_to_fen(self, row: tuple[Optional[Piece], ...]) -> str:
        """FEN string of a single rank"""
        fen_characters: list[str] = []
        empty_count = 0
        for piece in row:
            if piece is not None:
                if empty_count > 0:
                    fen_characters.append(str(empty_count))
                    empty_count = 0
                fen_characters.append(piece.to_fen())
            else:
                empty_count += 1

        # if the entire rank is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    def piece(self, square: Square) -> Optional[Piece]:
        """The piece on a square. None means the square is empty, or not on the board at all."""
        if not square.is_within_bounds():
            return None
        return self.grid[square.row][square.col]

    def squares(self) -> list[Square]:
        """All squares, row by row"""
        return [
            Square(row, col)
            for row in range(BOARD_DIMENSIONS[0])
            for col in range(BOARD_DIMENSIONS[1])
        ]

    def locate_color(self, color: Color) -> list[Square]:
        return [
            square
            for square in self.squares()
            if (piece := self.piece(square)) is not None and piece.color == color
        ]

    def find_king(self, color: Color) -> Optional[Square]:
        """Where the king stands. None on a board without one (not a legal game state, but must not crash)."""
        for row, rank in enumerate(self.grid):
            for col, piece in enumerate(rank):
                if piece is not None and piece.type == PieceType.KING and piece.color == color:
                    return Square(row, col)
        return None

    def place_piece(self, square: Square, piece: Optional[Piece]) -> Self:
        """A new board with the square's occupant replaced (None clears it)."""
        _assert_on_board(square)
        rows = [list(row) for row in self.grid]
        rows[square.row][square.col] = piece
        return type(self)(tuple(tuple(row) for row in rows))

    def remove_piece(self, square: Square) -> Self:
        return self.place_piece(square, None)

    def move_piece(self, from_square: Square, to_square: Square) -> tuple[Self, Move]:
        """
        Relocate the piece on from_square
        ---

        Returns the new board together with the record of the move. Whatever stood on to_square is captured.
        This board is left untouched.
        """
        _assert_on_board(from_square)
        _assert_on_board(to_square)
        piece_that_moved = self.piece(from_square)
        if piece_that_moved is None:
            raise InvalidMoveSourceError(
                f"No piece on {from_square.to_algebraic()} to move."
            )
        if from_square == to_square:
            raise IllegalMoveError(
                f"A piece cannot move onto its own square ({from_square.to_algebraic()})."
            )

        move = Move(
            from_square=from_square,
            to_square=to_square,
            piece=piece_that_moved,
            captured_piece=self.piece(to_square),
        )
        rows = [list(row) for row in self.grid]
        rows[from_square.row][from_square.col] = None
        rows[to_square.row][to_square.col] = piece_that_moved.moved()
        return type(self)(tuple(tuple(row) for row in rows)), move

    def count_material(self) -> dict[Color, int]:
        """Tally the points of material each player has on the board"""
        return {color: self._count_material_player(color) for color in Color}

    def _player_pieces(self, color: Color) -> list[Piece]:
        """find all pieces of a given color"""
        return [
            piece
            for row in self.grid
            for piece in row
            if piece is not None and piece.color == color
        ]

    def _count_material_player(self, color: Color) -> int:
        """Tally the points of material for a specific player"""
        return sum([piece.points for piece in self._player_pieces(color)])


def _assert_on_board(square: Square) -> None:
    if not square.is_within_bounds():
        raise OffBoardSquareError(
            f"Square (row={square.row}, col={square.col}) is not on the board."
        )
