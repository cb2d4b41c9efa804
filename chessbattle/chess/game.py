"""
The Game class is the entrypoint into the domain layer for the service layer.
It is responsible for orchestrating everything required to play a turn against the computer:
whose turn it is, the list of moves made so far, the status of the game and taking moves back.

The rules themselves live in rules.py; the computer's choice of move in engine/search.py.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Optional, Self

from chessbattle.chess.board import Board
from chessbattle.chess.moves import Move
from chessbattle.chess.pieces import Piece
from chessbattle.chess.rules import classify, legal_destinations
from chessbattle.chess.square import Square
from chessbattle.core.config import MEDIUM, Difficulty
from chessbattle.core.exceptions import (
    GameStateError,
    IllegalMoveError,
    InvalidMoveSourceError,
)
from chessbattle.core.models import GameModel
from chessbattle.core.shared_types import Color, GameStatus
from chessbattle.engine.search import StopFn, select_move

logger = logging.getLogger(__name__)

FINISHED = (GameStatus.CHECKMATE, GameStatus.STALEMATE)


@dataclass
class Game:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    board: Board
    color_to_move: Color
    human_color: Color
    difficulty: Difficulty
    moves: list[Move] = field(default_factory=list)
    history: list[Board] = field(default_factory=list)  # board before each move in `moves`
    status: GameStatus = GameStatus.PLAYING

    @classmethod
    def new_game(
        cls,
        human_color: Color = Color.WHITE,
        difficulty: Difficulty = MEDIUM,
        starting_fen: Optional[str] = None,
        color_to_move: Color = Color.WHITE,
    ) -> Self:
        """Start a game from the standard position (or the given FEN piece placement)."""
        board = Board.from_fen(starting_fen) if starting_fen else Board.starting_position()
        return cls(
            board=board,
            color_to_move=color_to_move,
            human_color=human_color,
            difficulty=difficulty,
            status=classify(board, color_to_move),
        )

    def to_model(self) -> GameModel:
        """Encode into a format the Service layer uses"""
        return GameModel(
            board_fen=self.board.to_fen(),
            color_to_move=self.color_to_move.value,
            human_color=self.human_color.value,
            moves_uci=[move.to_uci() for move in self.moves],
            status=self.status.value,
            difficulty=self.difficulty.name,
            captured={
                color.value: [piece.to_fen() for piece in pieces]
                for color, pieces in self.captured_pieces.items()
            },
        )

    @property
    def computer_color(self) -> Color:
        return self.human_color.opponent

    @property
    def is_over(self) -> bool:
        return self.status in FINISHED

    @property
    def is_computer_turn(self) -> bool:
        return not self.is_over and self.color_to_move == self.computer_color

    @property
    def winner(self) -> Optional[Color]:
        """
        Only checkmate has a winner.
        Given it is checkmate, the player who is to move just got mated and the opponent must be the winner
        """
        if self.status != GameStatus.CHECKMATE:
            return None
        return self.color_to_move.opponent

    @property
    def last_move(self) -> Optional[Move]:
        return self.moves[-1] if self.moves else None

    @property
    def captured_pieces(self) -> dict[Color, list[Piece]]:
        """Pieces taken off the board so far, grouped by the color of their owner."""
        captured: dict[Color, list[Piece]] = {color: [] for color in Color}
        for move in self.moves:
            if move.captured_piece is not None:
                captured[move.captured_piece.color].append(move.captured_piece)
        return captured

    def legal_destinations(self, square: Square) -> list[Square]:
        """
        Where the piece on the square may go.
        ----

        Used to highlight the squares for the user. Empty if the game is over, or if the square does not hold a piece of the side to move.
        """
        piece = self.board.piece(square)
        if self.is_over or piece is None or piece.color != self.color_to_move:
            return []
        return legal_destinations(self.board, square)

    def make_move(self, from_square: Square, to_square: Square) -> Move:
        """
        Attempt to make a move for the side to move
        -----

        1. make sure the game is (still) in progress and there is a piece of the side to move
        2. check the move is legal
        3. update the board, the move list, the turn and the status
        """
        self._assert_in_progress()

        piece = self.board.piece(from_square)
        if piece is None:
            raise InvalidMoveSourceError(
                f"No piece on {from_square.to_algebraic()} to move."
            )
        if piece.color != self.color_to_move:
            raise GameStateError(
                f"It is not {piece.color}'s turn. Waiting for {self.color_to_move} to make a move first."
            )
        if to_square not in legal_destinations(self.board, from_square):
            raise IllegalMoveError(
                f"Move not allowed: {from_square.to_algebraic()}{to_square.to_algebraic()}"
            )

        return self._commit(from_square, to_square)

    def play_computer_move(
        self, rng: Optional[random.Random] = None, should_stop: Optional[StopFn] = None
    ) -> Optional[Move]:
        """Let the computer pick and play its move. None if it has no move (the game is over then)."""
        self._assert_in_progress()
        if self.color_to_move != self.computer_color:
            raise GameStateError(
                f"It is not the computer's turn. Waiting for {self.color_to_move} to make a move first."
            )

        choice = select_move(
            self.board, self.color_to_move, self.difficulty, rng=rng, should_stop=should_stop
        )
        if choice is None:
            return None
        return self._commit(*choice)

    def undo(self) -> list[Move]:
        """
        Take moves back until it is the human's turn again.
        ----

        If the human is to move, the computer has replied already: take back both moves.
        Otherwise, take back the single last move. Returns the moves taken back (most recent first).
        """
        if not self.history:
            raise GameStateError("Nothing to undo: no moves have been made yet.")

        plies = 2 if self.color_to_move == self.human_color else 1
        plies = min(plies, len(self.history))

        self.board = self.history[-plies]
        del self.history[-plies:]
        taken_back = self.moves[-plies:][::-1]
        del self.moves[-plies:]
        if plies % 2 == 1:
            self.color_to_move = self.color_to_move.opponent
        self._change_status(classify(self.board, self.color_to_move))

        logger.info("Took back %s", ", ".join(move.to_uci() for move in taken_back))
        return taken_back

    # -- PRIVATE HELPERS ---
    def _assert_in_progress(self) -> None:
        if self.is_over:
            raise GameStateError(f"Game is over. status: {self.status}")

    def _commit(self, from_square: Square, to_square: Square) -> Move:
        """Apply an already validated move and update the rest of the game state."""
        new_board, move = self.board.move_piece(from_square, to_square)
        self.history.append(self.board)
        self.board = new_board
        self.moves.append(move)
        logger.info("%s plays %s", self.color_to_move, move.to_uci())

        self.color_to_move = self.color_to_move.opponent
        self._change_status(classify(self.board, self.color_to_move))
        return move

    def _change_status(self, new_status: GameStatus) -> None:
        if new_status != self.status:
            logger.info("Game status: %s -> %s", self.status, new_status)
        self.status = new_status
