"""Orchestration of communication from a presentation layer to the game logic (and the reverse direction)."""

import logging
import random
from pathlib import Path
from typing import Optional, Self
from uuid import UUID, uuid4

from chessbattle.api.models import (
    CreateGameRequest,
    DeleteGameRequest,
    GameResponse,
    GetGameRequest,
    LegalMovesRequest,
    LegalMovesResponse,
    MoveRequest,
    UndoRequest,
)
from chessbattle.chess.game import Game
from chessbattle.chess.square import Square
from chessbattle.core.config import Settings, load_settings
from chessbattle.core.exceptions import GameNotFoundError, GameStateError
from chessbattle.core.log import setup_logger
from chessbattle.core.shared_types import Color

logger = logging.getLogger(__name__)


class ChessService:
    """
    Orchestration of layers for games against the computer.

    Games only live in memory for as long as the service does.
    """

    def __init__(
        self, settings: Optional[Settings] = None, rng: Optional[random.Random] = None
    ) -> None:
        self.settings = settings if settings is not None else Settings()
        self.rng = rng
        self.games: dict[UUID, Game] = {}

    @classmethod
    def from_config(cls, path: Optional[str | Path] = None) -> Self:
        """Load the settings file (see core/config.py), configure logging and start a service with them."""
        settings = load_settings(path)
        setup_logger(settings.log_level)
        logger.info(
            "Difficulty tiers: %s (default %s)",
            ", ".join(difficulty.name for difficulty in settings.difficulties),
            settings.default_difficulty,
        )
        return cls(settings=settings)

    # -- Request handling logic ---
    def create_new_game(self, request: CreateGameRequest) -> GameResponse:
        """The human requested a new game. If the computer has the first move, it is played right away."""
        difficulty = self.settings.difficulty(request.difficulty)
        game = Game.new_game(
            human_color=request.human_color or self.settings.human_color,
            difficulty=difficulty,
            starting_fen=request.starting_fen,
        )
        game_id = uuid4()
        self.games[game_id] = game
        logger.info(
            "New game %s: human plays %s against %s", game_id, game.human_color, difficulty.name
        )

        self._let_computer_reply(game)
        return self._create_game_response(game_id, game)

    def get_game_state(self, request: GetGameRequest) -> GameResponse:
        game = self._fetch_game(request.game_id)
        return self._create_game_response(request.game_id, game)

    def legal_moves(self, request: LegalMovesRequest) -> LegalMovesResponse:
        """Squares the selected piece may move to."""
        game = self._fetch_game(request.game_id)
        destinations = game.legal_destinations(Square.from_algebraic(request.square))
        return LegalMovesResponse(
            game_id=request.game_id,
            square=request.square,
            legal_moves=[square.to_algebraic() for square in destinations],
        )

    def make_move(self, request: MoveRequest) -> GameResponse:
        """The human makes a move; unless that ended the game, the computer replies."""
        game = self._fetch_game(request.game_id)
        self._assert_your_turn(game)

        game.make_move(
            Square.from_algebraic(request.from_square),
            Square.from_algebraic(request.to_square),
        )
        self._let_computer_reply(game)
        return self._create_game_response(request.game_id, game)

    def undo(self, request: UndoRequest) -> GameResponse:
        """Take back the last move pair. If that leaves the computer to move (it opened the game), it moves again."""
        game = self._fetch_game(request.game_id)
        game.undo()
        self._let_computer_reply(game)
        return self._create_game_response(request.game_id, game)

    def delete_game(self, request: DeleteGameRequest) -> None:
        """Forget a game. Unknown ids are ignored."""
        self.games.pop(request.game_id, None)

    # -- Internal helpers --
    def _assert_your_turn(self, game: Game) -> None:
        """The human may only move the human's pieces."""
        if not game.is_over and game.color_to_move != game.human_color:
            raise GameStateError(
                f"It is not your turn. Waiting for {game.color_to_move} to make a move first."
            )

    def _let_computer_reply(self, game: Game) -> None:
        if game.is_computer_turn:
            game.play_computer_move(rng=self.rng)

    def _create_game_response(self, game_id: UUID, game: Game) -> GameResponse:
        """Convert info in GameModel to a GameResponse (for game with given ID.)"""
        model = game.to_model()
        winner = game.winner
        return GameResponse(
            game_id=game_id,
            board_fen=model.board_fen,
            color_to_move=Color(model.color_to_move),
            human_color=Color(model.human_color),
            status=model.status,
            difficulty=model.difficulty,
            move_history=model.moves_uci,
            captured=model.captured,
            winner=winner,
        )

    def _fetch_game(self, game_id: UUID) -> Game:
        """Attempt to find the game and raise error if it fails."""
        game = self.games.get(game_id)
        if game is None:
            raise GameNotFoundError(f"Game with {game_id=} not found.")
        return game
