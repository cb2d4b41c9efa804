"""Requests and Response models"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from chessbattle.core.exceptions import InvalidRequestError
from chessbattle.core.shared_types import Color, GameStatus

PieceColor = str
PieceFEN = str
SquareName = str


def _is_algebraic_notation(value: str) -> bool:
    if len(value) != 2:
        return False

    file_character = value[0]
    rank_character = value[1]
    return file_character in "abcdefgh" and rank_character in "12345678"


def validate_square_name(value: str) -> str:
    if not _is_algebraic_notation(value):
        raise InvalidRequestError(
            f"Cannot interpret {value!r} as a valid square name."
        )
    return value


# --- REQUEST MODELS ---
class CreateGameRequest(BaseModel):
    human_color: Optional[Color] = None
    difficulty: Optional[str] = None
    starting_fen: Optional[str] = None

    @field_validator("starting_fen")
    @classmethod
    def validate_starting_fen(cls, value: Optional[str]) -> Optional[str]:
        """Only the piece placement part of a FEN string is used."""
        if value is None:
            return value

        ranks = value.strip().split("/")
        if len(ranks) != 8:
            raise InvalidRequestError(
                "FEN piece placement must contain 8 '/'-separated ranks."
            )
        return value.strip()


class GetGameRequest(BaseModel):
    game_id: UUID


class LegalMovesRequest(BaseModel):
    game_id: UUID
    square: SquareName

    @field_validator("square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        return validate_square_name(value)


class MoveRequest(BaseModel):
    game_id: UUID
    from_square: SquareName
    to_square: SquareName

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        return validate_square_name(value)


class UndoRequest(BaseModel):
    game_id: UUID


class DeleteGameRequest(BaseModel):
    game_id: UUID


# --- RESPONSE MODELS ---
class GameResponse(BaseModel):
    game_id: UUID
    board_fen: str
    color_to_move: Color
    human_color: Color
    status: GameStatus
    difficulty: str
    move_history: list[str]
    captured: dict[PieceColor, list[PieceFEN]]
    winner: Optional[Color] = None


class LegalMovesResponse(BaseModel):
    game_id: UUID
    square: SquareName
    legal_moves: list[SquareName]
