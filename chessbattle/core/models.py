"""
Boundary layer data model(s).

These objects can be used to communicate with the Service.
Hence, both the API layer (higher) and the domain layer (lower) use the model defined here to send to/receive from the Service
(Decouples the data model specific to the API layer or domain layer from the information needed to send across boundaries)
"""

from dataclasses import dataclass

# Type aliases to make GameModel easier to read
PieceColor = str
PieceFEN = str


@dataclass
class GameModel:
    """Transport-safe representation of a game against the computer."""

    board_fen: str
    color_to_move: PieceColor
    human_color: PieceColor
    moves_uci: list[str]
    status: str
    difficulty: str
    captured: dict[PieceColor, list[PieceFEN]]
