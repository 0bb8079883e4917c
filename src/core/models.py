"""
Boundary layer data model(s).

These objects can be used to communicate with the Service.
Hence, both the API layer (higher) and domain/db layers (lower) will use model(s) defined here to send to/receive from the Service
(Decouples the data model specific to the DB layer, API layer, or domain layer from the information needed to send across boundaries)
"""

from dataclasses import dataclass, field
from typing import Optional

# Type aliases to make GameModel easier to read
PieceColor = str
SANMove = str


@dataclass
class GameModel:
    """
    Transport-safe representation of a chess game used between API, Service, DB, and Game layers.

    NOTE: No board position in here. The SAN move history (replayed from the starting position) is the position.
    """

    tags: dict[str, str] = field(default_factory=dict)
    move_history: list[SANMove] = field(default_factory=list)
    current_player: PieceColor = "white"
    state: str = "ongoing"
    draw_offered_by: Optional[PieceColor] = None
    resigned_by: Optional[PieceColor] = None
