# backend/app/models/game.py
from pydantic import BaseModel, Field
from typing import List, Literal, Optional

Cell = Literal["red", "blue", "empty", "blocked"]
Player = Literal["red", "blue"]


class Position(BaseModel):
    board: List[List[Cell]] = Field(..., description="7 rows of 7 cells, row 7 first")
    current_player: Player


class BotMoveRequest(Position):
    depth: Optional[int] = Field(None, description="Search depth in plies")


class BotMoveResponse(BaseModel):
    move: str
    is_pass: bool
    execution_time: float
    current_player: Player


class ApplyMoveRequest(Position):
    move: str


class BoardState(BaseModel):
    board: List[List[Cell]]
    current_player: Player
    red_pieces: int
    blue_pieces: int
    winner: Optional[Literal["red", "blue", "draw"]] = None
