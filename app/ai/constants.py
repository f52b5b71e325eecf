# Ataxx Game Constants
from enum import IntEnum

import numpy as np

BOARD_SIZE = 7

# Depth of the blocked frame around the playing area
BORDER = 2
EXTENDED_SIDE = BOARD_SIZE + 2 * BORDER
EXTENDED_SIZE = EXTENDED_SIDE * EXTENDED_SIDE
BOARD_TOTAL_CELLS = BOARD_SIZE * BOARD_SIZE

COLUMNS = "abcdefg"
ROWS = "1234567"

# Consecutive jumps without an extend before the game ends
JUMP_LIMIT = 25

# Default agent parameters
DEFAULT_MINIMAX_DEPTH = 4

# Search score magnitudes
WINNING_VALUE = 1_000_000
INFINITY = float('inf')


class PieceColor(IntEnum):
    EMPTY = 0
    RED = 1
    BLUE = 2
    BLOCKED = 3

    def opposite(self):
        if self is PieceColor.RED:
            return PieceColor.BLUE
        if self is PieceColor.BLUE:
            return PieceColor.RED
        raise ValueError(f"{self.name} has no opposite")

    def is_piece(self):
        return self in (PieceColor.RED, PieceColor.BLUE)

    def __str__(self):
        return self.name.lower()


EMPTY = PieceColor.EMPTY
RED = PieceColor.RED
BLUE = PieceColor.BLUE
BLOCKED = PieceColor.BLOCKED

# Index of the center square d4
CENTER = (3 + BORDER) * EXTENDED_SIDE + (3 + BORDER)

# Playable squares, column by column (a1, a2, ..., a7, b1, ...)
PLAYABLE_SQUARES = np.array(
    [(r + BORDER) * EXTENDED_SIDE + (c + BORDER)
     for c in range(BOARD_SIZE) for r in range(BOARD_SIZE)],
    dtype=np.intp,
)

# Linear offsets for the 3x3 and 5x5 neighbourhoods, dc outer, dr inner
ADJACENT_OFFSETS = np.array(
    [dc + dr * EXTENDED_SIDE
     for dc in range(-1, 2) for dr in range(-1, 2) if dc or dr],
    dtype=np.intp,
)
REACH_OFFSETS = np.array(
    [dc + dr * EXTENDED_SIDE
     for dc in range(-2, 3) for dr in range(-2, 3) if dc or dr],
    dtype=np.intp,
)
