#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Board module for Ataxx AI.

This module provides the game state representation and game mechanics used by
both the game orchestrator and the search engine.

The 7x7 playing area is stored in a flat numpy array of an 11x11 layout whose
outer two rows and columns are always BLOCKED. Looking at every square within
two columns and rows of a square never runs off the array, and the border
squares are rejected by the same rule that rejects blocked squares.
Square a1 is index 24, g7 is index 96 and row r, column c maps to
(r - '1' + 2) * 11 + (c - 'a' + 2).
"""
import logging
from contextlib import contextmanager
from typing import List, NamedTuple, Optional

import numpy as np

from app.ai.constants import (
    ADJACENT_OFFSETS, BLOCKED, BLUE, BOARD_SIZE, BOARD_TOTAL_CELLS, BORDER,
    CENTER, COLUMNS, EMPTY, EXTENDED_SIDE, EXTENDED_SIZE, JUMP_LIMIT,
    PLAYABLE_SQUARES, REACH_OFFSETS, RED, ROWS, PieceColor,
)
from app.ai.exceptions import EmptyHistoryError, IllegalBlockError, IllegalMoveError
from app.ai.move import Move, index, neighbor, parse_square

logger = logging.getLogger(__name__)

INITIAL_PIECES = (
    ('a', '7', RED),
    ('g', '1', RED),
    ('a', '1', BLUE),
    ('g', '7', BLUE),
)

_CELL_NAMES = {
    "empty": EMPTY,
    "red": RED,
    "blue": BLUE,
    "blocked": BLOCKED,
}

_SYMBOLS = {
    RED: 'r',
    BLUE: 'b',
    BLOCKED: 'X',
    EMPTY: '-',
}


class GroupStart(NamedTuple):
    """Marks the first undo entry of one move; keeps the jump count before it."""
    prior_jumps: int


class CellChange(NamedTuple):
    square: int
    prior_color: PieceColor


def _nop(board):
    pass


def to_color(cell):
    """Convert a cell value ("red", PieceColor.RED, 1, ...) to a PieceColor."""
    if isinstance(cell, PieceColor):
        return cell
    if isinstance(cell, str):
        try:
            return _CELL_NAMES[cell.lower()]
        except KeyError:
            raise ValueError(f"Unknown cell value: {cell!r}") from None
    if cell is None:
        return EMPTY
    return PieceColor(int(cell))


class Board:
    """An Ataxx board.

    Tracks piece placement, whose turn it is, piece counts, the number of
    consecutive jumps, the log of moves and an undo stack. Every grid write
    made by a move is recorded on the undo stack as a CellChange, grouped
    under the GroupStart pushed at the start of that move, so undo() can
    restore the position exactly.
    """

    SIDE = BOARD_SIZE
    EXTENDED_SIDE = EXTENDED_SIDE

    index = staticmethod(index)
    neighbor = staticmethod(neighbor)

    def __init__(self, notifier=None):
        """Create a board in the initial position.

        Args:
            notifier: Optional callable taking the board, invoked after every
                change of state (clear, move, pass, undo, block placement).
        """
        self._board = np.full(EXTENDED_SIZE, BLOCKED, dtype=np.int8)
        self._num_pieces = [0] * len(PieceColor)
        self._all_moves: List[Move] = []
        self._undo_stack = []
        self._notifier = notifier or _nop
        self.clear()

    @classmethod
    def from_rows(cls, rows, whose_move=RED, notifier=None):
        """Build a position from 7 rows of cells, row 7 first.

        Cells may be PieceColor values or the names "red", "blue", "empty"
        and "blocked". The result has no move history.
        """
        if len(rows) != BOARD_SIZE or any(len(row) != BOARD_SIZE for row in rows):
            raise ValueError(f"Board must be {BOARD_SIZE}x{BOARD_SIZE}")
        board = cls()
        board._board.fill(BLOCKED)
        for r, row in enumerate(reversed(rows)):
            for c, cell in enumerate(row):
                board._board[(r + BORDER) * EXTENDED_SIDE + c + BORDER] = to_color(cell)
        board._recount()
        border_cells = EXTENDED_SIZE - BOARD_TOTAL_CELLS
        board._total_open = BOARD_TOTAL_CELLS - (board._num_pieces[BLOCKED] - border_cells)
        board._whose_move = to_color(whose_move)
        if not board._whose_move.is_piece():
            raise ValueError(f"Side to move must be red or blue, not {whose_move!r}")
        board._notifier = notifier or _nop
        board._announce()
        return board

    def copy(self):
        """Return a board with my contents, turn, counters and move log, but
        with an empty undo stack and a notifier that does nothing."""
        board = Board.__new__(Board)
        board._board = self._board.copy()
        board._num_pieces = list(self._num_pieces)
        board._all_moves = list(self._all_moves)
        board._undo_stack = []
        board._notifier = _nop
        board._whose_move = self._whose_move
        board._num_moves = self._num_moves
        board._num_jumps = self._num_jumps
        board._total_open = self._total_open
        return board

    def clear(self):
        """Reset to the starting position, with no blocks and no history."""
        self._board.fill(BLOCKED)
        self._board[PLAYABLE_SQUARES] = EMPTY
        for col, row, color in INITIAL_PIECES:
            self._board[index(col, row)] = color
        self._recount()
        self._whose_move = RED
        self._total_open = BOARD_TOTAL_CELLS
        self._num_moves = 0
        self._num_jumps = 0
        self._all_moves = []
        self._undo_stack = []
        self._announce()

    def _recount(self):
        self._num_pieces = np.bincount(self._board, minlength=len(PieceColor)).tolist()

    # Accessors

    @property
    def whose_move(self) -> PieceColor:
        """The color of the player who moves next (arbitrary once the game is over)."""
        return self._whose_move

    @property
    def num_moves(self) -> int:
        """Moves and passes since the last clear."""
        return self._num_moves

    @property
    def num_jumps(self) -> int:
        """Jumps made since the last extend (or the start of the game)."""
        return self._num_jumps

    @property
    def total_open(self) -> int:
        """Number of playable squares that are not blocked."""
        return self._total_open

    @property
    def all_moves(self) -> List[Move]:
        return list(self._all_moves)

    @property
    def red_pieces(self) -> int:
        return self._num_pieces[RED]

    @property
    def blue_pieces(self) -> int:
        return self._num_pieces[BLUE]

    def num_pieces(self, color) -> int:
        return self._num_pieces[color]

    def get(self, col_or_sq, row=None) -> PieceColor:
        """Contents of square COL ROW, or of the square with linearized index
        COL_OR_SQ when ROW is omitted. Border squares are BLOCKED."""
        sq = col_or_sq if row is None else index(col_or_sq, row)
        return PieceColor(int(self._board[sq]))

    # Grid writes

    def _set(self, sq, color):
        """Set square SQ to COLOR, recording the old contents for undo."""
        self._undo_stack.append(CellChange(sq, PieceColor(int(self._board[sq]))))
        self._unrecorded_set(sq, color)

    def _unrecorded_set(self, sq, color):
        self._num_pieces[self._board[sq]] -= 1
        self._num_pieces[color] += 1
        self._board[sq] = color

    # Rules

    def legal_move(self, move) -> bool:
        """Return True iff MOVE (a Move, move text or None) is legal here."""
        if isinstance(move, str):
            move = Move.parse(move)
        if move is None:
            return False
        if move.is_pass:
            return not self.can_move(self._whose_move)
        # Moves constructed directly may have any shape.
        if Move.move(move.col0, move.row0, move.col1, move.row1) is None:
            return False
        return bool(self._board[move.from_index] == self._whose_move
                    and self._board[move.to_index] == EMPTY)

    def legal_move_text(self, col0, row0, col1, row1) -> bool:
        return self.legal_move(Move.move(col0, row0, col1, row1))

    def can_move(self, who) -> bool:
        """Return True iff WHO has a move, whether or not it is WHO's turn."""
        own = self.squares_of(who)
        if own.size == 0:
            return False
        return bool(np.any(self._board[own[:, None] + REACH_OFFSETS] == EMPTY))

    def squares_of(self, color) -> np.ndarray:
        """Indices of the squares holding COLOR, column a first, row 1 first."""
        return PLAYABLE_SQUARES[self._board[PLAYABLE_SQUARES] == color]

    def open_targets(self, sq) -> np.ndarray:
        """Indices of the EMPTY squares within two columns and rows of SQ,
        ordered by column offset, then row offset."""
        targets = sq + REACH_OFFSETS
        return targets[self._board[targets] == EMPTY]

    def make_move(self, move):
        """Make MOVE (a Move or its text form). Raises IllegalMoveError and
        leaves the board untouched if MOVE is not legal."""
        text = move
        if isinstance(move, str):
            move = Move.parse(move)
        if not self.legal_move(move):
            raise IllegalMoveError(f"Illegal move: {text}")

        self._all_moves.append(move)
        self._undo_stack.append(GroupStart(self._num_jumps))
        self._num_moves += 1

        if not move.is_pass:
            player = self._whose_move
            opponent = player.opposite()
            if move.is_jump:
                self._set(move.from_index, EMPTY)
                self._num_jumps += 1
            else:
                self._num_jumps = 0

            to = move.to_index
            self._set(to, player)
            around = to + ADJACENT_OFFSETS
            for sq in around[self._board[around] == opponent]:
                self._set(int(sq), player)

        self._whose_move = self._whose_move.opposite()
        self._announce()

    def undo(self):
        """Undo the last move or pass."""
        if not self._undo_stack:
            raise EmptyHistoryError("No move to undo")
        while True:
            entry = self._undo_stack.pop()
            if isinstance(entry, GroupStart):
                break
            self._unrecorded_set(entry.square, entry.prior_color)
        self._num_jumps = entry.prior_jumps
        self._all_moves.pop()
        self._whose_move = self._whose_move.opposite()
        self._num_moves -= 1
        self._announce()

    @contextmanager
    def applied(self, move):
        """Make MOVE for the duration of a with-block; it is undone on exit,
        however the block is left."""
        self.make_move(move)
        try:
            yield self
        finally:
            self.undo()

    def _block_squares(self, col, row):
        """The square COL ROW and its reflections across the middle row and
        column, without repeats."""
        dc = abs(ord(col) - ord('d'))
        dr = abs(ord(row) - ord('4'))
        return list(dict.fromkeys([
            CENTER + dc + dr * EXTENDED_SIDE,
            CENTER + dc - dr * EXTENDED_SIDE,
            CENTER - dc + dr * EXTENDED_SIDE,
            CENTER - dc - dr * EXTENDED_SIDE,
        ]))

    def legal_block(self, col, row=None) -> bool:
        """Return True iff a block may be placed at COL ROW (or at square
        text such as "c3" when ROW is omitted)."""
        if row is None:
            square = parse_square(col)
            if square is None:
                return False
            col, row = square
        if len(col) != 1 or len(row) != 1 or col not in COLUMNS or row not in ROWS:
            return False
        if self._num_moves > 0 or self.get(col, row) != EMPTY:
            return False
        return not any(self.get(sq).is_piece() for sq in self._block_squares(col, row))

    def set_block(self, col, row=None):
        """Block COL ROW and its reflections across the middle row and/or
        column. Only allowed before the first move and on an empty square."""
        if row is None:
            square = parse_square(col)
            if square is None:
                raise IllegalBlockError(f"Illegal block placement: {col}")
            col, row = square
        if not self.legal_block(col, row):
            raise IllegalBlockError(f"Illegal block placement: {col}{row}")
        for sq in self._block_squares(col, row):
            if self._board[sq] != BLOCKED:
                self._unrecorded_set(sq, BLOCKED)
                self._total_open -= 1
        logger.debug("Blocked %s%s, %d open squares left", col, row, self._total_open)
        self._announce()

    def get_winner(self) -> Optional[PieceColor]:
        """Return the winner, EMPTY for a draw, or None while the game is on."""
        red, blue = self.red_pieces, self.blue_pieces
        if red == 0:
            return BLUE
        if blue == 0:
            return RED
        if self._num_jumps >= JUMP_LIMIT or (not self.can_move(RED) and not self.can_move(BLUE)):
            if red > blue:
                return RED
            if blue > red:
                return BLUE
            return EMPTY
        return None

    # Notification

    def set_notifier(self, notify):
        """Set the callable invoked with this board after each change."""
        self._notifier = notify or _nop
        self._announce()

    def _announce(self):
        self._notifier(self)

    # Views

    def to_array(self) -> np.ndarray:
        """7x7 array of PieceColor values, row 7 first."""
        grid = self._board.reshape(EXTENDED_SIDE, EXTENDED_SIDE)
        return grid[BORDER:-BORDER, BORDER:-BORDER][::-1].copy()

    def to_rows(self) -> List[List[str]]:
        """7 rows of cell names ("red", "blue", "empty", "blocked"), row 7 first."""
        return [[str(PieceColor(int(cell))) for cell in row] for row in self.to_array()]

    def to_string(self, legend=False) -> str:
        lines = []
        for row in reversed(ROWS):
            line = row if legend else ""
            line += " " + "".join(" " + _SYMBOLS[self.get(col, row)] for col in COLUMNS)
            lines.append(line)
        if legend:
            lines.append("   " + " ".join(COLUMNS))
        return "\n".join(lines)

    def __str__(self):
        return self.to_string(False)

    def __repr__(self):
        return (f"Board(red={self.red_pieces}, blue={self.blue_pieces}, "
                f"to_move={self._whose_move}, moves={self._num_moves})")

    def __eq__(self, other):
        if not isinstance(other, Board):
            return NotImplemented
        return np.array_equal(self._board, other._board)

    def __hash__(self):
        return hash(self._board.tobytes())
