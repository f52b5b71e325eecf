#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Move representation for Ataxx.

A move is either a pass or a pair of squares (source, destination) that are
one square apart ("extend", the source keeps its piece) or two squares apart
("jump", the source is vacated). Moves are interned, so equal coordinates
always give the same object.

Text form is "<col0><row0>-<col1><row1>" (e.g. "a7-a6"); a pass is "-".
"""
import re
from dataclasses import dataclass
from functools import lru_cache

from app.ai.constants import BORDER, COLUMNS, EXTENDED_SIDE, ROWS

PASS_TEXT = "-"

MOVE_PATTERN = re.compile(r"([a-g])([1-7])-([a-g])([1-7])")
_SQUARE_PATTERN = re.compile(r"([a-g])([1-7])")


def index(col, row):
    """Return the linearized index of square COL ROW.

    Columns 'a' - 2 .. 'g' + 2 and rows '1' - 2 .. '7' + 2 are accepted; the
    ones outside a..g / 1..7 are border squares.
    """
    return (ord(row) - ord('1') + BORDER) * EXTENDED_SIDE + (ord(col) - ord('a') + BORDER)


def neighbor(sq, dc, dr):
    """Return the index of the square DC columns and DR rows away from SQ."""
    return sq + dc + dr * EXTENDED_SIDE


def col_of(sq):
    return chr(sq % EXTENDED_SIDE - BORDER + ord('a'))


def row_of(sq):
    return chr(sq // EXTENDED_SIDE - BORDER + ord('1'))


def in_range(col, row):
    """True iff COL ROW lies on the padded board (playing area plus border)."""
    return (-BORDER <= ord(col) - ord('a') < len(COLUMNS) + BORDER
            and -BORDER <= ord(row) - ord('1') < len(ROWS) + BORDER)


def parse_square(text):
    """Return (col, row) for a square name like "c3", or None."""
    if not isinstance(text, str):
        return None
    match = _SQUARE_PATTERN.fullmatch(text)
    if match is None:
        return None
    return match.group(1), match.group(2)


@dataclass(frozen=True)
class Move:
    col0: str
    row0: str
    col1: str
    row1: str

    @property
    def is_pass(self):
        return all(part == PASS_TEXT for part in (self.col0, self.row0, self.col1, self.row1))

    @property
    def dcol(self):
        return ord(self.col1) - ord(self.col0)

    @property
    def drow(self):
        return ord(self.row1) - ord(self.row0)

    @property
    def is_extend(self):
        return not self.is_pass and max(abs(self.dcol), abs(self.drow)) == 1

    @property
    def is_jump(self):
        return not self.is_pass and max(abs(self.dcol), abs(self.drow)) == 2

    @property
    def from_index(self):
        return index(self.col0, self.row0)

    @property
    def to_index(self):
        return index(self.col1, self.row1)

    def __str__(self):
        if self.is_pass:
            return PASS_TEXT
        return f"{self.col0}{self.row0}-{self.col1}{self.row1}"

    def __repr__(self):
        return f"Move({str(self)!r})"

    @staticmethod
    def move(col0, row0, col1, row1):
        """Return the move COL0 ROW0 - COL1 ROW1, or None if that pair of
        squares is not an extend or a jump."""
        return _make(col0, row0, col1, row1)

    @staticmethod
    def from_indices(sq0, sq1):
        """Return the move between the squares with linearized indices SQ0
        and SQ1, or None."""
        return _from_indices(int(sq0), int(sq1))

    @staticmethod
    def parse(text):
        """Return the move denoted by TEXT, or None if TEXT is malformed."""
        if not isinstance(text, str):
            return None
        text = text.strip()
        if text == PASS_TEXT:
            return PASS
        match = MOVE_PATTERN.fullmatch(text)
        if match is None:
            return None
        return _make(*match.groups())


@lru_cache(maxsize=None)
def _make(col0, row0, col1, row1):
    if not (isinstance(col0, str) and isinstance(row0, str)
            and isinstance(col1, str) and isinstance(row1, str)):
        return None
    if not all(len(ch) == 1 for ch in (col0, row0, col1, row1)):
        return None
    if not (in_range(col0, row0) and in_range(col1, row1)):
        return None
    distance = max(abs(ord(col1) - ord(col0)), abs(ord(row1) - ord(row0)))
    if distance not in (1, 2):
        return None
    return Move(col0, row0, col1, row1)


@lru_cache(maxsize=None)
def _from_indices(sq0, sq1):
    return _make(col_of(sq0), row_of(sq0), col_of(sq1), row_of(sq1))


PASS = Move(PASS_TEXT, PASS_TEXT, PASS_TEXT, PASS_TEXT)
Move.PASS = PASS
