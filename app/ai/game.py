#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Game orchestration for Ataxx.

A Game owns the canonical Board and a MinimaxAI. It accepts the textual
commands a front end sends:

    new            start over from the initial position
    block c3       block c3 and its reflections (before the first move only)
    a7-a6 / -      make a move / pass
    auto           let the engine play for the side to move
    undo           take back the last move
    dump           depict the board

Malformed text is rejected here, before it reaches the board.
"""
import logging
import re
from typing import NamedTuple, Optional

from app.ai.board import Board
from app.ai.constants import BLUE, EMPTY, RED
from app.ai.exceptions import IllegalMoveError, MalformedCommandError
from app.ai.minimax import MinimaxAI
from app.ai.move import MOVE_PATTERN, PASS_TEXT
from app.config import get_settings

logger = logging.getLogger(__name__)

_BLOCK_PATTERN = re.compile(r"block\s+([a-g][1-7])")
_SIMPLE_COMMANDS = ("new", "undo", "dump", "auto")


class Command(NamedTuple):
    kind: str
    arg: Optional[str] = None


def parse_command(text):
    """Split a command line into a Command, raising MalformedCommandError
    for anything that is not a recognized command."""
    if not isinstance(text, str):
        raise MalformedCommandError(f"Command must be text, not {type(text).__name__}")
    line = text.strip()
    if line in _SIMPLE_COMMANDS:
        return Command(line)
    match = _BLOCK_PATTERN.fullmatch(line)
    if match:
        return Command("block", match.group(1))
    if line == PASS_TEXT or MOVE_PATTERN.fullmatch(line):
        return Command("move", line)
    raise MalformedCommandError(f"Unknown command: {line!r}")


def winner_message(winner):
    if winner == RED:
        return "Red wins."
    if winner == BLUE:
        return "Blue wins."
    if winner == EMPTY:
        return "Draw."
    return None


class Game:
    """Drives one Board from textual commands."""

    def __init__(self, board=None, ai=None, notifier=None):
        self.board = board if board is not None else Board(notifier=notifier)
        self.ai = ai if ai is not None else MinimaxAI(get_settings().search_depth)

    def execute(self, text):
        """Run one command and return a short report of what happened."""
        command = parse_command(text)
        handler = getattr(self, f"_do_{command.kind}")
        report = handler(command.arg)
        logger.info("%s -> %s", text.strip(), report)
        return report

    def winner(self):
        return self.board.get_winner()

    def winner_message(self):
        return winner_message(self.board.get_winner())

    def _do_new(self, _):
        self.board.clear()
        return "New game."

    def _do_block(self, square):
        self.board.set_block(square)
        return f"Blocked {square}."

    def _do_undo(self, _):
        self.board.undo()
        return f"{self._name(self.board.whose_move)} to move."

    def _do_dump(self, _):
        return f"===\n{self.board}\n==="

    def _do_move(self, text):
        self._check_not_over()
        mover = self.board.whose_move
        self.board.make_move(text)
        return self._report(mover, self.board.all_moves[-1])

    def _do_auto(self, _):
        self._check_not_over()
        mover = self.board.whose_move
        move = self.ai.find_best_move(self.board, mover)
        self.board.make_move(move)
        return self._report(mover, move)

    def _check_not_over(self):
        if self.board.get_winner() is not None:
            raise IllegalMoveError("Game is over")

    def _report(self, mover, move):
        if move.is_pass:
            report = f"{self._name(mover)} passes."
        else:
            report = f"{self._name(mover)} moves {move}."
        result = self.winner_message()
        if result:
            report = f"{report} {result}"
        return report

    @staticmethod
    def _name(color):
        return str(color).capitalize()
