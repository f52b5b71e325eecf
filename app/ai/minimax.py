#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Alpha-Beta Minimax search for Ataxx.

Scores are always from red's point of view: red maximizes (sense 1) and blue
minimizes (sense -1). The search works on a private copy of the board and
walks the tree by making a move, recursing and undoing the move again.
"""
import logging
import time

from app.ai.constants import DEFAULT_MINIMAX_DEPTH, INFINITY, RED, WINNING_VALUE
from app.ai.exceptions import SearchError
from app.ai.heuristics import static_score
from app.ai.move import PASS, Move

logger = logging.getLogger(__name__)


def legal_moves(board):
    """All legal non-pass moves for the side to move on BOARD.

    Sources are visited column by column (a1, a2, ..., g7) and, for each
    source, destinations by column offset then row offset, both in -2..2.
    A destination qualifies when it is EMPTY, which together with the source
    holding the mover's color is exactly Board.legal_move.
    """
    moves = []
    for src in board.squares_of(board.whose_move):
        for dst in board.open_targets(src):
            moves.append(Move.from_indices(src, dst))
    return moves


class MinimaxAI:
    """Depth-limited minimax player with alpha-beta pruning.

    Keeps no state between searches apart from the move found by the most
    recent call to find_best_move.
    """

    def __init__(self, max_depth=DEFAULT_MINIMAX_DEPTH):
        """
        Args:
            max_depth: Search depth in plies (at least 1)
        """
        if max_depth < 1:
            raise ValueError(f"Search depth must be at least 1, got {max_depth}")
        self.max_depth = max_depth
        self.last_found_move = None
        self.nodes = 0

    def find_best_move(self, board, color):
        """Return the move COLOR should play on BOARD.

        Returns the pass move without searching when COLOR cannot move.
        BOARD itself is never modified.
        """
        if not board.can_move(color):
            self.last_found_move = PASS
            return PASS
        if color != board.whose_move:
            raise SearchError(f"It is not {color}'s turn to move")
        if board.get_winner() is not None:
            raise SearchError("The game is already over")

        work = board.copy()
        sense = 1 if color == RED else -1
        self.last_found_move = None
        self.nodes = 0

        start_time = time.time()
        score = self.minimax(work, self.max_depth, True, sense, -INFINITY, INFINITY)
        elapsed = time.time() - start_time

        if self.last_found_move is None:
            raise SearchError("Search found no move for a side that can move")
        logger.debug("%s plays %s: depth=%d score=%s nodes=%d time=%.3fs",
                     color, self.last_found_move, self.max_depth, score, self.nodes, elapsed)
        return self.last_found_move

    def get_move(self, board):
        """Best move for whichever side is to move on BOARD."""
        return self.find_best_move(board, board.whose_move)

    def minimax(self, board, depth, save_move, sense, alpha, beta):
        """Search BOARD DEPTH plies deep and return its value.

        The value is maximal (or above BETA) when SENSE is 1 and minimal (or
        below ALPHA) when SENSE is -1. When SAVE_MOVE is set the move that
        achieves it is stored in last_found_move. At depth 0, or when the game
        is over on BOARD, returns the static score and stores nothing.
        """
        self.nodes += 1
        # A win scores WINNING_VALUE + depth, so wins reached sooner
        # (more depth left) score higher.
        if depth == 0 or board.get_winner() is not None:
            return static_score(board, WINNING_VALUE + depth)

        # A side with no move must pass.
        moves = legal_moves(board) or [PASS]

        best_move = None
        best_so_far = -INFINITY if sense == 1 else INFINITY
        for move in moves:
            with board.applied(move):
                response = self.minimax(board, depth - 1, False, -sense, alpha, beta)

            if sense == 1:
                if response > best_so_far:
                    best_so_far = response
                    best_move = move
                    alpha = max(alpha, best_so_far)
            elif response < best_so_far:
                best_so_far = response
                best_move = move
                beta = min(beta, best_so_far)

            if alpha >= beta:
                break  # Cutoff

        if save_move:
            self.last_found_move = best_move
        return best_so_far
