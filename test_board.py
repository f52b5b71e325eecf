#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Tests for the Ataxx board: rules, counters, undo and blocks.
"""
import random

import pytest

from app.ai.board import Board
from app.ai.constants import (
    BLOCKED, BLUE, BOARD_TOTAL_CELLS, COLUMNS, EMPTY, EXTENDED_SIZE, JUMP_LIMIT,
    RED, ROWS,
)
from app.ai.exceptions import EmptyHistoryError, IllegalBlockError, IllegalMoveError
from app.ai.minimax import legal_moves
from app.ai.move import PASS, Move

SYMBOLS = {'r': 'red', 'b': 'blue', '-': 'empty', 'X': 'blocked'}

# Red at a1 is boxed in by blue; blue still has room to move.
RED_STUCK = (
    "-------",
    "-------",
    "-------",
    "-------",
    "bbb----",
    "bbb----",
    "rbb----",
)


def position(*lines, to_move=RED):
    """Build a board from 7 lines of r/b/-/X, row 7 first."""
    return Board.from_rows([[SYMBOLS[ch] for ch in line] for line in lines], to_move)


def snapshot(board):
    return (
        board.to_array().tobytes(),
        board.whose_move,
        tuple(board.num_pieces(color) for color in (EMPTY, RED, BLUE, BLOCKED)),
        board.num_moves,
        board.num_jumps,
        board.total_open,
        tuple(board.all_moves),
    )


def random_moves(board):
    moves = legal_moves(board)
    if not moves and board.legal_move(PASS):
        moves = [PASS]
    return moves


def play_shuttle_jumps(board, count):
    """Red shuttles a7<->a5 and blue g1<->g3 for COUNT moves (all jumps)."""
    red_cycle = ("a7-a5", "a5-a7")
    blue_cycle = ("g1-g3", "g3-g1")
    for i in range(count):
        cycle = red_cycle if i % 2 == 0 else blue_cycle
        board.make_move(cycle[(i // 2) % 2])


class TestInitialPosition:
    def test_pieces(self):
        board = Board()
        assert board.get('a', '7') == RED
        assert board.get('g', '1') == RED
        assert board.get('a', '1') == BLUE
        assert board.get('g', '7') == BLUE
        assert board.red_pieces == 2
        assert board.blue_pieces == 2
        assert board.num_pieces(EMPTY) == 45
        assert board.whose_move == RED
        assert board.total_open == BOARD_TOTAL_CELLS
        assert board.num_moves == 0
        assert board.num_jumps == 0
        assert board.all_moves == []
        assert board.get_winner() is None

    def test_counts_cover_backing_store(self):
        board = Board()
        assert board.num_pieces(BLOCKED) == EXTENDED_SIZE - BOARD_TOTAL_CELLS
        assert sum(board.num_pieces(c) for c in (EMPTY, RED, BLUE, BLOCKED)) == EXTENDED_SIZE

    def test_indexing(self):
        assert Board.index('a', '1') == 24
        assert Board.index('g', '7') == 96
        assert Board.neighbor(Board.index('d', '4'), 1, -1) == Board.index('e', '3')

    def test_border_is_blocked(self):
        board = Board()
        cols = [chr(ord('a') + c) for c in range(-2, 9)]
        rows = [chr(ord('1') + r) for r in range(-2, 9)]
        for col in cols:
            for row in rows:
                if col in COLUMNS and row in ROWS:
                    continue
                assert board.get(col, row) == BLOCKED

    def test_to_string(self):
        lines = Board().to_string(legend=True).split("\n")
        assert lines[0] == "7  r - - - - - b"
        assert lines[6] == "1  b - - - - - r"
        assert lines[7] == "   a b c d e f g"
        assert str(Board()).split("\n")[0] == "  r - - - - - b"


class TestMakeMove:
    def test_extend_from_start(self):
        board = Board()
        board.make_move("a7-a6")
        assert board.get('a', '6') == RED
        assert board.get('a', '7') == RED
        assert board.red_pieces == 3
        assert board.blue_pieces == 2
        assert board.whose_move == BLUE
        assert board.num_moves == 1
        assert board.num_jumps == 0
        assert board.all_moves == [Move.parse("a7-a6")]

    def test_jump_vacates_source(self):
        board = Board()
        board.make_move(Move.parse("a7-a5"))
        assert board.get('a', '7') == EMPTY
        assert board.get('a', '5') == RED
        assert board.red_pieces == 2
        assert board.num_jumps == 1

    def test_flips_adjacent_opponents(self):
        board = position(
            "-------",
            "-------",
            "-------",
            "--b----",
            "---b---",
            "-------",
            "r------",
        )
        board.make_move("a1-c2")
        assert board.get('c', '2') == RED
        assert board.get('d', '3') == RED
        assert board.get('c', '4') == BLUE
        assert board.get('a', '1') == EMPTY
        assert board.red_pieces == 2
        assert board.blue_pieces == 1

    def test_extend_resets_jump_count(self):
        board = Board()
        board.make_move("a7-a5")
        board.make_move("g7-g5")
        assert board.num_jumps == 2
        board.make_move("a5-a4")
        assert board.num_jumps == 0
        board.undo()
        assert board.num_jumps == 2

    @pytest.mark.parametrize("text", ["a7-a4", "a7-a7", "a1-a2", "a7-b8", "garbage", "", "-"])
    def test_illegal_move_leaves_board_untouched(self, text):
        board = Board()
        before = snapshot(board)
        with pytest.raises(IllegalMoveError):
            board.make_move(text)
        assert snapshot(board) == before

    def test_none_is_illegal(self):
        board = Board()
        assert not board.legal_move(None)
        with pytest.raises(IllegalMoveError):
            board.make_move(None)

    def test_move_onto_border_is_illegal(self):
        board = Board()
        move = Move.move('a', '7', chr(ord('a') - 1), '7')
        assert move is not None
        assert not board.legal_move(move)

    def test_notifier_called_on_every_change(self):
        calls = []
        board = Board(notifier=calls.append)
        assert len(calls) == 1
        board.make_move("a7-a6")
        board.undo()
        board.set_block("c3")
        board.clear()
        assert len(calls) == 5
        assert all(b is board for b in calls)

    def test_set_notifier_announces(self):
        calls = []
        board = Board()
        board.set_notifier(calls.append)
        assert calls == [board]


class TestPass:
    def test_pass_illegal_when_mover_can_move(self):
        board = Board()
        assert not board.legal_move(PASS)

    def test_pass_when_stuck(self):
        board = position(*RED_STUCK)
        assert not board.can_move(RED)
        assert board.can_move(BLUE)
        assert board.get_winner() is None
        assert board.legal_move(PASS)
        assert legal_moves(board) == []

        before = snapshot(board)
        grid = board.to_array().tobytes()
        board.make_move("-")
        assert board.whose_move == BLUE
        assert board.num_moves == 1
        assert board.to_array().tobytes() == grid
        board.undo()
        assert snapshot(board) == before


class TestUndo:
    def test_undo_without_moves(self):
        with pytest.raises(EmptyHistoryError):
            Board().undo()

    def test_undo_restores_flips(self):
        board = position(
            "-------",
            "-------",
            "-------",
            "--b----",
            "---b---",
            "-------",
            "r------",
        )
        before = snapshot(board)
        board.make_move("a1-c2")
        board.undo()
        assert snapshot(board) == before

    @pytest.mark.parametrize("seed", [1, 7, 42])
    def test_undo_is_inverse_along_random_games(self, seed):
        rng = random.Random(seed)
        board = Board()
        history = []
        for _ in range(40):
            if board.get_winner() is not None:
                break
            move = rng.choice(random_moves(board))
            before = snapshot(board)

            board.make_move(move)
            board.undo()
            assert snapshot(board) == before

            history.append(before)
            board.make_move(move)

        while history:
            board.undo()
            assert snapshot(board) == history.pop()

    def test_applied_undoes_on_error(self):
        board = Board()
        before = snapshot(board)
        with pytest.raises(RuntimeError):
            with board.applied("a7-a6"):
                assert board.red_pieces == 3
                raise RuntimeError("boom")
        assert snapshot(board) == before


class TestPieceCounts:
    @pytest.mark.parametrize("seed", [3, 11])
    def test_conservation(self, seed):
        rng = random.Random(seed)
        board = Board()
        for _ in range(40):
            if board.get_winner() is not None:
                break
            move = rng.choice(random_moves(board))
            mover = board.whose_move
            red, blue = board.red_pieces, board.blue_pieces
            flips = 0
            if not move.is_pass:
                flips = sum(
                    1 for dc in (-1, 0, 1) for dr in (-1, 0, 1)
                    if board.get(Board.neighbor(move.to_index, dc, dr)) == mover.opposite()
                )
            board.make_move(move)

            assert sum(board.num_pieces(c) for c in (EMPTY, RED, BLUE, BLOCKED)) == EXTENDED_SIZE
            gained = 0 if move.is_pass else flips + (1 if move.is_extend else 0)
            lost = 0 if move.is_pass else flips
            if mover == RED:
                assert board.red_pieces == red + gained
                assert board.blue_pieces == blue - lost
            else:
                assert board.blue_pieces == blue + gained
                assert board.red_pieces == red - lost


class TestLegality:
    def test_exhaustive_pairs(self):
        board = position(
            "r-----b",
            "-b-----",
            "--rX---",
            "---X---",
            "---Xr--",
            "-----b-",
            "b-----r",
        )
        squares = [(c, r) for c in COLUMNS for r in ROWS]
        expected_moves = set()
        for c0, r0 in squares:
            for c1, r1 in squares:
                move = Move.move(c0, r0, c1, r1)
                distance = max(abs(ord(c1) - ord(c0)), abs(ord(r1) - ord(r0)))
                expected = (1 <= distance <= 2
                            and board.get(c0, r0) == board.whose_move
                            and board.get(c1, r1) == EMPTY)
                assert board.legal_move(move) == expected, (c0, r0, c1, r1)
                if expected:
                    expected_moves.add(move)
        assert set(legal_moves(board)) == expected_moves

    @pytest.mark.parametrize("move", [
        Move('a', '7', 'd', '7'),
        Move('a', '7', 'a', '7'),
        Move('-', '7', 'a', '6'),
        Move('g', '1', 'z', '9'),
    ], ids=str)
    def test_directly_built_moves_need_a_legal_shape(self, move):
        board = Board()
        assert not move.is_pass
        assert not board.legal_move(move)
        with pytest.raises(IllegalMoveError):
            board.make_move(move)
        assert board == Board()
        assert board.num_moves == 0
        assert board.red_pieces == 2

    def test_can_move(self):
        board = Board()
        assert board.can_move(RED)
        assert board.can_move(BLUE)


class TestBlocks:
    def test_center_block_is_its_own_mirror(self):
        board = Board()
        board.set_block("d4")
        assert board.get('d', '4') == BLOCKED
        assert board.total_open == BOARD_TOTAL_CELLS - 1

    def test_block_mirrors_four_ways(self):
        board = Board()
        board.set_block('c', '3')
        for col, row in (('c', '3'), ('e', '3'), ('c', '5'), ('e', '5')):
            assert board.get(col, row) == BLOCKED
        assert board.total_open == BOARD_TOTAL_CELLS - 4
        assert board.num_pieces(EMPTY) == 45 - 4

    def test_block_on_middle_row_mirrors_two_ways(self):
        board = Board()
        board.set_block("c4")
        assert board.get('c', '4') == BLOCKED
        assert board.get('e', '4') == BLOCKED
        assert board.total_open == BOARD_TOTAL_CELLS - 2

    def test_block_after_move_fails(self):
        board = Board()
        board.make_move("a7-a6")
        assert not board.legal_block("c3")
        with pytest.raises(IllegalBlockError):
            board.set_block("c3")

    @pytest.mark.parametrize("square", ["a1", "g7", "z9", "c", ""])
    def test_block_on_bad_square_fails(self, square):
        board = Board()
        with pytest.raises(IllegalBlockError):
            board.set_block(square)
        assert board.total_open == BOARD_TOTAL_CELLS

    def test_block_on_blocked_square_fails(self):
        board = Board()
        board.set_block("b2")
        with pytest.raises(IllegalBlockError):
            board.set_block("f6")
        assert board.total_open == BOARD_TOTAL_CELLS - 4

    def test_clear_removes_blocks(self):
        board = Board()
        board.set_block("b2")
        board.clear()
        assert board == Board()
        assert board.total_open == BOARD_TOTAL_CELLS


class TestWinner:
    def test_no_blue_pieces(self):
        board = position(
            "r------",
            "-------",
            "-------",
            "-------",
            "-------",
            "-------",
            "------r",
        )
        assert board.get_winner() == RED

    def test_no_red_pieces(self):
        board = position(
            "b------",
            "-------",
            "-------",
            "-------",
            "-------",
            "-------",
            "-------",
        )
        assert board.get_winner() == BLUE

    def test_full_board_draw(self):
        board = position(
            "rrrrrrr",
            "rrrrrrr",
            "rrrrrrr",
            "rrrXbbb",
            "bbbbbbb",
            "bbbbbbb",
            "bbbbbbb",
        )
        assert board.red_pieces == board.blue_pieces == 24
        assert not board.can_move(RED) and not board.can_move(BLUE)
        assert board.get_winner() == EMPTY

    def test_full_board_majority(self):
        board = position(
            "rrrrrrr",
            "rrrrrrr",
            "rrrrrrr",
            "rrrrbbb",
            "bbbbbbb",
            "bbbbbbb",
            "bbbbbbb",
        )
        assert board.get_winner() == RED

    def test_jump_limit(self):
        board = position(
            "r--r---",
            "-------",
            "-------",
            "-------",
            "-------",
            "-------",
            "------b",
        )
        play_shuttle_jumps(board, JUMP_LIMIT - 1)
        assert board.num_jumps == JUMP_LIMIT - 1
        assert board.get_winner() is None
        last = board.all_moves[-1]
        assert last.is_jump

        board.make_move("a7-a5" if board.get('a', '7') == RED else "a5-a7")
        assert board.num_jumps == JUMP_LIMIT
        assert board.get_winner() == RED

        board.undo()
        assert board.get_winner() is None

    def test_jump_limit_with_equal_pieces_is_draw(self):
        board = position(
            "r------",
            "-------",
            "-------",
            "-------",
            "-------",
            "-------",
            "------b",
        )
        play_shuttle_jumps(board, JUMP_LIMIT)
        assert board.get_winner() == EMPTY


class TestEqualityAndCopy:
    def test_equality_ignores_turn_and_history(self):
        board = Board()
        board.make_move("a7-a6")
        same = Board.from_rows(board.to_rows(), RED)
        assert same == board
        assert hash(same) == hash(board)
        assert same.whose_move != board.whose_move

    def test_different_grids_differ(self):
        board = Board()
        other = Board()
        other.make_move("a7-a6")
        assert board != other

    def test_copy_is_independent(self):
        board = Board()
        board.make_move("a7-a6")
        copy = board.copy()
        assert copy == board
        assert copy.all_moves == board.all_moves
        assert copy.whose_move == board.whose_move

        copy.make_move("a1-a2")
        assert board.get('a', '2') == EMPTY
        copy.undo()
        with pytest.raises(EmptyHistoryError):
            copy.undo()
        assert board.num_moves == 1

    def test_from_rows_rejects_bad_shapes(self):
        with pytest.raises(ValueError):
            Board.from_rows([["empty"] * 7] * 6)
        with pytest.raises(ValueError):
            Board.from_rows([["empty"] * 7] * 7, "empty")
        with pytest.raises(ValueError):
            Board.from_rows([["green"] * 7] * 7)

    def test_from_rows_counts_blocks(self):
        board = position(
            "r-----b",
            "-------",
            "--X-X--",
            "-------",
            "--X-X--",
            "-------",
            "b-----r",
        )
        assert board.total_open == BOARD_TOTAL_CELLS - 4
        assert board.num_pieces(EMPTY) == 45 - 4
