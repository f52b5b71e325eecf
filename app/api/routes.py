import logging
import time

from fastapi import APIRouter, HTTPException

from app.ai.board import Board
from app.ai.constants import BLUE, EMPTY, RED
from app.ai.minimax import MinimaxAI
from app.config import get_settings
from app.models.game import ApplyMoveRequest, BoardState, BotMoveRequest, BotMoveResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _load_board(position):
    try:
        return Board.from_rows(position.board, position.current_player)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _winner_name(winner):
    if winner == RED:
        return "red"
    if winner == BLUE:
        return "blue"
    if winner == EMPTY:
        return "draw"
    return None


def board_state(board):
    return BoardState(
        board=board.to_rows(),
        current_player=str(board.whose_move),
        red_pieces=board.red_pieces,
        blue_pieces=board.blue_pieces,
        winner=_winner_name(board.get_winner()),
    )


@router.post("/bot-move/", response_model=BotMoveResponse)
def get_bot_move(request: BotMoveRequest):
    settings = get_settings()
    depth = request.depth if request.depth is not None else settings.search_depth
    if not 1 <= depth <= settings.max_request_depth:
        raise HTTPException(status_code=400,
                            detail=f"depth must be between 1 and {settings.max_request_depth}")

    board = _load_board(request)
    if board.get_winner() is not None:
        raise HTTPException(status_code=400, detail="Game is over")

    start_time = time.time()
    move = MinimaxAI(depth).find_best_move(board, board.whose_move)
    execution_time = time.time() - start_time
    logger.info("bot-move for %s at depth %d: %s (%.3fs)",
                request.current_player, depth, move, execution_time)

    return BotMoveResponse(
        move=str(move),
        is_pass=move.is_pass,
        execution_time=execution_time,
        current_player=request.current_player,
    )


@router.post("/apply-move/", response_model=BoardState)
def apply_move(request: ApplyMoveRequest):
    board = _load_board(request)
    board.make_move(request.move)
    return board_state(board)
