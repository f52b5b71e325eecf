from app.ai.constants import BLUE, RED


def static_score(board, winning_value):
    """Return a heuristic value for BOARD from red's point of view.

    Decided positions score +winning_value (red wins), -winning_value (blue
    wins) or 0 (draw); otherwise the score is the piece difference.
    """
    winner = board.get_winner()
    if winner is not None:
        if winner == RED:
            return winning_value
        if winner == BLUE:
            return -winning_value
        return 0

    return board.red_pieces - board.blue_pieces
