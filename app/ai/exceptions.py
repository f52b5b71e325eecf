"""Errors raised by the Ataxx board, engine and command layer."""


class GameException(Exception):
    """A caller asked for something the rules do not allow.

    The game state is left unchanged when one of these is raised.
    """


class IllegalMoveError(GameException):
    pass


class IllegalBlockError(GameException):
    pass


class EmptyHistoryError(GameException):
    pass


class MalformedCommandError(GameException):
    pass


class SearchError(RuntimeError):
    """The engine was asked to search a position it cannot search."""
