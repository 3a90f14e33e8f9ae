from __future__ import annotations


class MazeEngineError(Exception):
    """Base class for recoverable engine errors."""


class InvalidActionError(MazeEngineError, ValueError):
    def __init__(self, value: object) -> None:
        super().__init__(
            f"unknown action {value!r}; expected one of "
            "'move_forward', 'turn_left', 'turn_right', 'stop'"
        )
        self.value = value


class AnimationInProgressError(MazeEngineError, RuntimeError):
    """Raised when committed state is requested while an action is animating."""


class DecisionParseError(MazeEngineError, ValueError):
    def __init__(self, message: str, raw: str = "") -> None:
        super().__init__(message)
        self.raw = raw
