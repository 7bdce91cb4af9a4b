"""Exception hierarchy for the scoring model and its services."""

from __future__ import annotations


class PubRankerError(Exception):
    """Base class for every error raised by the PubRanker core."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(PubRankerError, ValueError):
    """Raised when an input value is rejected at the model boundary."""

    status_code = 422

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid value for '{field}': {reason}")


class ScoreOutOfRangeError(ValidationError):
    """Raised when points fall outside ``[0, round.max_points]``."""

    def __init__(self, points: int, max_points: int) -> None:
        self.points = points
        self.max_points = max_points
        super().__init__("points", f"{points} is outside the allowed range 0-{max_points}")


class NotFoundError(PubRankerError, LookupError):
    """Raised when a quiz, team or round id is unknown."""

    status_code = 404

    def __init__(self, entity_type: str, entity_id: str | None = None) -> None:
        self.entity_type = entity_type
        self.entity_id = entity_id
        if entity_id is None:
            message = f"{entity_type} not found"
        else:
            message = f"{entity_type} '{entity_id}' not found"
        super().__init__(message)


class NotAssociatedError(PubRankerError):
    """Raised when a team or round exists but is not part of the given quiz."""

    status_code = 409

    def __init__(self, entity_type: str, entity_id: str, quiz_id: str) -> None:
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.quiz_id = quiz_id
        super().__init__(f"{entity_type} '{entity_id}' does not belong to quiz '{quiz_id}'")


class AlreadyExistsError(PubRankerError):
    """Raised when creating a relation or entity that is already present."""

    status_code = 409


class InvalidTransitionError(PubRankerError, RuntimeError):
    """Raised when a quiz lifecycle event is not allowed from the current status."""

    status_code = 409


class PersistenceError(PubRankerError):
    """Raised when the store cannot load or save.

    In-memory state is never rolled back when a save fails; the error only
    reports that the latest change is not yet durable.
    """

    status_code = 503

    def __init__(self, message: str, underlying: BaseException | None = None) -> None:
        super().__init__(message)
        self.underlying = underlying
