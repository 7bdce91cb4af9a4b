"""Service for moving a quiz through planned -> active -> completed."""

from __future__ import annotations

from enum import Enum

from pubranker.core.errors import InvalidTransitionError
from pubranker.core.models import Quiz, QuizStatus


class QuizEvent(str, Enum):
    START = "start"
    COMPLETE = "complete"
    CANCEL = "cancel"


# {current_status: {event: next_status}}
TRANSITIONS: dict[QuizStatus, dict[QuizEvent, QuizStatus]] = {
    QuizStatus.PLANNED: {
        QuizEvent.START: QuizStatus.ACTIVE,
    },
    QuizStatus.ACTIVE: {
        QuizEvent.START: QuizStatus.ACTIVE,
        QuizEvent.COMPLETE: QuizStatus.COMPLETED,
        QuizEvent.CANCEL: QuizStatus.PLANNED,
    },
    QuizStatus.COMPLETED: {
        QuizEvent.COMPLETE: QuizStatus.COMPLETED,
    },
}


class QuizLifecycle:
    """Applies lifecycle events to a quiz.

    Round completion is tracked separately on each Round and never changes the
    quiz status; the only event that touches rounds is CANCEL, which reopens them
    all so the quiz can be run again from the start.
    """

    def can_transition(self, quiz: Quiz, event: QuizEvent) -> bool:
        return event in TRANSITIONS.get(quiz.status, {})

    def transition(self, quiz: Quiz, event: QuizEvent) -> QuizStatus:
        if not self.can_transition(quiz, event):
            raise InvalidTransitionError(
                f"Cannot {event.value} a quiz that is {quiz.status.value}"
            )
        next_status = TRANSITIONS[quiz.status][event]
        quiz.is_active = next_status is QuizStatus.ACTIVE
        quiz.is_completed = next_status is QuizStatus.COMPLETED
        if event is QuizEvent.CANCEL:
            for round_ in quiz.rounds:
                round_.is_completed = False
        return next_status

    def start(self, quiz: Quiz) -> QuizStatus:
        return self.transition(quiz, QuizEvent.START)

    def complete(self, quiz: Quiz) -> QuizStatus:
        return self.transition(quiz, QuizEvent.COMPLETE)

    def cancel(self, quiz: Quiz) -> QuizStatus:
        return self.transition(quiz, QuizEvent.CANCEL)
