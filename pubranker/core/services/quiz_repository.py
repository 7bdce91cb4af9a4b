"""Service for managing quizzes and the rounds they own."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from pubranker.constants.quiz_constants import DEFAULT_MAX_POINTS
from pubranker.core.errors import NotAssociatedError, NotFoundError, ValidationError
from pubranker.core.models import Quiz, Round
from pubranker.core.validation import clean_name, normalize_date, validate_max_points


class QuizRepository:
    """Keeps quizzes in memory and maintains the play order of their rounds."""

    def __init__(self) -> None:
        self._quizzes: dict[str, Quiz] = {}

    def load_quizzes(self, quizzes: list[Quiz]) -> None:
        """Replace the current contents with previously stored quizzes."""
        self._quizzes = {quiz.id: quiz for quiz in quizzes}
        for quiz in quizzes:
            self._reindex(quiz)

    def get_quizzes(self) -> list[Quiz]:
        """Return all quizzes ordered by event date, then name."""
        return sorted(self._quizzes.values(), key=lambda q: (q.date, q.name.casefold()))

    def get_quiz(self, quiz_id: str) -> Quiz:
        quiz = self._quizzes.get(quiz_id)
        if quiz is None:
            raise NotFoundError("Quiz", quiz_id)
        return quiz

    def create_quiz(self, name: str, venue: str = "", date: datetime | None = None) -> Quiz:
        quiz = Quiz(id=uuid4().hex, name=clean_name(name), venue=venue.strip())
        if date is not None:
            quiz.date = normalize_date(date)
        self._quizzes[quiz.id] = quiz
        return quiz

    def update_quiz(
        self,
        quiz_id: str,
        *,
        name: str | None = None,
        venue: str | None = None,
        date: datetime | None = None,
    ) -> Quiz:
        quiz = self.get_quiz(quiz_id)
        cleaned_name = clean_name(name) if name is not None else quiz.name
        normalized_date = normalize_date(date) if date is not None else quiz.date
        quiz.name = cleaned_name
        quiz.date = normalized_date
        if venue is not None:
            quiz.venue = venue.strip()
        return quiz

    def delete_quiz(self, quiz_id: str) -> Quiz:
        """Remove a quiz together with its rounds and return it."""
        quiz = self.get_quiz(quiz_id)
        del self._quizzes[quiz_id]
        return quiz

    # --- Rounds ---

    def get_round(self, quiz_id: str, round_id: str) -> Round:
        quiz = self.get_quiz(quiz_id)
        round_ = quiz.find_round(round_id)
        if round_ is None:
            if self.find_round(round_id) is not None:
                raise NotAssociatedError("Round", round_id, quiz_id)
            raise NotFoundError("Round", round_id)
        return round_

    def find_round(self, round_id: str) -> Round | None:
        for quiz in self._quizzes.values():
            round_ = quiz.find_round(round_id)
            if round_ is not None:
                return round_
        return None

    def add_round(self, quiz_id: str, name: str, max_points: int = DEFAULT_MAX_POINTS) -> Round:
        quiz = self.get_quiz(quiz_id)
        round_ = Round(
            id=uuid4().hex,
            name=clean_name(name),
            max_points=validate_max_points(max_points),
            order_index=len(quiz.rounds),
        )
        quiz.rounds.append(round_)
        return round_

    def update_round(
        self,
        quiz_id: str,
        round_id: str,
        *,
        name: str | None = None,
        max_points: int | None = None,
        highest_score: int = 0,
    ) -> Round:
        """Rename and/or re-cap a round; nothing changes if either value is invalid.

        ``highest_score`` is the best stored score for the round, so the cap can
        never drop below a score that has already been entered.
        """
        round_ = self.get_round(quiz_id, round_id)
        cleaned_name = clean_name(name) if name is not None else round_.name
        if max_points is not None:
            validate_max_points(max_points)
            if highest_score > max_points:
                raise ValidationError(
                    "max_points",
                    f"a team already has {highest_score} points in this round",
                )
        round_.name = cleaned_name
        if max_points is not None:
            round_.max_points = max_points
        return round_

    def delete_round(self, quiz_id: str, round_id: str) -> Round:
        quiz = self.get_quiz(quiz_id)
        round_ = self.get_round(quiz_id, round_id)
        quiz.rounds.remove(round_)
        self._reindex(quiz)
        return round_

    def move_round(self, quiz_id: str, round_id: str, new_index: int) -> Round:
        quiz = self.get_quiz(quiz_id)
        round_ = self.get_round(quiz_id, round_id)
        if not 0 <= new_index < len(quiz.rounds):
            raise ValidationError("new_index", f"{new_index} is out of range")
        ordered = quiz.sorted_rounds
        ordered.remove(round_)
        ordered.insert(new_index, round_)
        for index, item in enumerate(ordered):
            item.order_index = index
        return round_

    def complete_round(self, quiz_id: str, round_id: str) -> Round:
        round_ = self.get_round(quiz_id, round_id)
        round_.is_completed = True
        return round_

    def reopen_round(self, quiz_id: str, round_id: str) -> Round:
        round_ = self.get_round(quiz_id, round_id)
        round_.is_completed = False
        return round_

    @staticmethod
    def _reindex(quiz: Quiz) -> None:
        for index, round_ in enumerate(quiz.sorted_rounds):
            round_.order_index = index
