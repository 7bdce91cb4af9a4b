"""Business logic for managing quiz state shared between callers and the API."""

from __future__ import annotations

from datetime import datetime
import logging
from threading import Lock

from pubranker.constants.quiz_constants import DEFAULT_MAX_POINTS
from pubranker.core.errors import NotAssociatedError, PersistenceError
from pubranker.core.models import Quiz, QuizStatus, Round, Team
from pubranker.core.quiz_store import InMemoryQuizStore, QuizStore, StoreSnapshot
from pubranker.core.services.quiz_lifecycle import QuizLifecycle
from pubranker.core.services.quiz_repository import QuizRepository
from pubranker.core.services.scoreboard import LeaderboardRow, Scoreboard
from pubranker.core.services.team_registry import TeamRegistry

logger = logging.getLogger(__name__)


class QuizManager:
    """Facade for quiz services: Repository, TeamRegistry, Scoreboard and Lifecycle.

    Every public method takes the lock. Mutating methods save through the store
    once the in-memory change is done; when that save fails the change stays in
    memory and PersistenceError is raised to the caller.
    """

    def __init__(self, store: QuizStore | None = None) -> None:
        self._lock = Lock()
        self._store: QuizStore = store if store is not None else InMemoryQuizStore()

        # Services
        self._repository = QuizRepository()
        self._registry = TeamRegistry()
        self._scoreboard = Scoreboard()
        self._lifecycle = QuizLifecycle()

    # --- Persistence ---

    def load(self) -> None:
        """Replace the in-memory state with the store's contents."""
        with self._lock:
            snapshot = self._store.load()
            quiz_ids = {quiz.id for quiz in snapshot.quizzes}
            memberships = [m for m in snapshot.memberships if m.quiz_id in quiz_ids]
            if len(memberships) != len(snapshot.memberships):
                logger.warning(
                    "Ignoring %d memberships of unknown quizzes",
                    len(snapshot.memberships) - len(memberships),
                )
            self._repository.load_quizzes(snapshot.quizzes)
            self._registry.load(snapshot.teams, memberships)
            logger.info(
                "Loaded %d quizzes and %d teams",
                len(snapshot.quizzes),
                len(snapshot.teams),
            )

    def _snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(
            quizzes=self._repository.get_quizzes(),
            teams=self._registry.get_teams(),
            memberships=self._registry.get_memberships(),
        )

    def _save(self, action: str) -> None:
        try:
            self._store.save(self._snapshot())
        except PersistenceError:
            logger.error("Saving after %s failed; change kept in memory only", action)
            raise
        except OSError as exc:
            logger.error("Saving after %s failed: %s", action, exc)
            raise PersistenceError(f"Saving after {action} failed: {exc}", exc) from exc

    # --- Quizzes ---

    def create_quiz(self, name: str, venue: str = "", date: datetime | None = None) -> Quiz:
        with self._lock:
            quiz = self._repository.create_quiz(name, venue, date)
            logger.info("Created quiz '%s' (%s)", quiz.name, quiz.id)
            self._save("create_quiz")
            return quiz

    def update_quiz(
        self,
        quiz_id: str,
        *,
        name: str | None = None,
        venue: str | None = None,
        date: datetime | None = None,
    ) -> Quiz:
        with self._lock:
            quiz = self._repository.update_quiz(quiz_id, name=name, venue=venue, date=date)
            self._save("update_quiz")
            return quiz

    def delete_quiz(self, quiz_id: str) -> None:
        with self._lock:
            quiz = self._repository.delete_quiz(quiz_id)
            for team in self._registry.drop_quiz(quiz_id):
                team.prune_scores(quiz.round_ids)
            logger.info("Deleted quiz '%s' (%s)", quiz.name, quiz.id)
            self._save("delete_quiz")

    def get_quiz(self, quiz_id: str) -> Quiz:
        with self._lock:
            return self._repository.get_quiz(quiz_id)

    def get_quizzes(self) -> list[Quiz]:
        with self._lock:
            return self._repository.get_quizzes()

    # --- Lifecycle Delegation ---

    def start_quiz(self, quiz_id: str) -> QuizStatus:
        with self._lock:
            status = self._lifecycle.start(self._repository.get_quiz(quiz_id))
            self._save("start_quiz")
            return status

    def complete_quiz(self, quiz_id: str) -> QuizStatus:
        with self._lock:
            status = self._lifecycle.complete(self._repository.get_quiz(quiz_id))
            self._save("complete_quiz")
            return status

    def cancel_quiz(self, quiz_id: str) -> QuizStatus:
        with self._lock:
            status = self._lifecycle.cancel(self._repository.get_quiz(quiz_id))
            self._save("cancel_quiz")
            return status

    # --- Round Delegation ---

    def add_round(self, quiz_id: str, name: str, max_points: int = DEFAULT_MAX_POINTS) -> Round:
        with self._lock:
            round_ = self._repository.add_round(quiz_id, name, max_points)
            self._save("add_round")
            return round_

    def update_round(
        self,
        quiz_id: str,
        round_id: str,
        *,
        name: str | None = None,
        max_points: int | None = None,
    ) -> Round:
        with self._lock:
            round_ = self._repository.get_round(quiz_id, round_id)
            highest = self._scoreboard.highest_score(self._registry.teams_for_quiz(quiz_id), round_)
            self._repository.update_round(
                quiz_id, round_id, name=name, max_points=max_points, highest_score=highest
            )
            self._save("update_round")
            return round_

    def delete_round(self, quiz_id: str, round_id: str) -> None:
        with self._lock:
            round_ = self._repository.delete_round(quiz_id, round_id)
            for team in self._registry.get_teams():
                team.clear_score(round_.id)
            self._save("delete_round")

    def move_round(self, quiz_id: str, round_id: str, new_index: int) -> Round:
        with self._lock:
            round_ = self._repository.move_round(quiz_id, round_id, new_index)
            self._save("move_round")
            return round_

    def complete_round(self, quiz_id: str, round_id: str) -> Round:
        with self._lock:
            round_ = self._repository.get_round(quiz_id, round_id)
            if round_.is_completed:
                return round_
            self._repository.complete_round(quiz_id, round_id)
            logger.info("Round '%s' completed", round_.name)
            self._save("complete_round")
            return round_

    def reopen_round(self, quiz_id: str, round_id: str) -> Round:
        with self._lock:
            round_ = self._repository.get_round(quiz_id, round_id)
            if not round_.is_completed:
                return round_
            self._repository.reopen_round(quiz_id, round_id)
            logger.info("Round '%s' reopened", round_.name)
            self._save("reopen_round")
            return round_

    def get_round(self, quiz_id: str, round_id: str) -> Round:
        with self._lock:
            return self._repository.get_round(quiz_id, round_id)

    def get_sorted_rounds(self, quiz_id: str) -> list[Round]:
        with self._lock:
            return self._repository.get_quiz(quiz_id).sorted_rounds

    def get_current_round(self, quiz_id: str) -> Round | None:
        with self._lock:
            return self._repository.get_quiz(quiz_id).current_round

    def get_progress(self, quiz_id: str) -> float:
        with self._lock:
            return self._repository.get_quiz(quiz_id).progress

    # --- Team Registry Delegation ---

    def create_team(
        self,
        name: str,
        color: str | None = None,
        contact_person: str = "",
        email: str = "",
    ) -> Team:
        with self._lock:
            team = self._registry.create_team(name, color, contact_person, email)
            self._save("create_team")
            return team

    def add_team_to_quiz(
        self,
        quiz_id: str,
        name: str,
        color: str | None = None,
        contact_person: str = "",
        email: str = "",
        is_confirmed: bool = False,
    ) -> Team:
        """Create a new team and make it a member of the quiz in one step."""
        with self._lock:
            self._repository.get_quiz(quiz_id)
            team = self._registry.create_team(name, color, contact_person, email)
            self._registry.assign_team(quiz_id, team.id, is_confirmed)
            self._save("add_team_to_quiz")
            return team

    def assign_team(self, quiz_id: str, team_id: str, is_confirmed: bool = False) -> Team:
        with self._lock:
            self._repository.get_quiz(quiz_id)
            self._registry.assign_team(quiz_id, team_id, is_confirmed)
            self._save("assign_team")
            return self._registry.get_team(team_id)

    def remove_team_from_quiz(self, quiz_id: str, team_id: str) -> None:
        with self._lock:
            quiz = self._repository.get_quiz(quiz_id)
            team = self._registry.remove_team(quiz_id, team_id)
            team.prune_scores(quiz.round_ids)
            self._save("remove_team_from_quiz")

    def update_team(self, team_id: str, *, name: str | None = None, color: str | None = None) -> Team:
        with self._lock:
            team = self._registry.update_team(team_id, name=name, color=color)
            self._save("update_team")
            return team

    def update_team_details(
        self,
        team_id: str,
        contact_person: str,
        email: str,
        is_confirmed: bool | None = None,
        quiz_id: str | None = None,
    ) -> Team:
        """Replace contact details; ``is_confirmed`` applies to the team's entry in ``quiz_id``."""
        with self._lock:
            if quiz_id is not None:
                self._repository.get_quiz(quiz_id)
            team = self._registry.update_team_details(
                team_id,
                contact_person=contact_person,
                email=email,
                is_confirmed=is_confirmed,
                quiz_id=quiz_id,
            )
            self._save("update_team_details")
            return team

    def is_team_confirmed(self, quiz_id: str, team_id: str) -> bool:
        with self._lock:
            self._repository.get_quiz(quiz_id)
            return self._registry.is_confirmed(quiz_id, team_id)

    def delete_team(self, team_id: str) -> None:
        with self._lock:
            team = self._registry.delete_team(team_id)
            logger.info("Deleted team '%s' (%s)", team.name, team.id)
            self._save("delete_team")

    def get_team(self, team_id: str) -> Team:
        with self._lock:
            return self._registry.get_team(team_id)

    def get_teams(self) -> list[Team]:
        with self._lock:
            return self._registry.get_teams()

    def get_quiz_teams(self, quiz_id: str) -> list[Team]:
        with self._lock:
            self._repository.get_quiz(quiz_id)
            return self._registry.teams_for_quiz(quiz_id)

    def get_quizzes_for_team(self, team_id: str) -> list[Quiz]:
        with self._lock:
            return [
                self._repository.get_quiz(quiz_id)
                for quiz_id in self._registry.quiz_ids_for_team(team_id)
            ]

    # --- Scoreboard Delegation ---

    def update_score(self, quiz_id: str, team_id: str, round_id: str, points: int) -> None:
        with self._lock:
            team, round_ = self._resolve_score_target(quiz_id, team_id, round_id)
            self._scoreboard.update_score(team, round_, points)
            logger.debug("Team '%s' scored %d in round '%s'", team.name, points, round_.name)
            self._save("update_score")

    def clear_score(self, quiz_id: str, team_id: str, round_id: str) -> None:
        with self._lock:
            team, round_ = self._resolve_score_target(quiz_id, team_id, round_id)
            self._scoreboard.clear_score(team, round_)
            self._save("clear_score")

    def get_score(self, quiz_id: str, team_id: str, round_id: str) -> int:
        with self._lock:
            team, round_ = self._resolve_score_target(quiz_id, team_id, round_id)
            return self._scoreboard.get_score(team, round_)

    def get_total_score(self, quiz_id: str, team_id: str) -> int:
        with self._lock:
            quiz = self._repository.get_quiz(quiz_id)
            return self._scoreboard.total_score(self._member(quiz_id, team_id), quiz)

    def get_sorted_teams_by_score(self, quiz_id: str) -> list[Team]:
        with self._lock:
            quiz = self._repository.get_quiz(quiz_id)
            return self._scoreboard.sorted_teams_by_score(quiz, self._registry.teams_for_quiz(quiz_id))

    def get_leaderboard(self, quiz_id: str) -> list[LeaderboardRow]:
        with self._lock:
            quiz = self._repository.get_quiz(quiz_id)
            return self._scoreboard.leaderboard(quiz, self._registry.teams_for_quiz(quiz_id))

    def get_top_scorers(self, quiz_id: str, limit: int = 3) -> list[LeaderboardRow]:
        with self._lock:
            quiz = self._repository.get_quiz(quiz_id)
            return self._scoreboard.get_top_scorers(
                quiz, self._registry.teams_for_quiz(quiz_id), limit
            )

    def get_team_rank(self, quiz_id: str, team_id: str) -> int:
        with self._lock:
            quiz = self._repository.get_quiz(quiz_id)
            team = self._member(quiz_id, team_id)
            return self._scoreboard.team_rank(quiz, self._registry.teams_for_quiz(quiz_id), team)

    # --- Helpers ---

    def _member(self, quiz_id: str, team_id: str) -> Team:
        team = self._registry.get_team(team_id)
        if not self._registry.is_member(quiz_id, team_id):
            raise NotAssociatedError("Team", team_id, quiz_id)
        return team

    def _resolve_score_target(self, quiz_id: str, team_id: str, round_id: str) -> tuple[Team, Round]:
        round_ = self._repository.get_round(quiz_id, round_id)
        return self._member(quiz_id, team_id), round_
