"""Domain models for the pub quiz scoring model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable

from pubranker.constants.quiz_constants import DEFAULT_MAX_POINTS, DEFAULT_TEAM_COLOR


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class QuizStatus(str, Enum):
    """Lifecycle of a quiz: planned -> active -> completed."""

    PLANNED = "planned"
    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass(slots=True)
class Round:
    """One scoring segment of a quiz."""

    id: str
    name: str
    max_points: int = DEFAULT_MAX_POINTS
    order_index: int = 0
    is_completed: bool = False
    created_at: datetime = field(default_factory=utc_now)


@dataclass(slots=True)
class Team:
    """A participant group whose points are tracked per round id."""

    id: str
    name: str
    color: str = DEFAULT_TEAM_COLOR
    contact_person: str = ""
    email: str = ""
    round_scores: dict[str, int] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utc_now)

    def set_score(self, round_id: str, points: int) -> None:
        self.round_scores[round_id] = points

    def get_score(self, round_id: str) -> int:
        """Return the stored points for ``round_id``; unscored rounds count as 0."""
        return self.round_scores.get(round_id, 0)

    def clear_score(self, round_id: str) -> None:
        self.round_scores.pop(round_id, None)

    def total_score(self, round_ids: Iterable[str]) -> int:
        """Sum the points for the given rounds only, ignoring stale entries."""
        return sum(self.round_scores.get(round_id, 0) for round_id in set(round_ids))

    def prune_scores(self, round_ids: Iterable[str]) -> None:
        for round_id in round_ids:
            self.round_scores.pop(round_id, None)


@dataclass(slots=True)
class QuizMembership:
    """Row of the quiz <-> team relation table."""

    quiz_id: str
    team_id: str
    is_confirmed: bool = False
    joined_at: datetime = field(default_factory=utc_now)


@dataclass(slots=True)
class Quiz:
    """A single pub quiz event. Owns its rounds; teams are linked by membership."""

    id: str
    name: str
    venue: str = ""
    date: datetime = field(default_factory=utc_now)
    is_active: bool = False
    is_completed: bool = False
    rounds: list[Round] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)

    @property
    def status(self) -> QuizStatus:
        if self.is_completed:
            return QuizStatus.COMPLETED
        if self.is_active:
            return QuizStatus.ACTIVE
        return QuizStatus.PLANNED

    @property
    def sorted_rounds(self) -> list[Round]:
        return sorted(self.rounds, key=lambda r: (r.order_index, r.created_at))

    @property
    def round_ids(self) -> list[str]:
        return [r.id for r in self.sorted_rounds]

    @property
    def current_round(self) -> Round | None:
        """First round in play order that is not completed yet."""
        return next((r for r in self.sorted_rounds if not r.is_completed), None)

    @property
    def completed_rounds_count(self) -> int:
        return sum(1 for r in self.rounds if r.is_completed)

    @property
    def progress(self) -> float:
        """Fraction of completed rounds, 0.0 when the quiz has no rounds."""
        if not self.rounds:
            return 0.0
        return self.completed_rounds_count / len(self.rounds)

    def find_round(self, round_id: str) -> Round | None:
        return next((r for r in self.rounds if r.id == round_id), None)
