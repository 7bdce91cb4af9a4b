"""Persistence for quizzes, teams and memberships.

The manager hands a ``StoreSnapshot`` to the store after every mutation. The
JSON store writes one document per save:

    {
      "version": 1,
      "quizzes": [{"id": ..., "rounds": [...], ...}],
      "teams": [{"id": ..., "round_scores": {"<round id>": 7}, ...}],
      "memberships": [{"quiz_id": ..., "team_id": ..., "joined_at": ...}]
    }

The document is validated with pydantic on the way in and out, so a hand-edited
file with a negative max_points or a non-integer score is rejected at load time
instead of surfacing later as a broken leaderboard.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
import logging
import os
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from pubranker.constants.storage_constants import STORE_FORMAT_VERSION
from pubranker.core.errors import PersistenceError
from pubranker.core.models import Quiz, QuizMembership, Round, Team

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class StoreSnapshot:
    """Everything the manager needs to rebuild its state."""

    quizzes: list[Quiz] = field(default_factory=list)
    teams: list[Team] = field(default_factory=list)
    memberships: list[QuizMembership] = field(default_factory=list)


class QuizStore(Protocol):
    def load(self) -> StoreSnapshot: ...
    def save(self, snapshot: StoreSnapshot) -> None: ...


class InMemoryQuizStore:
    """Keeps the last saved snapshot in memory. Used for tests and throwaway runs."""

    def __init__(self) -> None:
        self._document: str | None = None
        self.save_count = 0

    def load(self) -> StoreSnapshot:
        if self._document is None:
            return StoreSnapshot()
        return _StoredDocument.model_validate_json(self._document).to_snapshot()

    def save(self, snapshot: StoreSnapshot) -> None:
        self._document = _StoredDocument.from_snapshot(snapshot).model_dump_json()
        self.save_count += 1


class JsonFileQuizStore:
    """Stores the snapshot as a JSON file, replaced atomically on every save."""

    def __init__(self, file_path: Path) -> None:
        self._file_path = Path(file_path)

    @property
    def file_path(self) -> Path:
        return self._file_path

    def load(self) -> StoreSnapshot:
        if not self._file_path.exists():
            logger.info("No data file at %s, starting empty", self._file_path)
            return StoreSnapshot()
        try:
            text = self._file_path.read_text(encoding="utf-8")
            document = _StoredDocument.model_validate_json(text)
        except (OSError, PydanticValidationError) as exc:
            raise PersistenceError(f"Could not load {self._file_path}: {exc}", exc) from exc
        return document.to_snapshot()

    def save(self, snapshot: StoreSnapshot) -> None:
        document = _StoredDocument.from_snapshot(snapshot).model_dump_json(indent=2)
        temp_path = self._file_path.with_suffix(self._file_path.suffix + ".tmp")
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(document + "\n", encoding="utf-8")
            os.replace(temp_path, self._file_path)
        except OSError as exc:
            raise PersistenceError(f"Could not save {self._file_path}: {exc}", exc) from exc


# --- Stored document schema ---


class _StoredRound(BaseModel):
    id: str
    name: str
    max_points: int = Field(ge=0)
    order_index: int = Field(ge=0)
    is_completed: bool
    created_at: datetime


class _StoredQuiz(BaseModel):
    id: str
    name: str
    venue: str
    date: datetime
    is_active: bool
    is_completed: bool
    created_at: datetime
    rounds: list[_StoredRound]


class _StoredTeam(BaseModel):
    id: str
    name: str
    color: str
    contact_person: str = ""
    email: str = ""
    round_scores: dict[str, int]
    created_at: datetime


class _StoredMembership(BaseModel):
    quiz_id: str
    team_id: str
    is_confirmed: bool = False
    joined_at: datetime


class _StoredDocument(BaseModel):
    version: int = STORE_FORMAT_VERSION
    quizzes: list[_StoredQuiz] = []
    teams: list[_StoredTeam] = []
    memberships: list[_StoredMembership] = []

    @classmethod
    def from_snapshot(cls, snapshot: StoreSnapshot) -> "_StoredDocument":
        return cls(
            quizzes=[
                _StoredQuiz(
                    id=quiz.id,
                    name=quiz.name,
                    venue=quiz.venue,
                    date=quiz.date,
                    is_active=quiz.is_active,
                    is_completed=quiz.is_completed,
                    created_at=quiz.created_at,
                    rounds=[
                        _StoredRound(
                            id=r.id,
                            name=r.name,
                            max_points=r.max_points,
                            order_index=r.order_index,
                            is_completed=r.is_completed,
                            created_at=r.created_at,
                        )
                        for r in quiz.sorted_rounds
                    ],
                )
                for quiz in snapshot.quizzes
            ],
            teams=[
                _StoredTeam(
                    id=team.id,
                    name=team.name,
                    color=team.color,
                    contact_person=team.contact_person,
                    email=team.email,
                    round_scores=dict(team.round_scores),
                    created_at=team.created_at,
                )
                for team in snapshot.teams
            ],
            memberships=[
                _StoredMembership(
                    quiz_id=m.quiz_id,
                    team_id=m.team_id,
                    is_confirmed=m.is_confirmed,
                    joined_at=m.joined_at,
                )
                for m in snapshot.memberships
            ],
        )

    def to_snapshot(self) -> StoreSnapshot:
        if self.version != STORE_FORMAT_VERSION:
            raise PersistenceError(f"Unsupported data file version {self.version}")
        return StoreSnapshot(
            quizzes=[
                Quiz(
                    id=q.id,
                    name=q.name,
                    venue=q.venue,
                    date=q.date,
                    is_active=q.is_active,
                    is_completed=q.is_completed,
                    created_at=q.created_at,
                    rounds=[
                        Round(
                            id=r.id,
                            name=r.name,
                            max_points=r.max_points,
                            order_index=r.order_index,
                            is_completed=r.is_completed,
                            created_at=r.created_at,
                        )
                        for r in q.rounds
                    ],
                )
                for q in self.quizzes
            ],
            teams=[
                Team(
                    id=t.id,
                    name=t.name,
                    color=t.color,
                    contact_person=t.contact_person,
                    email=t.email,
                    round_scores=dict(t.round_scores),
                    created_at=t.created_at,
                )
                for t in self.teams
            ],
            memberships=[
                QuizMembership(
                    quiz_id=m.quiz_id,
                    team_id=m.team_id,
                    is_confirmed=m.is_confirmed,
                    joined_at=m.joined_at,
                )
                for m in self.memberships
            ],
        )
