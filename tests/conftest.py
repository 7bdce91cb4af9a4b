"""Shared fixtures for the PubRanker test suite."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from pubranker.core.errors import PersistenceError
from pubranker.core.quiz_manager import QuizManager
from pubranker.core.quiz_store import InMemoryQuizStore, StoreSnapshot


class FailingStore:
    """Store whose saves always fail, for checking fire-and-forget semantics."""

    def __init__(self) -> None:
        self.attempts = 0

    def load(self) -> StoreSnapshot:
        return StoreSnapshot()

    def save(self, snapshot: StoreSnapshot) -> None:
        self.attempts += 1
        raise PersistenceError("disk full")


@pytest.fixture
def store() -> InMemoryQuizStore:
    return InMemoryQuizStore()


@pytest.fixture
def manager(store: InMemoryQuizStore) -> QuizManager:
    return QuizManager(store=store)


@pytest.fixture
def pub_quiz(manager: QuizManager) -> SimpleNamespace:
    """A quiz with two 10-point rounds and two member teams."""
    quiz = manager.create_quiz("Tuesday Quiz", venue="The Crown")
    first = manager.add_round(quiz.id, "General Knowledge", 10)
    second = manager.add_round(quiz.id, "Music", 10)
    alpha = manager.add_team_to_quiz(quiz.id, "Alpha")
    bravo = manager.add_team_to_quiz(quiz.id, "Bravo")
    return SimpleNamespace(quiz=quiz, rounds=[first, second], alpha=alpha, bravo=bravo)


@pytest.fixture
def failing_store() -> FailingStore:
    return FailingStore()
