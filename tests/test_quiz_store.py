"""Tests for the JSON file store."""

import json

import pytest

from pubranker.core.errors import PersistenceError
from pubranker.core.quiz_manager import QuizManager
from pubranker.core.quiz_store import JsonFileQuizStore


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "nested" / "pubranker.json"


class TestJsonFileQuizStore:
    def test_missing_file_loads_empty(self, data_file):
        snapshot = JsonFileQuizStore(data_file).load()
        assert snapshot.quizzes == []
        assert snapshot.teams == []
        assert snapshot.memberships == []

    def test_save_creates_parent_directories(self, data_file):
        manager = QuizManager(store=JsonFileQuizStore(data_file))
        manager.create_quiz("Tuesday Quiz")
        document = json.loads(data_file.read_text(encoding="utf-8"))
        assert document["version"] == 1
        assert document["quizzes"][0]["name"] == "Tuesday Quiz"
        assert not data_file.with_suffix(".json.tmp").exists()

    def test_round_trip_reproduces_leaderboard(self, data_file):
        manager = QuizManager(store=JsonFileQuizStore(data_file))
        quiz = manager.create_quiz("Tuesday Quiz", venue="The Crown")
        first = manager.add_round(quiz.id, "General Knowledge")
        second = manager.add_round(quiz.id, "Music", 20)
        alpha = manager.add_team_to_quiz(quiz.id, "Alpha")
        bravo = manager.add_team_to_quiz(quiz.id, "Bravo", "#34c759")
        manager.update_score(quiz.id, alpha.id, first.id, 7)
        manager.update_score(quiz.id, alpha.id, second.id, 8)
        manager.update_score(quiz.id, bravo.id, first.id, 9)
        manager.update_score(quiz.id, bravo.id, second.id, 9)
        manager.move_round(quiz.id, second.id, 0)

        restored = QuizManager(store=JsonFileQuizStore(data_file))
        restored.load()

        rows = restored.get_leaderboard(quiz.id)
        assert [(r.name, r.total_score) for r in rows] == [("Bravo", 18), ("Alpha", 15)]
        assert [r.name for r in restored.get_sorted_rounds(quiz.id)] == [
            "Music",
            "General Knowledge",
        ]
        assert restored.get_team(bravo.id).color == "#34C759"
        assert restored.get_quiz(quiz.id).date == quiz.date

    def test_corrupt_file_raises(self, data_file):
        data_file.parent.mkdir(parents=True)
        data_file.write_text("{not json", encoding="utf-8")
        with pytest.raises(PersistenceError):
            JsonFileQuizStore(data_file).load()

    def test_negative_max_points_is_rejected_on_load(self, data_file):
        data_file.parent.mkdir(parents=True)
        document = {
            "version": 1,
            "quizzes": [
                {
                    "id": "q1",
                    "name": "Quiz",
                    "venue": "",
                    "date": "2026-05-01T19:30:00+00:00",
                    "is_active": False,
                    "is_completed": False,
                    "created_at": "2026-05-01T12:00:00+00:00",
                    "rounds": [
                        {
                            "id": "r1",
                            "name": "Round 1",
                            "max_points": -5,
                            "order_index": 0,
                            "is_completed": False,
                            "created_at": "2026-05-01T12:00:00+00:00",
                        }
                    ],
                }
            ],
        }
        data_file.write_text(json.dumps(document), encoding="utf-8")
        with pytest.raises(PersistenceError):
            JsonFileQuizStore(data_file).load()

    def test_unknown_version_is_rejected(self, data_file):
        data_file.parent.mkdir(parents=True)
        data_file.write_text(json.dumps({"version": 99}), encoding="utf-8")
        with pytest.raises(PersistenceError):
            JsonFileQuizStore(data_file).load()

    def test_write_failure_raises_persistence_error(self, data_file, monkeypatch):
        def fail_replace(src, dst):
            raise OSError("read-only file system")

        monkeypatch.setattr("pubranker.core.quiz_store.os.replace", fail_replace)
        manager = QuizManager(store=JsonFileQuizStore(data_file))
        with pytest.raises(PersistenceError):
            manager.create_quiz("Tuesday Quiz")
        assert [q.name for q in manager.get_quizzes()] == ["Tuesday Quiz"]

    def test_file_path_is_exposed(self, data_file):
        assert JsonFileQuizStore(str(data_file)).file_path == data_file

    def test_files_without_contact_fields_still_load(self, data_file):
        data_file.parent.mkdir(parents=True)
        document = {
            "version": 1,
            "teams": [
                {
                    "id": "t1",
                    "name": "Alpha",
                    "color": "#007AFF",
                    "round_scores": {},
                    "created_at": "2026-05-01T12:00:00+00:00",
                }
            ],
            "memberships": [
                {"quiz_id": "q1", "team_id": "t1", "joined_at": "2026-05-01T12:00:00+00:00"}
            ],
        }
        data_file.write_text(json.dumps(document), encoding="utf-8")
        snapshot = JsonFileQuizStore(data_file).load()
        assert (snapshot.teams[0].contact_person, snapshot.teams[0].email) == ("", "")
        assert snapshot.memberships[0].is_confirmed is False
