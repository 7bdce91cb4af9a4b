"""Tests for the Quiz-derived views and Team score bookkeeping."""

from pubranker.core.models import Quiz, QuizStatus, Round, Team


def _quiz_with_rounds(*completed: bool) -> Quiz:
    quiz = Quiz(id="q1", name="Quiz")
    for index, is_completed in enumerate(completed):
        quiz.rounds.append(
            Round(id=f"r{index}", name=f"Round {index}", order_index=index, is_completed=is_completed)
        )
    return quiz


class TestQuizDerivedViews:
    """Derived properties are recomputed from rounds on every access."""

    def test_empty_quiz_has_no_progress_and_no_current_round(self):
        quiz = Quiz(id="q1", name="Quiz")
        assert quiz.progress == 0.0
        assert quiz.current_round is None
        assert quiz.completed_rounds_count == 0

    def test_sorted_rounds_follow_order_index(self):
        quiz = Quiz(id="q1", name="Quiz")
        quiz.rounds = [
            Round(id="b", name="Second", order_index=1),
            Round(id="a", name="First", order_index=0),
        ]
        assert [r.id for r in quiz.sorted_rounds] == ["a", "b"]

    def test_current_round_is_first_incomplete_round(self):
        quiz = _quiz_with_rounds(True, False, False)
        assert quiz.current_round.id == "r1"

    def test_current_round_is_none_when_all_completed(self):
        quiz = _quiz_with_rounds(True, True)
        assert quiz.current_round is None
        assert quiz.progress == 1.0

    def test_progress_is_fraction_of_completed_rounds(self):
        quiz = _quiz_with_rounds(True, False, False, True)
        assert quiz.completed_rounds_count == 2
        assert quiz.progress == 0.5

    def test_status_reflects_flags(self):
        quiz = Quiz(id="q1", name="Quiz")
        assert quiz.status is QuizStatus.PLANNED
        quiz.is_active = True
        assert quiz.status is QuizStatus.ACTIVE
        quiz.is_active = False
        quiz.is_completed = True
        assert quiz.status is QuizStatus.COMPLETED


class TestTeamScores:
    """Team keeps one entry per round id."""

    def test_unscored_round_reads_as_zero(self):
        team = Team(id="t1", name="Alpha")
        assert team.get_score("r1") == 0

    def test_set_score_overwrites_previous_value(self):
        team = Team(id="t1", name="Alpha")
        team.set_score("r1", 4)
        team.set_score("r1", 6)
        assert team.round_scores == {"r1": 6}

    def test_total_ignores_rounds_outside_the_given_set(self):
        team = Team(id="t1", name="Alpha", round_scores={"r1": 5, "gone": 9})
        assert team.total_score(["r1", "r2"]) == 5

    def test_prune_scores_removes_entries(self):
        team = Team(id="t1", name="Alpha", round_scores={"r1": 5, "r2": 3})
        team.prune_scores(["r1", "unknown"])
        assert team.round_scores == {"r2": 3}
