"""Service for recording round scores and ranking teams."""

from __future__ import annotations

from dataclasses import dataclass

from pubranker.core.errors import NotAssociatedError
from pubranker.core.models import Quiz, Round, Team
from pubranker.core.validation import validate_points


@dataclass(slots=True)
class RoundScoreCell:
    round_id: str
    round_name: str
    points: int


@dataclass(slots=True)
class LeaderboardRow:
    """Immutable snapshot returned to consumers."""

    rank: int
    team_id: str
    name: str
    color: str
    total_score: int
    round_scores: list[RoundScoreCell]


class Scoreboard:
    """Scoring rules: per-round points, totals and leaderboard order.

    Scores live on the Team records and are keyed by round id. Totals are always
    taken over the rounds a quiz currently owns, so entries left behind by a
    deleted round never count.
    """

    def update_score(self, team: Team, round_: Round, points: int) -> None:
        """Store ``points`` for the round, replacing any earlier value.

        Raises ScoreOutOfRangeError when points are outside ``[0, max_points]``;
        the stored value is left untouched in that case.
        """
        team.set_score(round_.id, validate_points(points, round_.max_points))

    def get_score(self, team: Team, round_: Round) -> int:
        return team.get_score(round_.id)

    def clear_score(self, team: Team, round_: Round) -> None:
        team.clear_score(round_.id)

    def total_score(self, team: Team, quiz: Quiz) -> int:
        return team.total_score(quiz.round_ids)

    def highest_score(self, teams: list[Team], round_: Round) -> int:
        return max((team.get_score(round_.id) for team in teams), default=0)

    def sorted_teams_by_score(self, quiz: Quiz, teams: list[Team]) -> list[Team]:
        """Order by total descending; equal totals fall back to name, then id."""
        round_ids = quiz.round_ids
        return sorted(
            teams,
            key=lambda t: (-t.total_score(round_ids), t.name.casefold(), t.id),
        )

    def leaderboard(self, quiz: Quiz, teams: list[Team]) -> list[LeaderboardRow]:
        """Ranked rows using competition ranking (1, 2, 2, 4)."""
        rounds = quiz.sorted_rounds
        round_ids = [r.id for r in rounds]
        rows: list[LeaderboardRow] = []
        previous_total: int | None = None
        rank = 0
        for position, team in enumerate(self.sorted_teams_by_score(quiz, teams), start=1):
            total = team.total_score(round_ids)
            if total != previous_total:
                rank = position
                previous_total = total
            rows.append(
                LeaderboardRow(
                    rank=rank,
                    team_id=team.id,
                    name=team.name,
                    color=team.color,
                    total_score=total,
                    round_scores=[
                        RoundScoreCell(round_id=r.id, round_name=r.name, points=team.get_score(r.id))
                        for r in rounds
                    ],
                )
            )
        return rows

    def team_rank(self, quiz: Quiz, teams: list[Team], team: Team) -> int:
        for row in self.leaderboard(quiz, teams):
            if row.team_id == team.id:
                return row.rank
        raise NotAssociatedError("Team", team.id, quiz.id)

    def get_top_scorers(self, quiz: Quiz, teams: list[Team], limit: int = 3) -> list[LeaderboardRow]:
        """Return the podium (first ``limit`` rows) of the leaderboard."""
        return self.leaderboard(quiz, teams)[:limit]
