"""Service for the global team list and the quiz <-> team relation."""

from __future__ import annotations

from uuid import uuid4

from pubranker.constants.quiz_constants import MAX_TEAMS_PER_QUIZ, TEAM_COLOR_PALETTE
from pubranker.core.errors import (
    AlreadyExistsError,
    NotAssociatedError,
    NotFoundError,
    ValidationError,
)
from pubranker.core.models import QuizMembership, Team
from pubranker.core.validation import clean_name, normalize_color, normalize_email


class TeamRegistry:
    """Owns every Team record; quizzes only reference teams through memberships."""

    def __init__(self) -> None:
        self._teams: dict[str, Team] = {}
        self._memberships: list[QuizMembership] = []

    def load(self, teams: list[Team], memberships: list[QuizMembership]) -> None:
        self._teams = {team.id: team for team in teams}
        self._memberships = [m for m in memberships if m.team_id in self._teams]

    def get_teams(self) -> list[Team]:
        return sorted(self._teams.values(), key=lambda t: (t.name.casefold(), t.id))

    def get_memberships(self) -> list[QuizMembership]:
        return list(self._memberships)

    def get_team(self, team_id: str) -> Team:
        team = self._teams.get(team_id)
        if team is None:
            raise NotFoundError("Team", team_id)
        return team

    def create_team(
        self,
        name: str,
        color: str | None = None,
        contact_person: str = "",
        email: str = "",
    ) -> Team:
        """Register a new team; without a color the next palette entry is used."""
        cleaned = clean_name(name)
        if color is None:
            color = TEAM_COLOR_PALETTE[len(self._teams) % len(TEAM_COLOR_PALETTE)]
        team = Team(
            id=uuid4().hex,
            name=cleaned,
            color=normalize_color(color),
            contact_person=contact_person.strip(),
            email=normalize_email(email),
        )
        self._teams[team.id] = team
        return team

    def update_team(self, team_id: str, *, name: str | None = None, color: str | None = None) -> Team:
        """Apply name and color together; nothing changes if either is invalid."""
        team = self.get_team(team_id)
        cleaned_name = clean_name(name) if name is not None else team.name
        normalized_color = normalize_color(color) if color is not None else team.color
        team.name = cleaned_name
        team.color = normalized_color
        return team

    def update_team_details(
        self,
        team_id: str,
        *,
        contact_person: str,
        email: str,
        is_confirmed: bool | None = None,
        quiz_id: str | None = None,
    ) -> Team:
        """Replace contact details and, for a quiz the team plays in, its confirmation."""
        team = self.get_team(team_id)
        normalized_email = normalize_email(email)
        membership = None
        if is_confirmed is not None:
            if quiz_id is None:
                raise ValidationError("quiz_id", "confirmation is tracked per quiz")
            membership = self._membership(quiz_id, team_id)
        team.contact_person = contact_person.strip()
        team.email = normalized_email
        if membership is not None:
            membership.is_confirmed = is_confirmed
        return team

    def delete_team(self, team_id: str) -> Team:
        """Remove a team everywhere. Its scores go with it."""
        team = self.get_team(team_id)
        del self._teams[team_id]
        self._memberships = [m for m in self._memberships if m.team_id != team_id]
        return team

    # --- Memberships ---

    def assign_team(self, quiz_id: str, team_id: str, is_confirmed: bool = False) -> QuizMembership:
        team = self.get_team(team_id)
        if self.is_member(quiz_id, team.id):
            raise AlreadyExistsError(f"Team '{team.name}' is already part of this quiz")
        if len(self.team_ids_for_quiz(quiz_id)) >= MAX_TEAMS_PER_QUIZ:
            raise ValidationError("teams", f"a quiz holds at most {MAX_TEAMS_PER_QUIZ} teams")
        membership = QuizMembership(quiz_id=quiz_id, team_id=team.id, is_confirmed=is_confirmed)
        self._memberships.append(membership)
        return membership

    def remove_team(self, quiz_id: str, team_id: str) -> Team:
        """Drop the relation only; the team stays in the registry."""
        team = self.get_team(team_id)
        self._memberships.remove(self._membership(quiz_id, team_id))
        return team

    def drop_quiz(self, quiz_id: str) -> list[Team]:
        """Forget every membership of a deleted quiz and return the former members."""
        members = self.teams_for_quiz(quiz_id)
        self._memberships = [m for m in self._memberships if m.quiz_id != quiz_id]
        return members

    def is_member(self, quiz_id: str, team_id: str) -> bool:
        return any(m.quiz_id == quiz_id and m.team_id == team_id for m in self._memberships)

    def is_confirmed(self, quiz_id: str, team_id: str) -> bool:
        return self._membership(quiz_id, team_id).is_confirmed

    def team_ids_for_quiz(self, quiz_id: str) -> list[str]:
        return [m.team_id for m in self._memberships if m.quiz_id == quiz_id]

    def teams_for_quiz(self, quiz_id: str) -> list[Team]:
        """Member teams in the order they joined the quiz."""
        return [self._teams[team_id] for team_id in self.team_ids_for_quiz(quiz_id)]

    def quiz_ids_for_team(self, team_id: str) -> list[str]:
        self.get_team(team_id)
        return [m.quiz_id for m in self._memberships if m.team_id == team_id]

    def _membership(self, quiz_id: str, team_id: str) -> QuizMembership:
        self.get_team(team_id)
        for membership in self._memberships:
            if membership.quiz_id == quiz_id and membership.team_id == team_id:
                return membership
        raise NotAssociatedError("Team", team_id, quiz_id)
