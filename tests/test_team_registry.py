"""Tests for the global team registry and quiz memberships."""

import pytest

from pubranker.constants.quiz_constants import MAX_TEAMS_PER_QUIZ, TEAM_COLOR_PALETTE
from pubranker.core.errors import (
    AlreadyExistsError,
    NotAssociatedError,
    NotFoundError,
    ValidationError,
)
from pubranker.core.services.team_registry import TeamRegistry


@pytest.fixture
def registry() -> TeamRegistry:
    return TeamRegistry()


class TestTeams:
    def test_colors_cycle_through_palette(self, registry):
        first = registry.create_team("Alpha")
        second = registry.create_team("Bravo")
        assert first.color == TEAM_COLOR_PALETTE[0]
        assert second.color == TEAM_COLOR_PALETTE[1]

    def test_explicit_color_is_normalized(self, registry):
        team = registry.create_team("Alpha", color="#ff3b30")
        assert team.color == "#FF3B30"

    @pytest.mark.parametrize("color", ["red", "#12345", "#GGGGGG"])
    def test_invalid_color_is_rejected(self, registry, color):
        with pytest.raises(ValidationError):
            registry.create_team("Alpha", color=color)

    def test_name_must_not_be_blank(self, registry):
        with pytest.raises(ValidationError):
            registry.create_team(" \t ")

    def test_teams_are_listed_by_name(self, registry):
        registry.create_team("bravo")
        registry.create_team("Alpha")
        assert [t.name for t in registry.get_teams()] == ["Alpha", "bravo"]


class TestMemberships:
    def test_team_can_join_several_quizzes(self, registry):
        team = registry.create_team("Alpha")
        registry.assign_team("q1", team.id)
        registry.assign_team("q2", team.id)
        assert registry.quiz_ids_for_team(team.id) == ["q1", "q2"]
        assert registry.teams_for_quiz("q2") == [team]

    def test_assigning_twice_is_rejected(self, registry):
        team = registry.create_team("Alpha")
        registry.assign_team("q1", team.id)
        with pytest.raises(AlreadyExistsError):
            registry.assign_team("q1", team.id)

    def test_remove_team_keeps_it_in_registry(self, registry):
        team = registry.create_team("Alpha")
        registry.assign_team("q1", team.id)
        registry.remove_team("q1", team.id)
        assert registry.teams_for_quiz("q1") == []
        assert registry.get_team(team.id) is team
        with pytest.raises(NotAssociatedError):
            registry.remove_team("q1", team.id)

    def test_delete_team_drops_memberships(self, registry):
        team = registry.create_team("Alpha")
        registry.assign_team("q1", team.id)
        registry.delete_team(team.id)
        assert registry.get_memberships() == []
        with pytest.raises(NotFoundError):
            registry.get_team(team.id)

    def test_quiz_team_limit(self, registry):
        for index in range(MAX_TEAMS_PER_QUIZ):
            registry.assign_team("q1", registry.create_team(f"Team {index}").id)
        extra = registry.create_team("One Too Many")
        with pytest.raises(ValidationError):
            registry.assign_team("q1", extra.id)


class TestTeamUpdates:
    def test_update_team_applies_name_and_color(self, registry):
        team = registry.create_team("Alpha")
        registry.update_team(team.id, name=" Aces ", color="#ff9500")
        assert (team.name, team.color) == ("Aces", "#FF9500")

    def test_invalid_color_keeps_old_name(self, registry):
        team = registry.create_team("Alpha", color="#007AFF")
        with pytest.raises(ValidationError):
            registry.update_team(team.id, name="Aces", color="red")
        assert (team.name, team.color) == ("Alpha", "#007AFF")

    def test_contact_details_are_normalized(self, registry):
        team = registry.create_team("Alpha", contact_person=" Sam ", email=" Sam@Example.ORG ")
        assert team.contact_person == "Sam"
        assert team.email == "sam@example.org"

    def test_invalid_email_is_rejected_without_changes(self, registry):
        team = registry.create_team("Alpha", contact_person="Sam")
        with pytest.raises(ValidationError):
            registry.update_team_details(team.id, contact_person="Alex", email="not-an-email")
        assert team.contact_person == "Sam"

    def test_confirmation_is_tracked_per_quiz(self, registry):
        team = registry.create_team("Alpha")
        registry.assign_team("q1", team.id)
        registry.assign_team("q2", team.id, is_confirmed=True)
        registry.update_team_details(
            team.id, contact_person="Sam", email="", is_confirmed=True, quiz_id="q1"
        )
        registry.update_team_details(
            team.id, contact_person="Sam", email="", is_confirmed=False, quiz_id="q2"
        )
        assert registry.is_confirmed("q1", team.id) is True
        assert registry.is_confirmed("q2", team.id) is False

    def test_confirmation_needs_a_quiz_the_team_plays_in(self, registry):
        team = registry.create_team("Alpha")
        with pytest.raises(ValidationError):
            registry.update_team_details(team.id, contact_person="Sam", email="", is_confirmed=True)
        with pytest.raises(NotAssociatedError):
            registry.update_team_details(
                team.id, contact_person="Sam", email="", is_confirmed=True, quiz_id="q1"
            )
        assert team.contact_person == ""
