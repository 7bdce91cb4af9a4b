"""FastAPI server that exposes the scoring model to presentation clients."""

from __future__ import annotations

from datetime import datetime
import logging

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, StrictBool, StrictInt
import uvicorn

from pubranker.constants.about import APP_ABOUT_TEXT, APP_LICENSE, APP_NAME, APP_VERSION
from pubranker.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from pubranker.constants.quiz_constants import DEFAULT_MAX_POINTS
from pubranker.core.errors import PubRankerError
from pubranker.core.models import Quiz, Round, Team
from pubranker.core.quiz_manager import QuizManager
from pubranker.core.services.scoreboard import LeaderboardRow

logger = logging.getLogger(__name__)


class QuizPayload(BaseModel):
    """Payload schema for creating a quiz."""

    name: str
    venue: str = ""
    date: datetime | None = None


class QuizUpdatePayload(BaseModel):
    name: str | None = None
    venue: str | None = None
    date: datetime | None = None


class RoundPayload(BaseModel):
    """Payload schema for adding a round."""

    name: str
    max_points: StrictInt = DEFAULT_MAX_POINTS


class RoundUpdatePayload(BaseModel):
    name: str | None = None
    max_points: StrictInt | None = None


class MoveRoundPayload(BaseModel):
    new_index: StrictInt


class TeamPayload(BaseModel):
    """Payload schema for registering a team."""

    name: str
    color: str | None = None
    contact_person: str = ""
    email: str = ""


class TeamUpdatePayload(BaseModel):
    name: str | None = None
    color: str | None = None


class TeamDetailsPayload(BaseModel):
    """Contact details; ``is_confirmed`` needs the ``quiz_id`` it applies to."""

    contact_person: str = ""
    email: str = ""
    is_confirmed: StrictBool | None = None
    quiz_id: str | None = None


class QuizTeamPayload(BaseModel):
    """Either link an existing team (``team_id``) or create one (``name``)."""

    team_id: str | None = None
    name: str | None = None
    color: str | None = None
    contact_person: str = ""
    email: str = ""
    is_confirmed: StrictBool = False


class ScorePayload(BaseModel):
    """Payload schema for entering a team's points in a round."""

    team_id: str
    round_id: str
    points: StrictInt


def _round_to_dict(round_: Round) -> dict[str, object]:
    return {
        "id": round_.id,
        "name": round_.name,
        "max_points": round_.max_points,
        "order_index": round_.order_index,
        "is_completed": round_.is_completed,
    }


def _team_to_dict(team: Team) -> dict[str, object]:
    return {
        "id": team.id,
        "name": team.name,
        "color": team.color,
        "contact_person": team.contact_person,
        "email": team.email,
    }


def _quiz_to_dict(quiz: Quiz) -> dict[str, object]:
    current = quiz.current_round
    return {
        "id": quiz.id,
        "name": quiz.name,
        "venue": quiz.venue,
        "date": quiz.date.isoformat(),
        "status": quiz.status.value,
        "is_active": quiz.is_active,
        "is_completed": quiz.is_completed,
        "rounds": [_round_to_dict(r) for r in quiz.sorted_rounds],
        "current_round_id": current.id if current else None,
        "completed_rounds_count": quiz.completed_rounds_count,
        "progress": quiz.progress,
    }


def _row_to_dict(row: LeaderboardRow) -> dict[str, object]:
    return {
        "rank": row.rank,
        "team_id": row.team_id,
        "name": row.name,
        "color": row.color,
        "total_score": row.total_score,
        "round_scores": [
            {"round_id": cell.round_id, "round_name": cell.round_name, "points": cell.points}
            for cell in row.round_scores
        ],
    }


def _get_quiz_manager_dependency(quiz_manager: QuizManager):
    def dependency() -> QuizManager:
        return quiz_manager

    return dependency


def create_api_app(quiz_manager: QuizManager) -> FastAPI:
    """Create a FastAPI application wired to the provided quiz manager."""
    app = FastAPI(
        title=f"{APP_NAME} API",
        version=APP_VERSION,
        description=APP_ABOUT_TEXT,
        license_info={"name": APP_LICENSE},
    )
    manager_dep = _get_quiz_manager_dependency(quiz_manager)

    @app.exception_handler(PubRankerError)
    async def handle_pubranker_error(request: Request, exc: PubRankerError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    # --- Quizzes ---

    @app.get("/quizzes")
    def list_quizzes(manager: QuizManager = Depends(manager_dep)) -> list[dict[str, object]]:
        return [_quiz_to_dict(q) for q in manager.get_quizzes()]

    @app.post("/quizzes", status_code=201)
    def create_quiz(
        payload: QuizPayload, manager: QuizManager = Depends(manager_dep)
    ) -> dict[str, object]:
        quiz = manager.create_quiz(payload.name, payload.venue, payload.date)
        return _quiz_to_dict(quiz)

    @app.get("/quizzes/{quiz_id}")
    def get_quiz(quiz_id: str, manager: QuizManager = Depends(manager_dep)) -> dict[str, object]:
        quiz = manager.get_quiz(quiz_id)
        body = _quiz_to_dict(quiz)
        body["teams"] = [
            {**_team_to_dict(t), "is_confirmed": manager.is_team_confirmed(quiz_id, t.id)}
            for t in manager.get_quiz_teams(quiz_id)
        ]
        return body

    @app.patch("/quizzes/{quiz_id}")
    def update_quiz(
        quiz_id: str, payload: QuizUpdatePayload, manager: QuizManager = Depends(manager_dep)
    ) -> dict[str, object]:
        quiz = manager.update_quiz(
            quiz_id, name=payload.name, venue=payload.venue, date=payload.date
        )
        return _quiz_to_dict(quiz)

    @app.delete("/quizzes/{quiz_id}", status_code=204)
    def delete_quiz(quiz_id: str, manager: QuizManager = Depends(manager_dep)) -> None:
        manager.delete_quiz(quiz_id)

    @app.post("/quizzes/{quiz_id}/start")
    def start_quiz(quiz_id: str, manager: QuizManager = Depends(manager_dep)) -> dict[str, object]:
        return {"status": manager.start_quiz(quiz_id).value}

    @app.post("/quizzes/{quiz_id}/complete")
    def complete_quiz(
        quiz_id: str, manager: QuizManager = Depends(manager_dep)
    ) -> dict[str, object]:
        return {"status": manager.complete_quiz(quiz_id).value}

    @app.post("/quizzes/{quiz_id}/cancel")
    def cancel_quiz(quiz_id: str, manager: QuizManager = Depends(manager_dep)) -> dict[str, object]:
        return {"status": manager.cancel_quiz(quiz_id).value}

    # --- Rounds ---

    @app.post("/quizzes/{quiz_id}/rounds", status_code=201)
    def add_round(
        quiz_id: str, payload: RoundPayload, manager: QuizManager = Depends(manager_dep)
    ) -> dict[str, object]:
        return _round_to_dict(manager.add_round(quiz_id, payload.name, payload.max_points))

    @app.patch("/quizzes/{quiz_id}/rounds/{round_id}")
    def update_round(
        quiz_id: str,
        round_id: str,
        payload: RoundUpdatePayload,
        manager: QuizManager = Depends(manager_dep),
    ) -> dict[str, object]:
        round_ = manager.update_round(
            quiz_id, round_id, name=payload.name, max_points=payload.max_points
        )
        return _round_to_dict(round_)

    @app.delete("/quizzes/{quiz_id}/rounds/{round_id}", status_code=204)
    def delete_round(
        quiz_id: str, round_id: str, manager: QuizManager = Depends(manager_dep)
    ) -> None:
        manager.delete_round(quiz_id, round_id)

    @app.post("/quizzes/{quiz_id}/rounds/{round_id}/complete")
    def complete_round(
        quiz_id: str, round_id: str, manager: QuizManager = Depends(manager_dep)
    ) -> dict[str, object]:
        return _round_to_dict(manager.complete_round(quiz_id, round_id))

    @app.post("/quizzes/{quiz_id}/rounds/{round_id}/reopen")
    def reopen_round(
        quiz_id: str, round_id: str, manager: QuizManager = Depends(manager_dep)
    ) -> dict[str, object]:
        return _round_to_dict(manager.reopen_round(quiz_id, round_id))

    @app.post("/quizzes/{quiz_id}/rounds/{round_id}/move")
    def move_round(
        quiz_id: str,
        round_id: str,
        payload: MoveRoundPayload,
        manager: QuizManager = Depends(manager_dep),
    ) -> list[dict[str, object]]:
        manager.move_round(quiz_id, round_id, payload.new_index)
        return [_round_to_dict(r) for r in manager.get_sorted_rounds(quiz_id)]

    # --- Teams ---

    @app.get("/teams")
    def list_teams(manager: QuizManager = Depends(manager_dep)) -> list[dict[str, object]]:
        return [_team_to_dict(t) for t in manager.get_teams()]

    @app.post("/teams", status_code=201)
    def create_team(
        payload: TeamPayload, manager: QuizManager = Depends(manager_dep)
    ) -> dict[str, object]:
        team = manager.create_team(payload.name, payload.color, payload.contact_person, payload.email)
        return _team_to_dict(team)

    @app.patch("/teams/{team_id}")
    def update_team(
        team_id: str, payload: TeamUpdatePayload, manager: QuizManager = Depends(manager_dep)
    ) -> dict[str, object]:
        team = manager.update_team(team_id, name=payload.name, color=payload.color)
        return _team_to_dict(team)

    @app.put("/teams/{team_id}/details")
    def update_team_details(
        team_id: str, payload: TeamDetailsPayload, manager: QuizManager = Depends(manager_dep)
    ) -> dict[str, object]:
        team = manager.update_team_details(
            team_id,
            payload.contact_person,
            payload.email,
            is_confirmed=payload.is_confirmed,
            quiz_id=payload.quiz_id,
        )
        return _team_to_dict(team)

    @app.delete("/teams/{team_id}", status_code=204)
    def delete_team(team_id: str, manager: QuizManager = Depends(manager_dep)) -> None:
        manager.delete_team(team_id)

    @app.post("/quizzes/{quiz_id}/teams", status_code=201)
    def add_quiz_team(
        quiz_id: str, payload: QuizTeamPayload, manager: QuizManager = Depends(manager_dep)
    ) -> dict[str, object]:
        if payload.team_id is not None:
            team = manager.assign_team(quiz_id, payload.team_id, payload.is_confirmed)
        else:
            team = manager.add_team_to_quiz(
                quiz_id,
                payload.name or "",
                payload.color,
                payload.contact_person,
                payload.email,
                payload.is_confirmed,
            )
        body = _team_to_dict(team)
        body["is_confirmed"] = payload.is_confirmed
        return body

    @app.delete("/quizzes/{quiz_id}/teams/{team_id}", status_code=204)
    def remove_quiz_team(
        quiz_id: str, team_id: str, manager: QuizManager = Depends(manager_dep)
    ) -> None:
        manager.remove_team_from_quiz(quiz_id, team_id)

    # --- Scores ---

    @app.put("/quizzes/{quiz_id}/scores")
    def update_score(
        quiz_id: str, payload: ScorePayload, manager: QuizManager = Depends(manager_dep)
    ) -> dict[str, object]:
        manager.update_score(quiz_id, payload.team_id, payload.round_id, payload.points)
        return {
            "team_id": payload.team_id,
            "round_id": payload.round_id,
            "points": manager.get_score(quiz_id, payload.team_id, payload.round_id),
            "total_score": manager.get_total_score(quiz_id, payload.team_id),
        }

    @app.get("/quizzes/{quiz_id}/scores/{team_id}/{round_id}")
    def get_score(
        quiz_id: str, team_id: str, round_id: str, manager: QuizManager = Depends(manager_dep)
    ) -> dict[str, object]:
        return {
            "team_id": team_id,
            "round_id": round_id,
            "points": manager.get_score(quiz_id, team_id, round_id),
        }

    @app.delete("/quizzes/{quiz_id}/scores/{team_id}/{round_id}", status_code=204)
    def clear_score(
        quiz_id: str, team_id: str, round_id: str, manager: QuizManager = Depends(manager_dep)
    ) -> None:
        manager.clear_score(quiz_id, team_id, round_id)

    @app.get("/quizzes/{quiz_id}/leaderboard")
    def get_leaderboard(
        quiz_id: str, manager: QuizManager = Depends(manager_dep)
    ) -> list[dict[str, object]]:
        return [_row_to_dict(row) for row in manager.get_leaderboard(quiz_id)]

    @app.get("/quizzes/{quiz_id}/progress")
    def get_progress(quiz_id: str, manager: QuizManager = Depends(manager_dep)) -> dict[str, object]:
        quiz = manager.get_quiz(quiz_id)
        current = manager.get_current_round(quiz_id)
        return {
            "status": quiz.status.value,
            "progress": manager.get_progress(quiz_id),
            "completed_rounds_count": quiz.completed_rounds_count,
            "round_count": len(quiz.rounds),
            "current_round": _round_to_dict(current) if current else None,
        }

    return app


def run_api_server(
    quiz_manager: QuizManager,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> None:
    """Serve the API in the foreground until interrupted."""
    app = create_api_app(quiz_manager)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)
    server.run()
