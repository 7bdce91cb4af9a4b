"""Input normalisation shared by the repository, registry and scoreboard."""

from __future__ import annotations

from datetime import datetime, timezone
import re

from pubranker.constants.quiz_constants import MAX_POINTS_PER_ROUND
from pubranker.core.errors import ScoreOutOfRangeError, ValidationError

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")
_EMAIL = re.compile(r"^[a-z0-9._%+-]+@[a-z0-9.-]+\.[a-z]{2,}$")


def clean_name(name: str, field: str = "name") -> str:
    """Trim a display name and reject it when nothing is left."""
    if not isinstance(name, str):
        raise ValidationError(field, "must be text")
    cleaned = name.strip()
    if not cleaned:
        raise ValidationError(field, "must not be empty")
    return cleaned


def normalize_color(color: str) -> str:
    """Return ``color`` as an upper-case ``#RRGGBB`` string."""
    if not isinstance(color, str) or not _HEX_COLOR.match(color.strip()):
        raise ValidationError("color", f"'{color}' is not a #RRGGBB hex color")
    return color.strip().upper()


def normalize_email(email: str) -> str:
    """Return a trimmed, lower-case address; an empty string means no email."""
    if not isinstance(email, str):
        raise ValidationError("email", "must be text")
    cleaned = email.strip().lower()
    if cleaned and not _EMAIL.match(cleaned):
        raise ValidationError("email", f"'{email}' is not a valid email address")
    return cleaned


def validate_max_points(max_points: int) -> int:
    if isinstance(max_points, bool) or not isinstance(max_points, int):
        raise ValidationError("max_points", "must be an integer")
    if not 0 <= max_points <= MAX_POINTS_PER_ROUND:
        raise ValidationError(
            "max_points", f"must be between 0 and {MAX_POINTS_PER_ROUND}"
        )
    return max_points


def validate_points(points: int, max_points: int) -> int:
    """Reject scores outside ``[0, max_points]``; values are never clamped."""
    if isinstance(points, bool) or not isinstance(points, int):
        raise ValidationError("points", "must be an integer")
    if not 0 <= points <= max_points:
        raise ScoreOutOfRangeError(points, max_points)
    return points


def normalize_date(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so quizzes can always be ordered by date."""
    if not isinstance(value, datetime):
        raise ValidationError("date", "must be a datetime")
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
