"""Quiz-related constants shared across the core and server layers."""

DEFAULT_MAX_POINTS: int = 10
MAX_POINTS_PER_ROUND: int = 1000
MAX_TEAMS_PER_QUIZ: int = 100

DEFAULT_TEAM_COLOR: str = "#007AFF"
TEAM_COLOR_PALETTE: tuple[str, ...] = (
    DEFAULT_TEAM_COLOR,
    "#FF3B30",
    "#34C759",
    "#FF9500",
    "#5856D6",
    "#FF2D55",
    "#5AC8FA",
    "#FFCC00",
    "#AF52DE",
    "#00C7BE",
    "#32ADE6",
    "#FF6482",
)
