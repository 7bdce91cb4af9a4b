"""Static metadata describing PubRanker."""

APP_NAME = "PubRanker"
APP_VERSION = "0.1"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "PubRanker keeps score during live pub quizzes. Create quizzes, teams and rounds, "
    "enter points as each round is marked, and show the leaderboard to the room."
)
