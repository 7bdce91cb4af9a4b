"""Application entry point for PubRanker."""

from __future__ import annotations

import os
from pathlib import Path

from pubranker.constants.about import APP_NAME, APP_VERSION
from pubranker.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from pubranker.constants.storage_constants import DEFAULT_DATA_FILE
from pubranker.core.quiz_manager import QuizManager
from pubranker.core.quiz_store import JsonFileQuizStore
from pubranker.server.api_server import run_api_server
from pubranker.utils.logging_config import configure_logging


def main() -> None:
    """Initialize logging, load saved quizzes, and serve the API."""
    logger = configure_logging()
    logger.info("Starting %s %s", APP_NAME, APP_VERSION)

    host = os.environ.get("PUBRANKER_HOST") or DEFAULT_HOST
    port = int(os.environ.get("PUBRANKER_PORT") or DEFAULT_PORT)
    data_file = Path(os.environ.get("PUBRANKER_DATA_FILE") or DEFAULT_DATA_FILE)

    store = JsonFileQuizStore(data_file)
    quiz_manager = QuizManager(store=store)
    quiz_manager.load()
    logger.info("Using data file %s", store.file_path)
    logger.info("API available at http://%s:%d/docs", host, port)

    run_api_server(quiz_manager=quiz_manager, host=host, port=port)


if __name__ == "__main__":
    main()
