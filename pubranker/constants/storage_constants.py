"""Persistence constants for the quiz store."""

from pathlib import Path

DEFAULT_DATA_FILE: Path = Path.home() / ".pubranker" / "pubranker.json"
STORE_FORMAT_VERSION: int = 1
