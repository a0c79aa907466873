"""Central configuration for the statement ingestion package."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = BASE_DIR / "data"

# Widest known statement layout.
MIN_COLUMNS = 14

UPLOAD_EXTENSIONS = (".xlsx", ".xls", ".csv", ".html", ".htm")
UPLOAD_BROKERS = ("IOL", "BALANZ", "BULL")


@dataclass(slots=True, frozen=True)
class Settings:
    min_columns: int
    max_file_size_bytes: int
    broker_key_max_length: int
    upload_extensions: tuple[str, ...]
    upload_brokers: tuple[str, ...]
    store_dir: Path


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip().isdigit():
        return default
    return int(raw.strip())


SETTINGS = Settings(
    min_columns=MIN_COLUMNS,
    max_file_size_bytes=_env_int("STATEMENT_INGEST_MAX_FILE_BYTES", 10 * 1024 * 1024),
    broker_key_max_length=50,
    upload_extensions=UPLOAD_EXTENSIONS,
    upload_brokers=UPLOAD_BROKERS,
    store_dir=Path(os.getenv("STATEMENT_INGEST_STORE_DIR", str(DATA_DIR / "datapoints"))),
)
