"""Configuration helpers for the Contact List service."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_MAX_BODY_BYTES = 10 * 1024 * 1024
DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
]


class ConfigError(RuntimeError):
    """Raised when configuration is missing or malformed."""


@dataclass(slots=True)
class Settings:
    """Runtime configuration for the API and CLI."""

    uploads_dir: Path
    logs_dir: Path
    data_dir: Path
    environment: str = "local"
    force_file: bool = False
    collection: str = "contacts"
    allowed_origins: List[str] = field(default_factory=list)
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES
    log_level: str = "INFO"
    port: int = 5000
    firestore_project: Optional[str] = None
    firebase_credentials: Optional[Path] = None


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}.") from exc
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}.")
    return value


def _env_path(name: str, base: Path, default: str) -> Path:
    raw = os.getenv(name)
    if raw:
        return Path(raw).expanduser().resolve()
    return base / default


def load_settings(*, base_dir: Optional[Path] = None, dotenv: bool = True) -> Settings:
    """Load settings from environment variables.

    Args:
        base_dir: Directory that relative defaults (uploads/, logs/, data/)
            hang off. Defaults to the current working directory.
        dotenv: Whether to read a ``.env`` file first. Existing environment
            variables win over values in the file.

    Returns:
        Settings with every value resolved.

    Raises:
        ConfigError: if a numeric variable is malformed or the log level is
            unknown.
    """

    if dotenv:
        load_dotenv(override=False)

    base = Path(base_dir) if base_dir else Path.cwd()

    origins_raw = os.getenv("CONTACTS_ALLOWED_ORIGINS")
    if origins_raw is None:
        origins = list(DEFAULT_ALLOWED_ORIGINS)
    else:
        origins = [origin.strip() for origin in origins_raw.split(",") if origin.strip()]

    log_level = os.getenv("CONTACTS_LOG_LEVEL", "INFO").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigError(f"Unknown CONTACTS_LOG_LEVEL {log_level!r}.")

    credentials = None
    credentials_raw = os.getenv("CONTACTS_FIREBASE_CREDENTIALS")
    if credentials_raw:
        credentials = Path(credentials_raw).expanduser().resolve()
        if not credentials.is_file():
            raise ConfigError(f"CONTACTS_FIREBASE_CREDENTIALS file not found: {credentials}")

    return Settings(
        uploads_dir=_env_path("CONTACTS_UPLOADS_DIR", base, "uploads"),
        logs_dir=_env_path("CONTACTS_LOG_DIR", base, "logs"),
        data_dir=_env_path("CONTACTS_DATA_DIR", base, "contacts_data"),
        environment=os.getenv("CONTACTS_ENV", "local"),
        force_file=os.getenv("CONTACTS_FORCE_FILE", "0") == "1",
        collection=os.getenv("CONTACTS_COLLECTION", "contacts"),
        allowed_origins=origins,
        max_body_bytes=_env_int("CONTACTS_MAX_BODY_BYTES", DEFAULT_MAX_BODY_BYTES),
        log_level=log_level,
        port=_env_int("PORT", 5000),
        firestore_project=os.getenv("CONTACTS_FIRESTORE_PROJECT") or None,
        firebase_credentials=credentials,
    )


def ensure_directories(settings: Settings) -> None:
    """Create the uploads, logs and (file backend) data directories."""

    required = [settings.uploads_dir, settings.logs_dir]
    if settings.force_file:
        required.append(settings.data_dir)

    for directory in required:
        if directory.is_dir():
            logger.debug("Directory exists: %s", directory)
            continue
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigError(f"Failed to create directory {directory}: {exc}") from exc
        logger.info("Created directory: %s", directory)
