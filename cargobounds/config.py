"""Runtime configuration — env-driven.

Centralized settings using pydantic-settings. Reads from a .env file and
CARGO_BOUNDS_* environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CHECK_COMMAND: tuple[str, ...] = (
    "cargo",
    "check",
    "--all-features",
    "--color",
    "always",
)


class BoundsSettings(BaseSettings):
    """Tool configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export CARGO_BOUNDS_MANIFEST_PATH=crates/core/Cargo.toml
        export CARGO_BOUNDS_LOG_LEVEL=DEBUG
        export CARGO_BOUNDS_REQUEST_INTERVAL=2.5
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="CARGO_BOUNDS_",
        env_file_encoding="utf-8",
    )

    log_level: str = "WARNING"

    # Manifest
    manifest_path: Path = Path("Cargo.toml")

    # Validator
    check_command: tuple[str, ...] = DEFAULT_CHECK_COMMAND
    shell: str = "bash"  # runs --command overrides as `<shell> -c <command>`

    # crates.io crawler policy: a descriptive user agent
    # and at most one request per second
    crates_io_api: str = "https://crates.io/api/v1"
    user_agent: str = "cargo-bounds (https://github.com/cargo-bounds/cargo-bounds)"
    request_interval: float = 1.0
    http_timeout: float = 15.0


# Module-level singleton — import as `from cargobounds.config import config`
config = BoundsSettings()
