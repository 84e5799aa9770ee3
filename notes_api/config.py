"""
Notes API - Application Configuration
=======================================

What:  Startup settings (bind host, bind port, cache directory) loaded with
       Pydantic Settings.
How:   Command-line flags (--host, --port, --cache) take precedence over
       environment variables (NOTES_HOST, NOTES_PORT, NOTES_CACHE) and the
       optional .env file. All three are required; there are no defaults.
Who:   Loaded once by the entry point (__main__.py) and handed to create_app().

Failure Mode:
    Missing or unparseable values raise InvalidConfigError. The entry point
    logs the diagnostic and exits with a non-zero status before the server
    binds any socket.
"""

import sys
from pathlib import Path
from typing import Optional, Sequence

from pydantic import Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict, SettingsError

from notes_api.exceptions import InvalidConfigError


class Settings(BaseSettings):
    """
    Service settings.

    Attributes:
        host:       Bind address for the HTTP server
        port:       Bind port for the HTTP server
        cache:      Directory holding one <name>.txt file per note
        log_level:  Root logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(min_length=1, description="Server bind address")
    port: int = Field(ge=1, le=65535, description="Server bind port")

    # ── Storage ───────────────────────────────────────────────────────────
    # Created recursively at startup if absent
    cache: Path = Field(description="Cache directory holding the note files")

    # ── Logging ───────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    model_config = SettingsConfigDict(
        env_prefix="NOTES_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        cli_prog_name="notes-api",
        cli_exit_on_error=False,
    )


def _describe_errors(exc: PydanticValidationError) -> str:
    """Render pydantic errors as `field: message` lines for the operator."""
    lines = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "settings"
        lines.append(f"  - {location}: {error.get('msg', 'invalid value')}")
    return "\n".join(lines)


def load_settings(argv: Optional[Sequence[str]] = None) -> Settings:
    """
    Load settings from command-line arguments and the environment.

    Args:
        argv: Arguments without the program name. Defaults to sys.argv[1:].

    Raises:
        InvalidConfigError if a required value is missing, a value cannot be
        parsed, or an unknown flag is given.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        return Settings(_cli_parse_args=args)
    except PydanticValidationError as e:
        raise InvalidConfigError(
            message="Invalid command-line arguments:\n" + _describe_errors(e),
            context={"errors": e.errors(include_url=False)},
        ) from e
    except SettingsError as e:
        raise InvalidConfigError(
            message=f"Invalid command-line arguments: {e}",
            context={"args": args},
        ) from e
