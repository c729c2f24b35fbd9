"""Load and validate settings from the environment."""

from pathlib import Path

from pydantic import ValidationError

from drive_backup.config.models import Settings
from drive_backup.errors import ConfigError

_EMPTY_ERROR_TYPES = {"missing", "string_too_short"}

_PASSWORD_HINT = (
    "If you have no password, set it to DB_PASSWORD= in your .env file."
)


def load_settings(env_file: str | Path | None = ".env") -> Settings:
    """Build ``Settings`` from the process environment and an env file.

    Args:
        env_file: Dotenv file merged under the process environment.
            ``None`` reads the process environment only.

    Returns:
        Frozen ``Settings`` instance.

    Raises:
        ConfigError: If any required variable is missing, empty or invalid.
            The message lists every offending variable.

    Example:
        >>> settings = load_settings()
        >>> settings.database.name
        'shop'
    """
    try:
        return Settings(_env_file=env_file)
    except ValidationError as e:
        raise ConfigError(_format_validation_error(e)) from e


def _format_validation_error(error: ValidationError) -> str:
    """Turn pydantic errors into one line per environment variable."""
    lines = []
    for item in error.errors():
        var = str(item["loc"][0]).upper() if item["loc"] else "<settings>"
        if item["type"] in _EMPTY_ERROR_TYPES:
            line = f"Missing required environment variable: {var}"
            if var == "DB_PASSWORD":
                line = f"{line}. {_PASSWORD_HINT}"
        else:
            line = f"Invalid value for {var}: {item['msg']}"
        lines.append(line)
    return "\n".join(lines)
