"""Pydantic models for tool configuration."""

import logging
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# ============================================================================
# Connection Models
# ============================================================================


class DatabaseConnection(BaseModel):
    """Everything the dump/import tools need to reach the database."""

    model_config = {"frozen": True}

    host: str
    user: str
    password: str  # "" means no password: the -p flag is omitted
    name: str
    port: int | None = None
    dump_bin: str = "mysqldump"
    import_bin: str = "mysql"


class DriveCredentials(BaseModel):
    """Service account credentials and target folder for Google Drive."""

    model_config = {"frozen": True}

    client_email: str
    private_key: str
    folder_id: str


# ============================================================================
# Settings
# ============================================================================


class Settings(BaseSettings):
    """Tool settings read once from the environment (and ``.env``).

    Field names map to upper-case environment variables
    (``db_host`` -> ``DB_HOST``). ``db_password`` has no default and no
    minimum length, so it must be present but may be empty.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Database
    db_host: str = Field(min_length=1)
    db_user: str = Field(min_length=1)
    db_password: str
    db_name: str = Field(min_length=1)
    db_port: int | None = None
    mysqldump_bin: str = "mysqldump"
    mysql_bin: str = "mysql"

    # Google Drive
    gdrive_client_email: str = Field(min_length=1)
    gdrive_private_key: str = Field(min_length=1)
    gdrive_folder_id: str = Field(min_length=1)

    # Local working files and listing
    backup_work_dir: Path = Path(".")
    backup_name_prefix: str = "backup-"
    backup_list_limit: int = Field(default=20, ge=1, le=1000)

    log_level: str = "INFO"

    @field_validator("gdrive_private_key")
    @classmethod
    def unescape_private_key(cls, v: str) -> str:
        # .env files usually carry the PEM key on one line with literal \n
        return v.replace("\\n", "\n")

    @field_validator("log_level")
    @classmethod
    def normalise_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level '{v}'")
        return level

    @property
    def database(self) -> DatabaseConnection:
        """Connection parameters for the dump and import tools."""
        return DatabaseConnection(
            host=self.db_host,
            user=self.db_user,
            password=self.db_password,
            name=self.db_name,
            port=self.db_port,
            dump_bin=self.mysqldump_bin,
            import_bin=self.mysql_bin,
        )

    @property
    def drive(self) -> DriveCredentials:
        """Credentials and folder for the Google Drive store."""
        return DriveCredentials(
            client_email=self.gdrive_client_email,
            private_key=self.gdrive_private_key,
            folder_id=self.gdrive_folder_id,
        )
