"""Configuration management: environment loading and settings models.

Usage:
    >>> from drive_backup.config import load_settings, Settings
"""

from drive_backup.config.loader import load_settings
from drive_backup.config.models import DatabaseConnection, DriveCredentials, Settings

__all__ = ["load_settings", "Settings", "DatabaseConnection", "DriveCredentials"]
