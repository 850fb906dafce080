"""Server configuration loaded from the environment."""
from pathlib import Path
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class ServerSettings(BaseSettings):
    """Settings for the meter application backend.

    Every field can be overridden with a ``METER_`` prefixed environment
    variable, e.g. ``METER_UPLOADS_DIR=/srv/uploads``.
    """

    # Storage settings
    database_uri: str = 'sqlite+pysqlite:///meter_applications.db'
    uploads_dir: str = str(PROJECT_ROOT / 'uploads')

    # Identifier generation
    application_id_attempts: int = Field(default=5, ge=1, le=100)

    # Logging settings
    log_level: str = 'INFO'
    log_dir: Optional[str] = str(PROJECT_ROOT / 'logs')

    model_config = SettingsConfigDict(env_prefix='METER_', case_sensitive=False)

    def to_flask_config(self):
        """Map settings onto the Flask config keys used by the app."""
        return {
            'SQLALCHEMY_DATABASE_URI': self.database_uri,
            'SQLALCHEMY_TRACK_MODIFICATIONS': False,
            'UPLOADS_DIR': self.uploads_dir,
            'APPLICATION_ID_MAX_ATTEMPTS': self.application_id_attempts,
            'LOG_LEVEL': self.log_level.upper(),
            'LOG_DIR': self.log_dir,
        }
