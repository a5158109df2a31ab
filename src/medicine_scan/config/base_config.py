# ============================================================================
# src/medicine_scan/config/base_config.py
# ============================================================================
"""
Base Configuration
- Data directory
- Scan history file
"""

from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseSettingsConfig(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATA_DIR: Path = Field(
        default=Path("data"),
        description="Directory for locally persisted data"
    )

    # Saved scans, JSON array newest first
    HISTORY_PATH: Path = Field(
        default=Path("data/history.json"),
        description="JSON file holding saved scan history"
    )

    def create_directories(self):
        """Create all necessary directories if they don't exist"""
        for directory in (self.DATA_DIR, self.HISTORY_PATH.parent):
            directory.mkdir(parents=True, exist_ok=True)


# Global instance
base_settings = BaseSettingsConfig()
