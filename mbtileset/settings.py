"""
Settings for the project.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="MBTILESET_")

    pool_size: int = Field(default=4, ge=1)
    "Number of read sessions each open tileset may check out at once."

    backup_pages: int = 256
    "Pages copied per incremental backup step when cloning into memory; -1 copies everything in one step."

    progress_interval: int = Field(default=1000, ge=1)
    "Number of SQLite VM instructions between cancellation checks while a query runs."

    def create_engine(self):
        """
        Create the default engine-access object based on the settings.
        """
        from mbtileset.database import SQLiteEngine

        return SQLiteEngine(progress_interval=self.progress_interval)


settings = Settings()
