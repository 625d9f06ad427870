# farmlog/config.py

from typing import Literal, Optional
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Loads application settings from .env file."""
    storage_backend: Literal["file", "mongo", "memory"] = "file"
    data_dir: str = "./farm_data"
    seed_sample_data: bool = True

    # MongoDB slot storage (used when storage_backend == "mongo")
    mongo_uri: Optional[str] = None
    mongo_user: Optional[str] = None
    mongo_password: Optional[str] = None
    mongo_host: str = "localhost"
    mongo_port: int = 27017
    mongo_db_name: str = "farm_fields_log_db"
    mongo_collection: str = "farm_store"

    @property
    def final_mongo_uri(self) -> str:
        """Constructs safe MongoDB URI from components (preferred) or returns the provided one."""
        if self.mongo_user and self.mongo_password:
            import urllib.parse
            user = urllib.parse.quote_plus(self.mongo_user)
            password = urllib.parse.quote_plus(self.mongo_password)
            return f"mongodb+srv://{user}:{password}@{self.mongo_host}/"

        if self.mongo_uri:
            return self.mongo_uri

        return f"mongodb://{self.mongo_host}:{self.mongo_port}/"

    class Config:
        env_file = ".env"
        env_prefix = "FARMLOG_"

# Create a single, reusable instance of the settings
settings = Settings()
