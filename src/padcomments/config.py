from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = "mongodb://localhost:27017/padcomments"
    debug: bool = False
    store_collection: str = "store"  # Collection backing the key-value store

    model_config = {
        "env_file": [".env"],
        "env_prefix": "PADCOMMENTS_",
        "extra": "ignore",
    }
