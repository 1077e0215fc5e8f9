from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

class Settings(BaseSettings):
    # Server
    APP_HOST: str = "0.0.0.0"
    PORT: int = 4549
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # MongoDB (MONGO_URI has no default, a missing value fails at connect time)
    MONGO_URI: Optional[str] = None
    MONGO_DB: str = "gadget-world"
    MONGO_PRODUCTS_COLLECTION: str = "products"

    # Front-ends allowed to call the API
    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:5174",
        "https://gadget-world-client.vercel.app",
    ]

    model_config = SettingsConfigDict(extra="ignore")


def get_settings(**overrides) -> Settings:
    """Build settings from the environment; keyword overrides win (used by tests)."""
    return Settings(**overrides)
