from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./assets.db"
    DATABASE_ECHO: bool = False
    
    # Redis
    REDIS_URL: str = "redis://localhost:6379"
    SEARCH_CACHE_TTL_SECONDS: int = 300
    
    # Live matching count
    COUNT_DEBOUNCE_SECONDS: float = 0.15
    
    # Object storage
    STORAGE_URL: str = "http://localhost:54321/storage/v1"
    STORAGE_API_KEY: str = ""
    STORAGE_TIMEOUT_SECONDS: float = 30.0
    LISTING_IMAGES_BUCKET: str = "property-images"
    MAX_LISTING_IMAGES: int = 20
    
    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:5173"]
    
    # Logging
    LOG_LEVEL: str = "INFO"
    
    @field_validator('COUNT_DEBOUNCE_SECONDS')
    @classmethod
    def validate_debounce(cls, v):
        if not 0.1 <= v <= 0.3:
            raise ValueError('COUNT_DEBOUNCE_SECONDS must be between 0.1 and 0.3')
        return v
    
    class Config:
        env_file = ".env"


settings = Settings()
