"""Application settings and configuration management."""

from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import Field, ConfigDict
from pydantic_settings import BaseSettings

DEFAULT_SEED_PATH = Path(__file__).resolve().parent.parent / "data" / "seed_entries.json"


class Settings(BaseSettings):
    """Application settings with environment variable support."""
    
    # Application
    app_name: str = Field(default="Knowledge Base Matcher")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)
    
    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    workers: int = Field(default=1)
    
    # Entry store
    entries_path: Optional[Path] = Field(default=None)
    seed_path: Optional[Path] = Field(default=DEFAULT_SEED_PATH)
    
    # Matching defaults
    default_max_results: int = Field(default=3)
    default_min_confidence: float = Field(default=0.6)
    best_match_min_confidence: float = Field(default=0.7)
    max_query_length: int = Field(default=500)
    
    # Placeholder substitution
    placeholder_token: str = Field(default="{SUPPORT_PHONE}")
    default_substitution: str = Field(default="IT Support")
    
    # Keyword scoring
    keyword_floor: float = Field(default=0.3)
    keyword_scale: float = Field(default=0.8)
    keyword_cap: float = Field(default=0.95)
    
    # Fuzzy index
    phrasing_weight: float = Field(default=0.7)
    keyword_weight: float = Field(default=0.2)
    answer_weight: float = Field(default=0.1)
    fuzzy_threshold: float = Field(default=0.4)  # lower = stricter
    fuzzy_distance: int = Field(default=100)
    fuzzy_min_match_length: int = Field(default=3)
    
    # Ranking
    tie_break_margin: float = Field(default=0.1)
    dedup_strategy: Literal["first", "best"] = Field(default="first")
    
    # Usage tracking
    usage_queue_size: int = Field(default=1000)
    
    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")
    
    # CORS
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080", "http://localhost:8000"]
    )
    
    model_config = ConfigDict(
        env_prefix="KB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
