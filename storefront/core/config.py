from typing import Dict, List
from pydantic import Field
from pydantic_settings import BaseSettings
import os
from dotenv import load_dotenv

load_dotenv()


# Points applied to a product's raw score per interaction. The storefront's
# hover badge used to advertise +3 for hover_2s; labels are now derived from
# this table so there is a single value to change.
DEFAULT_SCORING_POINTS: Dict[str, int] = {
    "hover_2s": 2,
    "hover_5s": 5,
    "product_click": 8,
    "add_to_cart": 15,
    "cart_abandon": -5,
}


class Settings(BaseSettings):
    # Application Configuration
    app_env: str = Field(default="dev", env="APP_ENV")
    api_port: int = Field(default=8000, env="API_PORT")

    # Redis document store
    redis_url: str = Field(default="redis://localhost:6379/0", env="REDIS_URL")
    redis_pool_size: int = Field(default=10, env="REDIS_POOL_SIZE")
    store_key_prefix: str = Field(default="storefront", env="STORE_KEY_PREFIX")

    # Engagement scoring
    max_score_threshold: float = Field(default=100, env="MAX_SCORE_THRESHOLD")
    cart_abandon_timeout_seconds: float = Field(default=30, env="CART_ABANDON_TIMEOUT_SECONDS")
    scoring_points: Dict[str, int] = Field(default_factory=lambda: dict(DEFAULT_SCORING_POINTS))

    # Bundle recommendations
    bundle_discount_percentage: float = Field(default=10, env="BUNDLE_DISCOUNT_PERCENTAGE")
    bundle_min_frequency: int = Field(default=2, env="BUNDLE_MIN_FREQUENCY")

    # Product similarity (heuristic scoring is used when disabled or on model failure)
    embedding_model: str = Field(default="all-MiniLM-L6-v2", env="EMBEDDING_MODEL")
    embedding_enabled: bool = Field(default=True, env="EMBEDDING_ENABLED")

    # CORS - allow dashboard origins (filter out None values)
    allowed_origins: List[str] = [
        origin for origin in [
            "http://localhost:3000",
            os.getenv("FRONTEND_URL")
        ] if origin is not None
    ]

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
