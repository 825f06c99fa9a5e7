from functools import lru_cache
from typing import Literal
import os
from pydantic_settings import BaseSettings, SettingsConfigDict
from vocalkart.domain.services import constants as C

EnvName = Literal["development", "production"]

def _env_file_for(app_env: EnvName) -> str:
    return ".env.development" if app_env == "development" else ".env.production"

class Settings(BaseSettings):

    # Core
    APP_ENV: EnvName = "development"
    APP_NAME: str = "VocalKart"
    DEBUG: bool = False
    GIT_SHA: str = "unknown"

    # Mongo (empty URI = skip connection at startup)
    MONGO_URI: str = ""
    MONGO_DB: str = "vocalkart"

    # Redis (optional, only caches OpenFoodFacts lookups)
    REDIS_URL: str = ""

    # Text generation gateway (OpenAI-compatible chat completions)
    LLM_API_KEY: str = ""
    LLM_BASE_URL: str = "https://ai.gateway.lovable.dev/v1"
    LLM_MODEL: str = "google/gemini-2.5-flash"
    llm_timeout_s: float = 9.0
    llm_max_retries: int = 2

    # OpenFoodFacts
    OFF_BASE_URL: str = "https://world.openfoodfacts.org"
    off_timeout_s: float = 7.0
    off_cache_ttl: int = 24 * 3600             # 24 hours
    off_cache_prefix: str = "off"

    # Alternatives pipeline
    candidate_pool_limit: int = C.CANDIDATE_POOL_LIMIT
    ranked_candidates_k: int = C.RANKED_CANDIDATES_K
    prompt_candidates_k: int = C.PROMPT_CANDIDATES_K
    max_alternatives: int = C.MAX_ALTERNATIVES
    default_match_score: int = C.DEFAULT_MATCH_SCORE

    # Nutrition distance weights (energy / sugar / fat)
    nutrition_weight_energy: float = C.WEIGHT_ENERGY
    nutrition_weight_sugar: float = C.WEIGHT_SUGAR
    nutrition_weight_fat: float = C.WEIGHT_FAT

    # API
    ALLOWED_ORIGINS: str = ""

    # pydantic-settings config will be set dynamically in the factory below
    model_config = SettingsConfigDict(env_file=None, case_sensitive=True)

@lru_cache
def get_settings() -> Settings:
    """
    Factory that chooses the right .env file based on APP_ENV.
    Cache makes it cheap to inject via FastAPI dependencies.
    """
    app_env: EnvName = os.getenv("APP_ENV", "development")  # earliest switch
    env_file = _env_file_for(app_env)
    return Settings(
                _env_file=env_file,  # load .env.development or .env.production
                _env_file_encoding="utf-8"
    )
