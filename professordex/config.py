from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "ProfessorDex"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/professordex"

    tcg_api_url: str = "https://api.pokemontcg.io/v2"
    # Empty key means the X-Api-Key header is not sent (anonymous rate limits)
    tcg_api_key: str = ""
    tcg_api_timeout: float = 30.0
    tcg_page_size: int = 250


settings = Settings()


# =============================================================================
# DECK-BUILDING LIMITS
# =============================================================================

# Copies of one card name allowed in a deck (basic energy is exempt)
MAX_COPIES_PER_NAME = 4

# ACE SPEC cards allowed per deck, across all names
MAX_ACE_SPEC_CARDS = 1

# Target deck size shown alongside the running total
DECK_SIZE = 60

# Longest collection or deck name accepted
MAX_NAME_LENGTH = 30
