"""Application configuration loaded from environment variables and .env file."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Values are loaded from environment variables first,
    then from a .env file in the project root as fallback.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    DATABASE_URL: str = "sqlite:///./dev.db"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Static reference data
    ITEM_CATALOG_PATH: str = "src/data/items.json"
    TRAIT_CATALOG_PATH: str = "src/data/traits.json"
    RECIPE_BOOK_PATH: str = "src/data/recipes.json"

    # Container capacities (distinct stacks, not quantity)
    PLAYER_CAPACITY: int = 20
    SAFE_CAPACITY: int = 5
    STORAGE_CAPACITY: int = 10

    CRAFT_SLOTS: int = 3
    MAX_ENERGY: int = 50

    # Consume an item even when its effect is already capped (full HP medkit)
    CONSUME_WHEN_CAPPED: bool = True


settings = Settings()
