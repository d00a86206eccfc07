from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Layout of the translation side tables."""

    model_config = SettingsConfigDict(env_prefix="ENTITY_MAPPER_")

    translations_table: str = "translations"
    translation_items_table: str = "translation_items"
    translation_id_column: str = "translationId"
    language_column: str = "languageId"
    data_column: str = "data"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
