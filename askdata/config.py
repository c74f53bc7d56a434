from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    openai_api_key: Optional[str] = Field(None, validation_alias="OPENAI_API_KEY")
    openai_model: str = Field("gpt-4o", validation_alias="OPENAI_MODEL")
    embedding_model: str = "text-embedding-3-small"
    embedding_dim: int = 1536

    qdrant_url: str = Field("http://localhost:6333", validation_alias="QDRANT_URL")
    qdrant_api_key: Optional[str] = Field(None, validation_alias="QDRANT_API_KEY")
    pattern_collection: str = "PromptPattern"
    schema_collection: str = "SchemaChunk"

    # Routing knobs
    match_certainty_floor: float = 0.7
    match_top_k: int = 5
    fallback_confidence_threshold: float = 0.6
    history_window: int = 3
    suggestion_limit: int = 10
    call_timeout_s: float = 20.0

    handlers_module: Optional[str] = None

    trace: bool = False
    trace_dir: Path = Path("logs") / "wal"

    model_config = SettingsConfigDict(
        env_prefix="ASKDATA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
