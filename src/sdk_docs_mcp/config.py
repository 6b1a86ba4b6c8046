from typing import Optional

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    catalog_path: str = "data/catalog.json"

    # Provider chain
    rag_provider: str = "auto"
    rag_fallback: str = "lexical"

    # Cache locations
    rag_cache_dir: str = "data/.rag-cache"
    rag_model_cache_dir: str = "data/.rag-cache/models"

    # Local model
    rag_local_model: str = "sentence-transformers/all-MiniLM-L6-v2"

    # Chunking and ranking
    rag_chunk_size: int = 1200
    rag_chunk_overlap: int = 200
    rag_max_chunks_per_doc: int = 6
    rag_max_text_chars: int = 4000
    rag_min_score: float = 0.2
    rag_include_score: bool = False

    rag_rebuild: bool = False
    rag_prewarm: bool = False
    rag_prewarm_block: bool = False

    # Remote embeddings (Gemini)
    gemini_api_key: Optional[SecretStr] = None
    gemini_embed_model: str = "models/gemini-embedding-001"
    gemini_api_base_url: str = "https://generativelanguage.googleapis.com"
    gemini_embed_batch_size: int = 16
    gemini_timeout: float = 60.0

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    @field_validator("rag_provider", "rag_fallback", mode="before")
    @classmethod
    def _lower_provider(cls, v: str) -> str:
        value = str(v).strip().lower()
        # "fuse" is accepted as an alias of the lexical provider.
        return "lexical" if value == "fuse" else value

    @field_validator("gemini_embed_model", mode="before")
    @classmethod
    def _prefix_gemini_model(cls, v: Optional[str]) -> str:
        if not v:
            return "models/embedding-001"
        return v if v.startswith("models/") else f"models/{v}"

    @property
    def has_gemini_key(self) -> bool:
        return bool(self.gemini_api_key and self.gemini_api_key.get_secret_value())


settings = Settings()
