from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    environment: str = "development"
    log_level: str = "INFO"

    openai_api_key: SecretStr = SecretStr("")
    openai_base_url: str = "https://api.openai.com/v1"
    embedding_model: str = "text-embedding-3-small"
    embedding_dimension: int = 1536  # text-embedding-3-small
    classifier_model: str = "gpt-4o-mini"

    pinecone_api_key: SecretStr = SecretStr("")
    pinecone_index_host: str = ""
    pinecone_namespace: str = ""

    # Empty key disables long-term memory
    mem0_api_key: SecretStr = SecretStr("")
    mem0_base_url: str = "https://api.mem0.ai"

    # Retrieval pipeline (character based)
    chunk_size: int = 800
    chunk_overlap: int = 100
    upsert_batch_size: int = 100
    embed_concurrency: int = 1
    default_top_k: int = 5

    # Wall-clock budgets, seconds
    ingest_timeout_seconds: float = 300.0
    chat_timeout_seconds: float = 60.0
    http_timeout_seconds: float = 30.0

    ingest_secret: SecretStr = SecretStr("")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

settings = Settings()
