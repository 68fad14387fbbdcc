from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # make it absolute so reload/CWD doesn't break it
        env_file=Path(__file__).resolve().parents[1] / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="CaseRetrieval", validation_alias="APP_NAME")
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        validation_alias="APP_ENV",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_dir: Path = Field(
        default=Path(__file__).resolve().parents[1] / "logs",
        validation_alias="LOG_DIR",
    )

    # MongoDB (embedding records)
    mongo_uri: str = Field(
        default="mongodb://localhost:27017",
        validation_alias="MONGO_URI",
    )
    mongo_db: str = Field(default="case_retrieval", validation_alias="MONGO_DB")
    mongo_embeddings_collection: str = Field(
        default="note_embeddings",
        validation_alias="MONGO_EMBEDDINGS_COLLECTION",
    )

    # Embeddings
    embedding_provider: Literal["local", "remote"] = Field(
        default="local",
        validation_alias="EMBEDDING_PROVIDER",
        description="'local' runs a sentence-transformers model in process, 'remote' calls OpenAI.",
    )
    local_embedding_model_name: str = Field(
        default="sentence-transformers/all-MiniLM-L6-v2",
        validation_alias="LOCAL_EMBEDDING_MODEL_NAME",
    )
    embedding_device: Literal["cpu", "cuda", "mps"] = Field(
        default="cpu",
        validation_alias="EMBEDDING_DEVICE",
    )
    remote_embedding_model_name: str = Field(
        default="text-embedding-3-small",
        validation_alias="REMOTE_EMBEDDING_MODEL_NAME",
    )

    # For OpenAI (when provider is "remote")
    openai_api_key: str | None = Field(
        default=None,
        validation_alias="OPENAI_API_KEY",
    )
    openai_base_url: str | None = Field(
        default=None,
        validation_alias="OPENAI_BASE_URL",
        description="Override for OpenAI-compatible endpoints. Leave unset for api.openai.com.",
    )


def get_settings() -> Settings:
    """Read settings afresh from the environment.

    Provider selection goes through this on every orchestration call, so a
    changed EMBEDDING_PROVIDER applies without a restart.
    """
    return Settings()


# Global settings instance
settings = Settings()
