from pydantic_settings import BaseSettings, SettingsConfigDict

from pdfchat.chunking.models import ChunkOptions


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    ollama_url: str = "http://localhost:11434"
    ollama_llm_model: str = "llama3.2:3b"
    llm_temperature: float = 0.2
    llm_timeout_s: float = 120.0

    chunk_size: int = 800
    chunk_overlap: int = 150
    min_chunk_size: int = 100
    search_top_k: int = 5

    ocr_enabled: bool = False
    ocr_lang: str = "jpn+eng"
    ocr_dpi: int = 200

    title_max_chars: int = 100

    def chunk_options(self) -> ChunkOptions:
        return ChunkOptions(
            chunk_size=self.chunk_size,
            chunk_overlap=self.chunk_overlap,
            min_chunk_size=self.min_chunk_size,
        )


settings = Settings()
