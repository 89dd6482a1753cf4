from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"
    debug: bool = False

    gemini_api_key: str = ""
    gemini_model: str = ""
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    gemini_models_url: str = "https://generativelanguage.googleapis.com/v1/models"
    gemini_timeout_seconds: int = 60

    extraction_provider: str = "gemini"
    extraction_temperature: float = 0.0
    extraction_api_url: str = ""

    classifier: str = "text_layer"
    classifier_min_page_chars: int = 20
    pdf_engine: str = "pdfplumber"

    preprocess_delay_seconds: float = 0.8
    classify_delay_seconds: float = 0.6

    rate_limit_max_retries: int = 3
    rate_limit_backoff_seconds: float = 5.0
    rate_limit_max_backoff_seconds: float = 60.0

    store_backend: str = "memory"
    store_json_path: str = "docuextract-documents.json"

    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "docuextract"
    db_username: str = "docuextract"
    db_password: str = "secret"
