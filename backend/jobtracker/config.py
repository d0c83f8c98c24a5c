from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_dir: Path = Path.home() / "JobTracker"
    api_prefix: str = "/api/v1"
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: list[str] = [
        "http://127.0.0.1:5173",
        "http://localhost:5173",
    ]
    log_level: str = "INFO"
    default_currency: str = "EUR"
    default_page_size: int = 50
    max_page_size: int = 500

    @property
    def db_path(self) -> Path:
        return self.data_dir / "tracker.sqlite"

    model_config = {"env_prefix": "TRACKER_"}


settings = Settings()
