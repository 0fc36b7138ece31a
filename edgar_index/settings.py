from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings


PROJECT_ROOT = Path(__file__).parent.parent
ENVIRONMENT_FILE = PROJECT_ROOT / ".env"


class ApplicationConfig(BaseSettings):

    DATA_DIRECTORY: str = str(PROJECT_ROOT / "data")
    CATALOG_FILENAME: str = "edgar_filings.db"
    STORAGE_BUCKET: str = "edgar"

    ARCHIVE_BASE_URL: str = "https://www.sec.gov/Archives/"
    USER_AGENT: str = "Sample-SEC-Research-Tool/1.0 (research@example.com)"
    REQUEST_INTERVAL: float = 0.1  # seconds between requests
    REQUEST_TIMEOUT: Optional[float] = None
    DOWNLOAD_CHUNK_SIZE: int = 64 * 1024

    CONTENT_EXTRACTOR: str = "soup"  # "soup" or "trafilatura"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = str(ENVIRONMENT_FILE)
        env_file_encoding = 'utf-8'
        case_sensitive = True
        extra = 'ignore'


app_settings = ApplicationConfig()
