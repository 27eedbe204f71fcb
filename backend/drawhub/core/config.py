from pydantic_settings import BaseSettings
from typing import List, Any
import json
from pathlib import Path


def parse_csv_list(v: Any) -> List[str]:
    """Parse a list setting from JSON array or comma-separated string"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [item.strip() for item in v.split(',') if item.strip()]
    return []


def parse_extensions(v: Any) -> List[str]:
    """Parse allowed extensions, normalized to lowercase with a leading dot"""
    extensions = []
    for ext in parse_csv_list(v):
        ext = ext.lower()
        if not ext.startswith('.'):
            ext = f".{ext}"
        extensions.append(ext)
    return extensions


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "DrawHub"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    SECRET_KEY: str = "CHANGE_ME"
    API_VERSION: str = "v1"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./drawhub.db"
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_RECYCLE: int = 1800  # seconds
    DB_SQLITE_TIMEOUT: int = 30  # seconds a writer waits for the SQLite lock

    # ==========================================
    # Authentication
    # ==========================================
    JWT_SECRET_KEY: str = "CHANGE_ME"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours, same as a working day session
    BCRYPT_ROUNDS: int = 12  # 4 for tests (fast), 12 for prod (secure)

    # Corporate e-mail policy
    DEFAULT_EMAIL_DOMAINS_STR: str = "axionpowert.com.br"
    PERSONAL_EMAIL_DOMAINS_STR: str = "gmail.com,hotmail.com,yahoo.com,outlook.com,live.com"

    @property
    def DEFAULT_EMAIL_DOMAINS(self) -> List[str]:
        return [d.lower() for d in parse_csv_list(self.DEFAULT_EMAIL_DOMAINS_STR)]

    @property
    def PERSONAL_EMAIL_DOMAINS(self) -> List[str]:
        return [d.lower() for d in parse_csv_list(self.PERSONAL_EMAIL_DOMAINS_STR)]

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:5000,http://localhost:5173,http://127.0.0.1:5000,http://127.0.0.1:5173"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        return parse_csv_list(self.CORS_ORIGINS_STR)

    # ==========================================
    # File Upload
    # ==========================================
    UPLOAD_PATH: str = "uploads"
    MAX_UPLOAD_SIZE: int = 52428800  # 50MB per file
    MAX_REQUEST_SIZE: int = 524288000  # 500MB per multipart batch
    ALLOWED_EXTENSIONS_STR: str = ".dwg,.pdf"
    UPLOAD_CONFLICT_RETRIES: int = 5  # Re-plan attempts when two uploads race for a version

    @property
    def ALLOWED_EXTENSIONS(self) -> List[str]:
        return parse_extensions(self.ALLOWED_EXTENSIONS_STR)

    # ==========================================
    # Activity feed
    # ==========================================
    ACTIVITY_DEFAULT_LIMIT: int = 10
    ACTIVITY_MAX_LIMIT: int = 100

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 120
    LOGIN_RATE_LIMIT: str = "5/minute"
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Initialize paths after pydantic validation
        self._base_dir = Path(__file__).resolve().parent.parent.parent
        self._upload_dir = Path(self.UPLOAD_PATH)
        if not self._upload_dir.is_absolute():
            self._upload_dir = self._base_dir / self._upload_dir

        # Create directories if they don't exist
        self._upload_dir.mkdir(exist_ok=True, parents=True)
        if self.LOG_FILE:
            Path(self.LOG_FILE).parent.mkdir(exist_ok=True, parents=True)

    @property
    def BASE_DIR(self) -> Path:
        return self._base_dir

    @property
    def UPLOAD_DIR(self) -> Path:
        return self._upload_dir

    def get_project_upload_dir(self, project_id: str) -> Path:
        """Get (and create) the upload directory of a project"""
        upload_dir = self.UPLOAD_DIR / str(project_id)
        upload_dir.mkdir(exist_ok=True, parents=True)
        return upload_dir


# Create settings instance
settings = Settings()
