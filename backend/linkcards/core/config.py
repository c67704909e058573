from pathlib import Path
from typing import Literal

from pydantic import Field, ValidationInfo
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


BACKEND_ROOT = Path(__file__).resolve().parents[2]
if (BACKEND_ROOT.parent / 'backend').exists() and (BACKEND_ROOT.parent / 'pyproject.toml').exists():
    PROJECT_ROOT = BACKEND_ROOT.parent
else:
    PROJECT_ROOT = BACKEND_ROOT


def default_storage_path() -> str:
    return str((PROJECT_ROOT / 'storage').resolve())


def default_database_url() -> str:
    return f'sqlite:///{Path(default_storage_path()) / "linkcards.sqlite3"}'


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', case_sensitive=False, extra='ignore')

    app_name: str = 'Linkcards'
    api_v1_prefix: str = '/api'
    debug: bool = False
    log_level: str = 'INFO'

    storage_path: str = Field(default_factory=default_storage_path)
    database_url: str = Field(default_factory=default_database_url)
    content_path: str = 'content.json'

    cache_backend: Literal['memory', 'sql', 'file'] = 'sql'
    cache_dir: str = 'cache'

    # Crawler user agents are served fuller Open Graph markup than browsers.
    scraper_user_agent: str = 'facebookexternalhit/1.1 (+http://www.facebook.com/externalhit_uatext.php)'
    scrape_timeout_seconds: float = 10.0
    scrape_retry_attempts: int = Field(default=2, ge=1)
    scrape_retry_backoff_seconds: float = 0.5
    scrape_max_bytes: int = Field(default=1_000_000, ge=1)
    metadata_extractor: Literal['regex', 'soup'] = 'regex'
    max_concurrent_scrapes: int = Field(default=0, ge=0)

    link_cache_ttl_hours: float = 24 * 7
    fallback_cache_ttl_hours: float = 1
    batch_cache_ttl_hours: float = 24

    @field_validator('storage_path')
    @classmethod
    def resolve_storage_path(cls, value: str) -> str:
        path = Path(value)
        if path.is_absolute():
            return str(path)
        return str((PROJECT_ROOT / path).resolve())

    @field_validator('content_path', 'cache_dir')
    @classmethod
    def resolve_under_storage(cls, value: str, info: ValidationInfo) -> str:
        path = Path(value)
        if path.is_absolute():
            return str(path)
        storage = info.data.get('storage_path') or default_storage_path()
        return str((Path(storage) / path).resolve())


settings = Settings()
