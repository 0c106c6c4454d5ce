import os
from dataclasses import dataclass
from typing import List, Mapping, Optional
from urllib.parse import quote

from dotenv import load_dotenv


def load_env_files() -> None:
    """Load `.env.production` or `.env.development`, then a plain `.env`.

    Variables already present in the process environment always win.
    """

    env = (os.environ.get("APP_ENV") or "development").strip().lower()
    load_dotenv(".env.production" if env == "production" else ".env.development")
    load_dotenv()


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = (environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _db_dsn(environ: Mapping[str, str]) -> str:
    """Resolve the database DSN.

    Order of preference:
      1. DATABASE_URL (postgres://... or a SQLite path)
      2. DB_HOST / DB_PORT / DB_USER / DB_PASSWORD / DB_NAME (Postgres)
      3. ./cleaning_checklist.sqlite
    """

    url = (environ.get("DATABASE_URL") or "").strip()
    if url:
        return url

    host = (environ.get("DB_HOST") or "").strip()
    if host:
        port = _env_int(environ, "DB_PORT", 5432)
        user = quote(environ.get("DB_USER") or "", safe="")
        password = quote(environ.get("DB_PASSWORD") or "", safe="")
        name = quote(environ.get("DB_NAME") or "", safe="")
        creds = user
        if password:
            creds = f"{user}:{password}"
        if creds:
            creds += "@"
        return f"postgresql://{creds}{host}:{port}/{name}"

    return "./cleaning_checklist.sqlite"


@dataclass(frozen=True)
class Config:
    """Runtime configuration.

    Built once at startup (see `load_config`) and handed to the app factory.
    Provide secrets via environment variables or an env file, never in source.
    """

    # -----------------
    # Core
    # -----------------
    # Permissive CORS only when APP_ENV=development is set explicitly.
    APP_ENV: str = "production"

    # Postgres URL or SQLite file path.
    DB_DSN: str = "./cleaning_checklist.sqlite"
    # Max concurrent store connections. Waiters beyond this queue without limit.
    DB_POOL_SIZE: int = 10

    # -----------------
    # Auth (JWT)
    # -----------------
    # NOTE: In production you MUST set JWT_SECRET to a strong random value.
    AUTH_JWT_SECRET: str = "dev_change_me"
    AUTH_TOKEN_EXPIRE_MINUTES: int = 60

    # -----------------
    # HTTP
    # -----------------
    # Comma-separated origins, enforced only outside development.
    CORS_ALLOW_ORIGINS: str = ""
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8080

    # -----------------
    # Checklist
    # -----------------
    DEFAULT_FACILITY: str = "galleria"

    @property
    def is_development(self) -> bool:
        return self.APP_ENV.strip().lower() == "development"

    def cors_origins(self) -> List[str]:
        return [o.strip() for o in (self.CORS_ALLOW_ORIGINS or "").split(",") if o.strip()]


def load_config(environ: Optional[Mapping[str, str]] = None) -> Config:
    if environ is None:
        load_env_files()
        environ = os.environ

    return Config(
        APP_ENV=(environ.get("APP_ENV") or "production").strip().lower(),
        DB_DSN=_db_dsn(environ),
        DB_POOL_SIZE=max(1, _env_int(environ, "DB_POOL_SIZE", 10)),
        AUTH_JWT_SECRET=environ.get("JWT_SECRET") or "dev_change_me",
        AUTH_TOKEN_EXPIRE_MINUTES=max(1, _env_int(environ, "AUTH_TOKEN_EXPIRE_MINUTES", 60)),
        CORS_ALLOW_ORIGINS=environ.get("ALLOWED_ORIGINS", ""),
        API_HOST=environ.get("API_HOST") or "0.0.0.0",
        API_PORT=_env_int(environ, "PORT", 8080),
        DEFAULT_FACILITY=(environ.get("DEFAULT_FACILITY") or "galleria").strip() or "galleria",
    )
