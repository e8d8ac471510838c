"""Async SQLAlchemy engine and session helpers."""

import ssl
from typing import Any, Dict, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from podsync.config import settings


def normalize_db_url(url: str) -> str:
    """Select the asyncpg driver for bare postgres/postgresql URLs.

    An explicit driver (e.g. postgresql+psycopg, sqlite+aiosqlite) is kept.
    """
    u = make_url(url)
    driver = (u.drivername or "").lower()
    if "+" not in driver and driver in ("postgres", "postgresql"):
        u = u.set(drivername="postgresql+asyncpg")
    return u.render_as_string(hide_password=False)


def prepare_connection(url: str) -> Tuple[str, Dict[str, Any]]:
    """Strip libpq-only query args and derive asyncpg connect kwargs."""
    normalized_url = normalize_db_url(url)
    split = urlsplit(normalized_url)
    query_pairs = parse_qsl(split.query, keep_blank_values=True)

    sslmode = None
    filtered_pairs = []
    for key, value in query_pairs:
        if key == "sslmode":
            sslmode = value
            continue
        if key == "channel_binding":
            continue
        filtered_pairs.append((key, value))

    cleaned_query = urlencode(filtered_pairs, doseq=True)
    cleaned_url = urlunsplit(split._replace(query=cleaned_query)).rstrip("?")

    connect_args: Dict[str, Any] = {}
    if sslmode:
        mode = sslmode.lower()
        if mode == "disable":
            connect_args["ssl"] = False
        elif mode in {"allow", "prefer"}:
            # asyncpg negotiates TLS itself when the server asks for it.
            pass
        elif mode in {"require", "verify-ca"}:
            ssl_context = ssl.create_default_context()
            ssl_context.check_hostname = False
            if mode == "require":
                ssl_context.verify_mode = ssl.CERT_NONE
            connect_args["ssl"] = ssl_context
        else:
            connect_args["ssl"] = ssl.create_default_context()

    return cleaned_url, connect_args


DATABASE_URL, CONNECT_ARGS = prepare_connection(settings.database_url)

engine = create_async_engine(
    DATABASE_URL,
    echo=settings.sql_echo,
    pool_pre_ping=True,
    connect_args=CONNECT_ARGS,
)
SessionLocal = async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


def load_schema_modules() -> None:
    """Import table modules so SQLModel metadata is fully populated."""
    from podsync.schemas import episodes, podcasts  # noqa: F401


async def init_db() -> None:
    """Create tables directly (dev only; deployed databases use Alembic)."""
    load_schema_modules()
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def dispose_engine() -> None:
    """Dispose of the async engine and its connection pool."""
    await engine.dispose()


def describe_database_url(url: str) -> str:
    """Return a sanitized, human-readable description of the DB URL for logging.

    Example: "postgresql+asyncpg://user@host:5432/dbname"
    Passwords are never included.
    """
    try:
        u = make_url(url)
        auth = u.username or "?"
        host = u.host or "?"
        port = f":{u.port}" if u.port else ""
        db = u.database or "?"
        return f"{u.drivername}://{auth}@{host}{port}/{db}"
    except Exception:
        return "<unparseable database URL>"
