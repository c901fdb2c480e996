import ssl

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from ladder_helper.load_secrets import WorkerSettings


def to_asyncpg_dsn(database_url: str) -> str:
    """Plain libpq-style DSN, as asyncpg.connect() expects it."""
    for prefix in ("postgresql+asyncpg://", "postgres://"):
        if database_url.startswith(prefix):
            return "postgresql://" + database_url[len(prefix):]
    return database_url


def to_sqlalchemy_url(database_url: str) -> str:
    return "postgresql+asyncpg://" + to_asyncpg_dsn(database_url)[len("postgresql://"):]


def build_ssl_context(settings: WorkerSettings) -> ssl.SSLContext | None:
    if not settings.db_ssl:
        return None
    context = ssl.create_default_context()
    if not settings.db_reject_unauthorized:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def create_engine(settings: WorkerSettings) -> AsyncEngine:
    connect_args = {}
    ssl_context = build_ssl_context(settings)
    if ssl_context is not None:
        connect_args["ssl"] = ssl_context

    return create_async_engine(
        to_sqlalchemy_url(settings.database_url),
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_pool_size,
        pool_pre_ping=True,
        connect_args=connect_args,
    )
