import os
from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

user = os.getenv("DB_USER")
password = os.getenv("DB_PASSWORD")
host = os.getenv("DB_HOST")
port = os.getenv("DB_PORT")
db_name = os.getenv("DB_NAME")


class WorkerSettings(BaseModel):
    bot_token: str
    database_url: str
    db_ssl: bool = False
    db_reject_unauthorized: bool = False
    db_pool_size: int = 10
    notify_backend: str = "postgres"
    notify_channel: str = "ladder_session_pickup"
    redis_url: str | None = None
    pacing_delay_sec: float = 2.0
    pending_sweep_sec: int = 60
    ops_api_host: str = "127.0.0.1"
    ops_api_port: int = 0
    log_level: str = "INFO"

    @property
    def worker_id(self) -> str:
        """The bot's numeric id, taken from the token prefix."""
        return self.bot_token.split(":")[0]


def _flag(name: str) -> bool:
    return os.getenv(name, "false").strip().lower() == "true"


def read_settings() -> WorkerSettings:
    """Build WorkerSettings from the environment.

    Raises:
        ValueError: A required value is missing or inconsistent.
    """
    url = os.getenv("DATABASE_URL")
    if not url and all([user, password, host, port, db_name]):
        url = f"postgresql://{user}:{password}@{host}:{port}/{db_name}"

    token = os.getenv("LADDER_BOT_TOKEN")
    if not token or not url:
        raise ValueError("LADDER_BOT_TOKEN or DATABASE_URL is missing.")

    backend = os.getenv("NOTIFY_BACKEND", "postgres").strip().lower()
    if backend not in ("postgres", "redis"):
        raise ValueError(f"Unknown NOTIFY_BACKEND: {backend}")
    redis_url = os.getenv("REDIS_URL")
    if backend == "redis" and not redis_url:
        raise ValueError("REDIS_URL is required when NOTIFY_BACKEND is redis.")

    return WorkerSettings(
        bot_token=token,
        database_url=url,
        db_ssl=_flag("DB_SSL"),
        db_reject_unauthorized=_flag("DB_REJECT_UNAUTHORIZED"),
        db_pool_size=int(os.getenv("DB_POOL_SIZE", "10")),
        notify_backend=backend,
        notify_channel=os.getenv("NOTIFY_CHANNEL", "ladder_session_pickup"),
        redis_url=redis_url,
        pacing_delay_sec=float(os.getenv("PACING_DELAY_SEC", "2.0")),
        pending_sweep_sec=int(os.getenv("PENDING_SWEEP_SEC", "60")),
        ops_api_host=os.getenv("OPS_API_HOST", "127.0.0.1"),
        ops_api_port=int(os.getenv("OPS_API_PORT", "0")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
