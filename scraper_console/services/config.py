"""Console settings, resolved once at startup from the environment."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_FILE = Path(__file__).resolve().parent.parent / ".env"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    manager_url: str = "http://localhost:8000"
    poll_interval_ms: int = 1000
    manager_adapter: str = "http"     # http | mock
    log_capacity: int = 1000
    spawn_max_batch: int = 50
    shrink_policy: str = "warn"       # warn | reset
    manager_timeout_s: float = 10.0

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv(dotenv_path=ENV_FILE, override=False)
        return cls(
            manager_url=os.getenv("SCRAPER_MANAGER_URL", cls.manager_url),
            poll_interval_ms=_int_env("POLL_INTERVAL_MS", cls.poll_interval_ms),
            manager_adapter=os.getenv("MANAGER_ADAPTER", cls.manager_adapter).lower(),
            log_capacity=_int_env("LOG_CAPACITY", cls.log_capacity),
            spawn_max_batch=_int_env("SPAWN_MAX_BATCH", cls.spawn_max_batch),
            shrink_policy=os.getenv("FEED_SHRINK_POLICY", cls.shrink_policy).lower(),
            manager_timeout_s=float(os.getenv("MANAGER_TIMEOUT_S", cls.manager_timeout_s)),
        )
