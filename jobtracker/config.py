import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Mapping, Optional

from .blocklist import parse_blocklist
from .errors import ConfigError
from .watermark import FirstRunPolicy


def _bool(value: Optional[str], default: bool = False) -> bool:
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _positive_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


@dataclass(frozen=True)
class Settings:
    access_token: str
    fetch_interval: float = 180.0
    blocked_keywords: FrozenSet[str] = field(default_factory=frozenset)
    enable_logging: bool = False
    first_run_policy: FirstRunPolicy = FirstRunPolicy.BASELINE
    retry_base_delay: float = 5.0
    request_timeout: float = 20.0
    db_path: Path = Path("data/jobs.db")
    log_level: str = "INFO"
    log_dir: Path = Path("logs")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables (``os.environ`` by default)."""
        env = os.environ if env is None else env

        token = (env.get("MASTER_ACCESS_TOKEN") or "").strip()
        if not token:
            raise ConfigError("MASTER_ACCESS_TOKEN not set. Add it to the environment or .env.")

        try:
            policy = FirstRunPolicy.parse(env.get("FIRST_RUN_POLICY") or "baseline")
        except ValueError as e:
            raise ConfigError(str(e))

        log_level = (env.get("LOG_LEVEL") or "INFO").strip().upper()
        if log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ConfigError(f"LOG_LEVEL must be a standard level name, got {log_level!r}")

        return cls(
            access_token=token,
            fetch_interval=_positive_float(env, "FETCH_INTERVAL", 180.0),
            blocked_keywords=parse_blocklist(env.get("BLOCKED_KEYWORDS", "")),
            enable_logging=_bool(env.get("ENABLE_LOGGING")),
            first_run_policy=policy,
            retry_base_delay=_positive_float(env, "RETRY_BASE_DELAY", 5.0),
            request_timeout=_positive_float(env, "REQUEST_TIMEOUT", 20.0),
            db_path=Path(env.get("JOBS_DB") or "data/jobs.db"),
            log_level=log_level,
            log_dir=Path(env.get("LOG_DIR") or "logs"),
        )
