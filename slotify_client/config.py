"""
Client Configuration

All tunables are read from the environment once, at startup.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Mapping, Optional
import os


DEFAULT_BASE_URL = "http://localhost:8080"


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _float_env(env: Mapping[str, str], name: str, default: Optional[float]) -> Optional[float]:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class ClientConfig:
    """
    Configuration for the scheduling client.

    ``read_timeout_seconds`` of None means a stream read may wait forever;
    an upload then only ends when the server closes the stream.
    """
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = 10.0
    read_timeout_seconds: Optional[float] = None
    day_start_hour: int = 7
    day_end_hour: int = 19
    default_duration_minutes: int = 30
    default_buffer_minutes: int = 10
    log_level: str = "WARNING"

    def __post_init__(self):
        if not 0 <= self.day_start_hour < self.day_end_hour <= 24:
            raise ValueError(
                f"Invalid display window {self.day_start_hour}-{self.day_end_hour}"
            )

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> ClientConfig:
        env = os.environ if env is None else env
        return cls(
            base_url=env.get("SLOTIFY_BASE_URL", "").strip() or DEFAULT_BASE_URL,
            timeout_seconds=_float_env(env, "SLOTIFY_TIMEOUT_SECONDS", 10.0),
            read_timeout_seconds=_float_env(env, "SLOTIFY_READ_TIMEOUT_SECONDS", None),
            day_start_hour=_int_env(env, "SLOTIFY_DAY_START_HOUR", 7),
            day_end_hour=_int_env(env, "SLOTIFY_DAY_END_HOUR", 19),
            default_duration_minutes=_int_env(env, "SLOTIFY_DEFAULT_DURATION_MINUTES", 30),
            default_buffer_minutes=_int_env(env, "SLOTIFY_DEFAULT_BUFFER_MINUTES", 10),
            log_level=env.get("SLOTIFY_LOG_LEVEL", "").strip().upper() or "WARNING",
        )
