import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

from dotenv import load_dotenv

from app.ai.constants import DEFAULT_MINIMAX_DEPTH

load_dotenv()


@dataclass(frozen=True)
class Settings:
    search_depth: int = DEFAULT_MINIMAX_DEPTH
    max_request_depth: int = 6
    log_level: str = "INFO"
    cors_origins: Tuple[str, ...] = ("*",)


def _int_env(name, default):
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


@lru_cache(maxsize=1)
def get_settings():
    origins = os.getenv("CORS_ORIGINS", "*")
    return Settings(
        search_depth=_int_env("ATAXX_SEARCH_DEPTH", DEFAULT_MINIMAX_DEPTH),
        max_request_depth=_int_env("ATAXX_MAX_REQUEST_DEPTH", 6),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        cors_origins=tuple(origin.strip() for origin in origins.split(",") if origin.strip()),
    )
