# config.py
# Runtime settings from environment variables (a .env file is loaded by the app).

import os
from dataclasses import dataclass
from typing import Optional, Tuple

KNOWN_SOURCES = ("crossref", "openalex", "pubmed", "semanticscholar")


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    value = value.strip()
    return value if value else default


def _env_int(name: str, default: int, *, min_value: Optional[int] = None, max_value: Optional[int] = None) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        value = default
    else:
        try:
            value = int(raw)
        except ValueError as e:
            raise ValueError(f"Invalid integer value for {name}: {raw!r}") from e
    if min_value is not None and value < min_value:
        raise ValueError(f"{name} must be >= {min_value} (got {value})")
    if max_value is not None and value > max_value:
        raise ValueError(f"{name} must be <= {max_value} (got {value})")
    return value


def _env_float(name: str, default: float, *, min_value: Optional[float] = None) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        value = float(default)
    else:
        try:
            value = float(raw)
        except ValueError as e:
            raise ValueError(f"Invalid float value for {name}: {raw!r}") from e
    if min_value is not None and value < min_value:
        raise ValueError(f"{name} must be >= {min_value} (got {value})")
    return value


def _env_sources(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    sources = tuple(dict.fromkeys(s.strip().lower() for s in raw.split(",") if s.strip()))
    unknown = [s for s in sources if s not in KNOWN_SOURCES]
    if unknown:
        raise ValueError(f"{name} has unknown sources {unknown} (choose from {', '.join(KNOWN_SOURCES)})")
    return sources


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    user_agent: str = "citation-cross-check/1.0"
    mailto: str = ""
    verify_timeout_seconds: float = 15.0
    max_verify: int = 25
    verify_workers: int = 4
    verify_sources: Tuple[str, ...] = KNOWN_SOURCES

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            log_level=_env_str("CITECHECK_LOG_LEVEL", "INFO"),
            user_agent=_env_str("CITECHECK_USER_AGENT", "citation-cross-check/1.0"),
            mailto=_env_str("CITECHECK_MAILTO", ""),
            verify_timeout_seconds=_env_float("CITECHECK_VERIFY_TIMEOUT", 15.0, min_value=1.0),
            max_verify=_env_int("CITECHECK_MAX_VERIFY", 25, min_value=1, max_value=200),
            verify_workers=_env_int("CITECHECK_VERIFY_WORKERS", 4, min_value=1, max_value=16),
            verify_sources=_env_sources("CITECHECK_VERIFY_SOURCES", KNOWN_SOURCES),
        )
