"""Settings from environment variables (and a .env file, if present)."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

_REPO_ROOT = Path(__file__).resolve().parent.parent.parent

BACKEND_HTTP = "http"
BACKEND_MEMORY = "memory"


def load_env() -> None:
    """Load .env from repo root or current dir (first one found wins)."""
    for path in (_REPO_ROOT / ".env", Path.cwd() / ".env"):
        if path.exists():
            load_dotenv(path)
            break


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, default).strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    api_base_url: str = "http://localhost:8080/api"
    api_token: str | None = None
    backend: str = BACKEND_HTTP
    debounce_ms: int = 500
    coordinate_precision: int = 6
    close_up_zoom: int = 15
    fit_padding: int = 50
    default_center: tuple[float, float] = (-25.4284, -49.2733)
    default_zoom: int = 12
    page_size: int = 10

    @property
    def quiet_period(self) -> float:
        return self.debounce_ms / 1000.0

    @classmethod
    def from_env(cls) -> "Settings":
        backend = _env_str("GEOCONTACTS_BACKEND", BACKEND_HTTP).lower()
        if backend not in (BACKEND_HTTP, BACKEND_MEMORY):
            raise ValueError(f"GEOCONTACTS_BACKEND must be 'http' or 'memory', got {backend!r}")
        return cls(
            api_base_url=_env_str("CONTACTS_API_URL", cls.api_base_url),
            api_token=os.environ.get("CONTACTS_API_TOKEN", "").strip() or None,
            backend=backend,
            debounce_ms=_env_int("LOOKUP_DEBOUNCE_MS", cls.debounce_ms),
            coordinate_precision=_env_int("COORDINATE_PRECISION", cls.coordinate_precision),
            close_up_zoom=_env_int("CLOSE_UP_ZOOM", cls.close_up_zoom),
            fit_padding=_env_int("FIT_PADDING", cls.fit_padding),
            default_center=(
                _env_float("DEFAULT_CENTER_LAT", cls.default_center[0]),
                _env_float("DEFAULT_CENTER_LNG", cls.default_center[1]),
            ),
            default_zoom=_env_int("DEFAULT_ZOOM", cls.default_zoom),
            page_size=_env_int("PAGE_SIZE", cls.page_size),
        )
