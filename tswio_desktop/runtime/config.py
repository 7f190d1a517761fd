from __future__ import annotations

import os
from typing import Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_BACKEND_PORT = 4000
HEALTH_PATH = "/api/health"


class BackendConfig(BaseModel):
    """Connection parameters of the backend sidecar, fixed for the process lifetime."""

    model_config = ConfigDict(frozen=True)

    host: str = "localhost"
    port: int = Field(DEFAULT_BACKEND_PORT, ge=1, le=65535)
    scheme: str = "http"
    health_path: str = HEALTH_PATH

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}"

    @property
    def health_url(self) -> str:
        return self.url_for(self.health_path)

    def url_for(self, path: str) -> str:
        if not path.startswith("/"):
            path = "/" + path
        return f"{self.base_url}{path}"

    def sidecar_env(self) -> Dict[str, str]:
        """Environment the backend expects: listening port, prod mode, packaged binary."""
        return {
            "PORT": str(self.port),
            "MIX_ENV": "prod",
            "BURRITO": "1",
        }


class StatusBand(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Exclusive. None marks the catch-all band.
    upper_bound: Optional[int] = None
    message: str


DEFAULT_STATUS_BANDS = (
    StatusBand(upper_bound=10, message="Starting server..."),
    StatusBand(upper_bound=30, message="Running database migrations..."),
    StatusBand(message="Almost ready..."),
)


class ReadinessPolicy(BaseModel):
    """Retry budget of the readiness loop.

    The splash variant polls more often for longer (`standard`), the bare
    variant polls once a second (`minimal`).
    """

    model_config = ConfigDict(frozen=True)

    max_retries: int = Field(120, ge=1)
    retry_delay: float = Field(0.5, ge=0.0)
    status_bands: List[StatusBand] = Field(default_factory=lambda: list(DEFAULT_STATUS_BANDS), min_length=1)

    @classmethod
    def standard(cls) -> "ReadinessPolicy":
        return cls(max_retries=120, retry_delay=0.5)

    @classmethod
    def minimal(cls) -> "ReadinessPolicy":
        return cls(max_retries=60, retry_delay=1.0)

    @property
    def worst_case_wait(self) -> float:
        return self.max_retries * self.retry_delay


def _env_int(env: Mapping[str, str], name: str) -> Optional[int]:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw.strip())
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


def resolve_backend_config(
    port: Optional[int] = None,
    env: Optional[Mapping[str, str]] = None,
) -> BackendConfig:
    """Build the backend config once at startup.

    Explicit arguments win over TSWIO_BACKEND_* environment variables,
    which win over the defaults.
    """
    env = os.environ if env is None else env
    values: Dict[str, object] = {}

    env_port = _env_int(env, "TSWIO_BACKEND_PORT")
    if port is not None:
        values["port"] = port
    elif env_port is not None:
        values["port"] = env_port

    host = env.get("TSWIO_BACKEND_HOST", "").strip()
    if host:
        values["host"] = host

    return BackendConfig(**values)
