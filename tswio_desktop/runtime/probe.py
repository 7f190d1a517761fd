from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

import httpx
from pydantic import BaseModel, ConfigDict

from tswio_desktop.runtime.config import BackendConfig

logger = logging.getLogger(__name__)


class ProbeStatus(str, Enum):
    READY = "ready"
    NOT_READY = "not_ready"
    TRANSPORT_ERROR = "transport_error"


class ProbeResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: ProbeStatus
    detail: Optional[str] = None

    @property
    def is_ready(self) -> bool:
        return self.status is ProbeStatus.READY

    @classmethod
    def ready(cls) -> "ProbeResult":
        return cls(status=ProbeStatus.READY)

    @classmethod
    def not_ready(cls, detail: Optional[str] = None) -> "ProbeResult":
        return cls(status=ProbeStatus.NOT_READY, detail=detail)

    @classmethod
    def transport_error(cls, detail: str) -> "ProbeResult":
        return cls(status=ProbeStatus.TRANSPORT_ERROR, detail=detail)


class HealthProbe:
    """
    Single readiness check against the backend.

    A 2xx answer means the backend finished booting (database reachable,
    migrations applied). Any other answer means the server is up but still
    initializing. No answer at all is reported as a transport error, or
    folded into NOT_READY when `report_transport_errors` is off.
    The probe never retries; the caller owns the retry loop.
    """

    def __init__(self, config: BackendConfig, path: Optional[str] = None, report_transport_errors: bool = True):
        self.config = config
        self.url = config.url_for(path) if path is not None else config.health_url
        self.report_transport_errors = report_transport_errors

    @classmethod
    def for_policy(cls, config: BackendConfig, minimal: bool = False) -> "HealthProbe":
        if minimal:
            return cls(config, path="/", report_transport_errors=False)
        return cls(config)

    def check(self) -> ProbeResult:
        try:
            resp = httpx.get(self.url)
        except httpx.HTTPError as e:
            if self.report_transport_errors:
                return ProbeResult.transport_error(f"{type(e).__name__}: {e}")
            return ProbeResult.not_ready()

        if resp.is_success:
            return ProbeResult.ready()
        logger.debug("Health check %s returned %s", self.url, resp.status_code)
        return ProbeResult.not_ready(f"HTTP {resp.status_code}")
