from __future__ import annotations

import logging
import queue
import time
from enum import Enum
from typing import Callable, Optional, Protocol, Sequence, Union

from pydantic import BaseModel, ConfigDict

from tswio_desktop.runtime.config import ReadinessPolicy, StatusBand
from tswio_desktop.runtime.probe import ProbeResult, ProbeStatus

logger = logging.getLogger(__name__)


class Probe(Protocol):
    def check(self) -> ProbeResult:
        ...


class LaunchOutcome(str, Enum):
    BACKEND_READY = "backend_ready"
    BACKEND_FAILED = "backend_failed"


class ControllerState(str, Enum):
    PROBING = "probing"
    READY = "ready"
    EXHAUSTED = "exhausted"


class StatusUpdate(BaseModel):
    model_config = ConfigDict(frozen=True)

    attempt: int
    text: str


class OutcomeMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    outcome: LaunchOutcome
    attempts: int


Message = Union[StatusUpdate, OutcomeMessage]


def status_message(attempt: int, bands: Sequence[StatusBand]) -> str:
    """Map an attempt number onto the first band whose bound it is below."""
    for band in bands:
        if band.upper_bound is None or attempt < band.upper_bound:
            return band.message
    return bands[-1].message


class ReadinessController:
    """
    Polls the backend until it reports healthy or the retry budget runs out.

    Individual failed probes are never fatal. Only exhausting
    `policy.max_retries` attempts yields BACKEND_FAILED, so the worst case
    wait is `max_retries * retry_delay` plus probe latency.
    """

    def __init__(
        self,
        probe: Probe,
        policy: Optional[ReadinessPolicy] = None,
        on_status: Optional[Callable[[StatusUpdate], None]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.probe = probe
        self.policy = policy or ReadinessPolicy.standard()
        self.on_status = on_status
        self._sleep = sleep
        self.attempt = 1
        self.state = ControllerState.PROBING
        self.outcome: Optional[LaunchOutcome] = None

    def _emit_status(self, update: StatusUpdate) -> None:
        if self.on_status is None:
            return
        try:
            self.on_status(update)
        except Exception as e:
            logger.debug("Status update dropped: %s", e)

    def run(self) -> LaunchOutcome:
        if self.state is not ControllerState.PROBING:
            raise RuntimeError(f"Readiness controller already finished ({self.state.value})")

        max_retries = self.policy.max_retries
        while self.attempt <= max_retries:
            result = self.probe.check()
            if result.is_ready:
                logger.info("Backend ready after %d attempts", self.attempt)
                self.state = ControllerState.READY
                self.outcome = LaunchOutcome.BACKEND_READY
                return self.outcome

            if result.status is ProbeStatus.TRANSPORT_ERROR:
                logger.debug("Health check error: %s", result.detail)

            self._emit_status(StatusUpdate(
                attempt=self.attempt,
                text=status_message(self.attempt, self.policy.status_bands),
            ))
            logger.info("Waiting for backend... attempt %d/%d", self.attempt, max_retries)
            self._sleep(self.policy.retry_delay)
            if self.attempt == max_retries:
                break
            self.attempt += 1

        logger.warning("Retry budget of %d attempts exhausted", max_retries)
        self.state = ControllerState.EXHAUSTED
        self.outcome = LaunchOutcome.BACKEND_FAILED
        return self.outcome


def run_to_channel(controller: ReadinessController, channel: "queue.Queue[Message]") -> LaunchOutcome:
    """Worker-thread entry: forward status updates and the outcome as messages."""
    controller.on_status = channel.put
    try:
        outcome = controller.run()
    except Exception:
        # The foreground waits on this channel; it must always get an outcome.
        logger.exception("Readiness check crashed")
        outcome = LaunchOutcome.BACKEND_FAILED
    channel.put(OutcomeMessage(outcome=outcome, attempts=controller.attempt))
    return outcome
