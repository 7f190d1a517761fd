from __future__ import annotations

import logging
import os
import queue
import threading
import time
from typing import Any, Callable, Optional

from tswio_desktop.runtime.config import BackendConfig, ReadinessPolicy
from tswio_desktop.runtime.errors import StartupError
from tswio_desktop.runtime.presentation import APP_TITLE, SPLASH_HTML, PresentationLayer
from tswio_desktop.runtime.readiness import (
    LaunchOutcome,
    Message,
    OutcomeMessage,
    Probe,
    ReadinessController,
    StatusUpdate,
    run_to_channel,
)
from tswio_desktop.runtime.sidecar import SidecarSupervisor

logger = logging.getLogger(__name__)

SPLASH_VIEW_ID = "splash"
MAIN_VIEW_ID = "main"
FAILURE_MESSAGE = "Failed to start. Please restart the app."
FAILURE_HOLD_SECONDS = 3.0


class LaunchOrchestrator:
    """
    Splash view -> spawn backend -> wait for readiness -> swap to the main view.

    `launch` runs the fatal startup steps on the calling thread and hands the
    readiness loop to a worker thread. `dispatch` is the only code that
    touches views: it drains the worker's messages and applies the outcome.
    """

    def __init__(
        self,
        config: BackendConfig,
        supervisor: SidecarSupervisor,
        probe: Probe,
        presentation: Optional[PresentationLayer] = None,
        splash: bool = True,
        policy: Optional[ReadinessPolicy] = None,
        open_main: Optional[Callable[[str], Any]] = None,
        failure_hold: float = FAILURE_HOLD_SECONDS,
        terminate: Callable[[int], Any] = os._exit,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self.supervisor = supervisor
        self.probe = probe
        self.presentation = presentation
        self.splash = splash
        self.policy = policy or ReadinessPolicy.standard()
        # Opens the app when no presentation layer owns the main view (browser mode)
        self.open_main = open_main
        self.failure_hold = failure_hold
        self.terminate = terminate
        self.sleep = sleep

        self.channel: "queue.Queue[Message]" = queue.Queue()
        self.controller = ReadinessController(probe, self.policy, sleep=sleep)
        self.splash_view: Any = None
        self.main_view: Any = None
        self.worker: Optional[threading.Thread] = None
        self.outcome: Optional[LaunchOutcome] = None

    def create_splash(self) -> None:
        if self.presentation is None or not self.splash:
            return
        try:
            self.splash_view = self.presentation.create_view(
                SPLASH_VIEW_ID,
                title=APP_TITLE,
                html=SPLASH_HTML,
                size=(400, 300),
                resizable=False,
                decorations=False,
            )
        except Exception as e:
            raise StartupError(f"Failed to create splash window: {e}") from e

    def launch(self) -> None:
        """Create the splash view, spawn the backend and start the readiness worker.

        Raises StartupError (or a subclass) without retrying; in that case
        no probe has been issued.
        """
        if self.worker is not None:
            raise RuntimeError("Launch already started")

        self.create_splash()
        self.supervisor.spawn(self.config)

        self.worker = threading.Thread(
            target=run_to_channel,
            args=(self.controller, self.channel),
            name="readiness",
            daemon=True,
        )
        self.worker.start()

    def dispatch(self) -> LaunchOutcome:
        """Apply worker messages until the outcome arrives."""
        while True:
            message = self.channel.get()
            if isinstance(message, StatusUpdate):
                self._show_status(message.text)
            elif isinstance(message, OutcomeMessage):
                self.outcome = message.outcome
                if message.outcome is LaunchOutcome.BACKEND_READY:
                    try:
                        self._on_ready()
                    except Exception:
                        logger.exception("Could not open the main window")
                        self.outcome = LaunchOutcome.BACKEND_FAILED
                        self._on_failed(message.attempts)
                else:
                    self._on_failed(message.attempts)
                return self.outcome

    def run(self) -> LaunchOutcome:
        self.launch()
        return self.dispatch()

    def close(self) -> None:
        self.supervisor.stop()

    def _show_status(self, text: str, error: bool = False) -> None:
        if self.presentation is None or self.splash_view is None:
            logger.debug("Status: %s", text)
            return
        try:
            self.presentation.update_status_text(self.splash_view, text, error=error)
        except Exception as e:
            logger.debug("Status update dropped: %s", e)

    def _on_ready(self) -> None:
        url = self.config.base_url
        logger.info("Opening %s", url)
        if self.presentation is None:
            if self.open_main is not None:
                self.open_main(url)
            return

        # Without a splash the main view is the first window and shows directly
        swap = self.splash_view is not None
        self.main_view = self.presentation.create_view(
            MAIN_VIEW_ID,
            title=APP_TITLE,
            url=url,
            size=(1200, 800),
            min_size=(800, 600),
            hidden=swap,
        )
        self.presentation.on_closed(self.main_view, self.close)
        if swap:
            try:
                self.presentation.close_view(self.splash_view)
            except Exception as e:
                logger.debug("Could not close splash window: %s", e)
            self.presentation.show_view(self.main_view)
            self.splash_view = None

    def _on_failed(self, attempts: int) -> None:
        logger.error("Backend failed to start after %d attempts", attempts)
        self._show_status(FAILURE_MESSAGE, error=True)
        self.sleep(self.failure_hold)
        self.close()
        self.terminate(1)
