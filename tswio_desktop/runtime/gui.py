from __future__ import annotations

import logging
import sys
import time
from pathlib import Path
from typing import Optional

from tswio_desktop.runtime.config import ReadinessPolicy, resolve_backend_config
from tswio_desktop.runtime.errors import StartupError
from tswio_desktop.runtime.orchestrator import LaunchOrchestrator
from tswio_desktop.runtime.probe import HealthProbe
from tswio_desktop.runtime.sidecar import SidecarSupervisor

logger = logging.getLogger(__name__)


def _report_startup_error(exc: Exception) -> int:
    logger.error("Startup aborted: %s", exc)
    print(f"TSW IO startup error: {exc}", file=sys.stderr)
    return 1


def build_orchestrator(
    port: Optional[int] = None,
    sidecar: Optional[Path] = None,
    splash: bool = True,
    presentation=None,
    open_main=None,
) -> LaunchOrchestrator:
    """Wire config, probe and supervisor for one of the two readiness variants."""
    config = resolve_backend_config(port=port)
    minimal = not splash
    policy = ReadinessPolicy.minimal() if minimal else ReadinessPolicy.standard()
    return LaunchOrchestrator(
        config=config,
        supervisor=SidecarSupervisor.from_env(executable=sidecar),
        probe=HealthProbe.for_policy(config, minimal=minimal),
        presentation=presentation,
        splash=splash,
        policy=policy,
        open_main=open_main,
    )


def run_desktop_mode(port: Optional[int] = None, sidecar: Optional[Path] = None, splash: bool = True) -> int:
    """Start the backend and show it in a native window."""
    from tswio_desktop.runtime.presentation import WebviewPresentation

    print("Starting TSW IO (Desktop mode)...")
    try:
        presentation = WebviewPresentation()
        orchestrator = build_orchestrator(port=port, sidecar=sidecar, splash=splash, presentation=presentation)
        orchestrator.launch()
    except (StartupError, ImportError, ValueError) as exc:
        return _report_startup_error(exc)

    try:
        if splash:
            presentation.start(orchestrator.dispatch)
        else:
            # pywebview needs a window before its loop starts
            orchestrator.dispatch()
            presentation.start()
        print("Window closed, exiting...")
    finally:
        orchestrator.close()

    print("Goodbye!")
    return 0


def run_web_mode(port: Optional[int] = None, sidecar: Optional[Path] = None) -> int:
    """Start the backend and open it in the system browser instead of a native window."""
    import webbrowser

    print("Starting TSW IO (Web mode)...")
    try:
        orchestrator = build_orchestrator(port=port, sidecar=sidecar, splash=False, open_main=webbrowser.open)
        orchestrator.launch()
    except (StartupError, ImportError, ValueError) as exc:
        return _report_startup_error(exc)

    url = orchestrator.config.base_url
    try:
        orchestrator.dispatch()
        print("\n" + "=" * 60)
        print("  TSW IO is running in browser mode")
        print(f"  Open in browser: {url}")
        print("=" * 60)
        print("\nPress Ctrl+C to stop...")
        while orchestrator.supervisor.process is not None and orchestrator.supervisor.process.poll() is None:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        orchestrator.close()

    print("Goodbye!")
    return 0
