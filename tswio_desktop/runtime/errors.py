from __future__ import annotations


class StartupError(RuntimeError):
    """Fatal launcher error raised before the readiness loop starts."""


class SidecarUnavailableError(StartupError):
    """The backend executable could not be located."""


class SidecarSpawnError(StartupError):
    """The backend executable was found but the process could not be started."""
