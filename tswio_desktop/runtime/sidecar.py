from __future__ import annotations

import logging
import os
import platform
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Callable, List, Mapping, Optional

from tswio_desktop.runtime.config import BackendConfig
from tswio_desktop.runtime.errors import SidecarSpawnError, SidecarUnavailableError

logger = logging.getLogger(__name__)

SIDECAR_NAME = "tsw_io_backend"
# Hide the console window of the child on Windows
CREATE_NO_WINDOW = 0x08000000


def target_triple(system: Optional[str] = None, machine: Optional[str] = None) -> Optional[str]:
    """Suffix the desktop build script appends to the sidecar binary name."""
    system = system or platform.system()
    machine = (machine or platform.machine()).lower()
    if system == "Darwin":
        return "aarch64-apple-darwin" if machine in ("arm64", "aarch64") else "x86_64-apple-darwin"
    if system == "Linux":
        return "x86_64-unknown-linux-gnu"
    if system == "Windows":
        return "x86_64-pc-windows-msvc"
    return None


def get_resource_dir() -> Path:
    """
    Directory holding bundled binaries, works for dev and for PyInstaller
    """
    if hasattr(sys, '_MEIPASS'):
        return Path(sys._MEIPASS)
    if getattr(sys, 'frozen', False):
        return Path(sys.executable).resolve().parent
    return Path.cwd()


def candidate_names(system: Optional[str] = None) -> List[str]:
    system = system or platform.system()
    names = [SIDECAR_NAME]
    triple = target_triple(system)
    if triple:
        names.insert(0, f"{SIDECAR_NAME}-{triple}")
    if system == "Windows":
        names = [f"{n}.exe" for n in names]
    return names


class SidecarSupervisor:
    """
    Spawns the backend executable once and keeps its handle.

    There is no restart logic: the child lives as long as the launcher,
    and `stop` is called when the application window goes away.
    """

    def __init__(
        self,
        executable: Optional[Path] = None,
        search_dirs: Optional[List[Path]] = None,
        popen: Optional[Callable[..., subprocess.Popen]] = None,
    ):
        self.executable = Path(executable) if executable else None
        self.search_dirs = search_dirs
        self._popen = popen or subprocess.Popen
        self.process: Optional[subprocess.Popen] = None

    @classmethod
    def from_env(cls, executable: Optional[Path] = None, env: Optional[Mapping[str, str]] = None) -> "SidecarSupervisor":
        env = os.environ if env is None else env
        if executable is None and env.get("TSWIO_SIDECAR_PATH"):
            executable = Path(env["TSWIO_SIDECAR_PATH"]).expanduser()
        return cls(executable=executable)

    def _search_dirs(self) -> List[Path]:
        if self.search_dirs is not None:
            return list(self.search_dirs)
        resource_dir = get_resource_dir()
        return [resource_dir / "binaries", resource_dir]

    def locate(self) -> Path:
        """
        Return the sidecar executable.

        Raises SidecarUnavailableError if no candidate exists.
        """
        if self.executable is not None:
            if not self.executable.is_file():
                raise SidecarUnavailableError(f"Backend executable not found: {self.executable}")
            return self.executable.resolve()

        names = candidate_names()
        for directory in self._search_dirs():
            for name in names:
                candidate = directory / name
                if candidate.is_file():
                    return candidate.resolve()

        for name in names:
            found = shutil.which(name)
            if found:
                return Path(found).resolve()

        raise SidecarUnavailableError(f"Backend executable '{SIDECAR_NAME}' not found")

    def build_env(self, config: BackendConfig) -> dict:
        env = os.environ.copy()
        env.update(config.sidecar_env())
        return env

    def spawn(self, config: BackendConfig) -> subprocess.Popen:
        """
        Start the backend **non-blocking** and return the Popen handle.
        """
        if self.process is not None:
            raise RuntimeError("Backend sidecar already spawned")

        exe = self.locate()
        logger.info("Launching backend sidecar %s on port %d", exe, config.port)
        try:
            self.process = self._popen(
                [str(exe)],
                env=self.build_env(config),
                creationflags=CREATE_NO_WINDOW if sys.platform == 'win32' else 0,
            )
        except OSError as e:
            raise SidecarSpawnError(f"Failed to spawn backend sidecar: {e}") from e
        return self.process

    def stop(self, timeout: float = 5.0) -> None:
        proc = self.process
        if proc is None or proc.poll() is not None:
            return
        logger.info("Stopping backend sidecar (pid %s)", proc.pid)
        proc.terminate()
        try:
            proc.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            logger.warning("Backend sidecar did not exit within %.0fs, killing it", timeout)
            proc.kill()
            proc.wait()
