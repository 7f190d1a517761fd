import subprocess
from unittest.mock import MagicMock

import pytest

from tswio_desktop.runtime import sidecar as sidecar_module
from tswio_desktop.runtime.config import BackendConfig
from tswio_desktop.runtime.errors import SidecarSpawnError, SidecarUnavailableError, StartupError
from tswio_desktop.runtime.sidecar import SidecarSupervisor, candidate_names, target_triple


@pytest.fixture
def fake_exe(tmp_path):
    exe = tmp_path / "tsw_io_backend"
    exe.write_text("#!/bin/sh\n")
    exe.chmod(0o755)
    return exe


def test_target_triples():
    assert target_triple("Darwin", "arm64") == "aarch64-apple-darwin"
    assert target_triple("Darwin", "x86_64") == "x86_64-apple-darwin"
    assert target_triple("Linux", "x86_64") == "x86_64-unknown-linux-gnu"
    assert target_triple("Windows", "AMD64") == "x86_64-pc-windows-msvc"


def test_candidate_names_windows_use_exe(monkeypatch):
    monkeypatch.setattr(sidecar_module.platform, "machine", lambda: "AMD64")
    assert candidate_names("Windows") == [
        "tsw_io_backend-x86_64-pc-windows-msvc.exe",
        "tsw_io_backend.exe",
    ]


def test_spawn_sets_backend_environment(fake_exe):
    popen = MagicMock()
    supervisor = SidecarSupervisor(executable=fake_exe, popen=popen)

    proc = supervisor.spawn(BackendConfig(port=4321))

    assert proc is popen.return_value
    args, kwargs = popen.call_args
    assert args[0] == [str(fake_exe.resolve())]
    assert kwargs["env"]["PORT"] == "4321"
    assert kwargs["env"]["MIX_ENV"] == "prod"
    assert kwargs["env"]["BURRITO"] == "1"


def test_spawn_only_once(fake_exe):
    supervisor = SidecarSupervisor(executable=fake_exe, popen=MagicMock())
    supervisor.spawn(BackendConfig())
    with pytest.raises(RuntimeError):
        supervisor.spawn(BackendConfig())


def test_missing_executable_is_unavailable(tmp_path):
    supervisor = SidecarSupervisor(executable=tmp_path / "missing", popen=MagicMock())
    with pytest.raises(SidecarUnavailableError):
        supervisor.spawn(BackendConfig())
    supervisor._popen.assert_not_called()


def test_locate_searches_binaries_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(sidecar_module.shutil, "which", lambda _name: None)
    binaries = tmp_path / "binaries"
    binaries.mkdir()
    name = candidate_names()[0]
    (binaries / name).write_text("")

    supervisor = SidecarSupervisor(search_dirs=[binaries])
    assert supervisor.locate() == (binaries / name).resolve()


def test_locate_nothing_found(tmp_path, monkeypatch):
    monkeypatch.setattr(sidecar_module.shutil, "which", lambda _name: None)
    supervisor = SidecarSupervisor(search_dirs=[tmp_path])
    with pytest.raises(StartupError):
        supervisor.locate()


def test_os_error_becomes_spawn_error(fake_exe):
    popen = MagicMock(side_effect=PermissionError("denied"))
    supervisor = SidecarSupervisor(executable=fake_exe, popen=popen)
    with pytest.raises(SidecarSpawnError, match="denied"):
        supervisor.spawn(BackendConfig())
    assert supervisor.process is None


def test_from_env_uses_sidecar_path(fake_exe):
    supervisor = SidecarSupervisor.from_env(env={"TSWIO_SIDECAR_PATH": str(fake_exe)})
    assert supervisor.locate() == fake_exe.resolve()


def test_stop_terminates_running_process(fake_exe):
    proc = MagicMock()
    proc.poll.return_value = None
    supervisor = SidecarSupervisor(executable=fake_exe, popen=MagicMock(return_value=proc))
    supervisor.spawn(BackendConfig())

    supervisor.stop()

    proc.terminate.assert_called_once()
    proc.wait.assert_called_once_with(timeout=5.0)
    proc.kill.assert_not_called()


def test_stop_kills_on_timeout(fake_exe):
    proc = MagicMock()
    proc.poll.return_value = None
    proc.wait.side_effect = [subprocess.TimeoutExpired("tsw_io_backend", 5.0), 0]
    supervisor = SidecarSupervisor(executable=fake_exe, popen=MagicMock(return_value=proc))
    supervisor.spawn(BackendConfig())

    supervisor.stop()

    proc.kill.assert_called_once()


def test_stop_without_spawn_is_noop():
    SidecarSupervisor().stop()
