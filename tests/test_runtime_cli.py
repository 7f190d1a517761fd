from pathlib import Path

import pytest

from tswio_desktop.runtime import cli as runtime_cli


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(runtime_cli, "configure_logging", lambda *_args, **_kwargs: None)


def test_parse_args_defaults_to_desktop():
    args = runtime_cli.parse_args([])
    assert args.mode == "desktop"
    assert args.port is None
    assert args.sidecar is None
    assert args.no_splash is False


def test_parse_args_desktop_subcommand():
    args = runtime_cli.parse_args(["desktop", "--port", "4100", "--no-splash"])
    assert args.mode == "desktop"
    assert args.port == 4100
    assert args.no_splash is True


def test_parse_args_web_subcommand():
    args = runtime_cli.parse_args(["web", "--sidecar", "bin/tsw_io_backend"])
    assert args.mode == "web"
    assert args.sidecar == Path("bin/tsw_io_backend")


def test_parse_args_dev_backend():
    args = runtime_cli.parse_args(["dev-backend", "--warmup", "1.5"])
    assert args.mode == "dev-backend"
    assert args.warmup == 1.5
    assert args.port is None


def test_parse_args_rejects_bad_port():
    with pytest.raises(SystemExit):
        runtime_cli.parse_args(["desktop", "--port", "abc"])


def test_parse_args_reads_sys_argv(monkeypatch):
    monkeypatch.setattr(runtime_cli.sys, "argv", ["tswio-desktop", "web"])
    assert runtime_cli.parse_args().mode == "web"


def test_main_dispatches_web(monkeypatch):
    monkeypatch.setattr(runtime_cli, "run_desktop_mode", lambda **_kwargs: 98)
    monkeypatch.setattr(runtime_cli, "run_web_mode", lambda **_kwargs: 7)
    assert runtime_cli.main(["web"]) == 7


def test_main_dispatches_desktop(monkeypatch):
    seen = {}

    def _fake_desktop(**kwargs):
        seen.update(kwargs)
        return 6

    monkeypatch.setattr(runtime_cli, "run_desktop_mode", _fake_desktop)
    monkeypatch.setattr(runtime_cli, "run_web_mode", lambda **_kwargs: 98)
    assert runtime_cli.main(["--no-splash", "--port", "4001"]) == 6
    assert seen == {"port": 4001, "sidecar": None, "splash": False}


def test_main_dispatches_dev_backend(monkeypatch):
    seen = {}

    def _fake_dev(args):
        seen["warmup"] = args.warmup
        return 0

    monkeypatch.setattr(runtime_cli, "run_dev_backend_mode", _fake_dev)
    monkeypatch.setattr(runtime_cli, "run_desktop_mode", lambda **_kwargs: (_ for _ in ()).throw(RuntimeError("gui-called")))
    assert runtime_cli.main(["dev-backend", "--warmup", "0"]) == 0
    assert seen == {"warmup": 0.0}


def test_unwritable_data_dir_falls_back_to_stdout_logging(monkeypatch):
    seen = []

    def _no_data_dir():
        raise PermissionError("read-only home")

    monkeypatch.setattr(runtime_cli, "log_file_path", _no_data_dir)
    monkeypatch.setattr(runtime_cli, "configure_logging", lambda log_file=None, level=None: seen.append(log_file))
    monkeypatch.setattr(runtime_cli, "run_desktop_mode", lambda **_kwargs: 1)

    assert runtime_cli.main(["desktop"]) == 1
    assert seen == [None]


def test_setup_logging_retries_without_file_when_handler_fails(monkeypatch, tmp_path):
    seen = []

    def _configure(log_file=None, level=None):
        seen.append(log_file)
        if log_file is not None:
            raise FileNotFoundError(log_file)

    monkeypatch.setattr(runtime_cli, "log_file_path", lambda: tmp_path / "missing" / "startup.log")
    monkeypatch.setattr(runtime_cli, "configure_logging", _configure)

    runtime_cli.setup_logging()
    assert seen == [tmp_path / "missing" / "startup.log", None]
