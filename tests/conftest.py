import pytest


@pytest.fixture(autouse=True)
def isolated_data_dir(tmp_path, monkeypatch):
    """Keep log files and env overrides of the launcher inside tmp_path."""
    data_dir = tmp_path / "data"
    monkeypatch.setenv("TSWIO_DATA_DIR", str(data_dir))
    for name in ("TSWIO_BACKEND_PORT", "TSWIO_BACKEND_HOST", "TSWIO_SIDECAR_PATH"):
        monkeypatch.delenv(name, raising=False)
    return data_dir


@pytest.fixture
def no_sleep():
    """Recording replacement for time.sleep."""
    calls = []
    def _sleep(seconds):
        calls.append(seconds)
    _sleep.calls = calls
    return _sleep
