from importlib.util import module_from_spec, spec_from_file_location
from pathlib import Path


def _load_script_module(name: str, relpath: str):
    script_path = Path(__file__).resolve().parents[1] / relpath
    spec = spec_from_file_location(name, script_path)
    assert spec is not None and spec.loader is not None
    module = module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_launch_desktop_calls_desktop_mode(monkeypatch):
    module = _load_script_module("launch_desktop_module", "scripts/launch_desktop.py")
    calls = {}

    def _fake_main(argv):
        calls["argv"] = argv
        return 0

    monkeypatch.setattr(module, "main", _fake_main)
    monkeypatch.setattr(module.sys, "argv", ["launch_desktop.py", "--no-splash"])
    code = module.launch()
    assert code == 0
    assert calls["argv"] == ["desktop", "--no-splash"]


def test_launch_web_uses_web_mode(monkeypatch):
    module = _load_script_module("launch_web_module", "scripts/launch_web.py")
    calls = {}

    def _fake_main(argv):
        calls["argv"] = argv
        return 0

    monkeypatch.setattr(module, "main", _fake_main)
    monkeypatch.setattr(module.sys, "argv", ["launch_web.py"])
    code = module.launch()
    assert code == 0
    assert calls["argv"] == ["web"]
