from __future__ import annotations

import importlib.util
import sys
from pathlib import Path
from types import ModuleType

import pytest

_SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "watch_resource.py"


def _load_script() -> ModuleType:
    spec = importlib.util.spec_from_file_location("watch_resource", _SCRIPT)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_missing_configuration_exits_with_failure_line(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.delenv("SANTIYE_URL", raising=False)
    monkeypatch.delenv("SANTIYE_API_KEY", raising=False)
    monkeypatch.setattr(sys, "argv", ["watch_resource.py", "sites"])

    assert _load_script()._main() == 2
    assert "[watch] Failed: Missing configuration" in capsys.readouterr().err
