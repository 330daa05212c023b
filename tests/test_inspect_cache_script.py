from __future__ import annotations

import importlib.util
import json
import sys

import pytest

from conftest import ROOT, metadata_doc, write_kernel


def _load_script():
    spec = importlib.util.spec_from_file_location("inspect_cache", ROOT / "scripts" / "inspect_cache.py")
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)
    return mod


def _run(monkeypatch, argv):
    mod = _load_script()
    monkeypatch.setattr(sys, "argv", ["inspect_cache.py", *argv])
    with pytest.raises(SystemExit) as ei:
        mod.main()
    return ei.value.code


def test_reports_ready_kernel(cache_root, monkeypatch, capsys):
    write_kernel(cache_root, "abc123")
    assert _run(monkeypatch, ["add_kernel", "--cache-dir", str(cache_root)]) == 0
    out = capsys.readouterr().out
    assert "[OK] binary (cubin): 1 match(es)" in out
    assert "target: cuda80" in out
    payload = json.loads(out[out.index("{"):])
    assert payload == metadata_doc()


def test_reports_missing_metadata(cache_root, monkeypatch, capsys):
    write_kernel(cache_root, "abc123", exts=("cubin",))
    assert _run(monkeypatch, ["add_kernel", "--cache-dir", str(cache_root)]) == 1
    out = capsys.readouterr().out
    assert "[MISSING] ir (ptx)" in out
    assert "[FAIL] metadata" in out
