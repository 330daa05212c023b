from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import pytest

# Ensure repo root is importable for all tests, regardless of nested test layout.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from triton_cache.config import CACHE_DIR_ENV, reset_default_cache_root  # noqa: E402


def metadata_doc(**overrides: Any) -> Dict[str, Any]:
    """A metadata document shaped like the one Triton writes for add_kernel."""
    doc: Dict[str, Any] = {
        "target": ["cuda", 80],
        "num_warps": 4,
        "num_ctas": 1,
        "num_stages": 3,
        "cluster_dims": [1, 1, 1],
        "ptx_version": None,
        "enable_warp_specialization": False,
        "enable_persistent": False,
        "optimize_epilogue": False,
        "enable_fp_fusion": True,
        "allow_fp8e4nv": False,
        "max_num_imprecise_acc_default": 0,
        "extern_libs": None,
        "debug": False,
        "AMDGCN_ENABLE_DUMP": False,
        "DISABLE_FAST_REDUCTION": False,
        "DISABLE_MMA_V3": False,
        "ENABLE_TMA": False,
        "LLVM_IR_ENABLE_DUMP": False,
        "MLIR_ENABLE_DUMP": False,
        "TRITON_DISABLE_LINE_INFO": False,
        "ids_of_folded_args": [],
        "ids_of_tensormaps": None,
        "shared": 0,
        "name": "add_kernel_0d1d2d3de",
    }
    doc.update(overrides)
    return doc


def write_kernel(
    root: Path,
    subdir: str,
    name: str = "add_kernel",
    *,
    meta: Optional[Dict[str, Any]] = None,
    exts: tuple = ("cubin", "ptx", "json"),
) -> Path:
    """Lay out one compiled kernel the way Triton's cache manager does."""
    d = root / subdir
    d.mkdir(parents=True, exist_ok=True)
    for ext in exts:
        p = d / f"{name}.{ext}"
        if ext == "json":
            p.write_text(json.dumps(meta if meta is not None else metadata_doc()))
        else:
            p.write_bytes(b"\x7fELF" if ext in {"cubin", "hsaco"} else b"//\n// Generated by LLVM NVPTX Back-End\n")
    return d


@pytest.fixture
def cache_root(tmp_path: Path) -> Path:
    root = tmp_path / "triton_cache"
    root.mkdir()
    return root


@pytest.fixture
def clean_default_root(monkeypatch):
    """Isolate the process-wide default root from the developer's environment."""
    monkeypatch.delenv(CACHE_DIR_ENV, raising=False)
    reset_default_cache_root()
    yield
    reset_default_cache_root()
