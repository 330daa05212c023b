"""
Compile-time metadata written next to each cached Triton kernel.

The `<kernel>.json` document records the options the kernel was compiled with
(warps, stages, cluster shape, compiler toggles) plus launch-sizing values such
as the shared-memory requirement. Decoding is strict: a required key that is
missing, or any value of the wrong JSON type, raises `MalformedMetadataError`.
Keys that are not part of the schema are ignored.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

from triton_cache.errors import ArtifactReadError, MalformedMetadataError


U32_MAX = 2**32 - 1

# Attributes whose document key is not the attribute name.
_JSON_KEYS: Dict[str, str] = {
    "amdgcn_enable_dump": "AMDGCN_ENABLE_DUMP",
    "disable_fast_reduction": "DISABLE_FAST_REDUCTION",
    "disable_mma_v3": "DISABLE_MMA_V3",
    "enable_tma": "ENABLE_TMA",
    "llvm_ir_enable_dump": "LLVM_IR_ENABLE_DUMP",
    "mlir_enable_dump": "MLIR_ENABLE_DUMP",
    "triton_disable_line_info": "TRITON_DISABLE_LINE_INFO",
}


def _type_name(v: Any) -> str:
    if v is None:
        return "null"
    if isinstance(v, bool):
        return "boolean"
    if isinstance(v, (int, float)):
        return "number"
    if isinstance(v, str):
        return "string"
    if isinstance(v, list):
        return "array"
    if isinstance(v, dict):
        return "object"
    return type(v).__name__


def _u32(key: str, v: Any) -> int:
    if isinstance(v, bool) or not isinstance(v, int):
        raise MalformedMetadataError(f"field '{key}': expected u32, got {_type_name(v)} {v!r}")
    if not 0 <= v <= U32_MAX:
        raise MalformedMetadataError(f"field '{key}': {v} out of range for u32")
    return v


def _bool(key: str, v: Any) -> bool:
    if not isinstance(v, bool):
        raise MalformedMetadataError(f"field '{key}': expected boolean, got {_type_name(v)} {v!r}")
    return v


def _str(key: str, v: Any) -> str:
    if not isinstance(v, str):
        raise MalformedMetadataError(f"field '{key}': expected string, got {_type_name(v)} {v!r}")
    return v


def _seq(item: Optional[Callable[[str, Any], Any]] = None) -> Callable[[str, Any], Tuple[Any, ...]]:
    def decode(key: str, v: Any) -> Tuple[Any, ...]:
        if not isinstance(v, list):
            raise MalformedMetadataError(f"field '{key}': expected array, got {_type_name(v)} {v!r}")
        if item is None:
            return tuple(v)
        return tuple(item(f"{key}[{i}]", x) for i, x in enumerate(v))

    return decode


def _triple(key: str, v: Any) -> Tuple[int, int, int]:
    dims = _seq(_u32)(key, v)
    if len(dims) != 3:
        raise MalformedMetadataError(f"field '{key}': expected 3 dimensions, got {len(dims)}")
    return dims  # type: ignore[return-value]


def _required(data: Dict[str, Any], key: str, decode: Callable[[str, Any], Any]) -> Any:
    if key not in data:
        raise MalformedMetadataError(f"missing field '{key}'")
    return decode(key, data[key])


def _optional(data: Dict[str, Any], key: str, decode: Callable[[str, Any], Any]) -> Any:
    v = data.get(key)
    return None if v is None else decode(key, v)


@dataclass(frozen=True)
class KernelMetadata:
    target: Tuple[Any, ...]
    num_warps: int
    num_ctas: int
    num_stages: int
    cluster_dims: Tuple[int, int, int]
    ptx_version: Optional[int]
    enable_warp_specialization: bool
    enable_persistent: bool
    optimize_epilogue: bool
    enable_fp_fusion: bool
    allow_fp8e4nv: bool
    max_num_imprecise_acc_default: int
    extern_libs: Optional[Tuple[str, ...]]
    debug: Optional[bool]
    amdgcn_enable_dump: bool
    disable_fast_reduction: bool
    disable_mma_v3: bool
    enable_tma: bool
    llvm_ir_enable_dump: bool
    mlir_enable_dump: bool
    triton_disable_line_info: bool
    ids_of_folded_args: Tuple[int, ...]
    ids_of_tensormaps: Optional[Tuple[int, ...]]
    shared: int
    name: str

    @property
    def target_text(self) -> str:
        """Target descriptors joined into one token, e.g. `["cuda", 80]` -> `cuda80`."""
        return "".join(json.dumps(v, separators=(",", ":"), ensure_ascii=False) for v in self.target).replace('"', "")

    @classmethod
    def from_json_dict(cls, data: Any) -> "KernelMetadata":
        if not isinstance(data, dict):
            raise MalformedMetadataError(f"expected a JSON object, got {_type_name(data)}")

        def flag(attr: str) -> bool:
            return _required(data, _JSON_KEYS[attr], _bool)

        return cls(
            target=_required(data, "target", _seq()),
            num_warps=_required(data, "num_warps", _u32),
            num_ctas=_required(data, "num_ctas", _u32),
            num_stages=_required(data, "num_stages", _u32),
            cluster_dims=_required(data, "cluster_dims", _triple),
            ptx_version=_optional(data, "ptx_version", _u32),
            enable_warp_specialization=_required(data, "enable_warp_specialization", _bool),
            enable_persistent=_required(data, "enable_persistent", _bool),
            optimize_epilogue=_required(data, "optimize_epilogue", _bool),
            enable_fp_fusion=_required(data, "enable_fp_fusion", _bool),
            allow_fp8e4nv=_required(data, "allow_fp8e4nv", _bool),
            max_num_imprecise_acc_default=_required(data, "max_num_imprecise_acc_default", _u32),
            extern_libs=_optional(data, "extern_libs", _seq(_str)),
            debug=_optional(data, "debug", _bool),
            amdgcn_enable_dump=flag("amdgcn_enable_dump"),
            disable_fast_reduction=flag("disable_fast_reduction"),
            disable_mma_v3=flag("disable_mma_v3"),
            enable_tma=flag("enable_tma"),
            llvm_ir_enable_dump=flag("llvm_ir_enable_dump"),
            mlir_enable_dump=flag("mlir_enable_dump"),
            triton_disable_line_info=flag("triton_disable_line_info"),
            ids_of_folded_args=_required(data, "ids_of_folded_args", _seq(_u32)),
            ids_of_tensormaps=_optional(data, "ids_of_tensormaps", _seq(_u32)),
            shared=_required(data, "shared", _u32),
            name=_required(data, "name", _str),
        )

    @classmethod
    def from_json_text(cls, text: str, *, path: Optional[Path] = None) -> "KernelMetadata":
        try:
            data = json.loads(text)
        except (ValueError, RecursionError) as e:
            # ValueError also covers integers past the interpreter's digit limit.
            if isinstance(e, json.JSONDecodeError):
                diagnostic = f"invalid JSON at line {e.lineno} column {e.colno}: {e.msg}"
            else:
                diagnostic = f"invalid JSON: {e}"
            raise MalformedMetadataError(diagnostic, path) from e
        try:
            return cls.from_json_dict(data)
        except MalformedMetadataError as e:
            if path is None or e.path is not None:
                raise
            raise MalformedMetadataError(e.diagnostic, path) from e

    def to_json_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for f in fields(self):
            v = getattr(self, f.name)
            out[_JSON_KEYS.get(f.name, f.name)] = list(v) if isinstance(v, tuple) else v
        return out


def load_metadata_file(path: Path) -> KernelMetadata:
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise ArtifactReadError(path, e) from e
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedMetadataError(f"not UTF-8 text: {e}", path) from e
    return KernelMetadata.from_json_text(text, path=path)


__all__ = ["U32_MAX", "KernelMetadata", "load_metadata_file"]
