"""
Inspect what the Triton cache holds for one kernel.

Prints the cache root, the artifacts found per extension, any directories the
scan had to skip, and the decoded metadata. Exits non-zero when the metadata
cannot be resolved or decoded, i.e. when the kernel is not ready to launch.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from triton_cache.config import CacheRoot  # noqa: E402
from triton_cache.errors import KernelCacheError  # noqa: E402
from triton_cache.resolver import CUDA_EXTENSIONS, HIP_EXTENSIONS, KernelCacheResolver  # noqa: E402


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("kernel", help="kernel name as registered by the compiler, e.g. add_kernel")
    ap.add_argument("--cache-dir", default=None, help="cache root (default: $TRITON_CACHE_DIR or ~/.triton/cache)")
    ap.add_argument("--backend", choices=["cuda", "hip"], default="cuda")
    ap.add_argument("--verbose", "-v", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    exts = HIP_EXTENSIONS if args.backend == "hip" else CUDA_EXTENSIONS
    try:
        root = CacheRoot.explicit(args.cache_dir) if args.cache_dir else CacheRoot.from_env()
    except KernelCacheError as e:
        print(f"[FAIL] cache root: {e}")
        raise SystemExit(1)
    resolver = KernelCacheResolver(root, extensions=exts)
    print(f"cache root: {root.path} ({root.source})")

    for label, ext in (("binary", exts.binary), ("ir", exts.ir), ("metadata", exts.metadata)):
        found = resolver.find_artifacts(args.kernel, ext)
        status = "OK" if len(found.paths) == 1 else ("MISSING" if not found.paths else "AMBIGUOUS")
        print(f"[{status}] {label} ({ext}): {len(found.paths)} match(es)")
        for p in found.paths:
            print(f"  {p}")
        for s in found.skipped:
            print(f"  skipped: {s}")

    try:
        meta = resolver.load_metadata(args.kernel)
    except KernelCacheError as e:
        print(f"[FAIL] metadata: {e}")
        raise SystemExit(1)
    print(f"target: {meta.target_text}")
    print(json.dumps(meta.to_json_dict(), indent=2, sort_keys=True))
    raise SystemExit(0)


if __name__ == "__main__":
    main()
