"""
Launch boundary: turn cached metadata into a launch for an external driver.

This package never touches a device. The driver (CUDA driver bindings, a
Triton backend, or a test double) is supplied by the caller through the
`KernelDriver` protocol; all we contribute is the binary path, the function
name recorded by the compiler, and the launch geometry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, Sequence, Tuple, Union

from triton_cache.metadata import KernelMetadata
from triton_cache.resolver import CachedKernel


logger = logging.getLogger("triton_cache.launch")

WARP_SIZE = 32

Dim3 = Tuple[int, int, int]


def _dim3(grid: Union[int, Sequence[int]]) -> Dim3:
    dims = (grid,) if isinstance(grid, int) else tuple(grid)
    if not 1 <= len(dims) <= 3:
        raise ValueError(f"grid must have 1 to 3 dimensions, got {len(dims)}")
    for d in dims:
        if isinstance(d, bool) or not isinstance(d, int) or d < 1:
            raise ValueError(f"grid dimensions must be positive integers, got {tuple(dims)}")
    return tuple(dims) + (1,) * (3 - len(dims))  # type: ignore[return-value]


@dataclass(frozen=True)
class LaunchConfig:
    grid: Dim3
    block: Dim3
    shared_mem: int = 0

    @classmethod
    def from_metadata(cls, meta: KernelMetadata, grid: Union[int, Sequence[int]], *, warp_size: int = WARP_SIZE) -> "LaunchConfig":
        # One Triton program runs as num_warps warps.
        return cls(grid=_dim3(grid), block=(meta.num_warps * warp_size, 1, 1), shared_mem=meta.shared)

    @property
    def num_threads(self) -> int:
        return self.block[0] * self.block[1] * self.block[2]


class KernelDriver(Protocol):
    def load_binary(self, path: Path, module_name: str, function_name: str) -> Any:
        ...

    def launch(self, function: Any, config: LaunchConfig, args: Sequence[Any]) -> None:
        ...


def launch_cached_kernel(
    kernel: CachedKernel,
    driver: KernelDriver,
    grid: Union[int, Sequence[int]],
    args: Sequence[Any],
    *,
    module_name: str = "triton",
    warp_size: int = WARP_SIZE,
) -> LaunchConfig:
    """
    Resolve `kernel` in the cache and launch it through `driver`.

    Resolution errors propagate before the driver is touched, so a cache miss
    never turns into a launch with partial data.
    """
    binary = kernel.binary_path()
    meta = kernel.metadata()
    config = LaunchConfig.from_metadata(meta, grid, warp_size=warp_size)
    logger.info("launching %s from %s: grid=%s block=%s shared=%d", meta.name, binary, config.grid, config.block, config.shared_mem)
    function = driver.load_binary(binary, module_name, meta.name)
    driver.launch(function, config, list(args))
    return config


__all__ = ["WARP_SIZE", "LaunchConfig", "KernelDriver", "launch_cached_kernel"]
