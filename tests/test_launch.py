from __future__ import annotations

import pytest

from triton_cache.errors import MissingArtifactError
from triton_cache.launch import LaunchConfig, launch_cached_kernel
from triton_cache.metadata import KernelMetadata
from triton_cache.resolver import KernelCacheResolver
from conftest import metadata_doc, write_kernel


class RecordingDriver:
    def __init__(self):
        self.loaded = []
        self.launches = []

    def load_binary(self, path, module_name, function_name):
        self.loaded.append((path, module_name, function_name))
        return f"fn:{function_name}"

    def launch(self, function, config, args):
        self.launches.append((function, config, list(args)))


def test_config_from_metadata():
    meta = KernelMetadata.from_json_dict(metadata_doc(num_warps=4, shared=1024))
    cfg = LaunchConfig.from_metadata(meta, 3)
    assert cfg.grid == (3, 1, 1)
    assert cfg.block == (128, 1, 1)
    assert cfg.num_threads == 128
    assert cfg.shared_mem == 1024


def test_config_wavefront_size():
    meta = KernelMetadata.from_json_dict(metadata_doc(num_warps=2))
    assert LaunchConfig.from_metadata(meta, (2, 2), warp_size=64).block == (128, 1, 1)


@pytest.mark.parametrize("grid", [0, (), (1, 1, 1, 1), (2, -1), (1.5,)])
def test_config_rejects_bad_grid(grid):
    meta = KernelMetadata.from_json_dict(metadata_doc())
    with pytest.raises(ValueError):
        LaunchConfig.from_metadata(meta, grid)


def test_launch_cached_kernel(cache_root):
    d = write_kernel(cache_root, "abc123", meta=metadata_doc(shared=256))
    driver = RecordingDriver()
    kernel = KernelCacheResolver(cache_root).kernel("add_kernel")
    cfg = launch_cached_kernel(kernel, driver, grid=(1,), args=("a", "b", "c", 3))
    assert driver.loaded == [(d / "add_kernel.cubin", "triton", "add_kernel_0d1d2d3de")]
    assert driver.launches == [("fn:add_kernel_0d1d2d3de", cfg, ["a", "b", "c", 3])]
    assert cfg.shared_mem == 256


def test_launch_halts_on_cache_miss(cache_root):
    write_kernel(cache_root, "abc123", exts=("cubin", "ptx"))
    driver = RecordingDriver()
    kernel = KernelCacheResolver(cache_root).kernel("add_kernel")
    with pytest.raises(MissingArtifactError):
        launch_cached_kernel(kernel, driver, grid=1, args=())
    assert driver.loaded == []
    assert driver.launches == []
