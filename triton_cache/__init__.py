"""
Lookup of compiled Triton kernels in the on-disk JIT cache.
"""

from triton_cache.config import CACHE_DIR_ENV, CacheRoot, default_cache_root
from triton_cache.discovery import DiscoveryResult, SkippedEntry, find_artifacts
from triton_cache.errors import (
    AmbiguousArtifactError,
    ArtifactReadError,
    ArtifactResolutionError,
    ConfigurationError,
    KernelCacheError,
    MalformedMetadataError,
    MissingArtifactError,
)
from triton_cache.launch import KernelDriver, LaunchConfig, launch_cached_kernel
from triton_cache.metadata import KernelMetadata, load_metadata_file
from triton_cache.resolver import (
    CUDA_EXTENSIONS,
    HIP_EXTENSIONS,
    ArtifactExtensions,
    CachedKernel,
    KernelCacheResolver,
)

__all__ = [
    "CACHE_DIR_ENV",
    "CacheRoot",
    "default_cache_root",
    "DiscoveryResult",
    "SkippedEntry",
    "find_artifacts",
    "KernelCacheError",
    "ConfigurationError",
    "ArtifactResolutionError",
    "MissingArtifactError",
    "AmbiguousArtifactError",
    "ArtifactReadError",
    "MalformedMetadataError",
    "KernelMetadata",
    "load_metadata_file",
    "ArtifactExtensions",
    "CUDA_EXTENSIONS",
    "HIP_EXTENSIONS",
    "KernelCacheResolver",
    "CachedKernel",
    "LaunchConfig",
    "KernelDriver",
    "launch_cached_kernel",
]
