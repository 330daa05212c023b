"""
KernelCacheResolver: kernel name -> cached artifacts and decoded metadata.

Every query goes back to the filesystem, so a kernel that the compiler
finishes between two calls is found by the second one. Queries that need a
single artifact (metadata, or a binary to hand to the driver) fail with
`MissingArtifactError` / `AmbiguousArtifactError` rather than guessing.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from triton_cache.config import CacheRoot, default_cache_root
from triton_cache.discovery import DiscoveryResult, find_artifacts
from triton_cache.errors import resolution_error
from triton_cache.metadata import KernelMetadata, load_metadata_file


logger = logging.getLogger("triton_cache.resolver")


@dataclass(frozen=True)
class ArtifactExtensions:
    binary: str
    ir: str
    metadata: str = "json"


CUDA_EXTENSIONS = ArtifactExtensions(binary="cubin", ir="ptx")
HIP_EXTENSIONS = ArtifactExtensions(binary="hsaco", ir="amdgcn")


class KernelCacheResolver:
    def __init__(
        self,
        cache_root: Union[CacheRoot, str, "os.PathLike[str]", None] = None,
        *,
        extensions: ArtifactExtensions = CUDA_EXTENSIONS,
    ) -> None:
        if cache_root is None:
            cache_root = default_cache_root()
        elif not isinstance(cache_root, CacheRoot):
            cache_root = CacheRoot.explicit(cache_root)
        self.cache_root = cache_root
        self.extensions = extensions

    @property
    def root(self) -> Path:
        return self.cache_root.path

    def __repr__(self) -> str:
        return f"KernelCacheResolver(root={str(self.root)!r}, source={self.cache_root.source!r})"

    def find_artifacts(self, kernel_name: str, extension: str) -> DiscoveryResult:
        return find_artifacts(self.root, kernel_name, extension)

    def find_paths(self, kernel_name: str, extension: str) -> List[Path]:
        return self.find_artifacts(kernel_name, extension).paths

    def resolve_one(self, kernel_name: str, extension: str) -> Path:
        """The single artifact `<kernel_name>.<extension>`; zero or several matches raise."""
        found = self.find_artifacts(kernel_name, extension)
        if len(found.paths) != 1:
            raise resolution_error(kernel_name, extension, found.paths, found.pattern)
        return found.paths[0]

    def binary_artifacts(self, kernel_name: str) -> List[Path]:
        return self.find_paths(kernel_name, self.extensions.binary)

    def ir_artifacts(self, kernel_name: str) -> List[Path]:
        return self.find_paths(kernel_name, self.extensions.ir)

    def metadata_path(self, kernel_name: str) -> Path:
        return self.resolve_one(kernel_name, self.extensions.metadata)

    def load_metadata(self, kernel_name: str) -> KernelMetadata:
        path = self.metadata_path(kernel_name)
        logger.debug("decoding metadata for %s from %s", kernel_name, path)
        return load_metadata_file(path)

    def kernel(self, name: str) -> "CachedKernel":
        return CachedKernel(name, self)


class CachedKernel:
    """A kernel name bound to the resolver that looks up its artifacts."""

    def __init__(self, name: str, resolver: Optional[KernelCacheResolver] = None) -> None:
        self.name = name
        self.resolver = resolver or KernelCacheResolver()

    def __repr__(self) -> str:
        return f"CachedKernel({self.name!r}, root={str(self.resolver.root)!r})"

    def metadata(self) -> KernelMetadata:
        return self.resolver.load_metadata(self.name)

    def cubin(self) -> List[Path]:
        """Artifacts with the resolver's binary extension (hsaco on HIP)."""
        return self.resolver.binary_artifacts(self.name)

    def ptx(self) -> List[Path]:
        """Artifacts with the resolver's IR extension (amdgcn on HIP)."""
        return self.resolver.ir_artifacts(self.name)

    def binary_path(self) -> Path:
        return self.resolver.resolve_one(self.name, self.resolver.extensions.binary)

    def ir_path(self) -> Path:
        return self.resolver.resolve_one(self.name, self.resolver.extensions.ir)


__all__ = [
    "ArtifactExtensions",
    "CUDA_EXTENSIONS",
    "HIP_EXTENSIONS",
    "KernelCacheResolver",
    "CachedKernel",
]
