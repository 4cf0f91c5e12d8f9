"""Recursive dependency resolution and materialization for stubfetch.

For one package the resolver runs these steps, strictly in order::

    depth check → already processed? → fetch release index
      → select release and download wheel → extract into scratch
      → mark processed → scan Requires-Dist
      → resolve each dependency (one at a time, depth-first)
      → merge scratch into the output tree → remove scratch

Rules worth knowing:

* A package name is handled at most once per run. The first request for a
  name wins; later requests with another constraint are ignored.
* A package is marked processed *before* its dependencies are visited, so
  dependency cycles terminate.
* Dependencies are merged before the package that required them, so on a
  path collision the dependent's file is the one left in the output.
* Past ``max_depth`` a branch stops silently and the package is not marked,
  so a shallower path may still pick it up later in the run.
* A failure in any step is logged and only ends that package's branch.

All state for a run lives in a :class:`ResolutionContext`, which is
passed down the recursion explicitly.

Typical usage::

    async with HTTPClient() as http:
        resolver = DependencyResolver(http, scratch_root=Path("stubs"),
                                      output_dir=Path("stubs/typings"))
        result = await resolver.resolve("micropython-esp32-stubs",
                                        release_prefix="1.26")
        for name, pkg in result.processed.items():
            print(name, pkg.version)
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from stubfetch.core.extractor import extract
from stubfetch.core.fetcher import ArtifactFetcher
from stubfetch.core.registry import RegistryClient
from stubfetch.core.scanner import find_dependencies
from stubfetch.exceptions import (
    FilesystemCleanupError,
    FilesystemMergeError,
    StubFetchError,
)
from stubfetch.models.package import DependencySpecifier, ProcessedPackage
from stubfetch.utils.http import HTTPClient
from stubfetch.utils.filesystem import merge_tree, remove_tree
from stubfetch.utils.logger import TreeLogger, get_logger
from stubfetch.constants import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_REGISTRY_URL,
    DEFAULT_VERSION_ORDERING,
    ROOT_DEPTH,
    SCRATCH_SUFFIX,
)

logger = get_logger("resolver")

__all__ = ["DependencyResolver", "ResolutionContext", "ResolutionResult"]


# ---------------------------------------------------------------------------
# Run state
# ---------------------------------------------------------------------------


@dataclass
class ResolutionContext:
    """Mutable state shared by every step of one resolution run.

    Attributes:
        scratch_root: Directory for release indexes, wheels and scratch
            directories.
        output_dir: Merged output tree.
        release_prefix: Release prefix applied to every package of the run.
        max_depth: Deepest level still processed (the root is level 1).
        processed: Packages fetched and extracted so far, in order.
        failed: Packages whose branch ended in an error.
        depth_limited: Packages skipped because they were too deep.
    """

    scratch_root: Path
    output_dir: Path
    release_prefix: str = ""
    max_depth: int = DEFAULT_MAX_DEPTH
    processed: Dict[str, ProcessedPackage] = field(default_factory=dict)
    failed: List[str] = field(default_factory=list)
    depth_limited: List[str] = field(default_factory=list)

    def is_processed(self, name: str) -> bool:
        return name in self.processed

    def mark_processed(self, package: ProcessedPackage) -> None:
        self.processed[package.name] = package

    def mark_failed(self, name: str) -> None:
        if name not in self.failed:
            self.failed.append(name)

    def mark_depth_limited(self, name: str) -> None:
        if name not in self.depth_limited:
            self.depth_limited.append(name)

    def scratch_dir(self, name: str) -> Path:
        """Extraction directory for ``name``."""
        return self.scratch_root / f"{name}{SCRATCH_SUFFIX}"


@dataclass
class ResolutionResult:
    """Outcome of :meth:`DependencyResolver.resolve`.

    Attributes:
        root: Name of the root package.
        output_dir: Merged output tree.
        processed: Every package fetched and extracted, in processing order.
        failed: Packages whose branch failed (absent from ``processed``).
        depth_limited: Packages never reached because of the depth limit.
    """

    root: str
    output_dir: Path
    processed: Dict[str, ProcessedPackage]
    failed: List[str] = field(default_factory=list)
    depth_limited: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        """True if the root package itself was processed."""
        return self.root in self.processed

    def to_rows(self) -> List[Dict[str, str]]:
        """One row per package, for table output."""
        rows = [
            {"Package": name, "Release": pkg.version, "Status": "merged"}
            for name, pkg in self.processed.items()
        ]
        rows.extend(
            {"Package": n, "Release": "-", "Status": "failed"}
            for n in self.failed
            if n not in self.processed
        )
        rows.extend(
            {"Package": n, "Release": "-", "Status": "depth limit"}
            for n in self.depth_limited
            if n not in self.processed
        )
        return rows

    def to_dict(self) -> Dict[str, Any]:
        return {
            "root": self.root,
            "output_dir": str(self.output_dir),
            "processed": [pkg.to_dict() for pkg in self.processed.values()],
            "failed": [n for n in self.failed if n not in self.processed],
            "depth_limited": [n for n in self.depth_limited if n not in self.processed],
        }


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class DependencyResolver:
    """Walk a package's dependency tree and merge every wheel into one folder.

    Args:
        http_client: Open HTTP client shared by registry and fetcher.
        scratch_root: Working directory for downloads and scratch trees.
        output_dir: Where all packages are merged.
        registry_url: Base URL of the registry JSON API.
        max_depth: Deepest dependency level processed (root is 1).
        ordering: Candidate ordering for version constraints.
        registry: Pre-built registry client (overrides ``registry_url``).
        fetcher: Pre-built artifact fetcher (overrides ``ordering``).
    """

    def __init__(
        self,
        http_client: HTTPClient,
        scratch_root: Path,
        output_dir: Path,
        *,
        registry_url: str = DEFAULT_REGISTRY_URL,
        max_depth: int = DEFAULT_MAX_DEPTH,
        ordering: str = DEFAULT_VERSION_ORDERING,
        registry: Optional[RegistryClient] = None,
        fetcher: Optional[ArtifactFetcher] = None,
    ) -> None:
        self.scratch_root = Path(scratch_root)
        self.output_dir = Path(output_dir)
        self.max_depth = max_depth
        self.registry = registry or RegistryClient(
            http_client,
            registry_url=registry_url,
            documents_dir=self.scratch_root,
        )
        self.fetcher = fetcher or ArtifactFetcher(http_client, ordering=ordering)

    def new_context(self, release_prefix: str = "") -> ResolutionContext:
        return ResolutionContext(
            scratch_root=self.scratch_root,
            output_dir=self.output_dir,
            release_prefix=release_prefix,
            max_depth=self.max_depth,
        )

    async def resolve(
        self,
        name: str,
        constraint: str = "",
        *,
        release_prefix: str = "",
    ) -> ResolutionResult:
        """Resolve ``name`` and everything it depends on.

        Args:
            name: Root package name.
            constraint: Optional version constraint for the root package.
            release_prefix: Prefix applied to the releases of every package.

        Returns:
            A :class:`ResolutionResult`. Branch failures are reported in
            ``failed`` rather than raised.
        """
        ctx = self.new_context(release_prefix)
        await self.process_package(name, constraint, ctx, ROOT_DEPTH)

        logger.info("Processed %d package(s)", len(ctx.processed))
        return ResolutionResult(
            root=name,
            output_dir=ctx.output_dir,
            processed=ctx.processed,
            failed=ctx.failed,
            depth_limited=ctx.depth_limited,
        )

    async def process_package(
        self,
        name: str,
        constraint: str,
        ctx: ResolutionContext,
        depth: int,
    ) -> None:
        """Fetch, extract, recurse into, merge and clean up one package."""
        log = TreeLogger(logger, depth)

        if depth > ctx.max_depth:
            log.warning("Maximum dependency depth reached for %s at depth %d", name, depth)
            ctx.mark_depth_limited(name)
            return

        if ctx.is_processed(name):
            log.info("Package %s already processed, skipping...", name)
            return

        log.info("Processing package: %s (depth: %d)", name, depth)
        scratch = ctx.scratch_dir(name)

        try:
            index = await self.registry.fetch_release_index(name)
            wheel_path, full_release = await self.fetcher.select_and_download(
                index, ctx.release_prefix, constraint, ctx.scratch_root
            )
            await asyncio.to_thread(extract, wheel_path, scratch)
        except StubFetchError as exc:
            log.error("Error processing package %s: %s", name, exc)
            ctx.mark_failed(name)
            self._cleanup(name, scratch, log)
            return

        log.info("Extracted %s %s to %s", name, full_release, scratch)
        ctx.mark_processed(ProcessedPackage(name=name, version=full_release, path=scratch))

        requirements = find_dependencies(scratch, full_release)
        log.info("Required distributions for %s: %s", name, requirements)

        for raw in requirements:
            dependency = DependencySpecifier.parse(raw)
            if not dependency.name:
                continue
            log.info("Found dependency: %s", dependency.name)
            await self.process_package(
                dependency.name, dependency.constraint, ctx, depth + 1
            )

        try:
            await asyncio.to_thread(merge_tree, scratch, ctx.output_dir)
            log.info("Copied files from %s to %s", name, ctx.output_dir)
        except FilesystemMergeError as exc:
            log.error("Error copying %s files: %s", name, exc)
        finally:
            self._cleanup(name, scratch, log)

    @staticmethod
    def _cleanup(name: str, scratch: Path, log: TreeLogger) -> None:
        try:
            remove_tree(scratch)
            log.debug("Cleaned up temporary directory for %s", name)
        except FilesystemCleanupError as exc:
            log.warning("Could not clean up temporary directory for %s: %s", name, exc)
