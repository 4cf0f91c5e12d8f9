"""Fetch command implementation for stubfetch.

Downloads a package and, recursively, every package it declares in
``Requires-Dist``, merging all unpacked wheels into one folder.

Working directory layout (``--root`` defaults to the current directory)::

    <root>/stubs/<package>.json     release index of every visited package
    <root>/stubs/<wheel>.whl        downloaded wheels
    <root>/stubs/<package>_temp/    scratch tree, removed after merging
    <root>/stubs/typings/           merged output (layout "typings")
    <root>/stubs/<root package>/    merged output (layout "package")

Typical usage::

    $ stubfetch fetch micropython-esp32-stubs --release-prefix 1.26
    $ stubfetch fetch micropython-stm32-stubs -r 1.26 --layout package
    $ stubfetch fetch some-stubs -r none --constraint ">=1.20,<1.27" --format json

A release prefix wins over ``--constraint`` whenever some release starts
with it. The default empty prefix matches every release, so a constraint
only decides the release when ``-r`` matches nothing.
"""

from __future__ import annotations

import sys
import asyncio
from pathlib import Path
from typing import Dict, Optional, Tuple

import click

from stubfetch.context import pass_context, StubFetchContext
from stubfetch.core import DependencyResolver, ResolutionResult
from stubfetch.exceptions import StubFetchError
from stubfetch.constants import OUTPUT_LAYOUTS, TYPINGS_DIRNAME, WORK_DIRNAME
from stubfetch.utils import (
    HTTPClient,
    ensure_directory,
    get_logger,
    print_error,
    print_json,
    print_success,
    print_table,
    print_warning,
    validate_path,
)

logger = get_logger("commands.fetch")


@click.command()
@click.argument("package")
@click.option(
    "--release-prefix",
    "-r",
    default="",
    help="Use the last release whose id starts with this prefix (applies to every package).",
)
@click.option(
    "--constraint",
    "-C",
    default="",
    help=(
        "Version constraint for the root package, e.g. '>=1.20,<1.27'. "
        "Only used when no release starts with --release-prefix."
    ),
)
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Project root; work files go to <root>/stubs.",
)
@click.option(
    "--layout",
    type=click.Choice(list(OUTPUT_LAYOUTS)),
    default=None,
    help="Merge into stubs/typings or stubs/<package> (default from config).",
)
@click.option(
    "--max-depth",
    type=click.IntRange(min=1),
    default=None,
    help="Deepest dependency level to fetch (default from config).",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@pass_context
def fetch(
    ctx: StubFetchContext,
    package: str,
    release_prefix: str,
    constraint: str,
    root: Path,
    layout: Optional[str],
    max_depth: Optional[int],
    format: str,
) -> None:
    """Fetch PACKAGE and its dependencies into a single merged folder.

    Exits 0 when PACKAGE itself was fetched and merged, 1 otherwise.
    Failures of individual dependencies are reported but do not change
    the exit status.
    """
    try:
        result = asyncio.run(
            _fetch_async(
                ctx,
                package,
                release_prefix=release_prefix,
                constraint=constraint,
                root=root,
                layout=layout or ctx.config.output_layout,
                max_depth=max_depth or ctx.config.max_depth,
            )
        )
    except StubFetchError as e:
        print_error(f"{e}")
        sys.exit(1)

    if format.lower() == "json":
        print_json(result.to_dict())
    else:
        _display_table(result)

    sys.exit(0 if result.succeeded else 1)


def prepare_directories(root: Path, package: str, layout: str) -> Tuple[Path, Path]:
    """Create and return ``(work_dir, output_dir)`` under ``root``."""
    work_dir = ensure_directory(validate_path(root) / WORK_DIRNAME)
    output_name = TYPINGS_DIRNAME if layout == "typings" else package
    output_dir = ensure_directory(validate_path(work_dir / output_name, base_dir=work_dir))
    return work_dir, output_dir


async def _fetch_async(
    ctx: StubFetchContext,
    package: str,
    *,
    release_prefix: str,
    constraint: str,
    root: Path,
    layout: str,
    max_depth: int,
) -> ResolutionResult:
    """Bootstrap the working directories and run the resolver.

    Raises:
        StubFetchError: The working directories could not be created.
    """
    config = ctx.config
    work_dir, output_dir = prepare_directories(root, package, layout)
    logger.info("Fetching %s into %s", package, output_dir)

    async with HTTPClient(timeout=config.timeout, max_retries=config.max_retries) as http:
        resolver = DependencyResolver(
            http,
            scratch_root=work_dir,
            output_dir=output_dir,
            registry_url=config.registry_url,
            max_depth=max_depth,
            ordering=config.version_ordering,
        )
        return await resolver.resolve(package, constraint, release_prefix=release_prefix)


def _display_table(result: ResolutionResult) -> None:
    styles: Dict[str, str] = {"failed": "red", "depth limit": "yellow"}
    print_table(
        result.to_rows(),
        headers=["Package", "Release", "Status"],
        title=f"Dependencies of {result.root}",
        caption=str(result.output_dir),
        row_styler=lambda row: styles.get(row["Status"]),
    )

    if result.succeeded:
        print_success(f"{len(result.processed)} package(s) merged into {result.output_dir}")
    else:
        print_error(f"{result.root} could not be fetched")

    if result.to_dict()["failed"]:
        print_warning("Some dependencies failed; see the log output for details")
