"""
stubfetch: fetch a PyPI package and its whole dependency tree as one folder

stubfetch downloads a package's wheel from PyPI, unpacks it, reads the
``Requires-Dist`` entries from its metadata and repeats for every
dependency. All unpacked wheels are merged into a single output tree,
typically a ``typings/`` folder of stub packages for an editor.

Typical usage::

    from stubfetch import DependencyResolver, HTTPClient

    async with HTTPClient() as http:
        resolver = DependencyResolver(http, scratch_root, output_dir)
        result = await resolver.resolve("micropython-esp32-stubs", release_prefix="1.26")
"""

from __future__ import annotations

from stubfetch.__version__ import __version__
from stubfetch.core import DependencyResolver, ResolutionResult
from stubfetch.utils.http import HTTPClient

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "stubfetch Contributors"
__license__ = "Apache-2.0"
__description__ = "Fetch a PyPI package and its dependencies into one merged tree."

__all__ = [
    "__version__",
    "DependencyResolver",
    "ResolutionResult",
    "HTTPClient",
]
