"""
Version resolver — map requested names to current/candidate versions.

Pure positional lookups: the output always has one entry per requested
name, in the same order, with ``None`` where the name is unknown.
"""

from __future__ import annotations

from collections.abc import Sequence

from chocosync.core.engine.state import StateQueryCache
from chocosync.core.models.package import NameVersionMap, ResolvedVersions


def resolve_versions(names: Sequence[str], lookup: NameVersionMap) -> ResolvedVersions:
    """Look each name up case-insensitively; misses become None."""
    return [lookup.get(name.lower()) for name in names]


def resolve_current(names: Sequence[str], cache: StateQueryCache) -> ResolvedVersions:
    """Installed version of each name."""
    return resolve_versions(names, cache.installed())


def resolve_candidate(names: Sequence[str], cache: StateQueryCache) -> ResolvedVersions:
    """Best available version of each name."""
    return resolve_versions(names, cache.available())
