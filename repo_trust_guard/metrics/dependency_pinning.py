"""Dependency pinning metric."""

import re
from collections.abc import Mapping
from typing import Any

from repo_trust_guard.metrics.base import MetricResult, MetricSpec, completed

DEPENDENCY_GROUPS = (
    "dependencies",
    "devDependencies",
    "peerDependencies",
    "optionalDependencies",
)

# A single exact version: optional "=" or "v", then major.minor.patch with
# optional prerelease/build suffixes. Anything else is a range or a moving target.
_EXACT_VERSION = re.compile(
    r"^=?v?\d+\.\d+\.\d+(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?$"
)


def is_pinned(specifier: str) -> bool:
    """Return True if a version specifier names exactly one version."""
    return bool(_EXACT_VERSION.match(specifier.strip()))


def dependency_pinning(manifest: Mapping[str, Any] | None) -> MetricResult:
    """
    Share of declared dependencies pinned to an exact version.

    All dependency groups of the manifest are counted together. A repository
    without a manifest, or without dependencies, gets the full score.
    """
    specifiers: list[str] = []
    for group in DEPENDENCY_GROUPS:
        dependencies = (manifest or {}).get(group)
        if isinstance(dependencies, Mapping):
            specifiers.extend(str(version) for version in dependencies.values())

    if not specifiers:
        return completed(METRIC.name, 1.0)

    pinned = sum(1 for specifier in specifiers if is_pinned(specifier))
    return completed(METRIC.name, pinned / len(specifiers))


METRIC = MetricSpec(
    name="GoodPinningPractice", signal="manifest", checker=dependency_pinning
)
