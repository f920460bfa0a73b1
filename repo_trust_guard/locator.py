"""
README and LICENSE discovery in a repository file tree.
"""

import json
import re
from collections.abc import Iterable
from pathlib import Path

from repo_trust_guard.exceptions import MetricComputationError

# Ordered: the first matching signature wins.
LICENSE_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("MIT", re.compile(r"mit license", re.IGNORECASE)),
    ("Apache-2.0", re.compile(r"apache license[,\s]+version 2\.0", re.IGNORECASE)),
    ("GPL-2.0", re.compile(r"gnu general public license[,\s]+version 2", re.IGNORECASE)),
    ("GPL-3.0", re.compile(r"gnu general public license[,\s]+version 3", re.IGNORECASE)),
    (
        "LGPL-2.1",
        re.compile(r"gnu lesser general public license[,\s]+version 2\.1", re.IGNORECASE),
    ),
    (
        "LGPL-3.0",
        re.compile(r"gnu lesser general public license[,\s]+version 3", re.IGNORECASE),
    ),
    ("BSD-2-Clause", re.compile(r'bsd 2-clause "simplified" license', re.IGNORECASE)),
    (
        "BSD-3-Clause",
        re.compile(r'bsd 3-clause "new" or "revised" license', re.IGNORECASE),
    ),
    ("MPL-2.0", re.compile(r"mozilla public license[,\s]+version 2\.0", re.IGNORECASE)),
    (
        "CDDL-1.0",
        re.compile(
            r"common development and distribution license[,\s]+version 1\.0",
            re.IGNORECASE,
        ),
    ),
    ("EPL-2.0", re.compile(r"eclipse public license[,\s]+version 2\.0", re.IGNORECASE)),
]


def identify_license(content: str) -> str | None:
    """Classify license text against the known signatures."""
    for license_name, pattern in LICENSE_PATTERNS:
        if pattern.search(content):
            return license_name
    return None


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")


def _find_top_level_file(tree: Iterable[Path], prefix: str) -> list[Path]:
    return [
        entry
        for entry in tree
        if entry.is_file() and entry.name.lower().startswith(prefix)
    ]


def locate_readme(tree: Iterable[Path]) -> Path | None:
    """Return the first top-level file whose name starts with 'readme'."""
    matches = _find_top_level_file(tree, "readme")
    return matches[0] if matches else None


def _manifest_license(tree: Iterable[Path]) -> str | None:
    for entry in tree:
        if entry.name != "package.json" or not entry.is_file():
            continue
        try:
            manifest = json.loads(_read_text(entry))
        except (OSError, json.JSONDecodeError):
            return None
        license_field = manifest.get("license") if isinstance(manifest, dict) else None
        if isinstance(license_field, dict):
            license_field = license_field.get("type")
        if isinstance(license_field, str) and license_field.strip():
            return license_field.strip()
    return None


def locate_license(tree: Iterable[Path], readme: Path | None) -> str | None:
    """
    Determine the repository license.

    Lookup order:
    1. Top-level files whose name starts with 'license', classified by text
    2. The ``license`` field of a top-level package.json
    3. The README text, classified with the same signatures

    Args:
        tree: Top-level entries of the checkout.
        readme: README path found by locate_readme, if any.

    Returns:
        License name, or None if nothing could be classified.

    Raises:
        MetricComputationError: If there is neither a license file nor a README.
    """
    entries = list(tree)
    license_files = _find_top_level_file(entries, "license")
    for license_file in license_files:
        license_name = identify_license(_read_text(license_file))
        if license_name:
            return license_name

    manifest_license = _manifest_license(entries)
    if manifest_license:
        return manifest_license

    if readme is None:
        if license_files:
            return None
        raise MetricComputationError(
            "License information not found in LICENSE files, package.json, or README."
        )
    return identify_license(_read_text(readme))
