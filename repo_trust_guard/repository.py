"""
Repository references and URL normalization.
"""

import re
from typing import Any, NamedTuple

GITHUB_HOST = "github.com"

# owner/repo path segments following a github.com host, over https, ssh or scp-like syntax
_GITHUB_PATH_PATTERN = re.compile(
    r"github\.com[/:]+(?P<owner>[A-Za-z0-9_.-]+)/(?P<name>[A-Za-z0-9_.-]+)",
    re.IGNORECASE,
)
_SHORTHAND_PATTERN = re.compile(r"^(?P<owner>[A-Za-z0-9_.-]+)/(?P<name>[A-Za-z0-9_.-]+)$")
_HOSTED_SHORTHAND_PREFIXES = ("gitlab:", "bitbucket:", "gist:")


class RepositoryReference(NamedTuple):
    """A GitHub repository identified by owner and name."""

    owner: str
    name: str

    @property
    def url(self) -> str:
        """Canonical https URL of the repository."""
        return f"https://{GITHUB_HOST}/{self.owner}/{self.name}"

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"


def _clean_name(name: str) -> str:
    if name.endswith(".git"):
        name = name[: -len(".git")]
    return name


def parse_repository_url(url: str) -> RepositoryReference | None:
    """
    Extract a GitHub repository reference from a URL-like string.

    Handles VCS decorations such as ``git+`` prefixes, ``.git`` suffixes,
    ``git://`` and ``ssh://`` schemes, scp-like ``git@github.com:owner/repo``
    and trailing paths, queries or fragments.

    Args:
        url: Repository URL in any of the supported shapes.

    Returns:
        RepositoryReference, or None when the string is not a GitHub repository.
    """
    if not url:
        return None
    candidate = url.strip()
    if candidate.startswith("git+"):
        candidate = candidate[len("git+") :]

    match = _GITHUB_PATH_PATTERN.search(candidate)
    if not match:
        return None

    owner = match.group("owner")
    name = _clean_name(match.group("name"))
    if not owner or not name:
        return None
    return RepositoryReference(owner, name)


def normalize_repository_field(repository: Any) -> str | None:
    """
    Normalize a package manifest ``repository`` field to a canonical URL.

    The field is either a string (full URL, ``github:owner/repo`` or bare
    ``owner/repo`` shorthand) or an object with a ``url`` entry.

    Args:
        repository: Raw value of the manifest's repository field.

    Returns:
        ``https://github.com/owner/repo``, or None if no usable reference exists.
    """
    if isinstance(repository, dict):
        repository = repository.get("url")
    if not isinstance(repository, str):
        return None

    value = repository.strip()
    if not value:
        return None
    if value.lower().startswith(_HOSTED_SHORTHAND_PREFIXES):
        return None
    if value.lower().startswith("github:"):
        value = value[len("github:") :]

    shorthand = _SHORTHAND_PATTERN.match(value)
    if shorthand:
        return RepositoryReference(
            shorthand.group("owner"), _clean_name(shorthand.group("name"))
        ).url

    reference = parse_repository_url(value)
    return reference.url if reference else None
