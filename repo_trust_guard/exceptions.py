"""
Error taxonomy for Repo Trust Guard.
"""


class RepoTrustError(Exception):
    """Base class for scoring pipeline errors."""


class ResolutionError(RepoTrustError):
    """No repository could be derived from the given URL."""


class CollectionError(RepoTrustError):
    """A network or API call failed after all retries were exhausted."""


class CheckoutError(CollectionError):
    """The temporary checkout of the repository could not be created."""


class MetricComputationError(RepoTrustError):
    """A metric could not be computed from the collected signals."""
