class MemwatchError(Exception):
    """Base exception for k8s-memory-watch."""

    pass


class ConfigError(MemwatchError, ValueError):
    """Raised when the configuration is invalid."""

    pass


class KubernetesError(MemwatchError):
    """Base exception for cluster access errors."""

    pass


class ClusterConnectionError(KubernetesError):
    """Raised when the cluster cannot be reached or no configuration can be loaded."""

    pass


class CollectionError(KubernetesError):
    """Raised when a collection cycle cannot proceed at all (e.g. namespaces cannot be listed)."""

    pass
