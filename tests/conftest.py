# tests/conftest.py

import pytest

from memwatch.core import k8s_client
from memwatch.models.memory import ContainerMemorySample, PodMemorySample

MIB = 1024 * 1024

CONFIG_ENV_VARS = (
    "NAMESPACE",
    "ALL_NAMESPACES",
    "KUBECONFIG",
    "IN_CLUSTER",
    "CHECK_INTERVAL",
    "MEMORY_THRESHOLD_MB",
    "MEMORY_WARNING_PERCENT",
    "LOG_LEVEL",
    "LABELS",
    "ANNOTATIONS",
    "OUTPUT",
    "OUTPUT_PATH",
)


@pytest.fixture(autouse=True)
def mock_settings_env_vars(monkeypatch):
    """
    Pytest fixture to isolate the tests from the developer's environment.

    This fixture runs automatically for every test (`autouse=True`). It removes
    every variable read by memwatch.core.config so that a Config built inside
    a test only sees what the test sets.
    """
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_k8s_config_state(monkeypatch):
    """Each test starts with the Kubernetes configuration not loaded."""
    monkeypatch.setattr(k8s_client, "_CONFIG_LOADED", False)


@pytest.fixture
def make_container():
    """Factory for ContainerMemorySample objects. Usage, request and limit are given in MiB."""

    def _make_container(name, usage=None, request=None, limit=None):
        return ContainerMemorySample(
            name=name,
            current_usage=None if usage is None else usage * MIB,
            memory_request=None if request is None else request * MIB,
            memory_limit=None if limit is None else limit * MIB,
        )

    return _make_container


@pytest.fixture
def make_pod():
    """Factory for PodMemorySample objects. Usage, request and limit are given in MiB."""

    def _make_pod(
        name="app",
        namespace="default",
        phase="Running",
        ready=True,
        containers=None,
        usage=None,
        request=None,
        limit=None,
        labels=None,
        annotations=None,
    ):
        return PodMemorySample(
            namespace=namespace,
            name=name,
            phase=phase,
            ready=ready,
            containers=containers or [],
            current_usage=None if usage is None else usage * MIB,
            memory_request=None if request is None else request * MIB,
            memory_limit=None if limit is None else limit * MIB,
            labels=labels or {},
            annotations=annotations or {},
        )

    return _make_pod
