# src/memwatch/core/k8s_client.py

import asyncio
import logging
import typing

from kubernetes_asyncio import client, config

logger = logging.getLogger(__name__)

# Global lock to prevent race conditions during config loading
_CONFIG_LOCK = asyncio.Lock()
_CONFIG_LOADED = False


async def _load_in_cluster() -> bool:
    try:
        logger.debug("Attempting to load in-cluster Kubernetes config...")
        config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes configuration.")
        return True
    except config.ConfigException:
        logger.debug("In-cluster config not found.")
    except Exception as e:
        logger.warning(f"Unexpected error loading in-cluster config: {e}")
    return False


async def _load_kubeconfig(kubeconfig: typing.Optional[str]) -> bool:
    try:
        logger.debug("Attempting to load kubeconfig %s...", kubeconfig or "(default location)")
        await config.load_kube_config(config_file=kubeconfig or None)
        logger.info("Loaded Kubernetes configuration from kubeconfig file.")
        return True
    except config.ConfigException:
        logger.warning("Could not find kubeconfig file.")
    except Exception as e:
        logger.warning(f"Unexpected error loading kubeconfig: {e}")
    return False


async def ensure_k8s_config(kubeconfig: typing.Optional[str] = None, in_cluster: bool = False) -> bool:
    """
    Ensures that the Kubernetes configuration is loaded exactly once.

    With `in_cluster` only the service account configuration is tried, with
    `kubeconfig` only that file. Otherwise in-cluster configuration is tried
    first and the default kubeconfig second.

    Returns:
        bool: True if config was loaded successfully (or was already loaded), False otherwise.
    """
    global _CONFIG_LOADED

    if _CONFIG_LOADED:
        return True

    async with _CONFIG_LOCK:
        # Double-check locking pattern
        if _CONFIG_LOADED:
            return True

        if in_cluster:
            loaded = await _load_in_cluster()
        elif kubeconfig:
            loaded = await _load_kubeconfig(kubeconfig)
        else:
            loaded = await _load_in_cluster() or await _load_kubeconfig(None)

        _CONFIG_LOADED = loaded

    if not _CONFIG_LOADED:
        logger.warning("Failed to load any Kubernetes configuration.")
    return _CONFIG_LOADED


async def get_core_v1_api(
    kubeconfig: typing.Optional[str] = None, in_cluster: bool = False
) -> typing.Optional[client.CoreV1Api]:
    """Returns a configured CoreV1Api instance, or None without configuration."""
    if await ensure_k8s_config(kubeconfig, in_cluster):
        return client.CoreV1Api()
    return None


async def get_custom_objects_api(
    kubeconfig: typing.Optional[str] = None, in_cluster: bool = False
) -> typing.Optional[client.CustomObjectsApi]:
    """Returns a CustomObjectsApi instance, used to read metrics.k8s.io resources."""
    if await ensure_k8s_config(kubeconfig, in_cluster):
        return client.CustomObjectsApi()
    return None


async def get_version_api(
    kubeconfig: typing.Optional[str] = None, in_cluster: bool = False
) -> typing.Optional[client.VersionApi]:
    if await ensure_k8s_config(kubeconfig, in_cluster):
        return client.VersionApi()
    return None
