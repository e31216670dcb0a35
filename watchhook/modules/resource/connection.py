"""Cluster connection loading (credentials, server, default namespace)."""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from kubernetes import client, config

from watchhook.errors import ConfigurationError

logger = logging.getLogger(__name__)

SERVICE_ACCOUNT_NAMESPACE = "/var/run/secrets/kubernetes.io/serviceaccount/namespace"
DEFAULT_NAMESPACE = "default"


@dataclass
class Connection:
    """An API client plus the namespace watches default to."""
    api_client: client.ApiClient
    namespace: str


def _in_cluster() -> bool:
    return bool(os.environ.get("KUBERNETES_SERVICE_HOST"))


def _service_account_namespace() -> str:
    try:
        with open(SERVICE_ACCOUNT_NAMESPACE) as f:
            return f.read().strip() or DEFAULT_NAMESPACE
    except OSError:
        return DEFAULT_NAMESPACE


def _kubeconfig_namespace(kubeconfig: Optional[str], context: Optional[str]) -> str:
    contexts, active_context = config.list_kube_config_contexts(config_file=kubeconfig)
    selected = active_context
    if context:
        selected = next((c for c in contexts if c.get("name") == context), None)
        if selected is None:
            raise ConfigurationError(f"context {context!r} not found in kubeconfig")
    return (selected or {}).get("context", {}).get("namespace") or DEFAULT_NAMESPACE


def _load_incluster() -> client.ApiClient:
    configuration = client.Configuration()
    config.load_incluster_config(client_configuration=configuration)
    return client.ApiClient(configuration)


def load_connection(
    kubeconfig: Optional[str] = None,
    context: Optional[str] = None,
    namespace: Optional[str] = None,
) -> Connection:
    """
    Build an API client the way kubectl would.

    Explicit kubeconfig/context always use the kubeconfig file. Otherwise the
    in-cluster service account is preferred when running inside a pod.

    Args:
        kubeconfig: Path to a kubeconfig file (None = client default, honours KUBECONFIG)
        context: Context name inside the kubeconfig
        namespace: Namespace override

    Returns:
        Connection with the resolved default namespace
    """
    if not kubeconfig and not context and _in_cluster():
        try:
            api_client = _load_incluster()
            logger.debug("Using in-cluster configuration")
            return Connection(api_client, namespace or _service_account_namespace())
        except config.ConfigException as e:
            logger.debug(f"In-cluster configuration unavailable: {e}")

    try:
        api_client = config.new_client_from_config(config_file=kubeconfig, context=context)
        resolved_namespace = namespace or _kubeconfig_namespace(kubeconfig, context)
    except config.ConfigException as e:
        raise ConfigurationError(f"failed to load kubeconfig: {e}") from e

    logger.debug(f"Using kubeconfig (context={context or 'current'}, namespace={resolved_namespace})")
    return Connection(api_client, resolved_namespace)
