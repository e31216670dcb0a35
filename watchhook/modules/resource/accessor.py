"""
Cluster resource access.

Maps a ResourceRef onto a discovered API resource and hands out a handle that
can open watches on it. Matching follows kubectl: the typed kind may be the
Kind itself, its plural or singular resource name, or a short name, in any
case.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional

from kubernetes import watch
from kubernetes.client import ApiClient
from kubernetes.client.exceptions import ApiException
from kubernetes.dynamic import DynamicClient
from kubernetes.dynamic.exceptions import DynamicApiError
from kubernetes.dynamic.resource import ResourceList
from urllib3.exceptions import HTTPError

from watchhook.errors import MappingError
from watchhook.modules.resource.identifier import ResourceRef

logger = logging.getLogger(__name__)


@dataclass
class WatchStream:
    """A live watch: the raw event iterator plus the watcher that can stop it."""
    events: Iterator[dict]
    watcher: watch.Watch

    def stop(self) -> None:
        self.watcher.stop()


class ResourceHandle:
    """Namespace-bound access to one API resource."""

    def __init__(self, dynamic_client: DynamicClient, resource: Any, namespace: str):
        self._client = dynamic_client
        self.resource = resource
        # Cluster-scoped resources ignore the namespace entirely.
        self.namespace: Optional[str] = namespace if resource.namespaced else None

    @property
    def namespaced(self) -> bool:
        return bool(self.resource.namespaced)

    def describe(self) -> str:
        group = self.resource.group or "core"
        scope = f"namespace {self.namespace}" if self.namespace else "cluster scope"
        return f"{self.resource.name} ({group}/{self.resource.api_version}) in {scope}"

    def watch(self, name: Optional[str] = None) -> WatchStream:
        """
        Open a watch on the resource.

        The request is sent lazily, on the first read of the event iterator.

        Args:
            name: Restrict the watch to this object (single-object list options)

        Returns:
            WatchStream yielding raw event dicts
        """
        watcher = watch.Watch()
        events = self._client.watch(
            self.resource,
            namespace=self.namespace,
            name=name,
            watcher=watcher,
        )
        return WatchStream(events=events, watcher=watcher)


def _matches(resource: Any, kind: str) -> bool:
    kind = kind.lower()
    names = [
        getattr(resource, "kind", None),
        getattr(resource, "name", None),
        getattr(resource, "singular_name", None),
    ]
    names.extend(getattr(resource, "short_names", None) or [])
    return any(n and n.lower() == kind for n in names)


class ClusterResourceAccessor:
    """Resolves ResourceRefs against the cluster's discovery data."""

    def __init__(self, dynamic_client: DynamicClient):
        self._client = dynamic_client

    @classmethod
    def from_api_client(cls, api_client: ApiClient) -> "ClusterResourceAccessor":
        """Build the accessor, running API discovery once."""
        try:
            return cls(DynamicClient(api_client))
        except (ApiException, DynamicApiError, HTTPError) as e:
            raise MappingError(f"failed to discover cluster resources: {e}") from e

    def _candidates(self, ref: ResourceRef) -> List[Any]:
        query = {}
        if ref.group:
            query["group"] = ref.group
        if ref.version:
            query["api_version"] = ref.version

        try:
            found = self._client.resources.search(**query)
        except (ApiException, DynamicApiError, HTTPError) as e:
            raise MappingError(f"failed to get rest mapping for {ref}: {e}") from e

        return [
            r for r in found
            if not isinstance(r, ResourceList)
            and "/" not in (getattr(r, "name", "") or "")
            and (not ref.group or r.group == ref.group)
            and _matches(r, ref.kind)
        ]

    def resolve(self, ref: ResourceRef, namespace: str) -> ResourceHandle:
        """
        Resolve a resource reference to a watchable handle.

        Args:
            ref: Parsed resource identifier
            namespace: Namespace used when the resource is namespaced

        Returns:
            ResourceHandle

        Raises:
            MappingError: the cluster does not serve a matching resource
        """
        candidates = self._candidates(ref)
        if not candidates:
            raise MappingError(f"failed to get rest mapping: no resource matches {ref!s}")

        # Server-preferred versions first; otherwise keep discovery order.
        candidates.sort(key=lambda r: not getattr(r, "preferred", False))
        resource = candidates[0]

        groups = sorted({f"{r.kind}.{r.group or 'core'}" for r in candidates})
        if len(groups) > 1:
            logger.warning(
                f"{ref} is ambiguous ({', '.join(groups)}); "
                f"using {resource.kind} from {resource.group or 'core'}"
            )

        handle = ResourceHandle(self._client, resource, namespace)
        logger.debug(f"Resolved {ref} to {handle.describe()}")
        return handle
