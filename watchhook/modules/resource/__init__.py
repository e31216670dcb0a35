"""
Resource Module - Black Box Interface

Purpose: Turn a typed resource identifier into something that can be watched
Interface: parse_resource_identifier(), load_connection(), ClusterResourceAccessor.resolve()
Hidden: kubeconfig/in-cluster loading, API discovery, REST mapping

Can be replaced with a different client as long as handles expose watch(name).
"""

from .accessor import ClusterResourceAccessor, ResourceHandle, WatchStream
from .connection import Connection, load_connection
from .identifier import ResourceRef, parse_resource_identifier

__all__ = [
    "ClusterResourceAccessor",
    "Connection",
    "ResourceHandle",
    "ResourceRef",
    "WatchStream",
    "load_connection",
    "parse_resource_identifier",
]
