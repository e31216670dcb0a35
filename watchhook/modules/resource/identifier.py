"""
Resource identifier parsing.

A resource identifier is the compact string a user types to name a kind,
optionally qualified by API version and group:

    kind
    kind.group
    kind.version.group

The version is recognised heuristically: a leading group label of the form
``v<digits>...`` is taken as the version. A group whose first label happens to
look like that (for example ``v2.example.com`` meant as a group) is read as a
version. This matches kubectl plugin behaviour and is kept for compatibility.
"""

import re
from dataclasses import dataclass

VERSION_PATTERN = re.compile(r"^v[0-9]+")


@dataclass(frozen=True)
class ResourceRef:
    """Group/version/kind triple; empty group or version means unspecified."""
    group: str
    version: str
    kind: str

    def __str__(self) -> str:
        return ".".join(part for part in (self.kind, self.version, self.group) if part)


def parse_resource_identifier(identifier: str) -> ResourceRef:
    """
    Parse ``kind[.version][.group]`` into a ResourceRef.

    Args:
        identifier: String typed by the user

    Returns:
        ResourceRef; any input parses, at worst to ``kind=identifier``
    """
    kind, sep, remainder = identifier.partition(".")
    if not sep:
        return ResourceRef(group="", version="", kind=kind)

    first, sep, rest = remainder.partition(".")
    if not sep:
        # Only one label after the kind: always a group.
        return ResourceRef(group=remainder, version="", kind=kind)

    if VERSION_PATTERN.match(first):
        return ResourceRef(group=rest, version=first, kind=kind)

    # Doesn't look like a version; the whole remainder is the group.
    return ResourceRef(group=remainder, version="", kind=kind)
