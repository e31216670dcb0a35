"""Object-to-text rendering for hook command input."""

from typing import Any, Mapping

import yaml

from watchhook.errors import SerializationError


def serialize_object(obj: Any) -> str:
    """
    Render one API object as a YAML document.

    Args:
        obj: Mapping, or an object with to_dict() (e.g. a ResourceInstance)

    Returns:
        Block-style YAML with sorted keys

    Raises:
        SerializationError: obj has an unexpected shape or cannot be dumped
    """
    if not isinstance(obj, Mapping) and callable(getattr(obj, "to_dict", None)):
        obj = obj.to_dict()
    if not isinstance(obj, Mapping):
        raise SerializationError(f"unexpected type for event object: {type(obj).__name__}")

    try:
        return yaml.safe_dump(dict(obj), default_flow_style=False, sort_keys=True)
    except yaml.YAMLError as e:
        raise SerializationError(f"failed to marshal to YAML: {e}") from e
